"""
Token Revocation System using Redis.

Implements token blacklisting to immediately invalidate JWT tokens
when a principal logs out or a driver account is removed.
"""

import logging
import time

from bus_backend.app.core.config import settings
from bus_backend.app.core import redis_client as redis_module

logger = logging.getLogger(__name__)

# Redis key prefixes
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
PRINCIPAL_TOKENS_PREFIX = "principal:tokens:"


async def revoke_token(token: str, subject: str, ttl_seconds: int = None) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        subject: Token subject ("driver:<id>" or "admin:<id>")
        ttl_seconds: How long to keep the entry; defaults to the token lifetime

    Returns:
        True if successfully revoked, False otherwise
    """
    if ttl_seconds is None:
        ttl_seconds = settings.access_token_expire_minutes * 60
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_module.redis_client.set(key, subject, ex=ttl_seconds)
        return True
    except Exception as e:
        logger.error("Error revoking token for %s: %s", subject, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Redis outages fail open: the request is allowed and the error logged.
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_module.redis_client.exists(key)
        return exists > 0
    except Exception as e:
        logger.warning("Error checking token revocation: %s", e)
        return False


async def revoke_all_principal_tokens(subject: str) -> bool:
    """
    Revoke every token issued to a principal before now (used when a driver
    is deleted).

    Stores the cut-off time; tokens issued at or after it stay valid.
    """
    try:
        key = f"{PRINCIPAL_TOKENS_PREFIX}{subject}:revoked"
        ttl_seconds = settings.access_token_expire_minutes * 60
        await redis_module.redis_client.set(key, str(int(time.time())), ex=ttl_seconds)
        return True
    except Exception as e:
        logger.error("Error revoking all tokens for %s: %s", subject, e)
        return False


async def are_principal_tokens_revoked(subject: str, issued_at: int = 0) -> bool:
    """Check if a token issued at `issued_at` predates the principal's revocation."""
    try:
        key = f"{PRINCIPAL_TOKENS_PREFIX}{subject}:revoked"
        revoked_at = await redis_module.redis_client.get(key)
        if revoked_at is None:
            return False
        return issued_at < int(revoked_at)
    except Exception as e:
        logger.warning("Error checking principal token revocation: %s", e)
        return False
