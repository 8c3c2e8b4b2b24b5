"""
Startup data bootstrap.
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from bus_backend.app.core.config import settings
from bus_backend.app.core.security import get_password_hash
from bus_backend.app.models.admin import Admin

logger = logging.getLogger(__name__)


async def ensure_default_admin(db: AsyncSession) -> bool:
    """
    Create the configured default admin when no admin exists yet.

    Returns:
        True if an admin was created
    """
    count = (await db.execute(select(func.count(Admin.admin_id)))).scalar()
    if count:
        return False

    db.add(Admin(
        email=settings.default_admin_email,
        name=settings.default_admin_name,
        password_hash=get_password_hash(settings.default_admin_password),
    ))
    await db.commit()
    logger.info("created default admin %s", settings.default_admin_email)
    return True
