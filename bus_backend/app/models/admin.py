"""
Admin database model.
"""

from sqlalchemy import Column, Integer, String
from bus_backend.app.db.session import Base


class Admin(Base):
    """Dashboard administrator."""
    __tablename__ = "admins"

    admin_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Admin(admin_id={self.admin_id}, email='{self.email}')>"
