"""
Driver database model.
"""

from sqlalchemy import Column, Integer, String
from bus_backend.app.db.session import Base


class Driver(Base):
    """
    Bus driver.

    Drivers log in with phone_number + password from the driver app.
    """
    __tablename__ = "drivers"

    driver_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    phone_number = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    profile_photo_url = Column(String(1024), nullable=True)

    def __repr__(self):
        return f"<Driver(driver_id={self.driver_id}, name='{self.name}', phone='{self.phone_number}')>"
