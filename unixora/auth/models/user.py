"""User account model."""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from unixora.config.database import Base


class User(Base):
    """Registered student account."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    email = Column(String, unique=True, index=True, nullable=False)  # stored lower-cased
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
