from sqlalchemy import Column, Date, DateTime, String, Text, Integer
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class Contact(Base):
    """Контакт (физическое лицо) — основа карточки сотрудника."""

    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    ip_phone = Column(String(32), nullable=True)
    dob = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
