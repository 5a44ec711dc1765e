from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class HRDocument(Base):
    """Кадровый документ сотрудника (договор, приказ, справка…)"""

    __tablename__ = "hr_documents"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    document_type = Column(String(32), nullable=False)
    title = Column(String(255), nullable=False)
    document_number = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)
    file_id = Column(Integer, ForeignKey("files.id"), nullable=True)
    issue_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="active")
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class DocumentRequest(Base):
    """Запрос справки/документа от сотрудника. pending -> approved | rejected."""

    __tablename__ = "document_requests"

    id = Column(Integer, primary_key=True, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    document_type = Column(String(32), nullable=False)
    purpose = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    rejection_reason = Column(Text, nullable=True)
    processed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
