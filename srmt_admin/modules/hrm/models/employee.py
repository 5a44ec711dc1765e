from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class Employee(Base):
    """
    Сотрудник организации.
    Связан с контактом (contact_id) и, опционально, с пользователем (user_id).
    """

    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, unique=True)
    employee_number = Column(String(64), nullable=True, unique=True)
    hire_date = Column(Date, nullable=False)
    termination_date = Column(Date, nullable=True)
    termination_reason = Column(Text, nullable=True)
    employment_type = Column(String(32), nullable=False)
    employment_status = Column(String(32), nullable=False, default="active")
    work_schedule = Column(String(64), nullable=True)
    work_hours_per_week = Column(Float, nullable=True)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    position_id = Column(Integer, ForeignKey("positions.id"), nullable=True)
    probation_end_date = Column(Date, nullable=True)
    probation_passed = Column(Boolean, nullable=True)
    notes = Column(Text, nullable=True)

    # Метаданные
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    contact = relationship("Contact", lazy="joined")
    manager = relationship("Employee", remote_side=[id], foreign_keys=[manager_id])

    @property
    def name(self) -> str | None:
        return self.contact.name if self.contact else None
