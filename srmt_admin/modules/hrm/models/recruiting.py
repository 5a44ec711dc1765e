from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class Vacancy(Base):
    """Вакансия. Жизненный цикл: draft -> open <-> on_hold -> closed."""

    __tablename__ = "vacancies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    department_id = Column(Integer, nullable=True)
    position_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    requirements = Column(Text, nullable=True)
    employment_type = Column(String(32), nullable=False)
    work_format = Column(String(32), nullable=False)
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False)
    priority = Column(String(16), nullable=False, default="normal")
    headcount = Column(Integer, nullable=False, default=1)
    deadline = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="draft")
    hiring_manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    vacancy_id = Column(Integer, ForeignKey("vacancies.id"), nullable=False, index=True)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    middle_name = Column(String(128), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    current_position = Column(String(255), nullable=True)
    current_company = Column(String(255), nullable=True)
    experience_years = Column(Integer, nullable=True)
    expected_salary = Column(Float, nullable=True)
    currency = Column(String(3), nullable=False)
    resume_file_id = Column(Integer, ForeignKey("files.id"), nullable=True)
    source = Column(String(64), nullable=True)
    status = Column(String(32), nullable=False, default="new")
    stage = Column(String(32), nullable=False, default="applied")
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
