"""
Модели инвестиционных проектов
"""
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from srmt_admin.core.database import Base
from srmt_admin.modules.files.models import File

investment_files = Table(
    "investment_files",
    Base.metadata,
    Column("investment_id", Integer, ForeignKey("investments.id", ondelete="CASCADE"), primary_key=True),
    Column("file_id", Integer, ForeignKey("files.id", ondelete="CASCADE"), primary_key=True),
)


class InvestmentType(Base):
    __tablename__ = "investment_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)


class InvestmentStatus(Base):
    """Статус проекта; type_id = NULL означает статус, общий для всех типов."""

    __tablename__ = "investment_statuses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    type_id = Column(Integer, ForeignKey("investment_types.id"), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)


class Investment(Base):
    __tablename__ = "investments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    type_id = Column(Integer, ForeignKey("investment_types.id"), nullable=False)
    status_id = Column(Integer, ForeignKey("investment_statuses.id"), nullable=False, index=True)
    cost = Column(Float, nullable=False, default=0)
    comments = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    type = relationship("InvestmentType")
    status = relationship("InvestmentStatus")
    files = relationship(File, secondary=investment_files, order_by=File.id)
