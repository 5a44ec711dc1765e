"""
Модели визитов на объекты
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from srmt_admin.core.database import Base
from srmt_admin.modules.files.models import File
from srmt_admin.modules.telemetry.models import Reservoir

visit_files = Table(
    "visit_files",
    Base.metadata,
    Column("visit_id", Integer, ForeignKey("visits.id", ondelete="CASCADE"), primary_key=True),
    Column("file_id", Integer, ForeignKey("files.id", ondelete="CASCADE"), primary_key=True),
)


class Visit(Base):
    """Визит на водохранилище (организацию)"""

    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("reservoirs.id"), nullable=False, index=True)
    visit_date = Column(DateTime(timezone=True), nullable=False, index=True)
    description = Column(Text, nullable=False)
    responsible_name = Column(String(255), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    organization = relationship(Reservoir)
    files = relationship(File, secondary=visit_files, order_by=File.id)

    @property
    def organization_name(self):
        return self.organization.name if self.organization else None
