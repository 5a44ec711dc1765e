"""
Модели файлового хранилища
"""
from sqlalchemy import BigInteger, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from srmt_admin.core.database import Base


class FileCategory(Base):
    """Категория файлов; display_name используется как префикс ключа объекта."""

    __tablename__ = "file_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    display_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(Integer, ForeignKey("file_categories.id"), nullable=True)

    parent = relationship("FileCategory", remote_side=[id])


class File(Base):
    """Метаданные загруженного файла"""

    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String(512), nullable=False)
    object_key = Column(String(1024), nullable=False, unique=True)
    category_id = Column(Integer, ForeignKey("file_categories.id"), nullable=True)
    mime_type = Column(String(255), nullable=True)
    size_bytes = Column(BigInteger, nullable=False, default=0)
    target_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("FileCategory")
