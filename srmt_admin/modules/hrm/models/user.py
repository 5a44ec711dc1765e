from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from srmt_admin.core.database import Base

users_roles = Table(
    "users_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(64), nullable=False, unique=True)
    description = Column(String(255), nullable=True)


class User(Base):
    """
    Пользователь системы.
    Может быть привязан к контакту (contact_id) — тогда ему доступны
    запросы документов и личный кабинет.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    pass_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    roles = relationship("Role", secondary=users_roles, lazy="selectin")

    def role_names(self) -> list[str]:
        return [r.name for r in self.roles]
