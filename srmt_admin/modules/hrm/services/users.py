"""
Пользователи и роли.

Пользователь создаётся вместе с ролями и привязкой к контакту: либо к
существующему (contact_id), либо к новому, который создаётся в той же
транзакции.
"""
import logging
from typing import List, Optional, Sequence

from srmt_admin.core.auth import get_password_hash
from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import ContactAlreadyLinkedError, ForeignKeyViolationError, NotFoundError
from srmt_admin.modules.hrm.models import Contact, Department, Employee, Role, User

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
ADMIN_ROLE_DESCRIPTION = "Admin role"
ADMIN_CONTACT_NAME = "Администратор"


class UserRepository(SQLRepository):
    """Пользователи для входа в систему, обновления токенов и администрирования."""

    def get_user_by_name(self, name: str) -> User:
        user = self.db.query(User).filter(User.name == name).first()
        if user is None:
            raise NotFoundError(f"user name={name}")
        return user

    def get_user(self, user_id: int) -> User:
        return self._get(User, user_id)

    def _load_roles(self, role_ids: Sequence[int]) -> List[Role]:
        unique_ids = list(dict.fromkeys(role_ids))
        roles = self.db.query(Role).filter(Role.id.in_(unique_ids)).all()
        if len(roles) != len(unique_ids):
            raise ForeignKeyViolationError(f"roles ids={unique_ids}")
        return roles

    def add_user(
        self,
        name: str,
        pass_hash: str,
        role_ids: Sequence[int],
        contact_id: Optional[int] = None,
        contact: Optional[dict] = None,
    ) -> int:
        """
        Raises:
            NotFoundError: contact_id не существует
            ContactAlreadyLinkedError: контакт уже привязан к пользователю
            ForeignKeyViolationError: неизвестная роль
            UniqueViolationError: логин занят
        """
        roles = self._load_roles(role_ids)
        if contact is not None:
            new_contact = Contact(**contact)
            self.db.add(new_contact)
            self.db.flush()
            contact_id = new_contact.id
        elif contact_id is not None:
            self._get(Contact, contact_id)
            if self.db.query(User.id).filter(User.contact_id == contact_id).first() is not None:
                raise ContactAlreadyLinkedError(f"contact id={contact_id}")
        user = User(name=name, pass_hash=pass_hash, contact_id=contact_id, is_active=True)
        user.roles = roles
        return self._add(user).id

    def update_user(self, user_id: int, values: dict, role_ids: Optional[Sequence[int]] = None) -> None:
        user = self._get(User, user_id)
        if role_ids is not None:
            user.roles = self._load_roles(role_ids)
        for field, value in values.items():
            setattr(user, field, value)
        self._commit()

    def delete_user(self, user_id: int) -> None:
        self._delete(User, user_id)

    def list_users(
        self,
        organization_id: Optional[int] = None,
        department_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> List[User]:
        """Фильтры по подразделению и организации идут через карточку сотрудника контакта."""
        query = self.db.query(User)
        if organization_id or department_id:
            query = query.join(Employee, Employee.contact_id == User.contact_id)
        if department_id:
            query = query.filter(Employee.department_id == department_id)
        if organization_id:
            query = query.join(Department, Department.id == Employee.department_id).filter(
                Department.organization_id == organization_id
            )
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        return query.order_by(User.name).all()

    def assign_role(self, user_id: int, role_id: int) -> None:
        user = self._get(User, user_id)
        role = self._get(Role, role_id)
        if role not in user.roles:
            user.roles.append(role)
            self._commit()

    def revoke_role(self, user_id: int, role_id: int) -> None:
        user = self._get(User, user_id)
        role = self._get(Role, role_id)
        if role not in user.roles:
            raise NotFoundError(f"users_roles user_id={user_id} role_id={role_id}")
        user.roles.remove(role)
        self._commit()

    # --- Роли ---

    def list_roles(self) -> List[Role]:
        return self.db.query(Role).order_by(Role.name).all()

    def get_role(self, role_id: int) -> Role:
        return self._get(Role, role_id)

    def get_role_by_name(self, name: str) -> Role:
        role = self.db.query(Role).filter(Role.name == name).first()
        if role is None:
            raise NotFoundError(f"role name={name}")
        return role

    def add_role(self, values: dict) -> int:
        return self._add(Role(**values)).id

    def update_role(self, role_id: int, values: dict) -> None:
        self._update(Role, role_id, values)

    def delete_role(self, role_id: int) -> None:
        self._delete(Role, role_id)


def ensure_admin(repo: UserRepository, name: str, password: str) -> None:
    """
    Роль admin и пользователь-администратор при старте приложения.

    Уже существующий пользователь не меняется, только получает роль admin,
    если её у него нет.
    """
    try:
        role = repo.get_role_by_name(ADMIN_ROLE)
    except NotFoundError:
        role = repo.get_role(repo.add_role({"name": ADMIN_ROLE, "description": ADMIN_ROLE_DESCRIPTION}))
        logger.info("admin role created", extra={"entity_id": role.id})

    try:
        user = repo.get_user_by_name(name)
    except NotFoundError:
        user_id = repo.add_user(
            name,
            get_password_hash(password),
            [role.id],
            contact={"name": ADMIN_CONTACT_NAME},
        )
        logger.info("admin user created", extra={"user_id": user_id})
        return

    if ADMIN_ROLE not in user.role_names():
        repo.assign_role(user.id, role.id)
        logger.info("admin role assigned", extra={"user_id": user.id})
