from typing import List, Optional

from srmt_admin.core.database import SQLRepository
from srmt_admin.modules.hrm.models import Contact


class ContactRepository(SQLRepository):
    def add_contact(self, values: dict) -> int:
        return self._add(Contact(**values)).id

    def get_contact(self, contact_id: int) -> Contact:
        return self._get(Contact, contact_id)

    def list_contacts(self, search: Optional[str] = None) -> List[Contact]:
        query = self.db.query(Contact)
        if search:
            query = query.filter(Contact.name.ilike(f"%{search.strip()}%"))
        return query.order_by(Contact.name).all()

    def update_contact(self, contact_id: int, values: dict) -> None:
        self._update(Contact, contact_id, values)

    def delete_contact(self, contact_id: int) -> None:
        self._delete(Contact, contact_id)
