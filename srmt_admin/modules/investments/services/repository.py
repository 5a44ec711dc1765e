"""SQL-репозиторий инвестиционных проектов, их типов и статусов."""

from dataclasses import dataclass
from typing import List, Optional

from srmt_admin.core.database import SQLRepository
from srmt_admin.modules.files.services.repository import load_files
from srmt_admin.modules.investments.models import Investment, InvestmentStatus, InvestmentType


@dataclass
class InvestmentFilters:
    status_id: Optional[int] = None
    type_id: Optional[int] = None
    min_cost: Optional[float] = None
    max_cost: Optional[float] = None
    search: Optional[str] = None
    created_by: Optional[int] = None


class InvestmentRepository(SQLRepository):
    # --- Проекты ---

    def add_investment(self, values: dict, created_by: Optional[int]) -> int:
        return self._add(Investment(**values, created_by=created_by)).id

    def get_investment(self, investment_id: int) -> Investment:
        return self._get(Investment, investment_id)

    def list_investments(self, filters: InvestmentFilters) -> List[Investment]:
        query = self.db.query(Investment)
        if filters.status_id:
            query = query.filter(Investment.status_id == filters.status_id)
        if filters.type_id:
            query = query.filter(Investment.type_id == filters.type_id)
        if filters.min_cost is not None:
            query = query.filter(Investment.cost >= filters.min_cost)
        if filters.max_cost is not None:
            query = query.filter(Investment.cost <= filters.max_cost)
        if filters.search:
            query = query.filter(Investment.name.ilike(f"%{filters.search}%"))
        if filters.created_by:
            query = query.filter(Investment.created_by == filters.created_by)
        return query.order_by(Investment.created_at.desc(), Investment.id.desc()).all()

    def update_investment(self, investment_id: int, values: dict) -> None:
        if values:
            self._update(Investment, investment_id, values)
        else:
            self._get(Investment, investment_id)

    def delete_investment(self, investment_id: int) -> None:
        self._delete(Investment, investment_id)

    def link_investment_files(self, investment_id: int, file_ids: List[int]) -> None:
        """Добавляет файлы к проекту; уже привязанные пропускаются."""
        if not file_ids:
            return
        investment = self._get(Investment, investment_id)
        linked = {f.id for f in investment.files}
        investment.files.extend(f for f in load_files(self.db, file_ids) if f.id not in linked)
        self._commit()

    def replace_investment_files(self, investment_id: int, file_ids: List[int]) -> None:
        investment = self._get(Investment, investment_id)
        investment.files = load_files(self.db, file_ids)
        self._commit()

    # --- Типы ---

    def add_type(self, values: dict) -> int:
        return self._add(InvestmentType(**values)).id

    def list_types(self) -> List[InvestmentType]:
        return self.db.query(InvestmentType).order_by(InvestmentType.id).all()

    def update_type(self, type_id: int, values: dict) -> None:
        self._update(InvestmentType, type_id, values)

    def delete_type(self, type_id: int) -> None:
        self._delete(InvestmentType, type_id)

    # --- Статусы ---

    def add_status(self, values: dict) -> int:
        return self._add(InvestmentStatus(**values)).id

    def list_statuses(self, type_id: Optional[int] = None) -> List[InvestmentStatus]:
        query = self.db.query(InvestmentStatus)
        if type_id:
            # общие статусы (type_id IS NULL) подходят любому типу
            query = query.filter(
                (InvestmentStatus.type_id == type_id) | (InvestmentStatus.type_id.is_(None))
            )
        return query.order_by(InvestmentStatus.display_order, InvestmentStatus.id).all()

    def update_status(self, status_id: int, values: dict) -> None:
        self._update(InvestmentStatus, status_id, values)

    def delete_status(self, status_id: int) -> None:
        self._delete(InvestmentStatus, status_id)
