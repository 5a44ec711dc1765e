from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import NotFoundError
from srmt_admin.modules.hrm.models import AccessCard, AccessLog, AccessZone


@dataclass
class AccessDecision:
    log_id: int
    access_granted: bool
    denial_reason: Optional[str] = None


def check_access(card: AccessCard, zone: AccessZone, on: date) -> Optional[str]:
    """Причина отказа или None, если проход разрешён."""
    if not card.is_active:
        return "card is blocked"
    if card.expiry_date is not None and card.expiry_date < on:
        return "card is expired"
    if not zone.is_active:
        return "zone is inactive"
    return None


class AccessRepository(SQLRepository):
    # --- Зоны ---

    def add_zone(self, values: dict) -> int:
        return self._add(AccessZone(**values)).id

    def list_zones(self) -> List[AccessZone]:
        return self.db.query(AccessZone).order_by(AccessZone.name).all()

    # --- Пропуска ---

    def add_card(self, values: dict) -> int:
        return self._add(AccessCard(**values)).id

    def get_card(self, card_id: int) -> AccessCard:
        return self._get(AccessCard, card_id)

    def list_cards(self, employee_id: Optional[int] = None, is_active: Optional[bool] = None) -> List[AccessCard]:
        query = self.db.query(AccessCard)
        if employee_id:
            query = query.filter(AccessCard.employee_id == employee_id)
        if is_active is not None:
            query = query.filter(AccessCard.is_active.is_(is_active))
        return query.order_by(AccessCard.id.desc()).all()

    def update_card(self, card_id: int, values: dict) -> None:
        self._update(AccessCard, card_id, values)

    def block_card(self, card_id: int, reason: str) -> None:
        self._update(
            AccessCard,
            card_id,
            {"is_active": False, "deactivation_reason": reason, "deactivated_at": datetime.now(timezone.utc)},
        )

    def unblock_card(self, card_id: int) -> None:
        self._update(AccessCard, card_id, {"is_active": True, "deactivation_reason": None, "deactivated_at": None})

    # --- Журнал проходов ---

    def log_access_event(
        self, card_number: str, zone_id: int, direction: str, event_time: Optional[datetime] = None
    ) -> AccessDecision:
        """
        Записывает событие прохода. Отказ тоже пишется в журнал.

        Raises:
            NotFoundError: неизвестный номер пропуска или зона
        """
        card = self.db.query(AccessCard).filter(AccessCard.card_number == card_number).first()
        if card is None:
            raise NotFoundError(f"access card number={card_number}")
        zone = self._get(AccessZone, zone_id)

        event_time = event_time or datetime.now(timezone.utc)
        reason = check_access(card, zone, event_time.date())
        log = self._add(
            AccessLog(
                card_id=card.id,
                employee_id=card.employee_id,
                zone_id=zone.id,
                direction=direction,
                event_time=event_time,
                access_granted=reason is None,
                denial_reason=reason,
            )
        )
        return AccessDecision(log_id=log.id, access_granted=log.access_granted, denial_reason=reason)

    def list_logs(
        self,
        employee_id: Optional[int] = None,
        zone_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[AccessLog]:
        query = self.db.query(AccessLog)
        if employee_id:
            query = query.filter(AccessLog.employee_id == employee_id)
        if zone_id:
            query = query.filter(AccessLog.zone_id == zone_id)
        if date_from:
            query = query.filter(AccessLog.event_time >= date_from)
        if date_to:
            query = query.filter(AccessLog.event_time <= date_to)
        return query.order_by(AccessLog.event_time.desc()).limit(limit).all()
