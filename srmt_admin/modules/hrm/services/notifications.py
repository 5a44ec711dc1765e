from datetime import datetime, timezone
from typing import List, Sequence

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import NotFoundError
from srmt_admin.modules.hrm.models import Notification


class NotificationRepository(SQLRepository):
    def add_notification(self, values: dict) -> int:
        return self._add(Notification(**values)).id

    def add_notifications(self, user_ids: Sequence[int], values: dict) -> int:
        """Одно уведомление каждому пользователю, одной транзакцией."""
        unique_ids = list(dict.fromkeys(user_ids))
        self.db.add_all([Notification(user_id=user_id, **values) for user_id in unique_ids])
        self._commit()
        return len(unique_ids)

    def list_notifications(self, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    def count_unread(self, user_id: int) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    def mark_read(self, notification_id: int, user_id: int) -> None:
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )
        if notification is None:
            raise NotFoundError(f"notification id={notification_id}")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            self._commit()

    def mark_all_read(self, user_id: int) -> int:
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({"is_read": True, "read_at": datetime.now(timezone.utc)}, synchronize_session=False)
        )
        self._commit()
        return updated
