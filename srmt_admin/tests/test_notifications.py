"""
Тесты уведомлений: рассылка нескольким пользователям
"""
import pytest

from srmt_admin.core.errors import ForeignKeyViolationError
from srmt_admin.modules.hrm.dependencies import get_notification_repo
from srmt_admin.modules.hrm.models import User
from srmt_admin.modules.hrm.services.notifications import NotificationRepository

NOTIFICATIONS = "/api/v1/hrm/notifications/"
MESSAGE = {"title": "Собрание", "message": "В 15:00 в актовом зале", "category": "system"}


class FakeNotificationRepo:
    def __init__(self, error=None):
        self.error = error
        self.bulk = []

    def add_notifications(self, user_ids, values):
        if self.error:
            raise self.error
        self.bulk.append((list(user_ids), values))
        return len(set(user_ids))


def test_bulk_returns_created_count(client, override, auth_headers):
    repo = FakeNotificationRepo()
    override(get_notification_repo, repo)

    response = client.post(f"{NOTIFICATIONS}bulk", json={**MESSAGE, "user_ids": [3, 4, 4, 9]}, headers=auth_headers("hr"))

    assert response.status_code == 201
    assert response.json() == {"status": 201, "count": 3}
    assert "user_ids" not in repo.bulk[0][1]


def test_bulk_requires_recipients(client, override, auth_headers):
    repo = FakeNotificationRepo()
    override(get_notification_repo, repo)

    response = client.post(f"{NOTIFICATIONS}bulk", json={**MESSAGE, "user_ids": []}, headers=auth_headers("hr"))

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'user_ids' is too short"]
    assert repo.bulk == []


def test_bulk_unknown_user(client, override, auth_headers):
    override(get_notification_repo, FakeNotificationRepo(error=ForeignKeyViolationError("users")))

    response = client.post(f"{NOTIFICATIONS}bulk", json={**MESSAGE, "user_ids": [404]}, headers=auth_headers("hr"))

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid user_ids"


# --- Репозиторий на SQLite ---


def test_repository_fan_out_skips_duplicates(db_session):
    users = [User(name=f"user{i}", pass_hash="x") for i in range(3)]
    db_session.add_all(users)
    db_session.commit()
    repo = NotificationRepository(db_session)
    ids = [u.id for u in users]

    count = repo.add_notifications(ids + [ids[0]], MESSAGE)

    assert count == 3
    for user_id in ids:
        assert len(repo.list_notifications(user_id)) == 1
    assert repo.count_unread(ids[0]) == 1
    assert repo.mark_all_read(ids[0]) == 1
    assert repo.list_notifications(ids[0], unread_only=True) == []

    with pytest.raises(ForeignKeyViolationError):
        repo.add_notifications([9999], MESSAGE)
