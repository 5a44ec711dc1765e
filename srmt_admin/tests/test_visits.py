"""
Тесты визитов: загрузка файлов по дате визита, компенсация и выборка за день
"""
import asyncio
import io
from datetime import date, datetime

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError
from srmt_admin.modules.files.dependencies import get_file_storage, get_files_repo
from srmt_admin.modules.files.services.repository import FileRepository
from srmt_admin.modules.telemetry.services.repository import ReservoirRepository
from srmt_admin.modules.visits.dependencies import get_visit_repo
from srmt_admin.modules.visits.models import Visit
from srmt_admin.modules.visits.schemas import VisitCreate, VisitUpdate
from srmt_admin.modules.visits.services.repository import VisitRepository
from srmt_admin.modules.visits.services.visits import VisitService

VISITS = "/api/v1/visits/"


class FakeVisitRepo:
    def __init__(self, add_error=None, link_error=None, update_error=None):
        self.add_error = add_error
        self.link_error = link_error
        self.update_error = update_error
        self.updated = []
        self.replaced = []
        self.added = []
        self.links = []

    def add_visit(self, values, created_by):
        if self.add_error:
            raise self.add_error
        self.added.append(values)
        return 15

    def link_visit_files(self, visit_id, file_ids):
        if self.link_error:
            raise self.link_error
        self.links.append((visit_id, list(file_ids)))

    def get_visit(self, visit_id):
        return Visit(id=visit_id, visit_date=datetime(2024, 9, 12, 10, 30))

    def update_visit(self, visit_id, values):
        if self.update_error:
            raise self.update_error
        self.updated.append((visit_id, values))

    def replace_visit_files(self, visit_id, file_ids):
        self.replaced.append((visit_id, list(file_ids)))

    def list_visits(self, day):
        self.day = day
        return []


class FakeFiles:
    def __init__(self):
        self.added = []
        self.deleted = []

    def get_or_create_category(self, name, display_name):
        return 2

    def add_file(self, file_name, object_key, category_id, mime_type, size_bytes, target_date=None):
        self.added.append((object_key, target_date))
        return 500 + len(self.added)

    def delete_file(self, file_id):
        self.deleted.append(file_id)


class FakeStorage:
    def __init__(self):
        self.uploaded = []
        self.deleted = []

    def upload_file(self, object_key, data, content_type):
        self.uploaded.append(object_key)

    def delete_file(self, object_key):
        self.deleted.append(object_key)


def _request(**kwargs):
    data = {
        "organization_id": 1,
        "visit_date": datetime(2024, 9, 12, 10, 30),
        "description": "Осмотр водосброса",
        "responsible_name": "Турсунов Б.",
    }
    data.update(kwargs)
    return VisitCreate(**data)


def _upload(name="act.pdf"):
    return UploadFile(file=io.BytesIO(b"%PDF"), filename=name, headers=Headers({"content-type": "application/pdf"}))


def _add(service, req, uploads=()):
    return asyncio.run(service.add_visit(req, created_by=3, uploads=uploads))


def test_files_are_stored_under_visit_date():
    repo, files, storage = FakeVisitRepo(), FakeFiles(), FakeStorage()

    visit_id, uploaded = _add(VisitService(repo, storage, files), _request(file_ids=[9]), [_upload()])

    assert visit_id == 15
    assert [f.id for f in uploaded] == [501]
    assert storage.uploaded[0].startswith("visits/2024/09/12/")
    assert files.added[0][1] == date(2024, 9, 12)
    assert repo.links == [(15, [9, 501])]
    assert "file_ids" not in repo.added[0]


def test_without_uploads_only_links_existing_files():
    repo, files, storage = FakeVisitRepo(), FakeFiles(), FakeStorage()

    visit_id, uploaded = _add(VisitService(repo, storage, files), _request(file_ids=[4, 5]))

    assert uploaded == []
    assert repo.links == [(15, [4, 5])]
    assert storage.uploaded == []


def test_failed_visit_insert_compensates_once():
    repo = FakeVisitRepo(add_error=ForeignKeyViolationError("reservoirs"))
    files, storage = FakeFiles(), FakeStorage()

    with pytest.raises(ForeignKeyViolationError):
        _add(VisitService(repo, storage, files), _request(), [_upload("a.pdf"), _upload("b.pdf")])

    assert sorted(storage.deleted) == sorted(storage.uploaded)
    assert len(storage.deleted) == 2
    assert files.deleted == [501, 502]


def test_link_failure_keeps_visit_and_removes_uploads():
    repo = FakeVisitRepo(link_error=RuntimeError("deadlock"))
    files, storage = FakeFiles(), FakeStorage()

    visit_id, uploaded = _add(VisitService(repo, storage, files), _request(), [_upload()])

    assert visit_id == 15
    assert uploaded == []
    assert files.deleted == [501]
    assert storage.deleted == storage.uploaded


def test_route_unknown_organization(client, override, auth_headers):
    override(get_visit_repo, FakeVisitRepo(add_error=ForeignKeyViolationError("reservoirs")))
    override(get_files_repo, FakeFiles())
    override(get_file_storage, FakeStorage())
    payload = {
        "organization_id": 77,
        "visit_date": "2024-09-12T10:30:00",
        "description": "Осмотр",
        "responsible_name": "Турсунов Б.",
    }

    response = client.post(VISITS, json=payload, headers=auth_headers("sc"))

    assert response.status_code == 400
    assert response.json()["error"] == "Organization not found"


def test_route_multipart(client, override, auth_headers):
    repo, files, storage = FakeVisitRepo(), FakeFiles(), FakeStorage()
    override(get_visit_repo, repo)
    override(get_files_repo, files)
    override(get_file_storage, storage)
    form = {
        "organization_id": "1",
        "visit_date": "2024-09-12T10:30:00",
        "description": "Осмотр",
        "responsible_name": "Турсунов Б.",
    }

    response = client.post(
        VISITS,
        data=form,
        files=[("files", ("акт.pdf", b"%PDF", "application/pdf"))],
        headers=auth_headers("sc"),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 15
    assert body["uploaded_files"][0]["file_name"] == "акт.pdf"


def test_route_list_defaults_to_today(client, override, auth_headers):
    repo = FakeVisitRepo()
    override(get_visit_repo, repo)

    response = client.get(VISITS, headers=auth_headers())

    assert response.status_code == 200
    assert repo.day == date.today()


def test_route_list_rejects_bad_date(client, override, auth_headers):
    override(get_visit_repo, FakeVisitRepo())

    response = client.get(f"{VISITS}?date=12.09.2024", headers=auth_headers())

    assert response.status_code == 400


def _edit(service, visit_id, req, uploads=()):
    return asyncio.run(service.edit_visit(visit_id, req, uploads=uploads))


def test_edit_stores_uploads_under_current_visit_date():
    repo, files, storage = FakeVisitRepo(), FakeFiles(), FakeStorage()

    uploaded = _edit(VisitService(repo, storage, files), 15, VisitUpdate(description="Повторный осмотр"), [_upload()])

    assert [f.id for f in uploaded] == [501]
    assert storage.uploaded[0].startswith("visits/2024/09/12/")
    assert repo.updated == [(15, {"description": "Повторный осмотр"})]
    assert repo.links == [(15, [501])]
    assert repo.replaced == []


def test_edit_with_new_date_and_file_ids_replaces_files():
    repo, files, storage = FakeVisitRepo(), FakeFiles(), FakeStorage()
    req = VisitUpdate(visit_date=datetime(2024, 10, 3, 9, 0), file_ids=[9])

    _edit(VisitService(repo, storage, files), 15, req, [_upload()])

    assert storage.uploaded[0].startswith("visits/2024/10/03/")
    assert files.added[0][1] == date(2024, 10, 3)
    assert repo.replaced == [(15, [9, 501])]
    assert repo.links == []


def test_failed_edit_compensates_once():
    repo = FakeVisitRepo(update_error=ForeignKeyViolationError("reservoirs"))
    files, storage = FakeFiles(), FakeStorage()

    with pytest.raises(ForeignKeyViolationError):
        _edit(VisitService(repo, storage, files), 15, VisitUpdate(organization_id=77), [_upload("a.pdf"), _upload("b.pdf")])

    assert sorted(storage.deleted) == sorted(storage.uploaded)
    assert len(storage.deleted) == 2
    assert files.deleted == [501, 502]


def test_route_edit_json(client, override, auth_headers):
    repo = FakeVisitRepo()
    override(get_visit_repo, repo)
    override(get_files_repo, FakeFiles())
    override(get_file_storage, FakeStorage())

    response = client.patch(f"{VISITS}15", json={"file_ids": [4, 5]}, headers=auth_headers("sc"))

    assert response.status_code == 200
    assert response.json() == {"status": 200}
    assert repo.updated == [(15, {})]
    assert repo.replaced == [(15, [4, 5])]


def test_route_edit_multipart_missing_visit(client, override, auth_headers):
    files, storage = FakeFiles(), FakeStorage()
    override(get_visit_repo, FakeVisitRepo(update_error=NotFoundError("visits id=15")))
    override(get_files_repo, files)
    override(get_file_storage, storage)

    response = client.patch(
        f"{VISITS}15",
        data={"visit_date": "2024-09-13T08:00:00"},
        files=[("files", ("акт.pdf", b"%PDF", "application/pdf"))],
        headers=auth_headers("sc"),
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Visit not found"
    assert storage.deleted == storage.uploaded
    assert files.deleted == [501]


# --- Репозиторий на SQLite ---


def test_repository_lists_one_day(db_session):
    org_id = ReservoirRepository(db_session).add_reservoir("Чарвак")
    repo = VisitRepository(db_session)
    file_id = FileRepository(db_session).add_file("act.pdf", "visits/2024/09/12/act.pdf", None, "application/pdf", 4)

    def visit(when):
        return repo.add_visit(
            {"organization_id": org_id, "visit_date": when, "description": "Осмотр", "responsible_name": "Б."},
            created_by=None,
        )

    late = visit(datetime(2024, 9, 12, 17, 0))
    early = visit(datetime(2024, 9, 12, 0, 0))
    visit(datetime(2024, 9, 13, 0, 0))
    visit(datetime(2024, 9, 11, 23, 59))
    repo.link_visit_files(early, [file_id])

    visits = repo.list_visits(date(2024, 9, 12))

    assert [v.id for v in visits] == [early, late]
    assert visits[0].organization_name == "Чарвак"
    assert [f.id for f in visits[0].files] == [file_id]

    with pytest.raises(ForeignKeyViolationError):
        repo.add_visit(
            {"organization_id": 999, "visit_date": datetime(2024, 9, 12), "description": "x", "responsible_name": "y"},
            created_by=None,
        )
