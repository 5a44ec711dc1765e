"""
Тесты файлового хранилища: загрузка, удаление, категории
"""
from datetime import date

import pytest

from srmt_admin.core.errors import NotFoundError, UniqueViolationError
from srmt_admin.modules.files.dependencies import get_file_storage, get_files_repo
from srmt_admin.modules.files.models import File, FileCategory
from srmt_admin.modules.files.services.repository import FileRepository

FILES = "/api/v1/files"


class FakeFilesRepo:
    def __init__(self, add_error=None):
        self.add_error = add_error
        self.added = []
        self.deleted = []
        self.files = {}

    def get_category(self, category_id):
        if category_id != 2:
            raise NotFoundError(f"file_categories id={category_id}")
        return FileCategory(id=2, name="reservoir-reports", display_name="Сводки")

    def add_file(self, file_name, object_key, category_id, mime_type, size_bytes, target_date=None):
        if self.add_error:
            raise self.add_error
        self.added.append((object_key, target_date))
        return 900 + len(self.added)

    def get_file(self, file_id):
        if file_id not in self.files:
            raise NotFoundError(f"files id={file_id}")
        return self.files[file_id]

    def delete_file(self, file_id):
        self.deleted.append(file_id)

    def add_category(self, name, display_name, description=None, parent_id=None):
        raise UniqueViolationError("file_categories.name")


class FakeStorage:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploaded = []
        self.deleted = []

    def upload_file(self, object_key, data, content_type):
        if self.fail:
            raise OSError("disk full")
        self.uploaded.append(object_key)

    def delete_file(self, object_key):
        self.deleted.append(object_key)


def _form_file(name="сводка.xlsx"):
    return [("file", (name, b"PK\x03\x04", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"))]


def _use(override, repo, storage):
    override(get_files_repo, repo)
    override(get_file_storage, storage)


def test_upload_uses_category_and_date(client, override, auth_headers):
    repo, storage = FakeFilesRepo(), FakeStorage()
    _use(override, repo, storage)

    response = client.post(
        f"{FILES}/upload", data={"category_id": "2", "date": "2024-04-18"}, files=_form_file(), headers=auth_headers()
    )

    assert response.status_code == 201
    assert response.json() == {"status": 201, "id": 901}
    assert storage.uploaded[0].startswith("Сводки/2024/04/18/")
    assert repo.added[0][1] == date(2024, 4, 18)


def test_upload_metadata_failure_removes_object(client, override, auth_headers):
    repo, storage = FakeFilesRepo(add_error=RuntimeError("insert failed")), FakeStorage()
    _use(override, repo, storage)

    response = client.post(f"{FILES}/upload", data={"category_id": "2"}, files=_form_file(), headers=auth_headers())

    assert response.status_code == 500
    assert response.json()["error"] == "Could not upload file"
    assert storage.deleted == storage.uploaded
    assert len(storage.deleted) == 1


def test_upload_storage_failure(client, override, auth_headers):
    repo, storage = FakeFilesRepo(), FakeStorage(fail=True)
    _use(override, repo, storage)

    response = client.post(f"{FILES}/upload", data={"category_id": "2"}, files=_form_file(), headers=auth_headers())

    assert response.status_code == 500
    assert repo.added == []


def test_upload_unknown_category(client, override, auth_headers):
    repo, storage = FakeFilesRepo(), FakeStorage()
    _use(override, repo, storage)

    response = client.post(f"{FILES}/upload", data={"category_id": "7"}, files=_form_file(), headers=auth_headers())

    assert response.status_code == 400
    assert response.json()["error"] == "Incorrect category"
    assert storage.uploaded == []


def test_upload_requires_file(client, override, auth_headers):
    _use(override, FakeFilesRepo(), FakeStorage())

    response = client.post(f"{FILES}/upload", data={"category_id": "2"}, headers=auth_headers())

    assert response.status_code == 400


def test_delete_removes_object_then_metadata(client, override, auth_headers):
    repo, storage = FakeFilesRepo(), FakeStorage()
    repo.files[5] = File(id=5, file_name="a.pdf", object_key="docs/2024/01/01/a.pdf")
    _use(override, repo, storage)

    response = client.delete(f"{FILES}/5", headers=auth_headers())

    assert response.status_code == 204
    assert storage.deleted == ["docs/2024/01/01/a.pdf"]
    assert repo.deleted == [5]


def test_delete_missing_file_is_no_content(client, override, auth_headers):
    repo, storage = FakeFilesRepo(), FakeStorage()
    _use(override, repo, storage)

    response = client.delete(f"{FILES}/5", headers=auth_headers())

    assert response.status_code == 204
    assert storage.deleted == []


def test_duplicate_category(client, override, auth_headers):
    _use(override, FakeFilesRepo(), FakeStorage())

    response = client.post(
        f"{FILES}/categories/", json={"name": "reports", "display_name": "Отчёты"}, headers=auth_headers("admin")
    )

    assert response.status_code == 409
    assert response.json()["error"] == "Category with this name already exists"


# --- Репозиторий на SQLite ---


def test_repository_file_by_category_and_date(db_session):
    repo = FileRepository(db_session)
    category_id = repo.get_or_create_category("reservoir-reports", "Сводки")
    assert repo.get_or_create_category("reservoir-reports", "Сводки") == category_id

    file_id = repo.add_file("a.xlsx", "Сводки/2024/04/18/a.xlsx", category_id, "application/xlsx", 4, date(2024, 4, 18))

    assert repo.get_file_by_category_and_date("reservoir-reports", date(2024, 4, 18)).id == file_id
    with pytest.raises(NotFoundError):
        repo.get_file_by_category_and_date("reservoir-reports", date(2024, 4, 19))
    with pytest.raises(UniqueViolationError):
        repo.add_category("reservoir-reports", "Дубль")
