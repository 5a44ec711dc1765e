"""
Тесты кадровых документов и запросов документов
"""
import pytest

from srmt_admin.core.errors import ForeignKeyViolationError, InvalidStatusError, NotFoundError
from srmt_admin.modules.files.dependencies import get_file_storage, get_files_repo
from srmt_admin.modules.hrm.dependencies import get_document_repo
from srmt_admin.modules.hrm.services.contacts import ContactRepository
from srmt_admin.modules.hrm.services.documents import DocumentRepository

DOCUMENTS = "/api/v1/hrm/documents/"
REQUESTS = "/api/v1/hrm/document-requests/"
FORM = {"employee_id": "5", "document_type": "contract", "title": "Трудовой договор"}


class FakeDocumentRepo:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.error:
            raise self.error

    def add_document(self, values, created_by):
        self._call("add_document", values, created_by)
        return 21

    def get_document(self, document_id):
        self._call("get_document", document_id)

    def delete_document(self, document_id):
        self._call("delete_document", document_id)

    def add_document_request(self, contact_id, document_type, purpose):
        self._call("add_document_request", contact_id, document_type, purpose)
        return 6

    def approve_document_request(self, request_id, processed_by):
        self._call("approve_document_request", request_id, processed_by)

    def reject_document_request(self, request_id, processed_by, reason):
        self._call("reject_document_request", request_id, processed_by, reason)


class FakeFilesRepo:
    def __init__(self):
        self.added = []
        self.deleted = []

    def get_or_create_category(self, name, display_name):
        return 6

    def add_file(self, file_name, object_key, category_id, mime_type, size_bytes, target_date=None):
        self.added.append(object_key)
        return 700 + len(self.added)

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


@pytest.fixture
def files(override):
    files_repo, storage = FakeFilesRepo(), FakeStorage()
    override(get_files_repo, files_repo)
    override(get_file_storage, storage)
    return files_repo, storage


@pytest.fixture
def hr(auth_headers):
    return auth_headers("hr", user_id=2)


def _attachment():
    return [("file", ("договор.pdf", b"%PDF-1.4", "application/pdf"))]


def test_add_multipart_stores_file(client, override, files, hr):
    repo = FakeDocumentRepo()
    override(get_document_repo, repo)
    files_repo, storage = files

    response = client.post(DOCUMENTS, data=FORM, files=_attachment(), headers=hr)

    assert response.status_code == 201
    assert response.json() == {"status": 201, "id": 21}
    values = repo.calls[0][1]
    assert values["file_id"] == 701
    assert storage.uploaded[0].startswith("hr-documents/")
    assert storage.deleted == []


def test_failed_insert_removes_upload_exactly_once(client, override, files, hr):
    override(get_document_repo, FakeDocumentRepo(error=ForeignKeyViolationError("employees")))
    files_repo, storage = files

    response = client.post(DOCUMENTS, data=FORM, files=_attachment(), headers=hr)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid employee_id or file_id"
    assert storage.deleted == storage.uploaded
    assert len(storage.deleted) == 1
    assert files_repo.deleted == [701]


def test_invalid_form_uploads_nothing(client, override, files, hr):
    repo = FakeDocumentRepo()
    override(get_document_repo, repo)
    files_repo, storage = files

    response = client.post(
        DOCUMENTS, data={**FORM, "document_type": "memo"}, files=_attachment(), headers=hr
    )

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'document_type' is not valid"]
    assert storage.uploaded == []
    assert repo.calls == []


def test_add_json_invalid_body(client, override, hr):
    repo = FakeDocumentRepo()
    override(get_document_repo, repo)

    response = client.post(DOCUMENTS, content=b"[1,", headers={**hr, "Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request format"
    assert repo.calls == []


def test_get_missing_document(client, override, hr):
    override(get_document_repo, FakeDocumentRepo(error=NotFoundError("hr_documents id=3")))

    response = client.get(f"{DOCUMENTS}3", headers=hr)

    assert response.status_code == 404
    assert response.json() == {"status": 404, "error": "Document not found"}


def test_request_uses_callers_contact(client, override, auth_headers):
    repo = FakeDocumentRepo()
    override(get_document_repo, repo)

    response = client.post(
        REQUESTS, json={"document_type": "reference", "purpose": "Для банка"}, headers=auth_headers(contact_id=14)
    )

    assert response.status_code == 201
    assert repo.calls == [("add_document_request", 14, "reference", "Для банка")]


def test_request_without_contact(client, override, auth_headers):
    repo = FakeDocumentRepo()
    override(get_document_repo, repo)

    response = client.post(REQUESTS, json={"document_type": "reference"}, headers=auth_headers())

    assert response.status_code == 401
    assert repo.calls == []


def test_reject_requires_reason(client, override, hr):
    repo = FakeDocumentRepo()
    override(get_document_repo, repo)

    response = client.post(f"{REQUESTS}6/reject", json={"reason": ""}, headers=hr)

    assert response.status_code == 400
    assert response.json()["errors"] == ["field 'reason' is too short"]
    assert repo.calls == []


@pytest.mark.parametrize("action, body", [("approve", None), ("reject", {"reason": "Нет оснований"})])
def test_processed_request_conflict(client, override, hr, action, body):
    override(get_document_repo, FakeDocumentRepo(error=InvalidStatusError("approved")))

    response = client.post(f"{REQUESTS}6/{action}", json=body, headers=hr)

    assert response.status_code == 409
    assert response.json()["error"] == "Document request is not pending"


# --- Репозиторий на SQLite ---


def test_repository_request_processed_once(db_session):
    contact_id = ContactRepository(db_session).add_contact({"name": "Юсупова Д."})
    repo = DocumentRepository(db_session)
    request_id = repo.add_document_request(contact_id, "certificate", None)

    repo.reject_document_request(request_id, processed_by=None, reason="Нет оснований")

    with pytest.raises(InvalidStatusError):
        repo.approve_document_request(request_id, processed_by=None)
    processed = repo.list_document_requests(contact_id=contact_id)[0]
    assert processed.status == "rejected"
    assert processed.rejection_reason == "Нет оснований"
    assert processed.processed_at is not None
