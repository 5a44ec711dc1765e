from datetime import datetime, timezone
from typing import List, Optional

from srmt_admin.core.database import SQLRepository
from srmt_admin.core.errors import InvalidStatusError
from srmt_admin.modules.hrm.models import DocumentRequest, HRDocument


class DocumentRepository(SQLRepository):
    # --- Кадровые документы ---

    def add_document(self, values: dict, created_by: int) -> int:
        return self._add(HRDocument(**values, created_by=created_by)).id

    def get_document(self, document_id: int) -> HRDocument:
        return self._get(HRDocument, document_id)

    def list_documents(
        self, employee_id: Optional[int] = None, document_type: Optional[str] = None
    ) -> List[HRDocument]:
        query = self.db.query(HRDocument)
        if employee_id:
            query = query.filter(HRDocument.employee_id == employee_id)
        if document_type:
            query = query.filter(HRDocument.document_type == document_type)
        return query.order_by(HRDocument.id.desc()).all()

    def update_document(self, document_id: int, values: dict) -> None:
        self._update(HRDocument, document_id, values)

    def delete_document(self, document_id: int) -> None:
        self._delete(HRDocument, document_id)

    # --- Запросы документов ---

    def add_document_request(self, contact_id: int, document_type: str, purpose: Optional[str]) -> int:
        obj = DocumentRequest(contact_id=contact_id, document_type=document_type, purpose=purpose)
        return self._add(obj).id

    def list_document_requests(
        self, contact_id: Optional[int] = None, status: Optional[str] = None
    ) -> List[DocumentRequest]:
        query = self.db.query(DocumentRequest)
        if contact_id:
            query = query.filter(DocumentRequest.contact_id == contact_id)
        if status:
            query = query.filter(DocumentRequest.status == status)
        return query.order_by(DocumentRequest.id.desc()).all()

    def _process_request(self, request_id: int, status: str, processed_by: int, reason: Optional[str] = None) -> None:
        req = self._get(DocumentRequest, request_id)
        if req.status != "pending":
            raise InvalidStatusError(f"document request {request_id} is {req.status}")
        req.status = status
        req.rejection_reason = reason
        req.processed_by = processed_by
        req.processed_at = datetime.now(timezone.utc)
        self._commit()

    def approve_document_request(self, request_id: int, processed_by: int) -> None:
        self._process_request(request_id, "approved", processed_by)

    def reject_document_request(self, request_id: int, processed_by: int, reason: str) -> None:
        self._process_request(request_id, "rejected", processed_by, reason)
