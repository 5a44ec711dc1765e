"""Роуты /hrm/contacts."""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import ForeignKeyViolationError, NotFoundError
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_contact_repo
from srmt_admin.modules.hrm.models import Contact
from srmt_admin.modules.hrm.schemas.contact import ContactCreate, ContactOut, ContactUpdate

router = APIRouter(prefix="/contacts", tags=["hrm-contacts"])


class ContactStore(Protocol):
    def add_contact(self, values: dict) -> int: ...

    def get_contact(self, contact_id: int) -> Contact: ...

    def list_contacts(self, search: Optional[str] = None) -> List[Contact]: ...

    def update_contact(self, contact_id: int, values: dict) -> None: ...

    def delete_contact(self, contact_id: int) -> None: ...


@router.get("/", response_model=List[ContactOut])
def list_contacts(
    search: Optional[str] = Query(None),
    log: RequestLogger = Depends(op_log("hrm.contacts.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: ContactStore = Depends(get_contact_repo),
):
    try:
        return repo.list_contacts(search)
    except Exception:
        log.exception("failed to list contacts")
        raise HTTPException(status_code=500, detail="Failed to retrieve contacts")


@router.get("/{contact_id}", response_model=ContactOut)
def get_contact(
    contact_id: int,
    log: RequestLogger = Depends(op_log("hrm.contacts.get")),
    claims: Claims = Depends(require_roles("hr")),
    repo: ContactStore = Depends(get_contact_repo),
):
    try:
        return repo.get_contact(contact_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contact not found")
    except Exception:
        log.exception("failed to get contact", extra={"entity_id": contact_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_contact(
    payload: ContactCreate,
    log: RequestLogger = Depends(op_log("hrm.contacts.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: ContactStore = Depends(get_contact_repo),
):
    try:
        contact_id = repo.add_contact(payload.model_dump())
    except Exception:
        log.exception("failed to add contact")
        raise HTTPException(status_code=500, detail="Failed to add contact")
    log.info("contact added", extra={"entity_id": contact_id})
    return created(contact_id)


@router.patch("/{contact_id}")
def edit_contact(
    contact_id: int,
    payload: ContactUpdate,
    log: RequestLogger = Depends(op_log("hrm.contacts.edit")),
    claims: Claims = Depends(require_roles("hr")),
    repo: ContactStore = Depends(get_contact_repo),
):
    try:
        repo.update_contact(contact_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contact not found")
    except Exception:
        log.exception("failed to update contact", extra={"entity_id": contact_id})
        raise HTTPException(status_code=500, detail="Failed to update contact")
    return ok()


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(
    contact_id: int,
    log: RequestLogger = Depends(op_log("hrm.contacts.delete")),
    claims: Claims = Depends(require_roles("hr")),
    repo: ContactStore = Depends(get_contact_repo),
):
    try:
        repo.delete_contact(contact_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Contact not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=409, detail="Contact is referenced by an employee or user")
    except Exception:
        log.exception("failed to delete contact", extra={"entity_id": contact_id})
        raise HTTPException(status_code=500, detail="Failed to delete contact")
    log.info("contact deleted", extra={"entity_id": contact_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
