"""Роуты /hrm/vacancies и /hrm/candidates."""
from typing import List, Optional, Protocol

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from srmt_admin.core.auth import Claims, require_roles
from srmt_admin.core.errors import (
    ForeignKeyViolationError,
    InvalidStatusError,
    NotFoundError,
    VacancyNotPublishedError,
)
from srmt_admin.core.logging_config import RequestLogger, op_log
from srmt_admin.core.responses import IDResponse, created, ok
from srmt_admin.core.validation import INTERNAL_ERROR
from srmt_admin.modules.hrm.dependencies import get_recruiting_repo
from srmt_admin.modules.hrm.models import Candidate, Vacancy
from srmt_admin.modules.hrm.schemas.recruiting import (
    CandidateCreate,
    CandidateOut,
    CandidateStatus,
    CandidateStatusChange,
    CandidateUpdate,
    VacancyCreate,
    VacancyOut,
    VacancyUpdate,
)

router = APIRouter(tags=["hrm-recruiting"])


class VacancyStore(Protocol):
    def add_vacancy(self, values: dict, created_by: int) -> int: ...

    def get_vacancy(self, vacancy_id: int) -> Vacancy: ...

    def list_vacancies(self, status: Optional[str] = None, department_id: Optional[int] = None) -> List[Vacancy]: ...

    def update_vacancy(self, vacancy_id: int, values: dict) -> None: ...

    def delete_vacancy(self, vacancy_id: int) -> None: ...

    def publish_vacancy(self, vacancy_id: int) -> None: ...

    def close_vacancy(self, vacancy_id: int) -> None: ...


class CandidateStore(Protocol):
    def add_candidate(self, values: dict) -> int: ...

    def get_candidate(self, candidate_id: int) -> Candidate: ...

    def list_candidates(self, vacancy_id: Optional[int] = None, status: Optional[str] = None) -> List[Candidate]: ...

    def update_candidate(self, candidate_id: int, values: dict) -> None: ...

    def change_candidate_status(self, candidate_id: int, status: str, stage: Optional[str]) -> None: ...


# --- Вакансии ---


@router.get("/vacancies/", response_model=List[VacancyOut])
def list_vacancies(
    vacancy_status: Optional[str] = Query(None, alias="status"),
    department_id: Optional[int] = Query(None),
    log: RequestLogger = Depends(op_log("hrm.vacancies.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacancyStore = Depends(get_recruiting_repo),
):
    try:
        return repo.list_vacancies(vacancy_status, department_id)
    except Exception:
        log.exception("failed to list vacancies")
        raise HTTPException(status_code=500, detail="Failed to retrieve vacancies")


@router.get("/vacancies/{vacancy_id}", response_model=VacancyOut)
def get_vacancy(
    vacancy_id: int,
    log: RequestLogger = Depends(op_log("hrm.vacancies.get")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacancyStore = Depends(get_recruiting_repo),
):
    try:
        return repo.get_vacancy(vacancy_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacancy not found")
    except Exception:
        log.exception("failed to get vacancy", extra={"entity_id": vacancy_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/vacancies/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_vacancy(
    payload: VacancyCreate,
    log: RequestLogger = Depends(op_log("hrm.vacancies.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacancyStore = Depends(get_recruiting_repo),
):
    try:
        vacancy_id = repo.add_vacancy(payload.model_dump(), claims.user_id)
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid hiring_manager_id")
    except Exception:
        log.exception("failed to add vacancy")
        raise HTTPException(status_code=500, detail="Failed to add vacancy")
    log.info("vacancy added", extra={"entity_id": vacancy_id})
    return created(vacancy_id)


@router.patch("/vacancies/{vacancy_id}")
def edit_vacancy(
    vacancy_id: int,
    payload: VacancyUpdate,
    log: RequestLogger = Depends(op_log("hrm.vacancies.edit")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacancyStore = Depends(get_recruiting_repo),
):
    try:
        repo.update_vacancy(vacancy_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacancy not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid hiring_manager_id")
    except Exception:
        log.exception("failed to update vacancy", extra={"entity_id": vacancy_id})
        raise HTTPException(status_code=500, detail="Failed to update vacancy")
    return ok()


@router.delete("/vacancies/{vacancy_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vacancy(
    vacancy_id: int,
    log: RequestLogger = Depends(op_log("hrm.vacancies.delete")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacancyStore = Depends(get_recruiting_repo),
):
    try:
        repo.delete_vacancy(vacancy_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacancy not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=409, detail="Vacancy has candidates")
    except Exception:
        log.exception("failed to delete vacancy", extra={"entity_id": vacancy_id})
        raise HTTPException(status_code=500, detail="Failed to delete vacancy")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/vacancies/{vacancy_id}/publish")
def publish_vacancy(
    vacancy_id: int,
    log: RequestLogger = Depends(op_log("hrm.vacancies.publish")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacancyStore = Depends(get_recruiting_repo),
):
    try:
        repo.publish_vacancy(vacancy_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacancy not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Vacancy cannot be published in its current status")
    except Exception:
        log.exception("failed to publish vacancy", extra={"entity_id": vacancy_id})
        raise HTTPException(status_code=500, detail="Failed to publish vacancy")
    log.info("vacancy published", extra={"entity_id": vacancy_id})
    return ok()


@router.post("/vacancies/{vacancy_id}/close")
def close_vacancy(
    vacancy_id: int,
    log: RequestLogger = Depends(op_log("hrm.vacancies.close")),
    claims: Claims = Depends(require_roles("hr")),
    repo: VacancyStore = Depends(get_recruiting_repo),
):
    try:
        repo.close_vacancy(vacancy_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacancy not found")
    except InvalidStatusError:
        raise HTTPException(status_code=409, detail="Vacancy cannot be closed in its current status")
    except Exception:
        log.exception("failed to close vacancy", extra={"entity_id": vacancy_id})
        raise HTTPException(status_code=500, detail="Failed to close vacancy")
    log.info("vacancy closed", extra={"entity_id": vacancy_id})
    return ok()


# --- Кандидаты ---


@router.get("/candidates/", response_model=List[CandidateOut])
def list_candidates(
    vacancy_id: Optional[int] = Query(None),
    candidate_status: Optional[CandidateStatus] = Query(None, alias="status"),
    log: RequestLogger = Depends(op_log("hrm.candidates.list")),
    claims: Claims = Depends(require_roles("hr")),
    repo: CandidateStore = Depends(get_recruiting_repo),
):
    try:
        return repo.list_candidates(vacancy_id, candidate_status)
    except Exception:
        log.exception("failed to list candidates")
        raise HTTPException(status_code=500, detail="Failed to retrieve candidates")


@router.get("/candidates/{candidate_id}", response_model=CandidateOut)
def get_candidate(
    candidate_id: int,
    log: RequestLogger = Depends(op_log("hrm.candidates.get")),
    claims: Claims = Depends(require_roles("hr")),
    repo: CandidateStore = Depends(get_recruiting_repo),
):
    try:
        return repo.get_candidate(candidate_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Candidate not found")
    except Exception:
        log.exception("failed to get candidate", extra={"entity_id": candidate_id})
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/candidates/", status_code=status.HTTP_201_CREATED, response_model=IDResponse)
def add_candidate(
    payload: CandidateCreate,
    log: RequestLogger = Depends(op_log("hrm.candidates.add")),
    claims: Claims = Depends(require_roles("hr")),
    repo: CandidateStore = Depends(get_recruiting_repo),
):
    try:
        candidate_id = repo.add_candidate(payload.model_dump())
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Vacancy not found")
    except VacancyNotPublishedError:
        raise HTTPException(status_code=400, detail="Vacancy is not published")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid vacancy_id or resume_file_id")
    except Exception:
        log.exception("failed to add candidate")
        raise HTTPException(status_code=500, detail="Failed to add candidate")
    log.info("candidate added", extra={"entity_id": candidate_id})
    return created(candidate_id)


@router.patch("/candidates/{candidate_id}")
def edit_candidate(
    candidate_id: int,
    payload: CandidateUpdate,
    log: RequestLogger = Depends(op_log("hrm.candidates.edit")),
    claims: Claims = Depends(require_roles("hr")),
    repo: CandidateStore = Depends(get_recruiting_repo),
):
    try:
        repo.update_candidate(candidate_id, payload.model_dump(exclude_unset=True))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Candidate not found")
    except ForeignKeyViolationError:
        raise HTTPException(status_code=400, detail="Invalid resume_file_id")
    except Exception:
        log.exception("failed to update candidate", extra={"entity_id": candidate_id})
        raise HTTPException(status_code=500, detail="Failed to update candidate")
    return ok()


@router.post("/candidates/{candidate_id}/status")
def change_candidate_status(
    candidate_id: int,
    payload: CandidateStatusChange,
    log: RequestLogger = Depends(op_log("hrm.candidates.status")),
    claims: Claims = Depends(require_roles("hr")),
    repo: CandidateStore = Depends(get_recruiting_repo),
):
    try:
        repo.change_candidate_status(candidate_id, payload.status, payload.stage)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Candidate not found")
    except Exception:
        log.exception("failed to change candidate status", extra={"entity_id": candidate_id})
        raise HTTPException(status_code=500, detail="Failed to change candidate status")
    log.info("candidate status changed", extra={"entity_id": candidate_id, "reason": payload.status})
    return ok()
