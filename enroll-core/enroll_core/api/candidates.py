"""
Candidate Routes
================
CRUD endpoints for training candidates.
"""

import time
from typing import Callable, List, Optional
from fastapi import APIRouter, Depends, Request, Response
import structlog

from enroll_core.errors import UserErrors, error_response
from enroll_core.exceptions import DuplicateCandidateError
from enroll_core.messaging.phone_utils import normalize_mobile
from enroll_core.schemas import (
    Candidate,
    CandidateCreate,
    CandidateSearch,
    CandidateUpdate,
    normalize_aadhar,
)
from enroll_core.storage.base import CandidateStorage

logger = structlog.get_logger(__name__)

_DUPLICATE_MESSAGES = {
    "aadhar": "Candidate with this Aadhar already exists",
    "mobile": "Candidate with this mobile number already exists",
}

# Attempts at picking a candidate_id that is not taken yet
_CANDIDATE_ID_ATTEMPTS = 3


def generate_candidate_id(clock: Callable[[], float] = time.time) -> str:
    """Build a ``TRN`` id from the last six digits of the millisecond clock."""
    return f"TRN{str(int(clock() * 1000))[-6:]}"


def get_storage(request: Request) -> CandidateStorage:
    return request.app.state.storage


def _parse_id(raw: str) -> Optional[int]:
    try:
        return int(raw)
    except ValueError:
        return None


def _lenient(normalize: Callable[[str], str], value: str) -> str:
    try:
        return normalize(value)
    except ValueError:
        return value


def create_candidates_router(
    id_factory: Callable[[], str] = generate_candidate_id,
) -> APIRouter:
    """
    Create the candidate router.

    Args:
        id_factory: Produces public candidate ids

    Returns:
        FastAPI router mounted under /api/candidates
    """
    router = APIRouter(prefix="/api/candidates", tags=["Candidates"])

    @router.get("", response_model=List[Candidate])
    async def list_candidates(storage: CandidateStorage = Depends(get_storage)):
        try:
            return await storage.get_all_candidates()
        except Exception as e:
            logger.error("Failed to fetch candidates", error=str(e), exc_info=True)
            return UserErrors.internal("Failed to fetch candidates")

    @router.get("/{candidate_id}", response_model=Candidate)
    async def get_candidate(candidate_id: str, storage: CandidateStorage = Depends(get_storage)):
        id = _parse_id(candidate_id)
        if id is None:
            return error_response(400, "Invalid candidate ID")
        try:
            candidate = await storage.get_candidate(id)
        except Exception as e:
            logger.error("Failed to fetch candidate", id=id, error=str(e), exc_info=True)
            return UserErrors.internal("Failed to fetch candidate")
        if candidate is None:
            return error_response(404, "Candidate not found")
        return candidate

    @router.post("/search", response_model=Candidate)
    async def search_candidate(body: CandidateSearch, storage: CandidateStorage = Depends(get_storage)):
        try:
            if body.aadhar:
                candidate = await storage.get_candidate_by_aadhar(_lenient(normalize_aadhar, body.aadhar))
            elif body.mobile:
                candidate = await storage.get_candidate_by_mobile(_lenient(normalize_mobile, body.mobile))
            else:
                return error_response(400, "Either aadhar or mobile is required")
        except Exception as e:
            logger.error("Failed to search candidate", error=str(e), exc_info=True)
            return UserErrors.internal("Failed to search candidate")
        if candidate is None:
            return error_response(404, "Candidate not found")
        return candidate

    @router.post("", response_model=Candidate, status_code=201)
    async def create_candidate(body: CandidateCreate, storage: CandidateStorage = Depends(get_storage)):
        try:
            if await storage.get_candidate_by_aadhar(body.aadhar):
                return error_response(409, _DUPLICATE_MESSAGES["aadhar"])
            if await storage.get_candidate_by_mobile(body.mobile):
                return error_response(409, _DUPLICATE_MESSAGES["mobile"])

            for attempt in range(_CANDIDATE_ID_ATTEMPTS):
                try:
                    candidate = await storage.create_candidate(body, id_factory())
                    break
                except DuplicateCandidateError as e:
                    if e.field != "candidate_id" or attempt == _CANDIDATE_ID_ATTEMPTS - 1:
                        raise
        except DuplicateCandidateError as e:
            return error_response(409, _DUPLICATE_MESSAGES.get(e.field, "Candidate already exists"))
        except Exception as e:
            logger.error("Failed to create candidate", error=str(e), exc_info=True)
            return UserErrors.internal("Failed to create candidate")

        logger.info("Candidate registered", id=candidate.id, candidate_id=candidate.candidate_id)
        return candidate

    @router.put("/{candidate_id}", response_model=Candidate)
    async def update_candidate(
        candidate_id: str,
        body: CandidateUpdate,
        storage: CandidateStorage = Depends(get_storage),
    ):
        id = _parse_id(candidate_id)
        if id is None:
            return error_response(400, "Invalid candidate ID")
        try:
            candidate = await storage.update_candidate(id, body.model_dump(exclude_unset=True))
        except DuplicateCandidateError as e:
            return error_response(409, _DUPLICATE_MESSAGES.get(e.field, "Candidate already exists"))
        except Exception as e:
            logger.error("Failed to update candidate", id=id, error=str(e), exc_info=True)
            return UserErrors.internal("Failed to update candidate")
        if candidate is None:
            return error_response(404, "Candidate not found")
        return candidate

    @router.delete("/{candidate_id}", status_code=204)
    async def delete_candidate(candidate_id: str, storage: CandidateStorage = Depends(get_storage)):
        id = _parse_id(candidate_id)
        if id is None:
            return error_response(400, "Invalid candidate ID")
        try:
            deleted = await storage.delete_candidate(id)
        except Exception as e:
            logger.error("Failed to delete candidate", id=id, error=str(e), exc_info=True)
            return UserErrors.internal("Failed to delete candidate")
        if not deleted:
            return error_response(404, "Candidate not found")
        return Response(status_code=204)

    return router
