"""
In-Memory Candidate Storage
===========================
Process-local storage used when no database is configured.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from enroll_core.exceptions import DuplicateCandidateError
from enroll_core.schemas import Candidate, CandidateCreate
from .base import CandidateStorage

_UNIQUE_FIELDS = ("candidate_id", "aadhar", "mobile")


class MemoryCandidateStorage(CandidateStorage):
    """Dict-backed storage with auto-increment ids."""

    name = "memory"

    def __init__(self):
        self._candidates: Dict[int, Candidate] = {}
        self._current_id = 1
        self._lock = asyncio.Lock()

    def _find(self, field: str, value: str) -> Optional[Candidate]:
        for candidate in self._candidates.values():
            if getattr(candidate, field) == value:
                return candidate
        return None

    def _check_unique(self, values: Dict[str, Any], exclude_id: Optional[int] = None) -> None:
        for field in _UNIQUE_FIELDS:
            if field not in values:
                continue
            existing = self._find(field, values[field])
            if existing is not None and existing.id != exclude_id:
                raise DuplicateCandidateError(field, values[field])

    async def get_candidate(self, id: int) -> Optional[Candidate]:
        return self._candidates.get(id)

    async def get_candidate_by_candidate_id(self, candidate_id: str) -> Optional[Candidate]:
        return self._find("candidate_id", candidate_id)

    async def get_candidate_by_aadhar(self, aadhar: str) -> Optional[Candidate]:
        return self._find("aadhar", aadhar)

    async def get_candidate_by_mobile(self, mobile: str) -> Optional[Candidate]:
        return self._find("mobile", mobile)

    async def create_candidate(self, data: CandidateCreate, candidate_id: str) -> Candidate:
        values = data.model_dump()
        values["candidate_id"] = candidate_id

        async with self._lock:
            self._check_unique(values)
            candidate = Candidate(
                id=self._current_id,
                created_at=datetime.now(timezone.utc),
                **values,
            )
            self._candidates[candidate.id] = candidate
            self._current_id += 1
        return candidate

    async def update_candidate(self, id: int, updates: Dict[str, Any]) -> Optional[Candidate]:
        async with self._lock:
            candidate = self._candidates.get(id)
            if candidate is None:
                return None
            self._check_unique(updates, exclude_id=id)
            updated = candidate.model_copy(update=updates)
            self._candidates[id] = updated
        return updated

    async def delete_candidate(self, id: int) -> bool:
        async with self._lock:
            return self._candidates.pop(id, None) is not None

    async def get_all_candidates(self) -> List[Candidate]:
        return list(self._candidates.values())
