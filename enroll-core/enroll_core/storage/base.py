"""
Candidate Storage Interface
===========================
Abstract persistence contract for candidate records.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from enroll_core.schemas import Candidate, CandidateCreate


class CandidateStorage(ABC):
    """
    Async storage for candidates.

    Implementations raise DuplicateCandidateError when a create or update
    would collide on ``aadhar``, ``mobile`` or ``candidate_id``.
    """

    name: str = "base"

    @abstractmethod
    async def get_candidate(self, id: int) -> Optional[Candidate]:
        pass

    @abstractmethod
    async def get_candidate_by_candidate_id(self, candidate_id: str) -> Optional[Candidate]:
        pass

    @abstractmethod
    async def get_candidate_by_aadhar(self, aadhar: str) -> Optional[Candidate]:
        pass

    @abstractmethod
    async def get_candidate_by_mobile(self, mobile: str) -> Optional[Candidate]:
        pass

    @abstractmethod
    async def create_candidate(self, data: CandidateCreate, candidate_id: str) -> Candidate:
        pass

    @abstractmethod
    async def update_candidate(self, id: int, updates: Dict[str, Any]) -> Optional[Candidate]:
        """Apply a partial update; returns None when the id is unknown."""
        pass

    @abstractmethod
    async def delete_candidate(self, id: int) -> bool:
        pass

    @abstractmethod
    async def get_all_candidates(self) -> List[Candidate]:
        pass

    async def ping(self) -> bool:
        """Check that the backend is reachable."""
        return True

    async def close(self) -> None:
        pass
