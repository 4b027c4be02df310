"""
SQL Candidate Storage
=====================
SQLAlchemy async storage for candidates.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import Boolean, DateTime, Integer, String, Text, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column
import structlog

from enroll_core.database import Base
from enroll_core.exceptions import DuplicateCandidateError
from enroll_core.schemas import Candidate, CandidateCreate, DEFAULT_STATUS
from .base import CandidateStorage

logger = structlog.get_logger(__name__)

_UNIQUE_FIELDS = ("candidate_id", "aadhar", "mobile")


class CandidateRow(Base):
    __tablename__ = "candidates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    candidate_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    dob: Mapped[str] = mapped_column(Text, nullable=False)
    mobile: Mapped[str] = mapped_column(String(15), unique=True, nullable=False)
    aadhar: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    program: Mapped[Optional[str]] = mapped_column(Text)
    center: Mapped[Optional[str]] = mapped_column(Text)
    trainer: Mapped[Optional[str]] = mapped_column(Text)
    duration: Mapped[Optional[str]] = mapped_column(Text)
    trained: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_STATUS)
    profile_image: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class SqlCandidateStorage(CandidateStorage):
    """Candidate storage over a SQL database."""

    name = "sql"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _get_by(self, field: str, value: Any) -> Optional[Candidate]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CandidateRow).where(getattr(CandidateRow, field) == value)
            )
            row = result.scalars().first()
            return Candidate.model_validate(row) if row else None

    async def _find_conflict(
        self,
        session: AsyncSession,
        values: Dict[str, Any],
        exclude_id: Optional[int] = None,
    ) -> Optional[str]:
        for field in _UNIQUE_FIELDS:
            if field not in values:
                continue
            stmt = select(CandidateRow.id).where(getattr(CandidateRow, field) == values[field])
            if exclude_id is not None:
                stmt = stmt.where(CandidateRow.id != exclude_id)
            if (await session.execute(stmt)).first() is not None:
                return field
        return None

    async def get_candidate(self, id: int) -> Optional[Candidate]:
        return await self._get_by("id", id)

    async def get_candidate_by_candidate_id(self, candidate_id: str) -> Optional[Candidate]:
        return await self._get_by("candidate_id", candidate_id)

    async def get_candidate_by_aadhar(self, aadhar: str) -> Optional[Candidate]:
        return await self._get_by("aadhar", aadhar)

    async def get_candidate_by_mobile(self, mobile: str) -> Optional[Candidate]:
        return await self._get_by("mobile", mobile)

    async def create_candidate(self, data: CandidateCreate, candidate_id: str) -> Candidate:
        values = data.model_dump()
        values["candidate_id"] = candidate_id

        async with self._session_factory() as session:
            conflict = await self._find_conflict(session, values)
            if conflict:
                raise DuplicateCandidateError(conflict, values[conflict])

            row = CandidateRow(**values)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                # Lost a race with a concurrent insert
                conflict = await self._find_conflict(session, values) or "aadhar"
                raise DuplicateCandidateError(conflict, values[conflict])
            await session.refresh(row)
            logger.info("Candidate created", id=row.id, candidate_id=candidate_id)
            return Candidate.model_validate(row)

    async def update_candidate(self, id: int, updates: Dict[str, Any]) -> Optional[Candidate]:
        async with self._session_factory() as session:
            row = await session.get(CandidateRow, id)
            if row is None:
                return None

            conflict = await self._find_conflict(session, updates, exclude_id=id)
            if conflict:
                raise DuplicateCandidateError(conflict, updates[conflict])

            for field, value in updates.items():
                setattr(row, field, value)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                conflict = await self._find_conflict(session, updates, exclude_id=id) or "aadhar"
                raise DuplicateCandidateError(conflict, updates.get(conflict, ""))
            await session.refresh(row)
            return Candidate.model_validate(row)

    async def delete_candidate(self, id: int) -> bool:
        async with self._session_factory() as session:
            row = await session.get(CandidateRow, id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
            return True

    async def get_all_candidates(self) -> List[Candidate]:
        async with self._session_factory() as session:
            result = await session.execute(select(CandidateRow).order_by(CandidateRow.id))
            return [Candidate.model_validate(row) for row in result.scalars().all()]

    async def ping(self) -> bool:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True
