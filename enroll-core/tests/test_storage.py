"""
Tests for Candidate Storage
===========================
Every test runs against both the in-memory and the SQL backend.
"""

import pytest


def make_candidate(**overrides):
    from enroll_core.schemas import CandidateCreate

    data = {
        "name": "Asha Kumari",
        "dob": "1999-04-12",
        "mobile": "9876543210",
        "aadhar": "1234 5678 9012",
        "program": "Retail Sales",
    }
    data.update(overrides)
    return CandidateCreate.model_validate(data)


@pytest.fixture(params=["memory", "sql"])
async def storage(request, tmp_path):
    if request.param == "memory":
        from enroll_core.storage import MemoryCandidateStorage

        yield MemoryCandidateStorage()
        return

    from enroll_core.database import create_async_engine, create_session_factory, init_models, close_engine
    from enroll_core.storage import SqlCandidateStorage

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'candidates.db'}")
    await init_models(engine)
    yield SqlCandidateStorage(create_session_factory(engine))
    await close_engine(engine)


class TestCandidateStorage:
    """Contract tests for candidate storage backends."""

    async def test_create_and_get(self, storage):
        candidate = await storage.create_candidate(make_candidate(), "TRN000001")

        assert candidate.id == 1
        assert candidate.candidate_id == "TRN000001"
        assert candidate.aadhar == "123456789012"
        assert candidate.trained is False
        assert candidate.status == "Not Enrolled"
        assert candidate.created_at is not None

        fetched = await storage.get_candidate(candidate.id)
        assert fetched.name == "Asha Kumari"

    async def test_lookups(self, storage):
        created = await storage.create_candidate(make_candidate(), "TRN000001")

        assert (await storage.get_candidate_by_aadhar("123456789012")).id == created.id
        assert (await storage.get_candidate_by_mobile("9876543210")).id == created.id
        assert (await storage.get_candidate_by_candidate_id("TRN000001")).id == created.id
        assert await storage.get_candidate_by_aadhar("000000000000") is None
        assert await storage.get_candidate(99) is None

    async def test_ids_increment(self, storage):
        first = await storage.create_candidate(make_candidate(), "TRN000001")
        second = await storage.create_candidate(
            make_candidate(mobile="9123456789", aadhar="210987654321"), "TRN000002"
        )

        assert second.id == first.id + 1
        assert [c.id for c in await storage.get_all_candidates()] == [first.id, second.id]

    @pytest.mark.parametrize("field,overrides,candidate_id", [
        ("aadhar", {"mobile": "9123456789"}, "TRN000002"),
        ("mobile", {"aadhar": "210987654321"}, "TRN000002"),
        ("candidate_id", {"mobile": "9123456789", "aadhar": "210987654321"}, "TRN000001"),
    ])
    async def test_duplicates_rejected(self, storage, field, overrides, candidate_id):
        from enroll_core.exceptions import DuplicateCandidateError

        await storage.create_candidate(make_candidate(), "TRN000001")

        with pytest.raises(DuplicateCandidateError) as exc_info:
            await storage.create_candidate(make_candidate(**overrides), candidate_id)
        assert exc_info.value.field == field

    async def test_update(self, storage):
        created = await storage.create_candidate(make_candidate(), "TRN000001")

        updated = await storage.update_candidate(created.id, {"trained": True, "status": "Enrolled"})

        assert updated.trained is True
        assert updated.status == "Enrolled"
        assert updated.name == created.name
        assert (await storage.get_candidate(created.id)).status == "Enrolled"

    async def test_update_missing(self, storage):
        assert await storage.update_candidate(42, {"status": "Enrolled"}) is None

    async def test_update_conflict(self, storage):
        from enroll_core.exceptions import DuplicateCandidateError

        await storage.create_candidate(make_candidate(), "TRN000001")
        other = await storage.create_candidate(
            make_candidate(mobile="9123456789", aadhar="210987654321"), "TRN000002"
        )

        with pytest.raises(DuplicateCandidateError):
            await storage.update_candidate(other.id, {"mobile": "9876543210"})

    async def test_update_own_values(self, storage):
        """Writing a candidate's own unique values back is not a conflict."""
        created = await storage.create_candidate(make_candidate(), "TRN000001")

        updated = await storage.update_candidate(created.id, {"mobile": "9876543210"})
        assert updated.mobile == "9876543210"

    async def test_delete(self, storage):
        created = await storage.create_candidate(make_candidate(), "TRN000001")

        assert await storage.delete_candidate(created.id) is True
        assert await storage.delete_candidate(created.id) is False
        assert await storage.get_all_candidates() == []

    async def test_ping(self, storage):
        assert await storage.ping() is True
