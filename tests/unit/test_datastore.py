"""Unit tests for datastore failure translation."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from worldkernel.core.datastore import commit, datastore_call
from worldkernel.errors import DatastoreError
from worldkernel.kernels.repository import KernelRepository


def _operational_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestDatastoreCall:
    """Tests for the datastore_call decorator."""

    async def test_driver_failure_becomes_datastore_error(self):
        @datastore_call
        async def query():
            raise _operational_error()

        with pytest.raises(DatastoreError) as exc_info:
            await query()

        assert exc_info.value.retryable is True
        assert exc_info.value.status_code == 503

    async def test_timeout_becomes_datastore_error(self):
        @datastore_call
        async def query():
            raise TimeoutError()

        with pytest.raises(DatastoreError):
            await query()

    async def test_asyncio_timeout_becomes_datastore_error(self):
        """asyncpg command timeouts raise asyncio.TimeoutError."""

        @datastore_call
        async def query():
            raise asyncio.TimeoutError()

        with pytest.raises(DatastoreError):
            await query()

    async def test_integrity_error_passes_through(self):
        @datastore_call
        async def query():
            raise IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(IntegrityError):
            await query()

    async def test_repository_read_on_unreachable_datastore(self):
        session = AsyncMock()
        session.execute.side_effect = _operational_error()

        with pytest.raises(DatastoreError):
            await KernelRepository(session).list_recent()

    async def test_failed_commit_becomes_datastore_error(self):
        session = AsyncMock()
        session.commit.side_effect = OperationalError("COMMIT", {}, Exception("connection lost"))

        with pytest.raises(DatastoreError):
            await commit(session)
