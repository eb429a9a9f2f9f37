"""
Tests for the provider abstraction.

Covers the three-state FetchResult, the paging loop and its guard, and
the wrapper the builder puts around every provider call.
"""

import pytest

from hubtreelib.aio.provider import (
    MAX_LOOPS,
    FetchResult,
    RemoteFetchError,
    guarded_call,
)
from hubtreelib.core.ids import RemoteID, RemoteIDPair
from hubtreelib.testing import SAMPLE_ACCOUNT_ID, SAMPLE_PROJECT_ID, InMemoryProvider

PROJECT = RemoteID(SAMPLE_PROJECT_ID)


class TestFetchResult:

    def test_success_with_data(self):
        result = FetchResult.ok([1])
        assert result.is_success
        assert not result.is_empty
        assert not result.is_exception

    def test_success_empty(self):
        result = FetchResult.ok([])
        assert result.is_success
        assert result.is_empty

    def test_failure_by_status(self):
        result = FetchResult.failure(status_code=404)
        assert not result.is_success
        assert not result.is_exception

        error = result.as_error("folder-1")
        assert isinstance(error, RemoteFetchError)
        assert error.status_code == 404
        assert "folder-1" in str(error)

    def test_failure_by_exception(self):
        boom = ConnectionError("reset")
        result = FetchResult(data=[1], status_code=200, error=boom)

        assert result.is_exception
        assert not result.is_success
        assert result.as_error() is boom


class TestPaging:

    @pytest.mark.asyncio
    async def test_pages_are_concatenated_in_order(self):
        provider = InMemoryProvider(page_size=2)
        root = provider.add_project()
        names = [f"f{i}" for i in range(5)]
        for name in names:
            provider.add_folder(root['id'], name)

        result = await provider.get_folder_contents(PROJECT, root['id'])

        assert result.is_success
        assert [r['attributes']['name'] for r in result.data] == names
        assert provider.calls.count(('get_folder_contents_page', root['id'])) == 3

    @pytest.mark.asyncio
    async def test_empty_folder(self):
        provider = InMemoryProvider()
        root = provider.add_project()

        result = await provider.get_folder_contents(PROJECT, root['id'])

        assert result.is_empty

    @pytest.mark.asyncio
    async def test_loop_guard_stops_endless_paging(self, caplog):
        provider = InMemoryProvider()
        root = provider.add_project()
        provider.endless_folders.add(root['id'])

        result = await provider.get_folder_contents(PROJECT, root['id'])

        assert result.is_success
        assert len(result.data) == MAX_LOOPS
        assert "may be incomplete" in caplog.text

    @pytest.mark.asyncio
    async def test_custom_loop_limit(self):
        provider = InMemoryProvider(max_loops=3)
        root = provider.add_project()
        provider.endless_folders.add(root['id'])

        result = await provider.get_folder_contents(PROJECT, root['id'])

        assert len(result.data) == 3

    def test_loop_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            InMemoryProvider(max_loops=0)

    @pytest.mark.asyncio
    async def test_failed_page_fails_listing(self):
        provider = InMemoryProvider()
        root = provider.add_project()
        provider.failing_folders.add(root['id'])

        result = await provider.get_folder_contents(PROJECT, root['id'])

        assert not result.is_success
        assert result.status_code == 403


class TestInMemoryProvider:

    @pytest.mark.asyncio
    async def test_get_project(self):
        provider = InMemoryProvider()
        root = provider.add_project(name="Tower")

        result = await provider.get_project(RemoteIDPair.create(SAMPLE_ACCOUNT_ID, SAMPLE_PROJECT_ID))

        assert result.is_success
        assert result.data.name == "Tower"
        assert result.data.root_folder_id == root['id']

    @pytest.mark.asyncio
    async def test_unknown_project(self):
        provider = InMemoryProvider()
        result = await provider.get_project(RemoteIDPair.create(SAMPLE_ACCOUNT_ID, SAMPLE_PROJECT_ID))
        assert result.status_code == 404

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        async with InMemoryProvider() as provider:
            assert await provider.get_stats() == {'calls': 0, 'folders_listed': 0, 'max_in_flight': 0}


class TestGuardedCall:

    @pytest.mark.asyncio
    async def test_passes_results_through(self):
        async def call():
            return FetchResult.ok([1])

        result = await guarded_call(call(), "call")
        assert result.data == [1]

    @pytest.mark.asyncio
    async def test_exception_becomes_failure(self):
        async def call():
            raise ConnectionError("reset")

        result = await guarded_call(call(), "call")

        assert not result.is_success
        assert isinstance(result.error, ConnectionError)

    @pytest.mark.asyncio
    async def test_wrong_return_type_becomes_failure(self):
        async def call():
            return [1, 2, 3]

        result = await guarded_call(call(), "call")

        assert not result.is_success
        assert isinstance(result.error, RemoteFetchError)
