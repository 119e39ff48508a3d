"""Tests for taskflow.context.ContextCache over a real DocumentStore."""

import pytest

from taskflow.context.manager import ContextCache
from taskflow.core.errors import DocumentNotFoundError, StoreIOError
from taskflow.store.documents import DEFAULT_DOCUMENTS, DocumentStore

DEFAULTS = dict(DEFAULT_DOCUMENTS)


@pytest.fixture
def cache(store, clock):
    return ContextCache(store, max_entries=3, ttl=900.0, clock=clock)


class TestReadThrough:
    @pytest.mark.asyncio
    async def test_first_get_reads_store_once(self, store, cache, counting_fs):
        await store.init()
        assert await cache.get("progress.md") == DEFAULTS["progress.md"]
        assert counting_fs.read_count("progress.md") == 1

    @pytest.mark.asyncio
    async def test_second_get_is_a_hit(self, store, cache, counting_fs):
        await store.init()
        await cache.get("progress.md")
        await cache.get("progress.md")
        assert counting_fs.read_count("progress.md") == 1

    @pytest.mark.asyncio
    async def test_missing_document_propagates_and_is_not_cached(
        self, store, cache, counting_fs
    ):
        await store.init()
        with pytest.raises(DocumentNotFoundError):
            await cache.get("missing.md")
        with pytest.raises(DocumentNotFoundError):
            await cache.get("missing.md")
        assert counting_fs.read_count("missing.md") == 2
        assert "missing.md" not in cache.cached_keys()

    @pytest.mark.asyncio
    async def test_empty_document_is_cached(self, store, cache, counting_fs):
        await store.init()
        await store.write("empty.md", "")
        assert await cache.get("empty.md") == ""
        assert await cache.get("empty.md") == ""
        assert counting_fs.read_count("empty.md") == 1


class TestWriteThrough:
    @pytest.mark.asyncio
    async def test_update_then_get_skips_store(self, store, cache, counting_fs):
        await store.init()
        await cache.update("activeContext.md", "X")
        assert await cache.get("activeContext.md") == "X"
        assert counting_fs.read_count("activeContext.md") == 0
        assert await store.read("activeContext.md") == "X"

    @pytest.mark.asyncio
    async def test_update_replaces_cached_value(self, store, cache):
        await store.init()
        await cache.get("progress.md")
        await cache.update("progress.md", "new")
        assert await cache.get("progress.md") == "new"

    @pytest.mark.asyncio
    async def test_failed_update_leaves_cache_untouched(
        self, store, cache, counting_fs
    ):
        await store.init()
        await cache.get("progress.md")
        counting_fs.fail_writes = True
        with pytest.raises(StoreIOError):
            await cache.update("progress.md", "lost")
        assert await cache.get("progress.md") == DEFAULTS["progress.md"]

    @pytest.mark.asyncio
    async def test_failed_update_does_not_create_entry(
        self, store, cache, counting_fs
    ):
        await store.init()
        counting_fs.fail_writes = True
        with pytest.raises(StoreIOError):
            await cache.update("new.md", "x")
        assert cache.cached_keys() == []


class TestInvalidation:
    @pytest.mark.asyncio
    async def test_invalidate_forces_reload(self, store, cache, counting_fs):
        await store.init()
        await cache.update("activeContext.md", "X")
        cache.invalidate("activeContext.md")
        assert await cache.get("activeContext.md") == "X"
        assert counting_fs.read_count("activeContext.md") == 1

    @pytest.mark.asyncio
    async def test_stale_until_invalidated(self, store, cache):
        await store.init()
        await cache.get("progress.md")
        await store.write("progress.md", "out of band")
        assert await cache.get("progress.md") == DEFAULTS["progress.md"]
        cache.invalidate("progress.md")
        assert await cache.get("progress.md") == "out of band"

    def test_invalidate_absent_is_noop(self, cache):
        cache.invalidate("never-seen.md")


class TestEvictionAndExpiry:
    @pytest.mark.asyncio
    async def test_capacity_eviction(self, store, cache, counting_fs):
        await store.init()
        await store.write("extra.md", "x")
        names = ["projectbrief.md", "activeContext.md", "progress.md", "extra.md"]
        for name in names:
            await cache.get(name)
        # projectbrief.md was least recently used and is gone
        await cache.get("projectbrief.md")
        assert counting_fs.read_count("projectbrief.md") == 2
        # the three most recent stayed cached until projectbrief.md came back
        assert counting_fs.read_count("extra.md") == 1
        assert counting_fs.read_count("progress.md") == 1

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, store, cache, clock, counting_fs):
        await store.init()
        await cache.get("progress.md")
        clock.advance(900.5)
        await cache.get("progress.md")
        assert counting_fs.read_count("progress.md") == 2


class TestAggregate:
    @pytest.mark.asyncio
    async def test_list_keys_comes_from_store(self, store, cache):
        await store.init()
        await cache.get("progress.md")
        assert set(await cache.list_keys()) == set(DEFAULTS)

    @pytest.mark.asyncio
    async def test_get_all(self, store, cache):
        await store.init()
        await cache.update("activeContext.md", "X")
        everything = await cache.get_all()
        assert everything["activeContext.md"] == "X"
        assert everything["progress.md"] == DEFAULTS["progress.md"]
        assert set(everything) == set(DEFAULTS)

    @pytest.mark.asyncio
    async def test_get_all_uses_cache(self, store, cache, counting_fs):
        await store.init()
        await cache.get("progress.md")
        await cache.get_all()
        assert counting_fs.read_count("progress.md") == 1

    @pytest.mark.asyncio
    async def test_get_all_aborts_on_unreadable_document(self, store, cache, counting_fs):
        await store.init()
        counting_fs.fail_reads = True
        with pytest.raises(StoreIOError):
            await cache.get_all()

    @pytest.mark.asyncio
    async def test_get_all_ignores_directories(self, store, cache, memory_dir):
        await store.init()
        (memory_dir / "archive.md").mkdir()
        assert set(await cache.get_all()) == set(DEFAULTS)

    def test_stats(self, cache):
        stats = cache.stats()
        assert stats["max_entries"] == 3
        assert stats["size"] == 0


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_bypassing_write_after_invalidate(self, memory_dir):
        store = DocumentStore(memory_dir)
        cache = ContextCache(store)
        await store.init()
        assert set(await store.list()) == set(DEFAULTS)
        await cache.update("activeContext.md", "X")
        assert await cache.get("activeContext.md") == "X"
        cache.invalidate("activeContext.md")
        await store.write("activeContext.md", "Y")
        assert await cache.get("activeContext.md") == "Y"
