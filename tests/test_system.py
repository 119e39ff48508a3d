"""Tests for taskflow.system.TaskflowSystem wiring."""

import pytest

from taskflow.core.config import Config
from taskflow.system import TaskflowSystem


class TestConstruction:
    def test_from_memory_dir(self, memory_dir):
        system = TaskflowSystem(memory_dir=memory_dir, cache_max_entries=5)
        assert system.store.root == memory_dir.resolve()
        assert system.config.cache_max_entries == 5
        assert system.modes.is_plan_mode()

    def test_invalid_config_rejected(self, memory_dir):
        with pytest.raises(ValueError):
            TaskflowSystem(config=Config.from_memory_dir(memory_dir, cache_ttl_seconds=0))

    def test_components_share_clock(self, config, clock):
        system = TaskflowSystem(config=config, clock=clock)
        assert system.operations.clock is clock

    def test_separate_instances_are_isolated(self, tmp_dir):
        a = TaskflowSystem(memory_dir=tmp_dir / "a")
        b = TaskflowSystem(memory_dir=tmp_dir / "b")
        a.modes.set_mode("act")
        assert b.modes.is_plan_mode()
        assert a.cache is not b.cache


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_async_context_manager_initialises(self, config):
        async with TaskflowSystem(config=config) as system:
            assert system.store.initialized
            assert len(await system.cache.list_keys()) == 3

    @pytest.mark.asyncio
    async def test_close_drains_operations(self, config):
        system = await TaskflowSystem(config=config).init()
        op_id = system.operations.submit(system.cache.get_all)
        await system.close()
        assert system.operations.status(op_id)["status"] == "completed"


class TestStatus:
    @pytest.mark.asyncio
    async def test_status_sections(self, config):
        async with TaskflowSystem(config=config) as system:
            status = await system.status()
        assert set(status) == {"server", "memory", "cache", "async", "ai", "mode"}
        assert status["memory"]["file_count"] == 3
        assert status["mode"]["current_mode"] == "plan"
        assert status["async"]["total"] == 0

    @pytest.mark.asyncio
    async def test_status_degrades_without_directory(self, config):
        system = TaskflowSystem(config=config)
        status = await system.status()
        assert "error" in status["memory"]
        assert status["memory"]["initialized"] is False
