"""
Tests for the sync controller.

Tests:
- Initialization ordering and failure
- Refresh idempotence and diff-merge
- Commit outcomes: applied, illegal, rejected
- One commit in flight at a time
- View model caching and listeners
"""

import asyncio

import pytest

from ..session import (
    CommitStatus,
    PendingPlacement,
    SyncController,
    SyncState,
)
from .fakes import (
    AsyncReadEngine,
    BrokenReadEngine,
    CrashingEngine,
    FakeEngine,
    GatedEngine,
    SilentEngine,
    YesNoEngine,
    factory_for,
)


def _mirror_values(controller: SyncController) -> dict:
    mirror = controller.mirror
    return {
        "tiles": mirror.tiles,
        "tiles_rotation": mirror.tiles_rotation,
        "remaining": mirror.remaining,
        "next_tile": mirror.next_tile,
    }


class TestInitialization:
    """Tests for initialize()."""

    def test_initialize_reaches_ready(self, controller, fake_engine):
        """Construction plus one refresh makes the controller READY."""
        assert controller.state is SyncState.UNINITIALIZED
        assert controller.view_model() is None

        assert asyncio.run(controller.initialize())

        assert controller.state is SyncState.READY
        assert controller.is_ready
        assert controller.mirror.tiles == tuple(fake_engine.board)
        assert controller.mirror.next_tile == 1
        assert controller.view_model().width == 3

    def test_commit_before_ready_is_rejected(self, controller, fake_engine):
        """Nothing reaches the engine before initialization completes."""
        controller.capture(1)

        result = asyncio.run(controller.commit())

        assert result.status is CommitStatus.REJECTED_NOT_READY
        assert not result.success
        assert fake_engine.place_calls == 0
        # The gesture is still there for after initialization
        assert controller.pending == PendingPlacement(cell_index=1)

    def test_factory_failure_stays_initializing(self):
        """A failed construction leaves the controller not ready, for good."""
        async def broken():
            raise ConnectionError("engine unreachable")

        controller = SyncController(broken)

        async def scenario():
            ok = await controller.initialize()
            refresh = await controller.refresh()
            commit = await controller.place(1)
            return ok, refresh, commit

        ok, refresh, commit = asyncio.run(scenario())

        assert not ok
        assert controller.state is SyncState.INITIALIZING
        assert "engine unreachable" in str(controller.init_error)
        assert controller.view_model() is None
        assert not refresh.success
        assert commit.status is CommitStatus.REJECTED_NOT_READY

    def test_factory_timeout(self):
        """Construction that never finishes times out into the failed state."""
        async def slow():
            await asyncio.sleep(10)

        controller = SyncController(slow, init_timeout=0.01)

        assert not asyncio.run(controller.initialize())
        assert controller.state is SyncState.INITIALIZING
        assert controller.init_error is not None

    def test_malformed_first_refresh(self):
        """Without a valid first read there is no mirror and no READY."""
        engine = FakeEngine(width=3, tiles=[255, 254], rotations=[0, 0])
        controller = SyncController(factory_for(engine))

        assert not asyncio.run(controller.initialize())
        assert controller.mirror is None
        assert controller.state is SyncState.INITIALIZING

    def test_crashing_first_read(self):
        """Any exception from a read fails initialization, not just engine errors."""
        engine = BrokenReadEngine()
        controller = SyncController(factory_for(engine))

        assert not asyncio.run(controller.initialize())
        assert controller.mirror is None
        assert controller.state is SyncState.INITIALIZING
        assert "IndexError" in str(controller.init_error)

    def test_initialize_twice(self):
        """The engine is constructed once."""
        constructed = []
        engine = FakeEngine()

        async def factory():
            constructed.append(1)
            return engine

        controller = SyncController(factory)

        async def scenario():
            await controller.initialize()
            return await controller.initialize()

        assert asyncio.run(scenario())
        assert len(constructed) == 1


class TestRefresh:
    """Tests for refresh()."""

    def test_refresh_is_idempotent(self, controller):
        """A second refresh over unchanged state replaces nothing."""
        async def scenario():
            await controller.initialize()
            before = _mirror_values(controller)
            first = await controller.refresh()
            second = await controller.refresh()
            return before, first, second

        before, first, second = asyncio.run(scenario())

        assert first.success and second.success
        assert first.changed == ()
        assert second.changed == ()
        after = _mirror_values(controller)
        for name in ("tiles", "tiles_rotation", "remaining"):
            assert after[name] is before[name]

    def test_only_next_tile_changed(self, controller, fake_engine):
        """Unchanged sequences keep their identity when only next_tile moves."""
        async def scenario():
            await controller.initialize()
            before = _mirror_values(controller)
            fake_engine.pile = [1, 0]
            result = await controller.refresh()
            return before, result

        before, result = asyncio.run(scenario())

        assert result.changed == ("next_tile",)
        assert controller.mirror.next_tile == 0
        assert controller.mirror.tiles is before["tiles"]
        assert controller.mirror.tiles_rotation is before["tiles_rotation"]
        assert controller.mirror.remaining is before["remaining"]

    def test_malformed_refresh_keeps_mirror(self, controller, fake_engine):
        """A broken read is dropped whole; no field is partially updated."""
        async def scenario():
            await controller.initialize()
            before = _mirror_values(controller)
            fake_engine.counts = [5, 5]
            fake_engine.rotations = [0, 0]
            result = await controller.refresh()
            return before, result

        before, result = asyncio.run(scenario())

        assert not result.success
        assert result.error
        assert _mirror_values(controller) == before
        assert controller.mirror.remaining == (1, 1)

    def test_crashing_read_keeps_mirror(self):
        """A read that raises something unexpected aborts the refresh only."""
        engine = BrokenReadEngine(broken=False)
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            before = _mirror_values(controller)
            engine.broken = True
            engine.counts = [0, 0]
            result = await controller.refresh()
            return before, result

        before, result = asyncio.run(scenario())

        assert not result.success
        assert "IndexError" in result.error
        assert _mirror_values(controller) == before
        assert controller.state is SyncState.READY

    def test_async_engine_reads(self):
        """Engines may answer with coroutines."""
        engine = AsyncReadEngine()
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            return await controller.place(1)

        result = asyncio.run(scenario())

        assert result.success
        assert controller.mirror.tiles[1] == 1


class TestCommit:
    """Tests for commit() and place()."""

    def test_successful_placement(self):
        """The only open slot is filled: one fewer tile left, new next tile."""
        engine = FakeEngine(width=2, tiles=[254, 3], remaining=[1, 1], pile=[1, 0])
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            before = _mirror_values(controller)
            result = await controller.place(0, rotation=0)
            return before, result

        before, result = asyncio.run(scenario())

        assert result.status is CommitStatus.APPLIED
        assert result.success
        assert result.placement == PendingPlacement(cell_index=0, rotation=0)
        assert sum(controller.mirror.remaining) == sum(before["remaining"]) - 1
        assert controller.mirror.next_tile != before["next_tile"]
        assert controller.mirror.tiles[0] == 0
        assert controller.pending is None
        assert controller.state is SyncState.READY

    def test_rejected_placement_leaves_mirror(self, controller, fake_engine):
        """The engine refuses: the mirror is exactly what it was."""
        async def scenario():
            await controller.initialize()
            before = _mirror_values(controller)
            # Index 4 holds the starting tile
            result = await controller.place(4)
            return before, result

        before, result = asyncio.run(scenario())

        assert result.status is CommitStatus.ILLEGAL
        assert not result.success
        assert result.error_code == "NOT_PLACEABLE"
        assert result.refresh.success
        assert result.changed == ()
        assert _mirror_values(controller) == before
        assert controller.pending is None
        assert fake_engine.placements == [(4, 0)]

    def test_refused_placement_is_not_retried(self, controller, fake_engine):
        """The gesture is cleared even though the engine said no."""
        fake_engine.refuse_with = "rules say no"

        async def scenario():
            await controller.initialize()
            first = await controller.place(1)
            second = await controller.commit()
            return first, second

        first, second = asyncio.run(scenario())

        assert first.status is CommitStatus.ILLEGAL
        assert first.error == "rules say no"
        assert second.status is CommitStatus.NO_PENDING
        assert fake_engine.place_calls == 1

    def test_engine_error_is_illegal(self, controller, fake_engine):
        """An engine that raises EngineError is treated as a refusal."""
        fake_engine.raise_on_place = True

        async def scenario():
            await controller.initialize()
            return await controller.place(1)

        result = asyncio.run(scenario())

        assert result.status is CommitStatus.ILLEGAL
        assert result.error_code == "ENGINE_ERROR"
        assert controller.state is SyncState.READY

    def test_crash_after_write_still_refreshes(self):
        """The engine placed the tile and then raised: the mirror still catches up."""
        engine = CrashingEngine()
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            return await controller.place(1)

        result = asyncio.run(scenario())

        assert result.status is CommitStatus.ILLEGAL
        assert result.error_code == "ENGINE_ERROR"
        assert "RuntimeError" in result.error
        assert result.refresh.success
        assert controller.mirror.tiles == tuple(engine.board)
        assert controller.mirror.tiles[1] == 1
        assert controller.mirror.next_tile == 0
        assert controller.state is SyncState.READY

    def test_engine_returning_nothing(self):
        """A None answer from place_next counts as applied."""
        engine = SilentEngine()
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            applied = await controller.place(1)
            refused = await controller.place(0)
            return applied, refused

        applied, refused = asyncio.run(scenario())

        assert applied.status is CommitStatus.APPLIED
        assert "tiles" in applied.refresh.changed
        assert controller.mirror.tiles[1] == 1
        assert refused.status is CommitStatus.ILLEGAL
        assert refused.error_code == "ENGINE_ERROR"

    def test_yes_no_engine(self):
        """Bare bool answers are understood."""
        engine = YesNoEngine()
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            refused = await controller.place(0)
            applied = await controller.place(1)
            return refused, applied

        refused, applied = asyncio.run(scenario())

        assert refused.status is CommitStatus.ILLEGAL
        assert applied.status is CommitStatus.APPLIED

    def test_commit_without_gesture(self, controller, fake_engine):
        """Nothing captured, nothing sent."""
        async def scenario():
            await controller.initialize()
            return await controller.commit()

        result = asyncio.run(scenario())

        assert result.status is CommitStatus.NO_PENDING
        assert fake_engine.place_calls == 0

    def test_refresh_follows_commit(self, controller, fake_engine):
        """Every placement is followed by a full read of the engine."""
        async def scenario():
            await controller.initialize()
            fake_engine.calls.clear()
            await controller.place(1)

        asyncio.run(scenario())

        assert fake_engine.calls[0] == "place_next"
        assert set(fake_engine.calls[1:]) == {
            "remaining", "width", "tiles", "tiles_rotation", "next_tile",
        }


class TestConcurrency:
    """One commit in flight at a time."""

    def test_second_commit_is_rejected_not_queued(self):
        """A commit arriving mid-commit is dropped; its gesture stays pending."""
        engine = GatedEngine()
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            first = asyncio.create_task(controller.place(1))
            await asyncio.sleep(0)
            assert controller.state is SyncState.COMMITTING

            second = await controller.place(3)

            engine.gate.set()
            return await first, second

        first, second = asyncio.run(scenario())

        assert second.status is CommitStatus.REJECTED_BUSY
        assert first.status is CommitStatus.APPLIED
        assert engine.placements == [(1, 0)]
        assert controller.pending == PendingPlacement(cell_index=3)
        assert controller.state is SyncState.READY

    def test_refresh_waits_for_commit(self):
        """An explicit refresh cannot overtake an in-flight commit."""
        engine = GatedEngine()
        controller = SyncController(factory_for(engine))

        async def scenario():
            await controller.initialize()
            commit = asyncio.create_task(controller.place(1))
            await asyncio.sleep(0)
            refresh = asyncio.create_task(controller.refresh())
            await asyncio.sleep(0)
            assert not refresh.done()

            engine.gate.set()
            return await commit, await refresh

        commit, refresh = asyncio.run(scenario())

        assert commit.changed
        # By the time the explicit refresh ran, the commit's refresh had merged
        assert refresh.changed == ()


class TestViewModel:
    """Tests for view model caching and listeners."""

    def test_view_model_cached_until_change(self, controller):
        """No-op refreshes do not re-derive the view model."""
        async def scenario():
            await controller.initialize()
            first = controller.view_model()
            await controller.refresh()
            same = controller.view_model()
            await controller.place(1)
            return first, same, controller.view_model()

        first, same, after = asyncio.run(scenario())

        assert same is first
        assert after is not first
        assert after.version == first.version + 1

    def test_listeners_hear_changes_only(self, controller):
        """Listeners fire on changing refreshes, not on no-ops."""
        heard = []
        controller.subscribe(lambda view, changed: heard.append((view.version, changed)))

        async def scenario():
            await controller.initialize()
            await controller.refresh()
            await controller.place(4)  # refused
            await controller.place(1)

        asyncio.run(scenario())

        assert len(heard) == 2
        assert heard[0][1] == ("remaining", "width", "tiles", "tiles_rotation", "next_tile")
        assert "tiles" in heard[1][1]

    def test_unsubscribe_and_failing_listener(self, controller):
        """A broken listener does not break the commit."""
        heard = []

        def broken(view, changed):
            raise RuntimeError("renderer exploded")

        controller.subscribe(broken)
        unsubscribe = controller.subscribe(lambda view, changed: heard.append(changed))
        unsubscribe()

        async def scenario():
            await controller.initialize()
            return await controller.place(1)

        result = asyncio.run(scenario())

        assert result.success
        assert heard == []
