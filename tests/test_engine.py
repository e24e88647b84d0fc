from __future__ import annotations

import asyncio

from core.config import SummarizerConfig
from core.engine import EngineState, SummaryEngine


class FakeSink:
    def __init__(self) -> None:
        self.texts: list[str] = []
        self.buckets: list[str] = []

    async def publish_summary_text(self, text: str) -> None:
        self.texts.append(text)

    async def publish_structured_buckets(self, serialized: str) -> None:
        self.buckets.append(serialized)


class FailingSink(FakeSink):
    async def publish_summary_text(self, text: str) -> None:
        raise RuntimeError("display down")


def _engine(sink: FakeSink, **overrides) -> SummaryEngine:
    return SummaryEngine(SummarizerConfig(**overrides), sink, clock=lambda: 0)


def test_force_on_empty_buffer_publishes_nothing() -> None:
    sink = FakeSink()
    engine = _engine(sink)

    result = asyncio.run(engine.force_summarize())

    assert result is None
    assert sink.texts == []
    assert sink.buckets == []


def test_tick_below_minimum_drops_the_window() -> None:
    sink = FakeSink()
    engine = _engine(sink, min_messages=5)
    for index in range(4):
        engine.ingest(f"user{index}", "hello")

    assert asyncio.run(engine.tick()) is None
    assert sink.texts == []
    assert engine.pending == 0


def test_tick_at_minimum_publishes_text_and_buckets() -> None:
    sink = FakeSink()
    engine = _engine(sink, min_messages=2)
    engine.ingest("Ann", "great idea")
    engine.ingest("Bob", "gg")

    result = asyncio.run(engine.tick())

    assert result is not None
    assert result.total_messages == 2
    assert sink.texts == [result.rendered_text]
    assert sink.buckets[0].startswith("5min ago, totalMessages: 2, topChatters: Ann(1), Bob(1)")
    assert engine.pending == 0


def test_force_bypasses_minimum() -> None:
    sink = FakeSink()
    engine = _engine(sink, min_messages=50)
    engine.ingest("solo", "anyone around?")

    result = asyncio.run(engine.force_summarize())

    assert result is not None
    assert result.category_lines == ["Questions: solo"]
    assert len(sink.texts) == 1


def test_invalid_ingest_is_ignored() -> None:
    engine = _engine(FakeSink())
    engine.ingest("", "hello")
    engine.ingest("bob", "   ")
    assert engine.pending == 0


def test_clear_buffer_discards_without_publishing() -> None:
    sink = FakeSink()
    engine = _engine(sink)
    engine.ingest("a", "one")
    engine.ingest("b", "two")

    assert engine.clear_buffer() == 2
    assert asyncio.run(engine.force_summarize()) is None
    assert sink.texts == []


def test_publish_failure_is_logged_and_not_rebuffered() -> None:
    sink = FailingSink()
    engine = _engine(sink)
    engine.ingest("a", "hello")

    result = asyncio.run(engine.force_summarize())

    assert result is not None
    assert engine.pending == 0
    # The structured publish still runs after the display sink failed.
    assert len(sink.buckets) == 1


def test_ingestion_continues_during_slow_publish() -> None:
    async def scenario() -> tuple[int, int]:
        release = asyncio.Event()
        entered = asyncio.Event()

        class SlowSink(FakeSink):
            async def publish_summary_text(self, text: str) -> None:
                entered.set()
                await release.wait()
                await super().publish_summary_text(text)

        sink = SlowSink()
        engine = _engine(sink)
        engine.ingest("a", "first")
        cycle = asyncio.create_task(engine.force_summarize())
        await entered.wait()

        assert engine.state is EngineState.DRAINING
        engine.ingest("b", "second")
        pending_during_publish = engine.pending
        release.set()
        result = await cycle
        return pending_during_publish, result.total_messages

    pending, total = asyncio.run(scenario())
    assert pending == 1
    assert total == 1


def test_cycles_are_serialized() -> None:
    async def scenario() -> list[int]:
        release = asyncio.Event()
        entered = asyncio.Event()

        class SlowSink(FakeSink):
            async def publish_summary_text(self, text: str) -> None:
                entered.set()
                await release.wait()
                await super().publish_summary_text(text)

        engine = _engine(SlowSink())
        engine.ingest("a", "first")
        first = asyncio.create_task(engine.force_summarize())
        await entered.wait()
        second = asyncio.create_task(engine.force_summarize())
        await asyncio.sleep(0)
        engine.ingest("b", "late")
        release.set()
        results = await asyncio.gather(first, second)
        return [result.total_messages for result in results]

    assert asyncio.run(scenario()) == [1, 1]


def test_start_reconfigure_and_stop_state_machine() -> None:
    async def scenario() -> None:
        engine = _engine(FakeSink())
        assert engine.state is EngineState.IDLE

        engine.start()
        assert engine.state is EngineState.ARMED
        timer = engine._timer

        engine.configuration_changed(SummarizerConfig())
        assert engine._timer is timer

        engine.configuration_changed({"interval_minutes": 10})
        assert engine.config.interval_minutes == 10
        assert engine._timer is not timer
        await asyncio.sleep(0)
        assert timer.cancelled()
        assert engine.state is EngineState.ARMED

        engine.ingest("a", "still here")
        await engine.stop()
        assert engine.state is EngineState.IDLE
        assert engine.pending == 0

    asyncio.run(scenario())


def test_reconfigure_without_interval_change_keeps_buffer_and_timer() -> None:
    async def scenario() -> None:
        engine = _engine(FakeSink(), max_buffered_messages=10)
        engine.start()
        timer = engine._timer
        for index in range(5):
            engine.ingest("user", str(index))

        engine.configuration_changed({"max_buffered_messages": 2, "categories": ["hype"]})

        assert engine._timer is timer
        assert engine.pending == 2
        assert list(engine.rules) == ["hype"]
        await engine.stop()

    asyncio.run(scenario())


def test_timer_loop_runs_natural_ticks() -> None:
    async def scenario() -> FakeSink:
        sink = FakeSink()
        engine = _engine(sink, min_messages=2)
        engine.ingest("a", "one")
        engine.ingest("b", "two")
        timer = asyncio.create_task(engine._run_timer(0.01))
        await asyncio.sleep(0.1)
        timer.cancel()
        await asyncio.gather(timer, return_exceptions=True)
        return sink

    sink = asyncio.run(scenario())
    assert len(sink.texts) == 1


def test_stop_waits_for_a_cycle_the_timer_started() -> None:
    async def scenario() -> tuple[bool, FakeSink, SummaryEngine]:
        release = asyncio.Event()
        entered = asyncio.Event()

        class SlowSink(FakeSink):
            async def publish_summary_text(self, text: str) -> None:
                entered.set()
                await release.wait()
                await super().publish_summary_text(text)

        sink = SlowSink()
        engine = _engine(sink, min_messages=1)
        engine.ingest("a", "one")
        engine._timer = asyncio.create_task(engine._run_timer(0.01))
        await entered.wait()

        stopping = asyncio.create_task(engine.stop())
        await asyncio.sleep(0.05)
        blocked = not stopping.done()
        release.set()
        await stopping
        return blocked, sink, engine

    blocked, sink, engine = asyncio.run(scenario())
    assert blocked
    assert len(sink.texts) == 1
    assert len(sink.buckets) == 1
    assert engine._inflight.done()
    assert engine.state is EngineState.IDLE
