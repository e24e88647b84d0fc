"""Windowed summary engine.

The engine owns the buffer, the compiled rule cache, and the timer handle.
States:
- IDLE: no timer armed (before ``start`` and after ``stop``)
- ARMED: the interval timer is running
- DRAINING: one drain/render/publish cycle is in flight

Ticks and forced summaries share one lock, so cycles never overlap. The
buffer snapshot is taken before publishing, which lets ingestion continue
while a slow sink is awaited.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Union

from core.buffer import MessageBuffer
from core.config import SummarizerConfig
from core.models import ChatMessage, SummaryResult
from core.ports import SummarySinkPort
from core.renderer import build_summary, format_buckets
from core.rules_engine import RuleSet, build_rules

LOGGER = logging.getLogger(__name__)

# How long stop() waits for a cycle the timer already started.
STOP_GRACE_SECONDS = 10.0


class EngineState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    DRAINING = "draining"


class SummaryEngine:
    """Buffers chat, then drains and summarizes it on a timer or on demand."""

    def __init__(
        self,
        config: SummarizerConfig,
        sink: SummarySinkPort,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self._config = config
        self._sink = sink
        self._rules: RuleSet = build_rules(config.categories, config.category_overrides)
        if clock is None:
            self._buffer = MessageBuffer(config.max_buffered_messages)
        else:
            self._buffer = MessageBuffer(config.max_buffered_messages, clock=clock)
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._cycle_lock = asyncio.Lock()
        self._draining = False

    @property
    def config(self) -> SummarizerConfig:
        return self._config

    @property
    def rules(self) -> RuleSet:
        return self._rules

    @property
    def pending(self) -> int:
        """Number of messages waiting for the next cycle."""

        return len(self._buffer)

    @property
    def state(self) -> EngineState:
        if self._draining:
            return EngineState.DRAINING
        if self._timer is not None and not self._timer.done():
            return EngineState.ARMED
        return EngineState.IDLE

    def start(self) -> None:
        """Arm the interval timer. Must be called from a running event loop."""

        if self._timer is not None and not self._timer.done():
            return
        self._arm()
        LOGGER.info("Summary timer armed (every %s min)", self._config.interval_minutes)

    async def stop(self) -> None:
        """Cancel the timer, let a started cycle finish, and drop the buffer."""

        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        inflight = self._inflight
        if inflight is not None and not inflight.done():
            _, still_running = await asyncio.wait({inflight}, timeout=STOP_GRACE_SECONDS)
            if still_running:
                LOGGER.warning(
                    "Summary cycle still running after %ss, leaving it to finish",
                    STOP_GRACE_SECONDS,
                )
        dropped = self._buffer.clear()
        LOGGER.info("Summary engine stopped (%s buffered messages dropped)", dropped)

    def configuration_changed(self, config: Union[SummarizerConfig, Mapping[str, Any]]) -> None:
        """Apply a new settings snapshot; unchanged values are a no-op."""

        if not isinstance(config, SummarizerConfig):
            config = SummarizerConfig.from_mapping(config)
        previous = self._config
        if config == previous:
            return

        self._config = config
        self._rules = build_rules(config.categories, config.category_overrides)
        if config.max_buffered_messages != previous.max_buffered_messages:
            self._buffer.resize(config.max_buffered_messages)
        if config.interval_minutes != previous.interval_minutes and self._timer is not None:
            self._arm()
            LOGGER.info("Summary timer restarted (every %s min)", config.interval_minutes)
        LOGGER.info("Settings updated (%s categories active)", len(self._rules))

    def ingest(
        self,
        username: object,
        message: object,
        platform: object = "",
        user_id: object = "",
        display_name: Optional[str] = None,
    ) -> None:
        """Buffer one chat message; invalid input is dropped silently."""

        self._buffer.append(
            username,
            message,
            platform=platform,
            user_id=user_id,
            display_name=display_name,
        )

    async def tick(self) -> Optional[SummaryResult]:
        """Run a natural timer cycle, honoring ``min_messages``."""

        return await self._run_cycle(force=False)

    async def force_summarize(self) -> Optional[SummaryResult]:
        """Summarize whatever is buffered right now, ignoring ``min_messages``."""

        return await self._run_cycle(force=True)

    def clear_buffer(self) -> int:
        """Drain and discard without rendering."""

        dropped = self._buffer.clear()
        LOGGER.info("Buffer cleared (%s messages discarded)", dropped)
        return dropped

    def _arm(self) -> None:
        # Cancel before arming so a reprogrammed timer can never double-fire.
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(
            self._run_timer(self._config.interval_seconds)
        )

    async def _run_timer(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            # A cycle that already started finishes even if the timer is
            # cancelled by a reconfigure or stop.
            self._inflight = asyncio.ensure_future(self._tick_logged())
            await asyncio.shield(self._inflight)

    async def _tick_logged(self) -> None:
        try:
            await self.tick()
        except Exception:
            LOGGER.exception("Summary cycle failed")

    async def _run_cycle(self, force: bool) -> Optional[SummaryResult]:
        async with self._cycle_lock:
            self._draining = True
            try:
                config = self._config
                rules = self._rules
                messages = self._buffer.drain_all()
                if not messages:
                    LOGGER.debug("Summary skipped, buffer empty")
                    return None
                if not force and len(messages) < config.min_messages:
                    # Best effort: the short window is dropped, not re-buffered.
                    LOGGER.debug(
                        "Summary skipped. %s messages drained (min %s).",
                        len(messages),
                        config.min_messages,
                    )
                    return None

                result = build_summary(messages, rules, config)
                await self._publish(result, messages)
                return result
            finally:
                self._draining = False

    async def _publish(self, result: SummaryResult, messages: List[ChatMessage]) -> None:
        try:
            await self._sink.publish_summary_text(result.rendered_text)
        except Exception:
            LOGGER.exception("Failed to publish summary text")
        try:
            await self._sink.publish_structured_buckets(format_buckets(result))
        except Exception:
            LOGGER.exception("Failed to publish summary buckets")
        LOGGER.info("Summary posted (%s messages)", len(messages))
