"""
Poll Loop - drives one aggregation cycle per fixed period.

The timer keeps its cadence regardless of how long a cycle takes. A tick
that fires while the previous cycle is still in flight is skipped, so the
registry only ever has one writer. There is no retry or backoff: the next
tick is the retry.
"""

import asyncio

from statusgate.aggregation import (
    CycleResult,
    StaleNodeReaper,
    StateMatrixBuilder,
    StatusSummary,
    status_counts,
)
from statusgate.credentials import CredentialResolver
from statusgate.logging import Logger
from statusgate.logging.statusgate_logging_models import (
    PollDebug,
    PollError,
    PollWarning,
    StatusModified,
)
from statusgate.registry import NodeRegistry


STATUS_TEMPLATE = "{timestamp} - {level} - {message} {status_counts}\n{table}"


class PollLoop:
    def __init__(
        self,
        registry: NodeRegistry,
        builder: StateMatrixBuilder,
        summary: StatusSummary,
        reaper: StaleNodeReaper,
        credentials: CredentialResolver,
        interval: float = 10.0,
        logger: Logger | None = None,
    ) -> None:
        self._registry = registry
        self._builder = builder
        self._summary = summary
        self._reaper = reaper
        self._credentials = credentials
        self._interval = interval
        self._logger = logger or Logger()

        self._running = False
        self._in_flight = False
        self._timer_task: asyncio.Task | None = None
        self._cycle_task: asyncio.Task | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def start(self):
        if self._running:
            return

        self._running = True
        self._timer_task = asyncio.create_task(self._run_timer())

    async def stop(self):
        self._running = False

        for task in (self._timer_task, self._cycle_task):
            if task is None or task.done():
                continue

            task.cancel()
            try:
                await task

            except asyncio.CancelledError:
                pass

        self._timer_task = None
        self._cycle_task = None

    async def _run_timer(self):
        while self._running:
            await asyncio.sleep(self._interval)
            await self._tick()

    async def _tick(self) -> bool:
        """
        Start a cycle unless one is already running.

        Returns:
            True if a cycle was started, False if the tick was skipped.
        """
        if self._in_flight:
            await self._logger.log(
                PollDebug(
                    message="Previous poll cycle still in flight, skipping tick",
                    known_nodes=len(self._registry.nodes),
                )
            )
            return False

        self._in_flight = True
        self._cycle_task = asyncio.create_task(self._run_exclusive())
        return True

    async def _run_exclusive(self):
        try:
            await self.run_cycle()

        except Exception as err:
            await self._logger.log(
                PollError(
                    message=f"Poll cycle failed: {err!r}",
                    known_nodes=len(self._registry.nodes),
                    using_fallback=self._credentials.using_fallback,
                )
            )

        finally:
            self._in_flight = False

    async def run_cycle(self) -> CycleResult | None:
        known_nodes = len(self._registry.nodes)

        if known_nodes == 0:
            await self._logger.log(
                PollWarning(
                    message="0 discovered nodes...",
                    known_nodes=known_nodes,
                )
            )
            return None

        result = await self._builder.build()

        if result.transport_error is not None:
            using_fallback = self._credentials.toggle()
            await self._logger.log(
                PollError(
                    message=f"Failed node state request: {result.transport_error}",
                    known_nodes=known_nodes,
                    using_fallback=using_fallback,
                )
            )
            return result

        snapshot = self._summary.build_snapshot(result.states, result.known_addresses)

        if not snapshot.same_as(self._registry.snapshot):
            self._registry.commit(snapshot)
            await self._logger.log(
                StatusModified(
                    message="Status modified",
                    status_counts=status_counts(snapshot.states),
                    table=snapshot.table or "",
                ),
                template=STATUS_TEMPLATE,
            )

        if result.successes == 0:
            using_fallback = self._credentials.toggle()
            await self._logger.log(
                PollError(
                    message="No node state request was successful",
                    known_nodes=known_nodes,
                    using_fallback=using_fallback,
                )
            )
            return result

        await self._reaper.reap(result)

        return result
