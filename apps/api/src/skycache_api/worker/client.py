"""Caller-side handle for the background query worker thread."""

from __future__ import annotations

import asyncio
import functools
import logging
import queue
import threading
import uuid
from typing import TYPE_CHECKING, Any

from skycache_api.errors import WorkerBusyError, WorkerEvaluationError
from skycache_api.worker.protocol import WorkerOp, handle_message
from skycache_core.schemas import FilterCriteria

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from skycache_core.schemas import CabinClass, FlightRecord, SortSpec

logger = logging.getLogger(__name__)

_STOP = object()


class QueryWorker:
    """Runs filter/sort jobs on a dedicated thread.

    Every request is tagged with a fresh request id and the response is
    matched back to the awaiting caller by that id, so overlapping calls
    never see each other's results. Up to *max_pending* calls may be in
    flight; further calls are rejected with :class:`WorkerBusyError`.
    """

    def __init__(
        self,
        *,
        max_pending: int = 8,
        name: str = "skycache-query-worker",
        handler: Callable[[dict[str, Any]], dict[str, Any]] = handle_message,
    ) -> None:
        self._max_pending = max_pending
        self._name = name
        self._handler = handler
        self._inbox: queue.SimpleQueue[Any] = queue.SimpleQueue()
        self._thread: threading.Thread | None = None
        self._pending: dict[str, asyncio.Future[dict[str, Any]]] = {}

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def start(self) -> None:
        if self.is_running:
            return
        self._inbox = queue.SimpleQueue()
        self._thread = threading.Thread(
            target=self._run, name=self._name, daemon=True
        )
        self._thread.start()
        logger.info("Query worker %s started", self._name)

    async def stop(self) -> None:
        """Stop the thread and fail any call still waiting for a response."""
        if self._thread is None:
            return
        self._inbox.put(_STOP)
        await asyncio.to_thread(self._thread.join)
        self._thread = None
        for request_id, future in self._pending.items():
            if not future.done():
                msg = f"Query worker stopped before {request_id} completed"
                future.set_exception(WorkerEvaluationError(msg))
        self._pending.clear()
        logger.info("Query worker %s stopped", self._name)

    # ------------------------------------------------------------------
    # Worker thread
    # ------------------------------------------------------------------

    def _run(self) -> None:
        while True:
            item = self._inbox.get()
            if item is _STOP:
                break
            message, reply = item
            try:
                response = self._handler(message)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "Query worker crashed on %s", message.get("request_id")
                )
                response = {
                    "request_id": message.get("request_id"),
                    "success": False,
                    "data": None,
                    "error": f"Worker crashed: {exc}",
                }
            try:
                reply(response)
            except RuntimeError:
                logger.debug("Event loop closed; dropping worker response")

    # ------------------------------------------------------------------
    # Event loop side
    # ------------------------------------------------------------------

    def _deliver(self, response: dict[str, Any]) -> None:
        future = self._pending.pop(response.get("request_id"), None)
        if future is None or future.done():
            logger.debug(
                "Dropping response for abandoned request %s", response.get("request_id")
            )
            return
        future.set_result(response)

    async def _submit(
        self,
        op: WorkerOp,
        records: Sequence[FlightRecord],
        criteria: FilterCriteria | None = None,
        sort: SortSpec | None = None,
    ) -> list[FlightRecord]:
        if not self.is_running:
            msg = "Query worker is not running"
            raise WorkerEvaluationError(msg)
        if len(self._pending) >= self._max_pending:
            msg = f"Query worker has {len(self._pending)} requests pending"
            raise WorkerBusyError(msg)

        loop = asyncio.get_running_loop()
        request_id = uuid.uuid4().hex
        future: asyncio.Future[dict[str, Any]] = loop.create_future()
        self._pending[request_id] = future
        message = {
            "request_id": request_id,
            "type": op.value,
            "flights": [record.model_dump() for record in records],
            "criteria": criteria.model_dump() if criteria is not None else None,
            "sort": sort.model_dump() if sort is not None else None,
        }
        reply = functools.partial(loop.call_soon_threadsafe, self._deliver)
        self._inbox.put((message, reply))

        try:
            response = await future
        except asyncio.CancelledError:
            self._pending.pop(request_id, None)
            logger.debug("Request %s abandoned by caller", request_id)
            raise

        if response.get("request_id") != request_id:
            msg = f"Worker response for {response.get('request_id')} != {request_id}"
            raise WorkerEvaluationError(msg)
        if not response["success"]:
            raise WorkerEvaluationError(response["error"] or "Unknown worker error")
        return response["data"]

    async def filter(
        self, records: Sequence[FlightRecord], criteria: FilterCriteria
    ) -> list[FlightRecord]:
        return await self._submit(WorkerOp.FILTER, records, criteria=criteria)

    async def sort(
        self,
        records: Sequence[FlightRecord],
        spec: SortSpec,
        *,
        cabin: CabinClass | None = None,
    ) -> list[FlightRecord]:
        """Sort *records*; price ordering reads the *cabin* fare (economy if None)."""
        criteria = FilterCriteria(cabin_class=cabin) if cabin is not None else None
        return await self._submit(WorkerOp.SORT, records, criteria=criteria, sort=spec)

    async def evaluate(
        self,
        records: Sequence[FlightRecord],
        criteria: FilterCriteria | None,
        spec: SortSpec | None,
    ) -> list[FlightRecord]:
        """Filter and sort in a single round trip."""
        return await self._submit(
            WorkerOp.EVALUATE, records, criteria=criteria, sort=spec
        )

    async def process(
        self,
        records: Sequence[FlightRecord],
        criteria: FilterCriteria | None = None,
        spec: SortSpec | None = None,
    ) -> list[FlightRecord]:
        """Apply a filter round trip then a sort round trip, skipping absent steps."""
        result = list(records)
        if criteria is not None:
            result = await self.filter(result, criteria)
        if spec is not None:
            cabin = criteria.cabin_class if criteria is not None else None
            result = await self.sort(result, spec, cabin=cabin)
        return result
