from __future__ import annotations

from typing import Awaitable, Optional
import logging

from schemas.analysis import Dataset
from .host import ChartHost
from .orchestrator import ChartOrchestrator, PaneId

logger = logging.getLogger(__name__)


class LifecycleBinding:
    """
    Connects a ChartOrchestrator to dataset arrivals and container resizes.

    Guarantees:
    - one resize subscription per bind, removed again on `unbind`
    - reconcile cycles never overlap: a dataset arriving while a cycle runs
      is queued and only the latest queued one is rendered afterwards
    - resizes received during a cycle are applied after it completes
    - a fetch that was superseded by a newer `load` is dropped
    - a dataset arriving before the container has a width is rendered on
      the first non-zero width
    """

    def __init__(self, orchestrator: ChartOrchestrator, host: ChartHost) -> None:
        self.orchestrator = orchestrator
        self.host = host
        self._token: Optional[int] = None
        self._in_cycle = False
        self._dataset_pending = False
        self._resize_pending = False
        self._awaiting_layout = False
        self._active_request: Optional[object] = None

    @property
    def is_bound(self) -> bool:
        return self._token is not None

    def bind(self) -> None:
        """Subscribe to container resizes. Calling it again is a no-op."""
        if self._token is not None:
            return
        self._token = self.host.resized.subscribe(self._on_resize)
        logger.debug("LifecycleBinding.bind: resize subscription installed")

    def unbind(self) -> None:
        """Remove the resize subscription and destroy every pane. Idempotent."""
        if self._token is not None:
            self.host.resized.unsubscribe(self._token)
            self._token = None
            logger.debug("LifecycleBinding.unbind: resize subscription removed")
        self._active_request = None
        self._dataset_pending = False
        self._resize_pending = False
        self._awaiting_layout = False
        self.orchestrator.destroy()

    def on_dataset(self, dataset: Optional[Dataset]) -> None:
        """
        Hand a newly resolved dataset to the chart.

        Ignored while the binding is not bound: panes mounted without a
        resize subscription would never follow the container again.

        Args:
            dataset: The fetch result, or None when there is no data.
        """
        if not self.is_bound:
            logger.warning("LifecycleBinding.on_dataset: binding is not bound, dataset dropped")
            return
        self.orchestrator.offer(dataset)
        if self._in_cycle:
            self._dataset_pending = True
            logger.debug("LifecycleBinding.on_dataset: cycle running, queued")
            return
        self._run_cycles()

    async def load(self, fetch: Awaitable[Optional[Dataset]]) -> bool:
        """
        Await a fetch and render its result unless a newer load started meanwhile.

        Args:
            fetch: Awaitable resolving to a Dataset (or None).

        Returns:
            True if the result was handed to the chart, False if it was stale
            or the binding was torn down meanwhile.
        """
        request = object()
        self._active_request = request
        dataset = await fetch
        if self._active_request is not request:
            logger.debug("LifecycleBinding.load: superseded fetch result dropped")
            return False
        if not self.is_bound:
            logger.warning("LifecycleBinding.load: binding is not bound, result dropped")
            return False
        self.on_dataset(dataset)
        return True

    def _run_cycles(self) -> None:
        self._in_cycle = True
        try:
            while True:
                self._dataset_pending = False
                dataset = self.orchestrator.latest
                self.orchestrator.reconcile(dataset)
                self._awaiting_layout = (
                    dataset is not None
                    and not dataset.is_empty
                    and self.host.width <= 0
                    and PaneId.PRICE not in self.orchestrator.panes
                )
                if self._awaiting_layout:
                    logger.info("LifecycleBinding: container has no width yet, render deferred")
                if not self._dataset_pending:
                    break
        finally:
            self._in_cycle = False

        if self._resize_pending:
            self._resize_pending = False
            self._apply_width(self.host.width)

    def _on_resize(self, width: int) -> None:
        if self._in_cycle:
            self._resize_pending = True
            return
        self._apply_width(width)

    def _apply_width(self, width: int) -> None:
        if width <= 0:
            return
        if self._awaiting_layout:
            self._awaiting_layout = False
            logger.info(f"LifecycleBinding: layout ready (width={width}), rendering deferred dataset")
            self._run_cycles()
            return
        self.orchestrator.resize(width)
