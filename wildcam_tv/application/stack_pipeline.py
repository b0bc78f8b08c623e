import asyncio
from typing import List, Optional, Set

from wildcam_tv.domain.stack import (
    SelectionChanged, StackQuery, StackImage, StackDataPort, FallbackStackPort,
    comparison_key, is_valid_for_retrieval, build_query,
)
from wildcam_tv.application.channels import ReplayChannel, ChannelView
from wildcam_tv.common.logger import setup_logger

logger = setup_logger("StackPipeline")

_NO_KEY = object()


class StackPipeline:
    """Turns selection changes into stack retrievals.

    Publishes on three replayable channels:
      - ``stack``: the latest retrieved list of images
      - ``frame_rate``: playback speed, republished on every selection change
      - ``loading``: True while a retrieval it started is outstanding

    Frame rate is excluded from duplicate detection, so changing it alone
    never triggers a retrieval. Retrievals are never cancelled; when several
    overlap, whichever finishes last owns the stack channel.
    """

    def __init__(self, data_service: StackDataPort, fallback_loader: Optional[FallbackStackPort] = None):
        self.data_service = data_service
        self.fallback_loader = fallback_loader

        self._stack: ReplayChannel[List[StackImage]] = ReplayChannel("stack")
        self._frame_rate: ReplayChannel[float] = ReplayChannel("frame_rate")
        self._loading: ReplayChannel[bool] = ReplayChannel("loading")

        self._previous_key = _NO_KEY
        self._pending: Set[asyncio.Task] = set()

    @property
    def stack(self) -> ChannelView[List[StackImage]]:
        return self._stack.view()

    @property
    def frame_rate(self) -> ChannelView[float]:
        return self._frame_rate.view()

    @property
    def loading(self) -> ChannelView[bool]:
        return self._loading.view()

    def on_selection_changed(self, event: SelectionChanged) -> None:
        criteria = event.criteria
        self._frame_rate.publish(criteria.frame_rate)

        key = comparison_key(criteria)
        if key == self._previous_key:
            return

        if not is_valid_for_retrieval(criteria):
            logger.debug(f"Selection incomplete, deferring retrieval: {criteria}")
            self._previous_key = key
            return

        # Raises without a running loop; the key is kept unset so the same selection can retry.
        self.load_stack(build_query(criteria))
        self._previous_key = key

    def load_stack(self, query: StackQuery) -> asyncio.Task:
        """Mark loading and start one retrieval for the query without waiting on it."""
        logger.info(
            f"Requesting stack for deployment {query.deployment_id} "
            f"({query.period.start} - {query.period.end}, every {query.interval}s, phase={query.phase})"
        )
        loop = asyncio.get_running_loop()
        self._loading.publish(True)

        task = loop.create_task(self._retrieve(query))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _retrieve(self, query: StackQuery) -> None:
        try:
            stack = list(await self.data_service.get_image_stack(query))
        except Exception:
            logger.warning(f"Stack retrieval failed for deployment {query.deployment_id}, keeping previous stack")
            self._loading.publish(False)
            return

        logger.info(f"Received stack of {len(stack)} images for deployment {query.deployment_id}")
        self._loading.publish(False)
        self._stack.publish(stack)

    async def load_fallback(self) -> None:
        if self.fallback_loader is None:
            raise RuntimeError("No fallback loader configured")
        stack = await self.fallback_loader.load_stack()
        logger.info(f"Loaded fallback stack of {len(stack)} images")
        self._stack.publish(list(stack))

    async def wait_for_pending(self) -> None:
        while any(not task.done() for task in self._pending):
            await asyncio.gather(*self._pending, return_exceptions=True)
