from enum import Enum
from typing import Callable, List

from pydantic import ValidationError
from socketio.exceptions import SocketIOError

from wildcam_tv.common.logger import setup_logger
from wildcam_tv.domain.stack import UpdateSelectionCommand, StackImage
from wildcam_tv.application.selection_state import SelectionState
from wildcam_tv.application.stack_pipeline import StackPipeline

logger = setup_logger('SocketHandlers')

class Event(str, Enum):
    SELECTION_UPDATE = "selection.update"
    LOAD_FALLBACK = "stack.load_fallback"
    STACK = "stack.updated"
    FRAME_RATE = "stack.framerate"
    LOADING = "stack.loading"

def register(sio, selection_state: SelectionState, pipeline: StackPipeline):

    # Inbound
    @sio.on(Event.SELECTION_UPDATE.value)
    async def update_selection(payload):
        try:
            command = UpdateSelectionCommand.model_validate(payload or {})
        except ValidationError as e:
            logger.warning(f"Invalid selection payload: {e}")
            return
        partial = command.to_partial()
        logger.info(f"Updating selection: {partial}")
        selection_state.update(partial)

    @sio.on(Event.LOAD_FALLBACK.value)
    async def load_fallback(payload=None):
        logger.info("Loading fallback stack")
        await pipeline.load_fallback()


class PlaybackPublisher:
    """Forwards the pipeline channels to the playback surface while connected."""

    def __init__(self, sio, pipeline: StackPipeline):
        self.sio = sio
        self.pipeline = pipeline
        self._unsubscribers: List[Callable[[], None]] = []

    def attach(self) -> None:
        # Channels replay their latest value, so a (re)connected surface is caught up at once.
        self.detach()
        self._unsubscribers = [
            self.pipeline.stack.subscribe(self.send_stack),
            self.pipeline.frame_rate.subscribe(self.send_frame_rate),
            self.pipeline.loading.subscribe(self.send_loading),
        ]

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    async def send_stack(self, stack: List[StackImage]) -> None:
        await self._emit(Event.STACK, [image.model_dump(mode="json") for image in stack])

    async def send_frame_rate(self, frame_rate: float) -> None:
        await self._emit(Event.FRAME_RATE, frame_rate)

    async def send_loading(self, loading: bool) -> None:
        await self._emit(Event.LOADING, loading)

    async def _emit(self, event: Event, data) -> None:
        try:
            await self.sio.emit(event.value, data)
        except SocketIOError as e:
            logger.warning(f"Could not send {event.value}: {e}")
