# wildcam_tv/container.py
from dataclasses import dataclass
from typing import Optional

from wildcam_tv.settings import Settings, get_settings
from wildcam_tv.application.messagebus import MessageBus
from wildcam_tv.application.selection_state import SelectionState
from wildcam_tv.application.stack_pipeline import StackPipeline
from wildcam_tv.domain.stack import SelectionCriteria, SelectionChanged
from wildcam_tv.infrastructure.data import HttpDataService, JsonFileFallbackLoader
from wildcam_tv.entrypoints.socket_client import SocketIOClient


@dataclass
class App:
    ws_client: SocketIOClient
    bus: MessageBus
    selection_state: SelectionState
    pipeline: StackPipeline
    data_service: HttpDataService

    async def start(self):
        await self.ws_client.connect()

    async def stop(self):
        await self.ws_client.disconnect()
        await self.pipeline.wait_for_pending()
        await self.data_service.close()


def create_app(settings: Optional[Settings] = None) -> App:
    cfg = settings or get_settings()

    bus = MessageBus()

    data_service = HttpDataService(
        stack_url=cfg.get_stack_url(),
        timeout=cfg.request_timeout
    )
    fallback_loader = JsonFileFallbackLoader(cfg.fallback_stack_path)

    pipeline = StackPipeline(
        data_service=data_service,
        fallback_loader=fallback_loader
    )

    selection_state = SelectionState(
        bus,
        SelectionCriteria(
            interval=cfg.default_interval,
            frame_rate=cfg.default_frame_rate
        )
    )

    bus.subscribe(SelectionChanged, pipeline.on_selection_changed)

    # Only the entrypoint at this level
    ws_client = SocketIOClient(selection_state, pipeline, cfg.socket_url)

    return App(
        ws_client=ws_client,
        bus=bus,
        selection_state=selection_state,
        pipeline=pipeline,
        data_service=data_service
    )
