import asyncio, logging, socketio

from wildcam_tv.settings import get_settings
from wildcam_tv.application.selection_state import SelectionState
from wildcam_tv.application.stack_pipeline import StackPipeline
from wildcam_tv.entrypoints.handlers import register as reg_handlers, PlaybackPublisher

log = logging.getLogger("SocketIOClient")


def to_http_uri(socket_url: str) -> str:
    return socket_url.replace("ws://", "http://").replace("wss://", "https://")


class SocketIOClient:
    def __init__(self, selection_state: SelectionState, pipeline: StackPipeline, socket_url: str = None) -> None:
        self.uri = to_http_uri(socket_url or get_settings().socket_url)
        self.sio = socketio.AsyncClient(reconnection=True)
        self.publisher = PlaybackPublisher(self.sio, pipeline)

        self._install_basic_logs()
        reg_handlers(self.sio, selection_state, pipeline)

    async def connect(self) -> None:
        await self.sio.connect(self.uri, transports=("websocket", "polling"))
        await self.sio.wait()

    async def emit(self, event: str, data=None) -> None:
        await self.sio.emit(event, data)

    async def call(self, event: str, data=None, timeout=8):
        try:
            return await self.sio.call(event, data, timeout=timeout)
        except (asyncio.TimeoutError, socketio.exceptions.TimeoutError):
            log.warning("ACK timeout for %s", event)

    async def disconnect(self) -> None:
        """Disconnect from the socket server."""
        self.publisher.detach()
        await self.sio.disconnect()

    def _install_basic_logs(self) -> None:
        """Attach Socket.IO lifecycle handlers."""
        sio = self.sio

        @sio.event
        async def connect() -> None:
            log.info("SocketIO connected → %s", self.uri)
            self.publisher.attach()
            # Runs on every reconnect too; the ack can only arrive once this handler returns.
            sio.start_background_task(self._register_client)

        @sio.event
        async def disconnect(*args) -> None:
            log.warning("SocketIO disconnected")
            self.publisher.detach()

        @sio.event
        async def connect_error(err) -> None:
            log.error("SocketIO connection error → %s", err)

    async def _register_client(self):
        try:
            response = await self.call('register', {'clientType': 'wildcam-tv'})
            if response:
                log.info(f"Successfully registered: {response}")
            else:
                log.warning("Registration failed - no response received")
        except Exception as e:
            log.error(f"Registration error: {e}")
