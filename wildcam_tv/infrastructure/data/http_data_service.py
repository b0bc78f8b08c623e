import asyncio
from typing import List, Optional

import aiohttp
from pydantic import TypeAdapter, ValidationError

from wildcam_tv.domain.stack import StackDataPort, StackQuery, StackImage, StackRetrievalError
from wildcam_tv.common.logger import setup_logger
from wildcam_tv.settings import get_settings

logger = setup_logger("HttpDataService")

_stack_adapter = TypeAdapter(List[StackImage])


class HttpDataService(StackDataPort):
    """Fetches image stacks from the backend REST API."""

    def __init__(self, stack_url: Optional[str] = None, timeout: Optional[float] = None):
        cfg = get_settings()
        self.stack_url = stack_url or cfg.get_stack_url()
        self.timeout = aiohttp.ClientTimeout(total=timeout or cfg.request_timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def get_image_stack(self, query: StackQuery) -> List[StackImage]:
        body = query.model_dump(mode="json", exclude_none=True)
        try:
            async with self._get_session().post(self.stack_url, json=body) as response:
                response.raise_for_status()
                payload = await response.json()
        except aiohttp.ContentTypeError as e:
            logger.error(f"Stack response is not JSON: {e.message}")
            raise StackRetrievalError("Malformed stack payload") from e
        except aiohttp.ClientResponseError as e:
            logger.error(f"Stack request rejected ({e.status}): {e.message}")
            raise StackRetrievalError(f"Backend answered {e.status}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Stack request to {self.stack_url} failed: {e!r}")
            raise StackRetrievalError("Backend unreachable") from e
        except ValueError as e:
            logger.error(f"Stack response could not be decoded: {e}")
            raise StackRetrievalError("Malformed stack payload") from e

        try:
            return _stack_adapter.validate_python(payload)
        except ValidationError as e:
            logger.error(f"Malformed stack payload: {e}")
            raise StackRetrievalError("Malformed stack payload") from e

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
