import asyncio
import json
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter

from wildcam_tv.domain.stack import FallbackStackPort, StackImage
from wildcam_tv.common.logger import setup_logger
from wildcam_tv.settings import get_settings

logger = setup_logger("FallbackLoader")

_stack_adapter = TypeAdapter(List[StackImage])


class JsonFileFallbackLoader(FallbackStackPort):
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or get_settings().fallback_stack_path)

    async def load_stack(self) -> List[StackImage]:
        logger.info(f"Loading fallback stack from {self.path}")
        raw = await asyncio.get_running_loop().run_in_executor(
            None, self.path.read_text, "utf-8"
        )
        return _stack_adapter.validate_python(json.loads(raw))
