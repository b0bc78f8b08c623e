from abc import ABC, abstractmethod
from typing import List

from .model import StackQuery, StackImage


class StackDataPort(ABC):
    @abstractmethod
    async def get_image_stack(self, query: StackQuery) -> List[StackImage]:
        """Retrieve the ordered image stack for a query. Raises on failure."""
        pass


class FallbackStackPort(ABC):
    @abstractmethod
    async def load_stack(self) -> List[StackImage]:
        pass
