"""Shared mocks and fixtures for the stack service tests."""

import asyncio
from typing import List

import pytest

from wildcam_tv.domain.stack import (
    StackDataPort, FallbackStackPort, StackImage, StackQuery, StackRetrievalError, SelectionChanged,
)
from wildcam_tv.application.messagebus import MessageBus
from wildcam_tv.application.selection_state import SelectionState
from wildcam_tv.application.stack_pipeline import StackPipeline


class MockStackData(StackDataPort):
    """Retrieval collaborator whose responses the test resolves by hand."""

    def __init__(self):
        self.queries: List[StackQuery] = []
        self._futures: List[asyncio.Future] = []

    async def get_image_stack(self, query: StackQuery) -> List[StackImage]:
        future = asyncio.get_running_loop().create_future()
        self.queries.append(query)
        self._futures.append(future)
        return await future

    def resolve(self, index: int, stack: List[StackImage]) -> None:
        self._futures[index].set_result(stack)

    def fail(self, index: int, error: Exception = None) -> None:
        self._futures[index].set_exception(error or StackRetrievalError("backend down"))


class MockFallbackLoader(FallbackStackPort):
    def __init__(self, stack=None, error: Exception = None):
        self.stack = stack or []
        self.error = error
        self.calls = 0

    async def load_stack(self) -> List[StackImage]:
        self.calls += 1
        if self.error:
            raise self.error
        return self.stack


class ChannelRecorder:
    """Records every value the pipeline channels deliver, in arrival order."""

    def __init__(self, pipeline: StackPipeline):
        self.events = []
        pipeline.stack.subscribe(lambda value: self.events.append(("stack", value)))
        pipeline.frame_rate.subscribe(lambda value: self.events.append(("frame_rate", value)))
        pipeline.loading.subscribe(lambda value: self.events.append(("loading", value)))

    def of(self, channel: str) -> list:
        return [value for name, value in self.events if name == channel]


def create_image(name: str) -> StackImage:
    return StackImage(object_name=name)


async def settle() -> None:
    """Let freshly scheduled tasks run up to their first await."""
    await asyncio.sleep(0)


@pytest.fixture
def bus() -> MessageBus:
    return MessageBus()


@pytest.fixture
def data_service() -> MockStackData:
    return MockStackData()


@pytest.fixture
def fallback_loader() -> MockFallbackLoader:
    return MockFallbackLoader(stack=[create_image("demo-1.jpg"), create_image("demo-2.jpg")])


@pytest.fixture
def pipeline(data_service, fallback_loader) -> StackPipeline:
    return StackPipeline(data_service, fallback_loader)


@pytest.fixture
def selection_state(bus, pipeline) -> SelectionState:
    bus.subscribe(SelectionChanged, pipeline.on_selection_changed)
    return SelectionState(bus)


@pytest.fixture
def recorder(pipeline) -> ChannelRecorder:
    return ChannelRecorder(pipeline)
