import asyncio
from datetime import datetime, timezone, timedelta

import pytest

from wildcam_tv.domain.stack import StackQuery, Period, StackRetrievalError
from wildcam_tv.application.stack_pipeline import StackPipeline

from conftest import ChannelRecorder, MockFallbackLoader, create_image, settle


VALID_SELECTION = {
    "deployment": 7,
    "period_start": "2024-01-01T00:00:00Z",
    "period_end": "2024-01-02T00:00:00Z",
    "interval": 5,
    "phase": "day",
}


@pytest.mark.asyncio
async def test_valid_selection_loads_stack(selection_state, pipeline, data_service, recorder):
    print("Testing: Valid selection triggers one retrieval and publishes the stack")

    selection_state.update(VALID_SELECTION)
    await settle()

    assert recorder.of("loading") == [True]
    assert data_service.queries == [
        StackQuery(
            deployment_id=7,
            period=Period(start="2024-01-01T00:00:00Z", end="2024-01-02T00:00:00Z"),
            interval=5,
            phase="day",
        )
    ]

    images = [create_image("img1.jpg"), create_image("img2.jpg"), create_image("img3.jpg")]
    data_service.resolve(0, images)
    await pipeline.wait_for_pending()

    assert recorder.events[-2:] == [("loading", False), ("stack", images)]
    assert pipeline.stack.value == images
    assert pipeline.loading.value is False
    print("✓ Stack published after loading cleared")


@pytest.mark.asyncio
async def test_frame_rate_change_does_not_refetch(selection_state, pipeline, data_service, recorder):
    selection_state.update(VALID_SELECTION)
    await settle()
    data_service.resolve(0, [create_image("img1.jpg")])
    await pipeline.wait_for_pending()
    stack_emissions = len(recorder.of("stack"))

    selection_state.update(frame_rate=4)
    await settle()

    assert recorder.of("frame_rate")[-1] == 4
    assert len(data_service.queries) == 1
    assert len(recorder.of("stack")) == stack_emissions


@pytest.mark.asyncio
async def test_every_update_republishes_frame_rate(selection_state, data_service, recorder):
    for rate in (2, 3, 3, 10):
        selection_state.update(frame_rate=rate)
    await settle()

    assert recorder.of("frame_rate") == [2, 3, 3, 10]
    assert recorder.of("stack") == []
    assert data_service.queries == []


@pytest.mark.asyncio
async def test_equal_selections_in_any_order_fetch_once(selection_state, data_service):
    selection_state.update({"deployment": 7, "interval": 5, "phase": "night"})
    selection_state.update({"phase": "night", "interval": 5, "deployment": 7})
    await settle()

    assert len(data_service.queries) == 1


@pytest.mark.asyncio
async def test_same_instant_in_other_timezone_is_not_a_change(selection_state, data_service):
    utc_start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    shifted_start = utc_start.astimezone(timezone(timedelta(hours=1)))

    selection_state.update(deployment=7, period_start=utc_start)
    selection_state.update(period_start=shifted_start)
    await settle()

    assert len(data_service.queries) == 1
    assert data_service.queries[0].period.start == "2024-01-01T00:00:00Z"


@pytest.mark.asyncio
async def test_incomplete_selection_is_deferred(selection_state, pipeline, data_service, recorder):
    print("Testing: Selection without deployment never starts loading")

    selection_state.update(period_start="2024-01-01T00:00:00Z", interval=5)
    selection_state.update(phase="day")
    await settle()

    assert data_service.queries == []
    assert True not in recorder.of("loading")
    assert not pipeline.loading.has_value

    selection_state.update(deployment=3)
    await settle()

    assert len(data_service.queries) == 1
    assert data_service.queries[0].deployment_id == 3
    print("✓ Retrieval starts once the selection becomes valid")


@pytest.mark.asyncio
async def test_failure_clears_loading_and_keeps_stack(selection_state, pipeline, data_service, recorder):
    first = [create_image("a.jpg"), create_image("b.jpg")]
    selection_state.update(VALID_SELECTION)
    await settle()
    data_service.resolve(0, first)
    await pipeline.wait_for_pending()

    selection_state.update(deployment=8)
    await settle()
    data_service.fail(1, StackRetrievalError("502"))
    await pipeline.wait_for_pending()

    assert recorder.of("loading") == [True, False, True, False]
    assert recorder.of("stack") == [first]
    assert pipeline.stack.value == first


@pytest.mark.asyncio
async def test_unexpected_error_is_treated_as_failure(selection_state, pipeline, data_service, recorder):
    selection_state.update(VALID_SELECTION)
    await settle()
    data_service.fail(0, KeyError("images"))
    await pipeline.wait_for_pending()

    assert pipeline.loading.value is False
    assert not pipeline.stack.has_value


@pytest.mark.asyncio
async def test_overlapping_retrievals_last_response_wins(selection_state, pipeline, data_service, recorder):
    selection_state.update(VALID_SELECTION)
    await settle()
    selection_state.update(deployment=9)
    await settle()
    assert len(data_service.queries) == 2

    older = [create_image("older.jpg")]
    newer = [create_image("newer.jpg")]
    data_service.resolve(1, newer)
    await settle()
    data_service.resolve(0, older)
    await pipeline.wait_for_pending()

    assert recorder.of("loading") == [True, True, False, False]
    assert recorder.of("stack") == [newer, older]
    assert pipeline.stack.value == older


@pytest.mark.asyncio
async def test_late_subscriber_gets_latest_values_first(selection_state, pipeline, data_service):
    images = [create_image("img1.jpg")]
    selection_state.update({**VALID_SELECTION, "frame_rate": 12})
    await settle()
    data_service.resolve(0, images)
    await pipeline.wait_for_pending()

    late = ChannelRecorder(pipeline)
    assert sorted(late.events, key=lambda e: e[0]) == [
        ("frame_rate", 12),
        ("loading", False),
        ("stack", images),
    ]

    selection_state.update(frame_rate=6)
    assert late.events[-1] == ("frame_rate", 6)


@pytest.mark.asyncio
async def test_load_fallback_publishes_directly(pipeline, fallback_loader, recorder):
    await pipeline.load_fallback()

    assert fallback_loader.calls == 1
    assert recorder.of("stack") == [fallback_loader.stack]
    assert recorder.of("loading") == []


@pytest.mark.asyncio
async def test_load_fallback_errors_propagate(data_service):
    pipeline = StackPipeline(data_service, MockFallbackLoader(error=FileNotFoundError("imgstack.json")))

    with pytest.raises(FileNotFoundError):
        await pipeline.load_fallback()
    assert not pipeline.stack.has_value


@pytest.mark.asyncio
async def test_load_fallback_without_loader(data_service):
    pipeline = StackPipeline(data_service)

    with pytest.raises(RuntimeError):
        await pipeline.load_fallback()


@pytest.mark.asyncio
async def test_non_list_response_is_treated_as_failure(selection_state, pipeline, data_service):
    selection_state.update(VALID_SELECTION)
    await settle()
    data_service.resolve(0, 42)
    await pipeline.wait_for_pending()

    assert pipeline.loading.value is False
    assert not pipeline.stack.has_value


def test_update_without_running_loop_leaves_state_consistent(selection_state, pipeline, data_service, recorder):
    print("Testing: Selection arriving outside an event loop can be retried")

    selection_state.update(VALID_SELECTION)

    assert not pipeline.loading.has_value
    assert data_service.queries == []
    assert recorder.of("frame_rate") == [1]

    images = [create_image("img1.jpg")]

    async def retry():
        selection_state.update(VALID_SELECTION)
        await settle()
        data_service.resolve(0, images)
        await pipeline.wait_for_pending()

    asyncio.run(retry())

    assert len(data_service.queries) == 1
    assert recorder.of("loading") == [True, False]
    assert pipeline.stack.value == images
    print("✓ Same selection is retrieved once a loop is running")
