import asyncio
import pytest
from attrition_desktop.presentation.services.gui_dispatcher import GuiDispatcher


@pytest.fixture
def dispatcher():
    return GuiDispatcher()


def test_post_from_gui_thread_runs_immediately(dispatcher):
    future = dispatcher.post(lambda a, b: a + b, 2, 3)

    assert future.done()
    assert future.result() == 5


def test_post_carries_exceptions(dispatcher):
    def fail():
        raise RuntimeError("dialog failed")

    future = dispatcher.post(fail)

    with pytest.raises(RuntimeError, match="dialog failed"):
        future.result(timeout=1)


@pytest.mark.asyncio
async def test_call_can_be_awaited(dispatcher):
    assert await dispatcher.call(str.upper, "customs") == "CUSTOMS"
