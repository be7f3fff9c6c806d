"""Tests for resolution step events and the loguru step logger."""

import pytest

from effectrun import DispatchTable, ResolutionEvent, define, loguru_step_logger, perform
from effectrun import interpreter as interpreter_module

Step = define("Step", lambda self, value: setattr(self, "value", value))
Broken = define("Broken")


def broken(effect):
    raise ValueError("broken")


@pytest.mark.asyncio
async def test_events_describe_each_step():
    events: list[ResolutionEvent] = []

    def workflow():
        try:
            yield Broken()
        except ValueError:
            pass
        value = yield Step(1)
        return value

    table = DispatchTable([(Step, lambda effect: effect.value), (Broken, broken)])

    assert await perform(table, workflow(), on_step=events.append) == 1

    kinds = [(event.kind, event.depth) for event in events]
    assert kinds == [
        ("yield", 0),
        ("dispatch", 1),
        ("failure", 0),
        ("yield", 0),
        ("dispatch", 1),
        ("return", 0),
    ]
    assert isinstance(events[2].value, ValueError)
    assert events[-1].value == 1


@pytest.mark.asyncio
async def test_await_event_is_reported():
    events: list[ResolutionEvent] = []

    async def compute():
        return "done"

    await perform(DispatchTable(), compute(), on_step=events.append)

    assert [event.kind for event in events] == ["await"]


@pytest.mark.asyncio
async def test_hook_errors_fail_the_resolution():
    def failing_hook(event):
        raise RuntimeError("hook failed")

    table = DispatchTable([(Step, lambda effect: effect.value)])

    with pytest.raises(RuntimeError, match="hook failed"):
        await perform(table, Step(1), on_step=failing_hook)


@pytest.mark.asyncio
async def test_hook_error_on_yield_is_thrown_into_generator():
    def fail_on_yield(event):
        if event.kind == "yield":
            raise RuntimeError("hook failed")

    def workflow():
        try:
            yield Step(1)
        except RuntimeError as error:
            return f"recovered: {error}"

    table = DispatchTable([(Step, lambda effect: effect.value)])

    assert await perform(table, workflow(), on_step=fail_on_yield) == "recovered: hook failed"


@pytest.mark.asyncio
async def test_hook_error_on_yield_runs_generator_cleanup():
    cleaned_up = []

    def fail_on_yield(event):
        if event.kind == "yield":
            raise RuntimeError("hook failed")

    def workflow():
        try:
            yield Step(1)
        finally:
            cleaned_up.append(True)

    table = DispatchTable([(Step, lambda effect: effect.value)])

    with pytest.raises(RuntimeError, match="hook failed"):
        await perform(table, workflow(), on_step=fail_on_yield)

    assert cleaned_up == [True]


@pytest.mark.asyncio
async def test_loguru_step_logger_reports_events(loguru_messages):
    def workflow():
        value = yield Step("payload")
        return value

    table = DispatchTable([(Step, lambda effect: effect.value)])

    await perform(table, workflow(), on_step=loguru_step_logger("INFO"))

    text = "".join(loguru_messages)
    assert "INFO|yield Step(value='payload') (depth=0)" in text
    assert "INFO|  dispatch Step(value='payload') (depth=1)" in text
    assert "INFO|return 'payload' (depth=0)" in text


@pytest.mark.asyncio
async def test_trace_setting_installs_loguru_logger(monkeypatch, loguru_messages):
    monkeypatch.setattr(interpreter_module, "TRACE_STEPS", True)
    table = DispatchTable([(Step, lambda effect: effect.value)])

    await perform(table, Step("traced"))

    assert "DEBUG|dispatch Step(value='traced') (depth=0)" in "".join(loguru_messages)


def test_event_describe():
    event = ResolutionEvent("dispatch", Step(2), 3)

    assert event.describe() == "dispatch Step(value=2) (depth=3)"
