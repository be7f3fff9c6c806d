"""Tests for the completion callback handed to Callback performers."""

import asyncio
import logging

import pytest

from effectrun import Callback, CompletionError, DispatchTable, define, perform

Job = define("Job")


@pytest.mark.asyncio
async def test_first_completion_wins(caplog):
    def complete_twice(effect, completion):
        completion(None, "first")
        completion(None, "second")

    table = DispatchTable([(Job, Callback(complete_twice))])

    with caplog.at_level(logging.WARNING, logger="effectrun.performers"):
        assert await perform(table, Job()) == "first"

    assert "completed more than once" in caplog.text


@pytest.mark.asyncio
async def test_error_after_success_is_ignored(caplog):
    def complete_then_fail(effect, completion):
        completion.complete("ok")
        completion.fail(ValueError("too late"))

    table = DispatchTable([(Job, Callback(complete_then_fail))])

    with caplog.at_level(logging.WARNING, logger="effectrun.performers"):
        assert await perform(table, Job()) == "ok"

    assert "completed more than once" in caplog.text


@pytest.mark.asyncio
async def test_raise_after_completion_is_ignored(caplog):
    def complete_then_raise(effect, completion):
        completion.complete("done")
        raise RuntimeError("after completion")

    table = DispatchTable([(Job, Callback(complete_then_raise))])

    with caplog.at_level(logging.WARNING, logger="effectrun.interpreter"):
        assert await perform(table, Job()) == "done"

    assert "raised after completing" in caplog.text


@pytest.mark.asyncio
async def test_non_exception_error_is_wrapped():
    def fail_with_string(effect, completion):
        completion("boom")

    table = DispatchTable([(Job, Callback(fail_with_string))])

    with pytest.raises(CompletionError) as exc_info:
        await perform(table, Job())

    assert exc_info.value.reason == "boom"


@pytest.mark.asyncio
async def test_none_error_with_no_result_completes_with_none():
    def complete_empty(effect, completion):
        completion()

    table = DispatchTable([(Job, Callback(complete_empty))])

    assert await perform(table, Job()) is None


@pytest.mark.asyncio
async def test_fail_requires_an_error():
    captured = []

    def fail_without_error(effect, completion):
        try:
            completion.fail(None)
        except TypeError as error:
            captured.append(error)
        completion.complete("completed")

    table = DispatchTable([(Job, Callback(fail_without_error))])

    assert await perform(table, Job()) == "completed"
    assert len(captured) == 1


@pytest.mark.asyncio
async def test_completion_reports_called():
    seen = []

    def record(effect, completion):
        seen.append(completion.called)
        completion.complete(1)
        seen.append(completion.called)

    table = DispatchTable([(Job, Callback(record))])

    await perform(table, Job())

    assert seen == [False, True]


@pytest.mark.asyncio
async def test_late_completion_after_cancel_is_dropped():
    completions = []

    def hold(effect, completion):
        completions.append(completion)

    table = DispatchTable([(Job, Callback(hold))])
    task = perform(table, Job())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    completions[0].complete("late")
    await asyncio.sleep(0)

    assert task.cancelled()
