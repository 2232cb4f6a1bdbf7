import pytest

from deckhand.plan import PlanStore
from deckhand.results import ToolResult


def test_set_plan_skips_blank_lines_and_numbers_tasks():
    store = PlanStore()

    snapshot = store.set_plan("  ", ["first", "", "   ", "second"])

    assert snapshot.title == "Plan"
    assert [(t.id, t.description) for t in snapshot.tasks] == [("1", "first"), ("2", "second")]


def test_snapshot_is_detached_from_store():
    store = PlanStore()
    before = store.set_plan("Work", ["a"])

    store.update_task("1", "in_progress")

    assert before.tasks[0].status == "pending"
    assert store.snapshot().tasks[0].status == "in_progress"


def test_update_without_plan_raises_key_error():
    with pytest.raises(KeyError):
        PlanStore().update_task("1", "completed")


def test_clear_removes_plan():
    store = PlanStore()
    store.set_plan("Work", ["a"])
    store.clear()

    assert store.plan is None
    assert store.snapshot() is None


def test_tool_result_prompt_text():
    assert ToolResult(tool="t", result="ok").to_prompt_text() == "ok"
    assert ToolResult(tool="t", error="bad").to_prompt_text() == "Error: bad"
    assert ToolResult(tool="t", result="out\n", error="bad").to_prompt_text() == "out\nError: bad"
