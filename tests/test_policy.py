import pathlib

import pytest

from i18n_codemod.errors import (
    AbortRequested,
    ErrorCategory,
    ErrorRecord,
    ErrorTracker,
    NonInteractiveAbort,
)
from i18n_codemod.policy import Decision, ErrorPolicy


def record(name="App.jsx", category=ErrorCategory.PARSE):
    return ErrorRecord(path=pathlib.Path(name), category=category, message="broken")


def test_tracker_counts_failures_in_a_row_across_categories():
    tracker = ErrorTracker()
    assert tracker.register(record()) is False
    assert tracker.register(record(category=ErrorCategory.FILE_IO)) is False
    assert tracker.register(record(category=ErrorCategory.FORMAT)) is True
    assert tracker.consecutive == 3


def test_clearing_the_streak_keeps_the_total():
    tracker = ErrorTracker()
    tracker.register(record())
    tracker.register(record())
    tracker.clear_streak()
    assert tracker.register(record()) is False
    assert (tracker.consecutive, tracker.total) == (1, 3)


def test_total_limit_applies_without_a_streak():
    tracker = ErrorTracker()
    hits = []
    for _ in range(10):
        hits.append(tracker.register(record()))
        tracker.clear_streak()
    assert hits == [False] * 9 + [True]


def test_record_description_includes_path():
    assert record("src/App.jsx").describe() == "src/App.jsx: broken"
    assert ErrorRecord(path=None, category=ErrorCategory.OTHER, message="x").describe() == "x"


def test_failures_below_the_limit_continue(capsys):
    policy = ErrorPolicy(interactive=False)
    decision = policy.handle_error(pathlib.Path("App.jsx"), ErrorCategory.PARSE, "bad syntax.")
    assert decision is Decision.CONTINUE
    assert "Could not transform App.jsx: bad syntax." in capsys.readouterr().out
    assert [item.describe() for item in policy.records] == ["App.jsx: bad syntax."]


def test_non_interactive_run_stops_at_the_limit():
    policy = ErrorPolicy(interactive=False)
    policy.handle_error(None, ErrorCategory.PARSE, "one")
    policy.handle_error(None, ErrorCategory.PARSE, "two")
    with pytest.raises(NonInteractiveAbort):
        policy.handle_error(None, ErrorCategory.PARSE, "three")


def test_success_breaks_the_streak():
    policy = ErrorPolicy(interactive=False)
    policy.handle_error(None, ErrorCategory.PARSE, "one")
    policy.handle_error(None, ErrorCategory.PARSE, "two")
    policy.record_success()
    assert policy.handle_error(None, ErrorCategory.PARSE, "three") is Decision.CONTINUE


@pytest.mark.parametrize(
    "answer, expected",
    [("c", Decision.CONTINUE), ("Retry", Decision.RETRY), (" r ", Decision.RETRY)],
)
def test_interactive_answers(answer, expected):
    policy = ErrorPolicy(interactive=True, tracker=ErrorTracker(consecutive_limit=1), ask=lambda prompt: answer)
    assert policy.handle_error(None, ErrorCategory.PARSE, "one") is expected


def test_interactive_abort_after_unknown_answer(capsys):
    answers = iter(["maybe", "a"])
    policy = ErrorPolicy(
        interactive=True,
        tracker=ErrorTracker(consecutive_limit=1),
        ask=lambda prompt: next(answers),
    )
    with pytest.raises(AbortRequested):
        policy.handle_error(None, ErrorCategory.PARSE, "one")
    assert "Please answer" in capsys.readouterr().out
