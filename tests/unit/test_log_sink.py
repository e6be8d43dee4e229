"""Tests for the log sink."""

from datetime import datetime

import pytest

from qa_pilot.log_sink import LogEntry, LogSink, LogSinkClosedError

FIXED_TIME = datetime(2099, 1, 1, 9, 5, 7)


@pytest.fixture
def sink() -> LogSink:
    """Create sink with a fixed clock."""
    return LogSink(clock=lambda: FIXED_TIME)


def test_append_assigns_sequential_indices(sink: LogSink) -> None:
    """Entries are numbered in append order."""
    sink.append("first")
    sink.append("second", case_id="tc-0")

    assert [e.index for e in sink.entries] == [0, 1]
    assert [e.message for e in sink] == ["first", "second"]
    assert len(sink) == 2


def test_entry_text_includes_timestamp(sink: LogSink) -> None:
    """Renders entries with a bracketed time prefix."""
    entry = sink.append("STARTED: Load")

    assert entry.text == "[09:05:07] STARTED: Load"
    assert sink.lines == ["[09:05:07] STARTED: Load"]


def test_for_case_filters_by_case_id(sink: LogSink) -> None:
    """Returns only the entries attributed to one case."""
    sink.append("planning")
    sink.append("a", case_id="tc-0")
    sink.append("b", case_id="tc-1")
    sink.append("c", case_id="tc-0")

    assert [e.message for e in sink.for_case("tc-0")] == ["a", "c"]


def test_subscribers_receive_entries_in_order(sink: LogSink) -> None:
    """Notifies listeners synchronously for each entry."""
    received: list[LogEntry] = []
    sink.subscribe(received.append)

    sink.append("one")
    sink.append("two")

    assert [e.message for e in received] == ["one", "two"]


def test_unsubscribe_stops_notifications(sink: LogSink) -> None:
    """Removed listeners are no longer called."""
    received: list[LogEntry] = []
    unsubscribe = sink.subscribe(received.append)

    sink.append("one")
    unsubscribe()
    unsubscribe()
    sink.append("two")

    assert [e.message for e in received] == ["one"]


def test_closed_sink_rejects_appends(sink: LogSink) -> None:
    """Raises once the sink is closed and keeps earlier entries."""
    sink.append("one")
    sink.close()

    with pytest.raises(LogSinkClosedError):
        sink.append("two")

    assert sink.closed
    assert [e.message for e in sink] == ["one"]


def test_entries_snapshot_is_immutable(sink: LogSink) -> None:
    """The entries view cannot be used to rewrite history."""
    sink.append("one")

    assert isinstance(sink.entries, tuple)
