"""Append-only, ordered record of timestamped run events."""

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TypeAlias

log = logging.getLogger(__name__)

LogListener: TypeAlias = Callable[["LogEntry"], None]


class LogSinkClosedError(RuntimeError):
    """Raised when appending to a sink whose run has been torn down."""


@dataclass(frozen=True, kw_only=True)
class LogEntry:
    """A single orchestration event."""

    index: int
    timestamp: datetime
    message: str
    case_id: str | None = None

    @property
    def text(self) -> str:
        """Render the entry the way the live viewer shows it."""
        return f"[{self.timestamp:%H:%M:%S}] {self.message}"


class LogSink:
    """Ordered event log for one run with live subscribers.

    Entries are never removed or reordered. Listeners are called synchronously,
    in subscription order, right after an entry is recorded.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._entries: list[LogEntry] = []
        self._listeners: list[LogListener] = []
        self._closed = False

    def append(self, message: str, *, case_id: str | None = None) -> LogEntry:
        """Record a new event and notify listeners."""
        if self._closed:
            raise LogSinkClosedError("Cannot append to a closed log sink")

        entry = LogEntry(
            index=len(self._entries),
            timestamp=self._clock(),
            message=message,
            case_id=case_id,
        )
        self._entries.append(entry)

        for listener in tuple(self._listeners):
            listener(entry)

        return entry

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        """Refuse further events and drop all listeners."""
        if not self._closed:
            log.debug("Closing log sink after %d entries", len(self._entries))
        self._closed = True
        self._listeners.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def entries(self) -> Sequence[LogEntry]:
        return tuple(self._entries)

    @property
    def lines(self) -> Sequence[str]:
        return [entry.text for entry in self._entries]

    def for_case(self, case_id: str) -> Sequence[LogEntry]:
        """Return the entries attributed to one case, in order."""
        return [entry for entry in self._entries if entry.case_id == case_id]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(tuple(self._entries))
