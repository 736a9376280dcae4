from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class EventType(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    TRANSITION = "TRANSITION"
    HALTED = "HALTED"


@dataclass(frozen=True)
class Event:
    """A single observation emitted while a machine runs."""

    seq: int
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class MachineHooks:
    """
    Optional callbacks fired by the tape and the engine.
    Every hook may be None; the engine never depends on them.

    on_read(address, symbol)
    on_write(address, previous, new)
    on_transition(from_state, transition)
    on_halted(status)
    """

    on_read: Optional[Callable[[int, Any], None]] = None
    on_write: Optional[Callable[[int, Any, Any], None]] = None
    on_transition: Optional[Callable[[Any, Any], None]] = None
    on_halted: Optional[Callable[[Any], None]] = None


@dataclass
class InMemoryEventSink:
    """Collects every hook call as an ordered Event list (tests, tracer history)."""

    events: list[Event] = field(default_factory=list)
    record_reads: bool = True
    _seq: int = field(default=0, init=False)

    def emit(self, event_type: EventType, **data: Any) -> None:
        self._seq += 1
        self.events.append(Event(seq=self._seq, type=event_type, data=dict(data)))

    def of_type(self, event_type: EventType) -> list[Event]:
        return [e for e in self.events if e.type == event_type]

    def clear(self) -> None:
        self.events.clear()
        self._seq = 0

    def hooks(self) -> MachineHooks:
        def on_read(address, symbol):
            if self.record_reads:
                self.emit(EventType.READ, address=address, symbol=symbol)

        return MachineHooks(
            on_read=on_read,
            on_write=lambda address, old, new: self.emit(EventType.WRITE, address=address, old=old, new=new),
            on_transition=lambda state, transition: self.emit(
                EventType.TRANSITION, state_id=state.id, transition=transition
            ),
            on_halted=lambda status: self.emit(EventType.HALTED, status=status),
        )
