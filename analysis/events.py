"""
Event Model for the Banker's Algorithm Safety Simulator.

Defines event types for tracking request decisions and safety verdicts.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class EventType(Enum):
    """Types of events in the simulation."""
    ALLOCATION = "allocation"
    DENIAL = "denial"
    SAFETY_CHECK = "safety_check"


@dataclass
class SimulationEvent:
    """
    Represents a single event in the simulation.

    Attributes:
        step: Index of the request (or check) that produced the event
        event_type: Type of event
        process_id: Process involved in event (-1 for system-wide events)
        request: Requested instances per resource type (if applicable)
        message: Human-readable description
        reason: Reason for the grant/denial decision (if applicable)
    """
    step: int
    event_type: EventType
    process_id: int
    request: Optional[List[int]] = None
    message: str = ""
    reason: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"Step {self.step}: P{self.process_id}"

        if self.event_type == EventType.ALLOCATION:
            return f"{base} requests {self.request} - GRANTED ({self.reason})"
        elif self.event_type == EventType.DENIAL:
            return f"{base} requests {self.request} - DENIED ({self.reason})"
        else:
            return f"Step {self.step}: SAFETY CHECK ({self.message})"


@dataclass
class EventLog:
    """Collection of simulation events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event: SimulationEvent) -> None:
        """Add an event to the log."""
        self.events.append(event)

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events_by_process(self, process_id: int) -> list:
        """Get all events involving a specific process."""
        return [e for e in self.events if e.process_id == process_id]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
