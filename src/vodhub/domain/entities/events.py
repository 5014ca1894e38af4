"""Lifecycle events emitted by the search orchestrator.

A dispatch emits one ``StartEvent``, then exactly one terminal event
(``SourceResultEvent`` or ``SourceErrorEvent``) per provider in completion
order, then one ``CompleteEvent``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .media import CandidateResult


@dataclass(frozen=True)
class StartEvent:
    total_providers: int


@dataclass(frozen=True)
class SourceResultEvent:
    provider: str
    records: tuple[CandidateResult, ...]
    provider_label: str = ""


@dataclass(frozen=True)
class SourceErrorEvent:
    provider: str
    reason: str


@dataclass(frozen=True)
class CompleteEvent:
    completed_providers: int


StreamEvent = Union[StartEvent, SourceResultEvent, SourceErrorEvent, CompleteEvent]

TerminalEvent = Union[SourceResultEvent, SourceErrorEvent]


def is_terminal(event: StreamEvent) -> bool:
    """True for the per-provider terminal events."""
    return isinstance(event, (SourceResultEvent, SourceErrorEvent))
