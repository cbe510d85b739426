"""Configuration for the transactional event layer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .events.classifier import DEFAULT_TRANSACTIONAL_EVENTS


class TransactionalEventsConfig(BaseModel):
    """Settings for ``install_transactional_dispatcher``.

    Attributes:
        enabled: Install the transactional decorator at all.
        events: Patterns of events handled transactionally.
        excluded: Patterns always dispatched immediately. The lifecycle
            namespace is excluded in addition to these.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    events: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TRANSACTIONAL_EVENTS)
    )
    excluded: list[str] = Field(default_factory=list)
