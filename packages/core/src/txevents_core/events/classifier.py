"""EventClassifier — decides which events wait for a transaction outcome."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..domain.lifecycle import LIFECYCLE_NAMESPACE
from ..ports.connection import TransactionalEvent
from ..utils import event_name, pattern_matches

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_TRANSACTIONAL_EVENTS: tuple[str, ...] = ("orm.",)


class EventClassifier:
    """Include/exclude pattern rules for transactional events.

    Exclusions are checked first and always start with the lifecycle
    namespace, so commit and rollback notifications are never buffered.
    A pattern containing ``*`` is a whole-name glob; any other pattern is a
    literal prefix (``"orm."`` covers ``"orm.inserted: app.Order"``).
    """

    def __init__(
        self,
        included: Iterable[str] | None = None,
        excluded: Iterable[str] | None = None,
    ) -> None:
        self._included: list[str] = []
        self._excluded: list[str] = []
        self.set_included(
            DEFAULT_TRANSACTIONAL_EVENTS if included is None else included
        )
        self.set_excluded(excluded or ())

    @property
    def included(self) -> list[str]:
        return list(self._included)

    @property
    def excluded(self) -> list[str]:
        return list(self._excluded)

    def set_included(self, patterns: Iterable[str]) -> None:
        """Replace the patterns of events handled transactionally."""
        self._included = list(patterns)

    def set_excluded(self, patterns: Iterable[str]) -> None:
        """Replace the exclusions, keeping the lifecycle namespace first."""
        self._excluded = [LIFECYCLE_NAMESPACE, *patterns]

    def should_buffer(self, event: Any, transaction_level: int) -> bool:
        """Whether *event* must wait for the outer commit.

        Nothing is buffered outside a transaction (``transaction_level < 1``).
        """
        if transaction_level < 1:
            return False
        return self.is_transactional(event)

    def is_transactional(self, event: Any) -> bool:
        name = event_name(event)

        if any(pattern_matches(pattern, name) for pattern in self._excluded):
            return False

        if any(pattern_matches(pattern, name) for pattern in self._included):
            return True

        return not isinstance(event, str) and isinstance(event, TransactionalEvent)
