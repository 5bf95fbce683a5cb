"""
Tap Ledger EventBus: in-process async pub/sub.

Purpose
-------
Decouples ledger services from whatever reacts to ledger changes
(notifications, analytics, embedding applications). Services publish after a
transaction commits; listeners never see uncommitted state.

Responsibilities
----------------
- Register/unregister event listeners with priorities
- Publish events to all matching listeners (exact + wildcard)
- Run listeners in priority order, awaiting async callbacks
- Error isolation (one failing listener never blocks others or the publisher)

Design Decisions
----------------
- **Instance-based**: tests create their own bus; ``event_bus`` is the
  process-wide default
- **Sequential execution**: listeners run one at a time in priority order,
  so the order of side effects is deterministic
- **Wildcard support**: ``leaderboard.*`` and ``*`` subscriptions
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from typing import Any, Optional

from tapledger.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from tapledger.core.logging.logger import get_logger

logger = get_logger(__name__)


def matches(event_name: str, pattern: str) -> bool:
    """
    Check if an event name matches a wildcard pattern.

    Examples
    --------
    >>> matches("leaderboard.score_submitted", "leaderboard.*")
    True
    >>> matches("leaderboard.score_submitted", "*.score_submitted")
    True
    >>> matches("leaderboard.score_submitted", "player.*")
    False
    """
    if pattern == "*":
        return True

    if "*" not in pattern:
        return event_name == pattern

    while "**" in pattern:
        pattern = pattern.replace("**", "*")

    parts = pattern.split("*")

    if parts[0] and not event_name.startswith(parts[0]):
        return False

    if parts[-1] and not event_name.endswith(parts[-1]):
        return False

    # Prefix and suffix must not overlap.
    if len(parts[0]) + len(parts[-1]) > len(event_name):
        return False

    idx = len(parts[0])
    end = len(event_name) - len(parts[-1])
    for mid in parts[1:-1]:
        if not mid:
            continue
        next_idx = event_name.find(mid, idx, end)
        if next_idx == -1:
            return False
        idx = next_idx + len(mid)

    return True


class EventBus:
    """
    Async publish/subscribe hub.

    Designed for single-threaded asyncio usage: all methods are called from
    the same event loop.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("leaderboard.top_score_changed", on_new_champion)
    >>> await bus.publish("leaderboard.top_score_changed", {"identity": "bob"})
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventListener]] = defaultdict(list)

    # ------------------------------------------------------------------ #
    # Listener Validation
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """
        Ensure callback accepts exactly one parameter.

        Raises
        ------
        ValueError:
            If callback signature is invalid.
        """
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            # Built-ins may not expose a signature.
            return

        params = list(sig.parameters.values())
        if len(params) != 1:
            callback_name = getattr(callback, "__qualname__", None) or getattr(
                callback, "__name__", repr(callback)
            )
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(params)} parameters for '{callback_name}'"
            )

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Subscribing the same identifier twice to the same event is ignored.

        Returns
        -------
        str:
            The listener identifier (for unsubscribing later).
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        existing = self._listeners[event_name]
        if any(item.identifier == listener.identifier for item in existing):
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        existing.append(listener)
        existing.sort(key=lambda item: item.priority.value)

        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
                "once": listener.once,
            },
        )

        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        """Remove a listener. Returns True if one was removed."""
        existing = self._listeners.get(event_name, [])
        remaining = [item for item in existing if item.identifier != identifier]
        removed = len(remaining) != len(existing)

        if remaining:
            self._listeners[event_name] = remaining
        else:
            self._listeners.pop(event_name, None)

        if removed:
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )

        return removed

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    def _collect(self, event_name: str) -> list[tuple[str, EventListener]]:
        collected: list[tuple[str, EventListener]] = []
        for key, listeners in list(self._listeners.items()):
            if matches(event_name, key):
                collected.extend((key, listener) for listener in listeners)

        # Stable sort keeps subscription order within a priority.
        collected.sort(key=lambda pair: pair[1].priority.value)

        for key, listener in collected:
            if listener.once:
                self.unsubscribe(key, listener.identifier)

        return collected

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Publish an event to all matching listeners.

        A listener that raises is logged; the remaining listeners
        still run and the exception is not propagated to the publisher.

        Returns
        -------
        list[Any]:
            Results of the listeners that completed, in execution order.
        """
        listeners = self._collect(event_name)
        if not listeners:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        logger.debug(
            "EventBus: publishing event",
            extra={
                "event_name": event_name,
                "payload_keys": list(data.keys()),
                "listener_count": len(listeners),
            },
        )

        results: list[Any] = []
        for _, listener in listeners:
            try:
                result = listener.callback(data)
                if inspect.isawaitable(result):
                    result = await result
                results.append(result)
            except Exception as exc:
                logger.error(
                    "EventBus: listener failed",
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )

        return results


# Process-wide default bus
event_bus = EventBus()
