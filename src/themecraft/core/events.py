"""
Builder lifecycle events.

A ThemeBuilder notifies listeners as it registers extensions, applies
customizations, validates and finishes a build. Listener tables are plain
mappings of event type to a tuple of callables; the helpers here return new
tables so a builder can stay immutable.

Listener failures are logged and never reach the builder's caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class BuilderEventType(StrEnum):
    THEME_BUILT = "theme-built"
    CUSTOMIZATION_APPLIED = "customization-applied"
    VALIDATION_ERROR = "validation-error"
    VALIDATION_WARNING = "validation-warning"
    PLUGIN_REGISTERED = "plugin-registered"
    PLUGIN_UNREGISTERED = "plugin-unregistered"


@dataclass(frozen=True)
class BuilderEvent:
    """A single lifecycle notification."""

    type: BuilderEventType
    data: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[BuilderEvent], None]
ListenerTable = Mapping[BuilderEventType, tuple[Listener, ...]]


def add_listener(
    listeners: ListenerTable, event: BuilderEventType | str, listener: Listener
) -> dict[BuilderEventType, tuple[Listener, ...]]:
    event = BuilderEventType(event)
    return {**listeners, event: (*listeners.get(event, ()), listener)}


def remove_listener(
    listeners: ListenerTable, event: BuilderEventType | str, listener: Listener
) -> dict[BuilderEventType, tuple[Listener, ...]]:
    """Drop the first registration of ``listener``; unknown listeners are ignored."""
    event = BuilderEventType(event)
    current = list(listeners.get(event, ()))
    if listener in current:
        current.remove(listener)
    table = dict(listeners)
    if current:
        table[event] = tuple(current)
    else:
        table.pop(event, None)
    return table


def emit(listeners: ListenerTable, event: BuilderEventType, **data: Any) -> bool:
    """Call every listener registered for ``event``.

    Returns:
        True if at least one listener was registered.
    """
    callbacks = listeners.get(event, ())
    if not callbacks:
        return False
    payload = BuilderEvent(type=event, data=data)
    for callback in callbacks:
        try:
            callback(payload)
        except Exception as e:
            logger.warning(f"Listener for '{event}' failed: {e}", exc_info=True)
    return True
