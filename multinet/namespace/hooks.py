"""
Filter hooks for multinet.

A minimal filter dispatcher for applications that integrate the
rewriter through named extension points rather than direct calls.
Each filter receives a value, returns a (possibly modified) value, and
the result is passed on to the next filter registered on the same hook.

Example:
    registry = FilterRegistry()
    registry.add_filter(TABLE_PREFIX_FILTER, lambda prefix: prefix.upper())
    registry.apply_filters(TABLE_PREFIX_FILTER, "wp_")  # "WP_"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable
import logging

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10


@dataclass
class FilterHook:
    """Describes a named filter point.

    Attributes:
        name: Hook identifier.
        description: What is being filtered.
        parameters: Parameters passed to each filter.
    """

    name: str
    description: str
    parameters: list[str] = field(default_factory=list)


TABLE_PREFIX_FILTER = "bp_core_get_table_prefix"
USER_META_KEY_FILTER = "bp_get_user_meta_key"

# Filter points the rewriter attaches to
FILTER_HOOKS = [
    FilterHook(
        name=TABLE_PREFIX_FILTER,
        description="Called when the community table prefix is resolved",
        parameters=["prefix"],
    ),
    FilterHook(
        name=USER_META_KEY_FILTER,
        description="Called when a community user-meta key is resolved",
        parameters=["key"],
    ),
]


@dataclass(order=True)
class _Registration:
    priority: int
    sequence: int
    callback: Callable[..., Any] = field(compare=False)


class FilterRegistry:
    """Registry of value filters keyed by hook name.

    Filters run in ascending priority; filters sharing a priority run
    in the order they were added.

    Attributes:
        _filters: Registered filters by hook name.
    """

    def __init__(self) -> None:
        self._filters: dict[str, list[_Registration]] = {}
        self._sequence = count()

    def add_filter(
        self,
        hook_name: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        """Register a filter.

        Args:
            hook_name: The hook to register for.
            callback: Called with the current value plus any extra args.
            priority: Lower runs earlier.
        """
        if not callable(callback):
            raise TypeError(f"Filter for {hook_name} must be callable")
        entries = self._filters.setdefault(hook_name, [])
        entries.append(_Registration(priority, next(self._sequence), callback))
        entries.sort()
        logger.debug(f"Added filter {callback!r} to {hook_name} at priority {priority}")

    def remove_filter(
        self,
        hook_name: str,
        callback: Callable[..., Any],
        priority: int | None = None,
    ) -> bool:
        """Remove a filter.

        Args:
            hook_name: The hook it was registered on.
            callback: The callback to remove.
            priority: Only remove a registration at this priority.

        Returns:
            True if at least one registration was removed.
        """
        entries = self._filters.get(hook_name, [])
        kept = [
            e for e in entries
            if not (
                e.callback == callback
                and (priority is None or e.priority == priority)
            )
        ]
        removed = len(kept) != len(entries)
        if kept:
            self._filters[hook_name] = kept
        else:
            self._filters.pop(hook_name, None)
        return removed

    def has_filter(
        self,
        hook_name: str,
        callback: Callable[..., Any] | None = None,
    ) -> bool:
        """Check whether a hook has filters, or a specific filter."""
        entries = self._filters.get(hook_name, [])
        if callback is None:
            return bool(entries)
        return any(e.callback == callback for e in entries)

    def get_filters(self, hook_name: str) -> list[Callable[..., Any]]:
        """Get the filters for a hook in execution order."""
        return [e.callback for e in self._filters.get(hook_name, [])]

    def apply_filters(self, hook_name: str, value: Any, *args: Any) -> Any:
        """Run a value through every filter registered on a hook.

        Args:
            hook_name: The hook to apply.
            value: The initial value.
            *args: Extra arguments passed to every filter.

        Returns:
            The value returned by the last filter, or the initial
            value if no filters are registered.
        """
        for callback in self.get_filters(hook_name):
            value = callback(value, *args)
        return value

    def __repr__(self) -> str:
        total = sum(len(v) for v in self._filters.values())
        return f"<FilterRegistry hooks={len(self._filters)} filters={total}>"
