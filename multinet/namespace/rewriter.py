"""
Namespace rewriting for multinet.

NamespaceRewriter intercepts two values that the community platform
normally treats as global and qualifies them with the current network:

    - the database table prefix
    - a fixed set of per-user metadata keys

The main network always keeps the unmodified names. Every other network
has the base prefix swapped for its root site's prefix, and its
community user-meta keys prefixed the same way, so that networks sharing
one database never read or write each other's community data.

Example:
    ctx = NetworkContext.from_settings(network_id=5, root_site_id=5)
    rewriter = NamespaceRewriter(ctx)

    rewriter.resolve_prefix("wp_")               # "wp_5_"
    rewriter.resolve_meta_key("last_activity")   # "wp_5_last_activity"
    rewriter.resolve_meta_key("nickname")        # "nickname"
"""

from __future__ import annotations

import logging

from multinet.namespace.context import NetworkContext
from multinet.namespace.hooks import (
    FilterRegistry,
    TABLE_PREFIX_FILTER,
    USER_META_KEY_FILTER,
)
from multinet.namespace.scope import get_current_network

logger = logging.getLogger(__name__)


# Community user-meta keys that must not be shared across networks
USER_META_KEYS: tuple[str, ...] = (
    "last_activity",
    "bp_new_mentions",
    "bp_new_mention_count",
    "bp_favorite_activities",
    "bp_latest_update",
    "total_friend_count",
    "total_group_count",
    "notification_activity_new_mention",
    "notification_activity_new_reply",
    "notification_groups_group_updated",
    "notification_groups_membership_request",
    "notification_membership_request_completed",
    "notification_groups_admin_promotion",
    "notification_groups_invite",
    "notification_messages_new_message",
    "notification_messages_new_notice",
    "closed_notices",
    "profile_last_updated",
)


class NamespaceRewriter:
    """Rewrites table prefixes and user-meta keys per network.

    An instance is meant to live for one request. Qualified meta keys
    are computed on first use and cached for the life of the instance.
    The cache belongs to one network: resolving under a different
    context starts a fresh cache.

    When no network context can be found, or the context has no storage
    handle, both resolve methods return their input unchanged.

    Attributes:
        _context: Context bound at construction, if any.
        _meta_keys: Registry key -> qualified key, None until computed.
        _cache_owner: Context the cached keys were computed for.
    """

    def __init__(self, context: NetworkContext | None = None):
        """Initialize the rewriter.

        Args:
            context: Network context to use. When omitted, the context
                bound to the current scope is looked up on every call.
        """
        self._context = context
        self._meta_keys: dict[str, str | None] = dict.fromkeys(USER_META_KEYS)
        self._cache_owner: NetworkContext | None = None
        self._warned = False

    @property
    def context(self) -> NetworkContext | None:
        """Get the context bound at construction."""
        return self._context

    def _resolve_context(self, context: NetworkContext | None) -> NetworkContext | None:
        if context is not None:
            return context
        if self._context is not None:
            return self._context
        return get_current_network()

    def _degrade(self, reason: str) -> None:
        if not self._warned:
            logger.warning(f"Namespace rewriting disabled: {reason}")
            self._warned = True

    def is_registered_key(self, key: str) -> bool:
        """Check whether a user-meta key is namespaced per network."""
        return key in self._meta_keys

    def resolve_prefix(
        self,
        prefix: str = "",
        context: NetworkContext | None = None,
    ) -> str:
        """Resolve the table prefix for the current network.

        Only the base prefix is rewritten, and only off the main network.
        Any other prefix has already been qualified and is returned as is.

        Args:
            prefix: The candidate table prefix.
            context: Explicit context for this call.

        Returns:
            The effective table prefix.
        """
        ctx = self._resolve_context(context)
        if ctx is None:
            self._degrade("no network context")
            return prefix

        if ctx.is_main_network():
            return prefix

        base = ctx.base_prefix()
        if base is None:
            self._degrade("no storage handle")
            return prefix

        if prefix != base:
            return prefix

        derived = ctx.derived_prefix()
        logger.debug(f"Rewrote table prefix {prefix!r} -> {derived!r} for network {ctx.network_id}")
        return derived

    def resolve_meta_key(
        self,
        key: str = "",
        context: NetworkContext | None = None,
    ) -> str:
        """Resolve a user-meta key for the current network.

        Args:
            key: The candidate meta key.
            context: Explicit context for this call.

        Returns:
            The key prefixed with the network's table prefix if it is a
            community key and the network is not the main one, else the
            key unchanged.
        """
        if key not in self._meta_keys:
            return key

        ctx = self._resolve_context(context)
        if ctx is None:
            self._degrade("no network context")
            return key

        if ctx.is_main_network():
            return key

        if ctx != self._cache_owner:
            self._meta_keys = dict.fromkeys(self._meta_keys)
            self._cache_owner = ctx

        cached = self._meta_keys[key]
        if cached is None:
            derived = ctx.derived_prefix()
            if derived is None:
                self._degrade("no storage handle")
                return key
            cached = f"{derived}{key}"
            self._meta_keys[key] = cached
            logger.debug(f"Qualified meta key {key!r} -> {cached!r}")

        return cached

    def register(self, registry: FilterRegistry) -> "NamespaceRewriter":
        """Attach both resolvers to their filter hooks.

        Args:
            registry: The registry to attach to.

        Returns:
            Self for method chaining.
        """
        registry.add_filter(TABLE_PREFIX_FILTER, self.resolve_prefix)
        registry.add_filter(USER_META_KEY_FILTER, self.resolve_meta_key)
        return self

    def unregister(self, registry: FilterRegistry) -> None:
        """Detach both resolvers from a registry."""
        registry.remove_filter(TABLE_PREFIX_FILTER, self.resolve_prefix)
        registry.remove_filter(USER_META_KEY_FILTER, self.resolve_meta_key)

    def __repr__(self) -> str:
        cached = sum(1 for v in self._meta_keys.values() if v is not None)
        network = self._context.network_id if self._context else None
        return f"<NamespaceRewriter network={network} cached_keys={cached}>"
