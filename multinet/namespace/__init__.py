"""
Per-network namespacing for multinet.

Lets several networks share one community database by qualifying the
table prefix and the community user-meta keys with the network they
belong to. The main network keeps the unmodified names.

Key Components:
    - NetworkContext: Host state a rewrite decision depends on
    - SharedStorage: Default base-prefix / site-prefix storage handle
    - NamespaceRewriter: Resolves table prefixes and user-meta keys
    - NetworkScope: Binds a network and a fresh rewriter to a request
    - FilterRegistry: Named filter hooks the rewriter can attach to
    - NetworkMiddleware: ASGI middleware entering a NetworkScope per request

Example:
    from multinet.namespace import (
        NetworkContext, NetworkScope, FilterRegistry,
        TABLE_PREFIX_FILTER,
    )

    registry = FilterRegistry()
    with NetworkScope(NetworkContext.from_settings(2, 2)) as scope:
        scope.rewriter.register(registry)
        registry.apply_filters(TABLE_PREFIX_FILTER, "wp_")  # "wp_2_"
"""

from multinet.namespace.context import (
    NetworkContext,
    SharedStorage,
    StorageHandle,
)
from multinet.namespace.hooks import (
    FILTER_HOOKS,
    TABLE_PREFIX_FILTER,
    USER_META_KEY_FILTER,
    FilterHook,
    FilterRegistry,
)
from multinet.namespace.scope import (
    NetworkScope,
    clear_current_network,
    get_current_network,
    get_current_rewriter,
    require_network,
    set_current_network,
)
from multinet.namespace.rewriter import (
    USER_META_KEYS,
    NamespaceRewriter,
)
from multinet.namespace.middleware import NetworkMiddleware

__all__ = [
    # Context
    "NetworkContext",
    "SharedStorage",
    "StorageHandle",
    # Hooks
    "FILTER_HOOKS",
    "TABLE_PREFIX_FILTER",
    "USER_META_KEY_FILTER",
    "FilterHook",
    "FilterRegistry",
    # Scope
    "NetworkScope",
    "clear_current_network",
    "get_current_network",
    "get_current_rewriter",
    "require_network",
    "set_current_network",
    # Rewriter
    "USER_META_KEYS",
    "NamespaceRewriter",
    # Middleware
    "NetworkMiddleware",
]
