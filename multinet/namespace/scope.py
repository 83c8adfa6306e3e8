"""
Request-scoped network binding for multinet.

Uses Python's contextvars so the network serving a request can be bound
once at request entry and picked up by any rewriter without being passed
around explicitly. Bindings are isolated per thread and per asyncio task.

Example:
    from multinet.namespace.scope import NetworkScope, get_current_rewriter

    with NetworkScope(NetworkContext.from_settings(2, 2)) as scope:
        scope.rewriter.resolve_prefix("wp_")          # "wp_2_"
        get_current_rewriter() is scope.rewriter      # True
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any
import logging

from multinet.namespace.context import NetworkContext

if TYPE_CHECKING:
    from multinet.namespace.rewriter import NamespaceRewriter

logger = logging.getLogger(__name__)


# Context variable for the network serving the current request
_current_network: ContextVar[NetworkContext | None] = ContextVar(
    'current_network', default=None
)

# Context variable for the rewriter owned by the current scope
_current_rewriter: ContextVar["NamespaceRewriter | None"] = ContextVar(
    'current_rewriter', default=None
)


def get_current_network() -> NetworkContext | None:
    """Get the network context bound to the current execution context.

    Returns:
        The bound NetworkContext, or None if not set.
    """
    return _current_network.get()


def set_current_network(context: NetworkContext | None) -> Token[NetworkContext | None]:
    """Bind a network context to the current execution context.

    Args:
        context: The context to bind, or None to clear.

    Returns:
        A Token that can be used to restore the previous binding.
    """
    logger.debug(f"Setting current network to: {context.network_id if context else None}")
    return _current_network.set(context)


def clear_current_network() -> None:
    """Clear the network binding.

    Equivalent to set_current_network(None).
    """
    _current_network.set(None)


def require_network() -> NetworkContext:
    """Get the bound network context or raise an error.

    Returns:
        The current NetworkContext.

    Raises:
        RuntimeError: If no network is bound.
    """
    context = get_current_network()
    if context is None:
        raise RuntimeError(
            "No network bound to the current context. Enter a NetworkScope "
            "before resolving network-scoped names."
        )
    return context


def get_current_rewriter() -> "NamespaceRewriter | None":
    """Get the rewriter owned by the innermost active NetworkScope."""
    return _current_rewriter.get()


class NetworkScope:
    """Context manager binding a network for the duration of a request.

    On entry the network context is bound and a fresh NamespaceRewriter
    is created, so cached meta keys never outlive the scope. The previous
    binding is restored on exit, which makes nested scopes safe.

    Example:
        with NetworkScope(ctx) as scope:
            key = scope.rewriter.resolve_meta_key("last_activity")

        async with NetworkScope(ctx):
            await handle_request()
    """

    def __init__(self, context: NetworkContext):
        """Initialize the scope.

        Args:
            context: The network context to bind.
        """
        self._context = context
        self._rewriter: NamespaceRewriter | None = None
        self._token: Token[NetworkContext | None] | None = None
        self._rewriter_token: Token[Any] | None = None

    @property
    def context(self) -> NetworkContext:
        """Get the network context for this scope."""
        return self._context

    @property
    def rewriter(self) -> "NamespaceRewriter":
        """Get the rewriter for this scope.

        Raises:
            RuntimeError: If the scope has not been entered.
        """
        if self._rewriter is None:
            raise RuntimeError("NetworkScope has not been entered")
        return self._rewriter

    def __enter__(self) -> "NetworkScope":
        """Enter the network scope (sync).

        Binds the network context and a fresh rewriter, storing the
        tokens for cleanup.

        Returns:
            Self for accessing the scope rewriter.
        """
        from multinet.namespace.rewriter import NamespaceRewriter  # avoid cycle

        self._rewriter = NamespaceRewriter(self._context)
        self._token = _current_network.set(self._context)
        self._rewriter_token = _current_rewriter.set(self._rewriter)
        logger.debug(f"Entered network scope: {self._context.network_id}")
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any | None,
    ) -> None:
        """Exit the network scope (sync).

        Restores the previous network and rewriter bindings.
        """
        if self._rewriter_token is not None:
            _current_rewriter.reset(self._rewriter_token)
            self._rewriter_token = None
        if self._token is not None:
            _current_network.reset(self._token)
            self._token = None
        self._rewriter = None
        logger.debug(f"Exited network scope: {self._context.network_id}")

    async def __aenter__(self) -> "NetworkScope":
        """Enter the network scope (async).

        Returns:
            Self for accessing the scope rewriter.
        """
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any | None,
    ) -> None:
        """Exit the network scope (async)."""
        self.__exit__(exc_type, exc_val, exc_tb)
