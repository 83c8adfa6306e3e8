"""
Network context for multinet namespace rewriting.

Everything the rewriter needs to know about the host installation is
carried on a NetworkContext instead of being read from ambient globals:

    - which network the current request belongs to
    - which network is the primary ("main") one
    - the root site of the current network
    - the shared storage handle that knows the base table prefix and
      how to derive a per-site prefix from it

Example:
    from multinet.namespace.context import NetworkContext, SharedStorage

    ctx = NetworkContext(
        network_id=2,
        root_site_id=2,
        storage=SharedStorage(base_prefix="wp_"),
    )
    ctx.is_main_network()   # False
    ctx.derived_prefix()    # "wp_2_"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from multinet.config.settings import settings


@runtime_checkable
class StorageHandle(Protocol):
    """Shared storage that all networks live in.

    Attributes:
        base_prefix: The unqualified table prefix shared by every network.
    """

    base_prefix: str

    def get_blog_prefix(self, blog_id: int) -> str:
        """Return the table prefix used by a given site."""
        ...


@dataclass
class SharedStorage:
    """Default storage handle for a shared multisite database.

    Sites 0 and 1 live directly under the base prefix; every other
    site ``n`` gets ``<base_prefix><n>_``.

    Attributes:
        base_prefix: The unqualified table prefix.
    """

    base_prefix: str = field(default_factory=lambda: settings.DB_BASE_PREFIX)

    def __post_init__(self) -> None:
        if not self.base_prefix:
            raise ValueError("Base prefix cannot be empty")

    def get_blog_prefix(self, blog_id: int) -> str:
        """Return the table prefix for a site.

        Args:
            blog_id: The site identifier.

        Returns:
            The site's table prefix.

        Raises:
            ValueError: If blog_id is negative.
        """
        blog_id = int(blog_id)
        if blog_id < 0:
            raise ValueError(f"Invalid site ID: {blog_id}")
        if blog_id in (0, 1):
            return self.base_prefix
        return f"{self.base_prefix}{blog_id}_"


@dataclass(frozen=True)
class NetworkContext:
    """The host state a rewrite decision depends on.

    Attributes:
        network_id: ID of the network serving the current request.
        root_site_id: ID of the root site of that network. Community data
            lives in the root site's tables, so its prefix is the one
            non-main networks are rewritten to.
        storage: Storage handle for base prefix lookup and prefix
            derivation. None when the host has no storage available.
        primary_network_id: ID of the main network. Defaults to the
            PRIMARY_NETWORK_ID setting.
    """

    network_id: int
    root_site_id: int
    storage: StorageHandle | None = None
    primary_network_id: int = field(
        default_factory=lambda: settings.PRIMARY_NETWORK_ID
    )

    def __post_init__(self) -> None:
        for name in ("network_id", "root_site_id", "primary_network_id"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ValueError(f"{name} must be positive, got {value}")

    @classmethod
    def from_settings(
        cls,
        network_id: int,
        root_site_id: int,
        base_prefix: str | None = None,
    ) -> "NetworkContext":
        """Build a context backed by SharedStorage.

        Args:
            network_id: The current network ID.
            root_site_id: The current network's root site ID.
            base_prefix: Override for the DB_BASE_PREFIX setting.

        Returns:
            A new NetworkContext.
        """
        storage = SharedStorage(base_prefix or settings.DB_BASE_PREFIX)
        return cls(network_id=network_id, root_site_id=root_site_id, storage=storage)

    def active_network_id(self) -> int:
        """Get the primary network ID."""
        return self.primary_network_id

    def is_main_network(self) -> bool:
        """Whether the current request is served by the main network."""
        return self.active_network_id() == self.network_id

    def root_collection_id(self) -> int:
        """Get the root site ID of the current network."""
        return self.root_site_id

    def storage_handle(self) -> StorageHandle | None:
        """Get the storage handle, if any."""
        return self.storage

    def base_prefix(self) -> str | None:
        """Get the shared base prefix, or None without storage."""
        if self.storage is None:
            return None
        return self.storage.base_prefix

    def derived_prefix(self) -> str | None:
        """Get the table prefix of the current network's root site.

        Returns:
            The derived prefix, or None without storage.
        """
        if self.storage is None:
            return None
        return self.storage.get_blog_prefix(self.root_collection_id())
