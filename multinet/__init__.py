"""multinet -- per-network community data namespacing for shared databases."""

__version__ = "0.2.0"
