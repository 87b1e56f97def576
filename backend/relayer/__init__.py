"""Cross-layer message finalization relayer."""

__version__ = "0.1.0"
