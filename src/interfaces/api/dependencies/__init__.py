"""DI helpers."""

from .container import get_container  # noqa: F401
