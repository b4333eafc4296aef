"""External search command support."""

from .runner import SearchRunner, build_search_command

__all__ = ["SearchRunner", "build_search_command"]
