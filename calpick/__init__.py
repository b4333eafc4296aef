"""calpick - interactive keyboard-driven calendar date picker for the terminal."""

__version__ = "1.0.0"
__author__ = "calpick developers"
__description__ = "Interactive terminal calendar that prints the chosen date"

# Package metadata
__all__ = [
    "__author__",
    "__description__",
    "__version__",
]
