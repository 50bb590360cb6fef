"""Entry points of the encoding exercises."""

from .runner import run

__all__ = ["run"]
