"""Rewrite external ``<img>`` references in Evernote notes into attached resources."""

NAME = "HTML img Rectifier"
__version__ = "0.1"
USER_AGENT = f"{NAME}/{__version__}"

from .rectifier import Rectifier, RectifyStats, open_rectifier  # noqa: E402

__all__ = [
    "NAME",
    "USER_AGENT",
    "Rectifier",
    "RectifyStats",
    "open_rectifier",
    "__version__",
]
