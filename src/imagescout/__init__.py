"""Container image package and shadow-runtime inspection."""

from __future__ import annotations

__version__ = "0.1.0"
