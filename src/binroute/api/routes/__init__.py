"""Route group exports."""

from . import bins, driver, health

__all__ = ["bins", "driver", "health"]
