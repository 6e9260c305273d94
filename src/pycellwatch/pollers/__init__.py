"""Poll loops feeding the state stores."""

from pycellwatch.pollers.cell import DEFAULT_TECHNOLOGIES, CellInfoPoller
from pycellwatch.pollers.location import LocationPoller

__all__ = ["DEFAULT_TECHNOLOGIES", "CellInfoPoller", "LocationPoller"]
