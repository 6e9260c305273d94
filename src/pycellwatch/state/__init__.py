"""State/store layer.

Stores are the single source of truth between the pollers that write
collection results and the presentation code that renders them.
"""

from pycellwatch.state.store import CellInfoStore, LocationStore, ObservableStore

__all__ = ["CellInfoStore", "LocationStore", "ObservableStore"]
