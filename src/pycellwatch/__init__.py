"""pycellwatch - Async poller for cell-tower identity and device location."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycellwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from pycellwatch.config import CellWatchConfig
from pycellwatch.exceptions import (
    CellWatchConfigError,
    CellWatchError,
    LocationQueryError,
    MalformedRecordError,
    PermissionDeniedError,
    TelephonyQueryError,
)
from pycellwatch.models import (
    CellInfo,
    CellRecord,
    CellTechnology,
    LocationFix,
    LteCellInfo,
    parse_cell_info,
)
from pycellwatch.permissions import (
    PermissionGate,
    PermissionKind,
    PermissionProvider,
    PermissionResult,
    StaticPermissionProvider,
)
from pycellwatch.pollers import CellInfoPoller, LocationPoller
from pycellwatch.state import CellInfoStore, LocationStore, ObservableStore
from pycellwatch.watch import CellWatch

__all__ = [
    "__version__",
    "CellInfo",
    "CellInfoPoller",
    "CellInfoStore",
    "CellRecord",
    "CellTechnology",
    "CellWatch",
    "CellWatchConfig",
    "CellWatchConfigError",
    "CellWatchError",
    "LocationFix",
    "LocationPoller",
    "LocationQueryError",
    "LocationStore",
    "LteCellInfo",
    "MalformedRecordError",
    "ObservableStore",
    "PermissionDeniedError",
    "PermissionGate",
    "PermissionKind",
    "PermissionProvider",
    "PermissionResult",
    "StaticPermissionProvider",
    "TelephonyQueryError",
    "parse_cell_info",
]
