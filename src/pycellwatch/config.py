"""Runtime configuration for pycellwatch."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pycellwatch._constants import DEFAULT_QUERY_TIMEOUT
from pycellwatch.exceptions import CellWatchConfigError
from pycellwatch.permissions import PermissionKind

BACKEND_TERMUX = "termux"
BACKEND_HTTP = "http"
BACKENDS: frozenset[str] = frozenset({BACKEND_TERMUX, BACKEND_HTTP})

LOCATION_PROVIDERS: frozenset[str] = frozenset({"gps", "network", "passive"})


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def parse_permission_list(value: str) -> frozenset[PermissionKind]:
    """Parse a comma separated list of permission names.

    Accepts the full Android name (``android.permission.READ_PHONE_STATE``)
    or the bare constant (``READ_PHONE_STATE``). ``all`` grants every kind
    and an empty string grants none.
    """
    text = value.strip()
    if not text:
        return frozenset()
    if text.lower() == "all":
        return frozenset(PermissionKind)

    kinds: set[PermissionKind] = set()
    for item in text.split(","):
        name = item.strip()
        if not name:
            continue
        try:
            kinds.add(PermissionKind.parse(name))
        except ValueError as exc:
            raise CellWatchConfigError(f"Unknown permission: {name!r}") from exc
    return frozenset(kinds)


@dataclasses.dataclass(frozen=True)
class CellWatchConfig:
    """Watcher configuration.

    Parameters
    ----------
    backend : str
        Platform service backend, ``"termux"`` (Termux:API commands on
        the device) or ``"http"`` (JSON endpoints served by a companion
        app).
    base_url : str or None
        Root URL of the companion app. Required for the HTTP backend.
    query_timeout : float
        Seconds a single telephony or location query may take.
    location_enabled : bool
        Run the location poller next to the cell-info poller.
    location_provider : str
        Termux location provider (``gps``, ``network`` or ``passive``).
    granted_permissions : frozenset of PermissionKind
        Permissions the static permission provider reports as granted.
        On Termux and HTTP deployments the OS grants live on the phone,
        so all kinds are granted by default.
    grant_on_request : bool
        Whether the static permission provider accepts prompts for
        permissions not already granted.
    termux_prefix : str
        Directory holding the Termux:API executables. Empty means look
        them up on ``PATH``.
    log_sensitive : bool
        Log coordinates and device identifiers unredacted at DEBUG.
    """

    backend: str = BACKEND_TERMUX
    base_url: str | None = None
    query_timeout: float = DEFAULT_QUERY_TIMEOUT
    location_enabled: bool = True
    location_provider: str = "gps"
    granted_permissions: frozenset[PermissionKind] = frozenset(PermissionKind)
    grant_on_request: bool = False
    termux_prefix: str = ""
    log_sensitive: bool = False

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise CellWatchConfigError(f"Unknown backend {self.backend!r}; expected one of {sorted(BACKENDS)}")
        if self.backend == BACKEND_HTTP and not self.base_url:
            raise CellWatchConfigError("base_url is required for the http backend")
        if self.location_provider not in LOCATION_PROVIDERS:
            raise CellWatchConfigError(f"Unknown location provider {self.location_provider!r}")
        if self.query_timeout <= 0:
            raise CellWatchConfigError("query_timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> CellWatchConfig:
        """Create configuration from environment variables.

        Reads the optional ``CELLWATCH_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        CellWatchConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CELLWATCH_BACKEND": "backend",
            "CELLWATCH_BASE_URL": "base_url",
            "CELLWATCH_LOCATION_PROVIDER": "location_provider",
            "CELLWATCH_TERMUX_PREFIX": "termux_prefix",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()
        for field_name in ("backend", "location_provider"):
            if field_name in config_kwargs:
                config_kwargs[field_name] = config_kwargs[field_name].lower()

        timeout_env = env.get("CELLWATCH_QUERY_TIMEOUT")
        if timeout_env is not None and "query_timeout" not in overrides:
            try:
                config_kwargs["query_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise CellWatchConfigError(f"CELLWATCH_QUERY_TIMEOUT is not a number: {timeout_env!r}") from exc

        permissions_env = env.get("CELLWATCH_GRANTED_PERMISSIONS")
        if permissions_env is not None and "granted_permissions" not in overrides:
            config_kwargs["granted_permissions"] = parse_permission_list(permissions_env)

        if "location_enabled" not in overrides:
            config_kwargs["location_enabled"] = _env_bool(env.get("CELLWATCH_LOCATION_ENABLED"), True)

        if "grant_on_request" not in overrides:
            config_kwargs["grant_on_request"] = _env_bool(env.get("CELLWATCH_GRANT_ON_REQUEST"), False)

        if "log_sensitive" not in overrides:
            config_kwargs["log_sensitive"] = _env_bool(env.get("CELLWATCH_LOG_SENSITIVE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
