"""HTTP backend.

Reads cell info and location fixes as JSON from a companion app running
on the phone (reachable over Wi-Fi or an ``adb reverse`` port).
"""

from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp

from pycellwatch._constants import HTTP_CELLINFO_PATH, HTTP_LOCATION_PATH
from pycellwatch.config import CellWatchConfig
from pycellwatch.exceptions import CellWatchConfigError, LocationQueryError, TelephonyQueryError
from pycellwatch.models.location import LocationFix
from pycellwatch.telephony._base import coerce_cell_list, coerce_location, debug_payload

_logger = logging.getLogger(__name__)


class JsonEndpointClient:
    """GET JSON documents below the configured base URL."""

    def __init__(self, config: CellWatchConfig, http_session: aiohttp.ClientSession) -> None:
        if not config.base_url:
            raise CellWatchConfigError("base_url is required for the http backend")
        self._config = config
        self._http = http_session
        self._base_url = config.base_url.rstrip("/")

    async def get_json(
        self,
        path: str,
        *,
        error_cls: type[TelephonyQueryError] = TelephonyQueryError,
    ) -> Any:
        """Fetch *path* and decode the body; an empty body decodes to ``None``."""
        url = f"{self._base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self._config.query_timeout)

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers={"accept": "application/json"}, timeout=timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise error_cls(
                        f"HTTP {resp.status} from {path}: {text[:200]}",
                        source=url,
                        status_code=resp.status,
                    )
        except TelephonyQueryError:
            raise
        except TimeoutError as exc:
            raise error_cls(f"Request to {path} timed out", source=url) from exc
        except aiohttp.ClientError as exc:
            raise error_cls(f"Request to {path} failed: {exc}", source=url) from exc

        text = text.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise error_cls(f"Invalid JSON from {path}: {text[:200]}", source=url) from exc


class HttpTelephonyService:
    """Cell info from ``GET {base_url}/cellinfo``."""

    def __init__(self, config: CellWatchConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._client = JsonEndpointClient(config, http_session)

    async def get_all_cell_info(self) -> list[Any]:
        decoded = await self._client.get_json(HTTP_CELLINFO_PATH)
        debug_payload(_logger, "cell info", decoded, sensitive=self._config.log_sensitive)
        return coerce_cell_list(decoded, source=HTTP_CELLINFO_PATH)


class HttpLocationService:
    """A single fix from ``GET {base_url}/location``."""

    def __init__(self, config: CellWatchConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._client = JsonEndpointClient(config, http_session)

    async def get_current_location(self) -> LocationFix:
        decoded = await self._client.get_json(HTTP_LOCATION_PATH, error_cls=LocationQueryError)
        debug_payload(_logger, "location", decoded, sensitive=self._config.log_sensitive)
        return coerce_location(decoded, source=HTTP_LOCATION_PATH)
