"""Termux:API backend.

Runs the ``termux-telephony-cellinfo`` and ``termux-location`` commands
on the device and decodes their JSON output. The Android permissions
are held by the Termux:API app.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
from typing import Any

from pycellwatch._constants import TERMUX_CELLINFO_COMMAND, TERMUX_LOCATION_COMMAND
from pycellwatch.config import CellWatchConfig
from pycellwatch.exceptions import LocationQueryError, TelephonyQueryError
from pycellwatch.models.location import LocationFix
from pycellwatch.telephony._base import coerce_cell_list, coerce_location, debug_payload

_logger = logging.getLogger(__name__)


def _command_path(config: CellWatchConfig, command: str) -> str:
    if config.termux_prefix:
        return os.path.join(config.termux_prefix, command)
    return command


async def run_json_command(
    argv: list[str],
    *,
    timeout: float,
    error_cls: type[TelephonyQueryError] = TelephonyQueryError,
) -> Any:
    """Run *argv* and decode its stdout as JSON.

    Empty output decodes to ``None``. Launch failures, timeouts,
    non-zero exit codes and invalid JSON raise *error_cls*.
    """
    source = " ".join(argv)
    _logger.debug("exec %s", source)

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise error_cls(f"Cannot run {argv[0]}: {exc}", source=source) from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except TimeoutError as exc:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        raise error_cls(f"{source} timed out after {timeout:.1f}s", source=source) from exc

    if proc.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        raise error_cls(
            f"{source} exited with code {proc.returncode}: {message[:200]}",
            source=source,
            returncode=proc.returncode,
        )

    text = stdout.decode("utf-8", errors="replace").strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise error_cls(f"{source} printed invalid JSON: {text[:200]}", source=source) from exc


class TermuxTelephonyService:
    """Cell info from ``termux-telephony-cellinfo``."""

    def __init__(self, config: CellWatchConfig) -> None:
        self._config = config
        self._argv = [_command_path(config, TERMUX_CELLINFO_COMMAND)]

    async def get_all_cell_info(self) -> list[Any]:
        decoded = await run_json_command(self._argv, timeout=self._config.query_timeout)
        debug_payload(_logger, "cell info", decoded, sensitive=self._config.log_sensitive)
        return coerce_cell_list(decoded, source=self._argv[0])


class TermuxLocationService:
    """A single fix from ``termux-location -r once``."""

    def __init__(self, config: CellWatchConfig) -> None:
        self._config = config
        self._argv = [
            _command_path(config, TERMUX_LOCATION_COMMAND),
            "-p",
            config.location_provider,
            "-r",
            "once",
        ]

    async def get_current_location(self) -> LocationFix:
        decoded = await run_json_command(
            self._argv,
            timeout=self._config.query_timeout,
            error_cls=LocationQueryError,
        )
        debug_payload(_logger, "location", decoded, sensitive=self._config.log_sensitive)
        return coerce_location(decoded, source=self._argv[0])
