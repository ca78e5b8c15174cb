"""Host and run metadata shown in the report's properties table."""

from __future__ import annotations

import getpass
import os
import socket
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

#: Environment variables with these prefixes are copied into the report.
ENV_PREFIXES = ("JMETER_", "REPORT_")


def _host() -> tuple[str, str]:
    try:
        name = socket.gethostname()
        return name, socket.gethostbyname(name)
    except OSError:
        return "localhost", "127.0.0.1"


def _user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def collect_environment(
    sources: Iterable[Union[str, Path]] = (),
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Collect the key/value pairs listed under "Report Properties".

    Args:
        sources: Source files of the run; the first one is reported.
        environ: Environment to scan (defaults to ``os.environ``).

    Returns:
        Ordered mapping: ``host.name``, ``host.address``, ``user.name``,
        ``report.source`` (when known), then matching environment variables
        sorted by name.
    """
    env = os.environ if environ is None else environ
    host_name, host_address = _host()
    result: Dict[str, str] = {
        "host.name": host_name,
        "host.address": host_address,
        "user.name": _user(),
    }
    first = next(iter(sources), None)
    if first is not None:
        result["report.source"] = str(Path(first).resolve())
    for key in sorted(env):
        if key.startswith(ENV_PREFIXES):
            result[key] = env[key]
    return result
