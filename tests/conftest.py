"""Shared fixtures: small JTL documents written to ``tmp_path``."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

import pytest

#: Epoch milliseconds of the first sample in the fixtures (2023-11-14 22:13:20 UTC).
BASE_TS = 1_700_000_000_000

SAMPLE_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<testResults version="1.2">
<httpSample t="120" ts="{BASE_TS}" s="true" lb="Home" rc="200" rm="OK" by="2048"/>
<httpSample t="340" ts="{BASE_TS + 1000}" s="false" lb="Login" rc="500" rm="Internal Server Error" by="512"/>
<sample t="900" ts="{BASE_TS + 2000}" s="false" lb="Checkout" rc="200" rm="OK">
  <httpSample t="450" ts="{BASE_TS + 2100}" s="true" lb="Cart" rc="200" rm="OK" by="1024">
    <assertionResult>
      <name>Response Assertion</name>
      <failure>false</failure>
      <error>false</error>
    </assertionResult>
  </httpSample>
  <assertionResult>
    <name>Total Assertion</name>
    <failure>true</failure>
    <error>false</error>
    <failureMessage>Too slow</failureMessage>
  </assertionResult>
</sample>
</testResults>
"""

SAMPLE_CSV = f"""timeStamp,elapsed,label,responseCode,responseMessage,threadName,dataType,success,bytes
{BASE_TS},120,Home,200,OK,TG 1-1,text,true,2048
{BASE_TS + 1000},340,Login,500,Internal Server Error,TG 1-1,text,false,512
{BASE_TS + 2000},15,Home,200,OK,TG 1-2,text,true,
"""


def ts(offset_ms: int = 0) -> datetime:
    """UTC datetime ``offset_ms`` after :data:`BASE_TS`."""
    return datetime.fromtimestamp(BASE_TS / 1000.0, tz=timezone.utc) + timedelta(
        milliseconds=offset_ms
    )


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing ``content`` to ``tmp_path / name``."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_jtl(write_file) -> Path:
    return write_file("results.jtl", SAMPLE_XML)


@pytest.fixture
def sample_csv(write_file) -> Path:
    return write_file("results.csv", SAMPLE_CSV)


@pytest.fixture
def at() -> Callable[[int], datetime]:
    """Timestamp factory: ``at(250)`` is 250 ms after the first fixture sample."""
    return ts
