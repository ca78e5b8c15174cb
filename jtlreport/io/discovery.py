"""Locating JTL sources and choosing the adapter for each."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List, Union

from jtlreport.config import DEFAULT_CONFIG, ReportConfig
from jtlreport.io.csv_source import iter_csv_records
from jtlreport.io.xml_source import iter_xml_records
from jtlreport.model.record import Record

#: File suffixes picked up when a directory is given.
SOURCE_SUFFIXES = (".jtl", ".csv")


def discover_sources(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """Expand files and directories into the list of sources to read.

    Files are kept as given, in order. A directory contributes its ``*.jtl``
    and ``*.csv`` files (suffix match is case-insensitive, not recursive),
    sorted by name.

    Raises:
        FileNotFoundError: If a path does not exist.
        ValueError: If no source file results.
    """
    result: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            result.append(path)
        elif path.is_dir():
            result.extend(
                sorted(
                    child
                    for child in path.iterdir()
                    if child.is_file() and child.suffix.lower() in SOURCE_SUFFIXES
                )
            )
        else:
            raise FileNotFoundError(
                f"The following JMeter JTL file was not found: {path.resolve()}"
            )
    if not result:
        raise ValueError("No source files defined")
    return result


def is_csv(path: Union[str, Path]) -> bool:
    return Path(path).suffix.lower() == ".csv"


def open_records(
    path: Union[str, Path], config: ReportConfig = DEFAULT_CONFIG
) -> Iterator[Record]:
    """Return the lazy record stream of ``path``: CSV for ``.csv``, XML otherwise."""
    if is_csv(path):
        return iter_csv_records(path, config)
    return iter_xml_records(path, config)
