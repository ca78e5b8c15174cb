"""Sequential aggregation of several JTL sources.

Each source is folded into its own :class:`AggregationEngine`. When the
source is read to the end, that engine is merged into the run-level engine;
when reading fails, everything aggregated from that source is discarded and
the failure is recorded. By default the run stops at the first failing
source; ``continue_on_error`` moves on to the next one instead.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from pathlib import Path
from time import perf_counter
from typing import Iterable, List, Optional, Union

from jtlreport.config import DEFAULT_CONFIG, ReportConfig
from jtlreport.engine import AggregationEngine
from jtlreport.io.discovery import discover_sources, open_records
from jtlreport.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SourceOutcome:
    """How reading one source went.

    Attributes:
        path: The source file.
        ok: True when the source was read completely and merged.
        records: Records aggregated from the source (0 when failed).
        failures: Failed records among them.
        elapsed: Wall-clock seconds spent on the source.
        error: Error description when ``ok`` is False.
    """

    path: Path
    ok: bool
    records: int = 0
    failures: int = 0
    elapsed: float = 0.0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "path": str(self.path),
            "ok": self.ok,
            "records": self.records,
            "failures": self.failures,
            "elapsed": self.elapsed,
            "error": self.error,
        }


@dataclass
class RunResult:
    """Run-level aggregation plus per-source outcomes."""

    engine: AggregationEngine
    sources: List[SourceOutcome] = field(default_factory=list)

    @property
    def processed_sources(self) -> List[SourceOutcome]:
        return [s for s in self.sources if s.ok]

    @property
    def failed_sources(self) -> List[SourceOutcome]:
        return [s for s in self.sources if not s.ok]

    @property
    def ok(self) -> bool:
        return not self.failed_sources


def aggregate_source(
    path: Union[str, Path], config: ReportConfig = DEFAULT_CONFIG
) -> AggregationEngine:
    """Aggregate a single source into a fresh engine.

    Errors from the adapter propagate; the partially filled engine is never
    returned.
    """
    engine = AggregationEngine(error_capacity=config.error_cache_capacity)
    engine.ingest_all(open_records(path, config))
    return engine


def aggregate_sources(
    paths: Iterable[Union[str, Path]],
    config: ReportConfig = DEFAULT_CONFIG,
    continue_on_error: Optional[bool] = None,
) -> RunResult:
    """Discover and aggregate sources one after another.

    Args:
        paths: Files and/or directories (see :func:`discover_sources`).
        config: Run configuration.
        continue_on_error: Overrides ``config.continue_on_error`` when given.

    Returns:
        The run result; inspect ``failed_sources`` for sources that were
        abandoned.

    Raises:
        FileNotFoundError: A given path does not exist.
        ValueError: No source file was found.
    """
    keep_going = config.continue_on_error if continue_on_error is None else continue_on_error
    sources = discover_sources(paths)
    result = RunResult(engine=AggregationEngine(error_capacity=config.error_cache_capacity))

    for index, path in enumerate(sources, start=1):
        logger.info(f"Reading source {index}/{len(sources)}: {path}")
        start = perf_counter()
        try:
            engine = aggregate_source(path, config)
        except (ValueError, OSError, csv.Error) as e:
            elapsed = perf_counter() - start
            logger.error(f"Failed to read {path}: {type(e).__name__}: {e}")
            result.sources.append(
                SourceOutcome(
                    path=path,
                    ok=False,
                    elapsed=elapsed,
                    error=f"{type(e).__name__}: {e}",
                )
            )
            if not keep_going:
                skipped = len(sources) - index
                if skipped:
                    logger.warning(f"Stopping after failure; {skipped} source(s) not read")
                break
            continue

        elapsed = perf_counter() - start
        result.engine.merge(engine)
        result.sources.append(
            SourceOutcome(
                path=path,
                ok=True,
                records=engine.record_count,
                failures=engine.failure_count,
                elapsed=elapsed,
            )
        )
        logger.info(
            f"Read {engine.record_count:,} records ({engine.failure_count:,} failed) "
            f"from {path} in {elapsed:.2f} s"
        )

    return result
