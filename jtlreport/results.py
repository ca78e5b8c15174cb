"""JSON export of a run.

:func:`results_to_dict` returns a structure of JSON primitives only::

    {
      "sources": [{"path", "ok", "records", "failures", "elapsed", "error"}],
      "summary": {"requests", "failures", "success_rate", ...},
      "monitors": [{"label", "unit", "count", ..., "histogram": {...}}],
      "errors": {"<label>": [{"error_label", "error_code", ...}]}
    }

Monitors are ordered by unit (``ms.``, ``kb.``, ``Exception``,
``JMeter Errors``) and then label so the document is deterministic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from jtlreport.model.monitor import UNITS
from jtlreport.report.tables import summarize
from jtlreport.runner import RunResult
from jtlreport.utils.output_paths import ensure_parent_dir


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "item"):
        # numpy scalars coming out of pandas
        return value.item()
    return value


def results_to_dict(run: RunResult) -> Dict[str, Any]:
    """Build the JSON-safe results document of ``run``."""
    registry = run.engine.registry
    unit_order = {unit: i for i, unit in enumerate(UNITS)}
    monitors = sorted(
        registry.all(), key=lambda m: (unit_order.get(m.unit, len(UNITS)), m.unit, m.label)
    )
    return {
        "sources": [s.to_dict() for s in run.sources],
        "summary": _json_safe(summarize(registry)),
        "monitors": [m.to_dict() for m in monitors],
        "errors": run.engine.errors.to_dict(),
    }


def results_to_json(run: RunResult, indent: int = 2) -> str:
    return json.dumps(results_to_dict(run), indent=indent, default=str)


def write_results(run: RunResult, path: Union[str, Path]) -> Path:
    """Write the results document to ``path``, creating parent directories."""
    target = Path(path)
    ensure_parent_dir(target)
    target.write_text(results_to_json(run), encoding="utf-8")
    return target
