from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional


def report_path(reports_root: str | Path, name: str, *, now: Optional[datetime] = None) -> Path:
    """Timestamped JSON path under reports_root, with name reduced to filename-safe characters."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    label = "".join(c if c.isalnum() or c in "-_" else "_" for c in name.strip()) or "report"
    return Path(reports_root) / f"{label}_{stamp}.json"


def write_report(path: str | Path, report: Mapping[str, Any]) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return out
