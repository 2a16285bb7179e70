# treasury_orchestrator/audit_exporter.py
"""CSV exporter for the treasury audit log."""
from __future__ import annotations

import csv
import io
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Iterable, List, Optional

from common.datetime import format_local_time, parse_iso8601, to_rfc3339_z
from treasury_observability import metrics as met

HEADER = ("timestamp", "time_local", "event", "details")

_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuditExportRow:
    ts: datetime
    time_local: str
    event: str
    details: str


def _row(event: Any, tz: Optional[tzinfo]) -> List[str]:
    return [
        to_rfc3339_z(event.ts),
        format_local_time(event.ts, tz),
        event.kind,
        event.details(),
    ]


def audit_rows(events: Iterable[Any], *, tz: Optional[tzinfo] = None) -> List[List[str]]:
    """Header row plus one row per event, in the order given (log order)."""
    rows = [list(HEADER)]
    rows.extend(_row(e, tz) for e in events)
    return rows


def render_audit_csv(events: Iterable[Any], *, tz: Optional[tzinfo] = None) -> str:
    """Every field double-quoted, embedded quotes doubled, ``\\n`` line ends."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    rows = audit_rows(events, tz=tz)
    writer.writerows(rows)
    met.audit_export_rows_total.inc(len(rows) - 1)
    return buf.getvalue()


def parse_audit_csv(text: str) -> List[AuditExportRow]:
    """Read an export back. Raises ValueError if the header is not ours."""
    reader = csv.reader(io.StringIO(text))
    try:
        header = next(reader)
    except StopIteration:
        raise ValueError("empty audit export")
    if tuple(header) != HEADER:
        raise ValueError(f"unexpected audit export header: {header}")
    out: List[AuditExportRow] = []
    for line in reader:
        if not line:
            continue
        ts, time_local, event, details = line
        out.append(AuditExportRow(parse_iso8601(ts), time_local, event, details))
    return out


def export_filename(now: Optional[datetime] = None) -> str:
    ts_safe = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")  # Windows-safe (no ':')
    return f"treasury-audit-{ts_safe}.csv"


def write_audit_csv(
    events: Iterable[Any],
    directory: Path,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Path:
    """Write the CSV export atomically (temp file + rename) into *directory*."""
    payload = render_audit_csv(events, tz=tz)
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    tmp_fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
    path_tmp = Path(tmp_path)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(payload)
        final_path = directory / export_filename(now)
        path_tmp.replace(final_path)
    except Exception:
        path_tmp.unlink(missing_ok=True)
        raise
    _log.info("audit_export_written", extra={"path": str(final_path)})
    return final_path
