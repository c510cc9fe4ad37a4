import math
from dataclasses import asdict, dataclass, field

from django.utils import timezone


@dataclass
class ImportProgress:
    session_id: int
    total_rows: int
    rows_processed: int
    current_row: int
    percentage: int
    rows_per_second: float
    estimated_time_remaining: int
    current_operation: str
    status: str
    errors: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_progress(rows_processed, total_rows, started_at, current_operation="", now=None) -> dict:
    """Throughput figures derived from wall-clock time since ``started_at``."""
    now = now or timezone.now()
    percentage = round(rows_processed / total_rows * 100) if total_rows > 0 else 0
    elapsed = (now - started_at).total_seconds() if started_at else 0
    rows_per_second = rows_processed / elapsed if elapsed > 0 else 0
    remaining = max(total_rows - rows_processed, 0)
    eta = remaining / rows_per_second if rows_per_second > 0 else 0
    return {
        "total_rows": total_rows,
        "rows_processed": rows_processed,
        "current_row": min(rows_processed + 1, total_rows) if total_rows else 0,
        "percentage": min(percentage, 100),
        "rows_per_second": round(rows_per_second, 1),
        "estimated_time_remaining": round(eta),
        "current_operation": current_operation,
    }


def format_time_remaining(seconds) -> str:
    if seconds is None or (isinstance(seconds, float) and math.isnan(seconds)) or seconds < 0:
        return "Calculating..."
    if seconds < 60:
        return f"{round(seconds)}s"
    if seconds < 3600:
        minutes, secs = divmod(seconds, 60)
        return f"{int(minutes)}m {round(secs)}s"
    hours, rest = divmod(seconds, 3600)
    return f"{int(hours)}h {int(rest // 60)}m"


def build_progress(session, current_operation="", errors=None, now=None) -> ImportProgress:
    figures = calculate_progress(
        session.rows_processed,
        session.total_rows,
        session.started_at,
        current_operation,
        now=now,
    )
    return ImportProgress(session_id=session.pk, status=session.status, errors=list(errors or []), **figures)
