from dataclasses import dataclass, field


@dataclass
class VenueMetrics:
    """Track scraping metrics for each venue."""
    venue_id: str
    event_count: int = 0
    attempts: int = 0
    exit_code: int = 0
    error_kind: str = None
    error_messages: list = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def success(self):
        return self.exit_code == 0


def format_summary_lines(metrics):
    """Fixed-width summary table of a run, one row per venue plus a total."""
    lines = [
        "=" * 64,
        "VENUE SUMMARY",
        "=" * 64,
        f"{'Venue':<24} {'Events':>7} {'Exit':>5} {'Kind':>13} {'Time':>9}",
        "-" * 64,
    ]
    for m in sorted(metrics, key=lambda m: m.venue_id):
        lines.append(
            f"{m.venue_id:<24} {m.event_count:>7} {m.exit_code:>5} {m.error_kind or '-':>13} {m.duration_ms:>7.0f}ms"
        )
    lines.append("-" * 64)
    total_events = sum(m.event_count for m in metrics)
    failed = sum(1 for m in metrics if not m.success)
    total_time = sum(m.duration_ms for m in metrics)
    lines.append(f"{'TOTAL':<24} {total_events:>7} {failed:>5} {'':>13} {total_time:>7.0f}ms")
    lines.append("=" * 64)
    return lines
