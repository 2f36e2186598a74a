"""
Per-cycle summary reporting.

Aggregates one cycle's anomalies into a compact summary. Summaries are only
emitted when the run is verbose or is killing sessions; quiet, read-only
runs report the individual anomalies and nothing else.
"""

import logging
from typing import Any, Optional, Sequence

import polars as pl

from ..models.config import RunConfig
from ..models.results import CycleSummary, Verdict
from .serializer import RecordSerializer

logger = logging.getLogger(__name__)


class SummaryReporter:
    """Builds and conditionally emits per-cycle summaries."""

    def __init__(self, run_config: RunConfig, serializer: RecordSerializer):
        self.run_config = run_config
        self.serializer = serializer

    @property
    def enabled(self) -> bool:
        return self.run_config.verbose or self.run_config.kill

    def summarize(self, anomalies: Sequence[Verdict]) -> Optional[CycleSummary]:
        """
        Aggregate the anomalies of one cycle.

        Returns:
            The summary, or None when the cycle found no anomalies
        """
        if not anomalies:
            return None

        df = pl.DataFrame(
            {
                "duration": [v.duration for v in anomalies],
                "rows_modified": [v.rows_modified for v in anomalies],
                "statement": [v.statement for v in anomalies],
            },
            schema={"duration": pl.Int64, "rows_modified": pl.Int64, "statement": pl.Utf8},
        )

        longest = df.row(df["duration"].arg_max(), named=True)

        return CycleSummary(
            count=df.height,
            max_duration=int(df["duration"].max()),
            max_rows_modified=int(df["rows_modified"].max()),
            max_duration_statement=longest["statement"],
            sum_duration=int(df["duration"].sum()),
            sum_rows_modified=int(df["rows_modified"].sum()),
        )

    def report(
        self,
        poller: str,
        anomalies: Sequence[Verdict],
        records: Sequence[Any] = (),
    ) -> Optional[CycleSummary]:
        """
        Summarize the cycle and emit the summary when the policy allows it.

        Args:
            poller: Name of the reporting poller
            anomalies: Positive verdicts of the cycle
            records: The snapshot records behind the anomalies, emitted with
                the summary

        Returns:
            The summary (also when it was not emitted), or None without anomalies
        """
        summary = self.summarize(anomalies)
        if summary is None:
            return None

        if not self.enabled:
            logger.debug(f"{poller}: summary of {summary.count} anomalies suppressed (quiet run)")
            return summary

        self.serializer.emit(
            "summary",
            f"MaxTransactionTime: {summary.max_duration} seconds, "
            f"MaxUndos: {summary.max_rows_modified} rows",
            data=summary,
            poller=poller,
        )
        self.serializer.emit(
            "captured",
            f"CAPTURED ACTIVE TRANSACTIONS: ({len(records)})",
            data=list(records),
            poller=poller,
        )
        return summary
