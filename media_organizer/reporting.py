import csv
import logging
from collections import Counter
from pathlib import Path
from typing import List, Optional

from .models import FileOutcome

STATUSES = ('updated', 'moved', 'skipped', 'failed')


class RunReport:
    """
    Collects the per-file outcomes of a run.
    """

    def __init__(self):
        self.outcomes: List[FileOutcome] = []

    def record(self, path: Path, status: str, detail: str = "",
               destination: Optional[Path] = None) -> FileOutcome:
        outcome = FileOutcome(path=path, status=status, detail=detail, destination=destination)
        self.outcomes.append(outcome)
        return outcome

    def counts(self) -> Counter:
        return Counter(o.status for o in self.outcomes)

    def count(self, status: str) -> int:
        return self.counts()[status]

    def summary(self) -> str:
        counts = self.counts()
        parts = [f"{counts[s]} {s}" for s in STATUSES if counts[s]]
        return f"Processed {len(self.outcomes)} files" + (f": {', '.join(parts)}" if parts else "")

    def log_summary(self):
        if self.count('failed'):
            logging.warning(self.summary())
        else:
            logging.info(self.summary())

    def write_csv(self, output_csv: Path):
        """Writes one row per file outcome."""
        headers = ["Source Path", "Status", "Destination Path", "Notes"]

        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(headers)
            for o in self.outcomes:
                writer.writerow([
                    str(o.path),
                    o.status,
                    str(o.destination) if o.destination else "",
                    o.detail,
                ])

        logging.info(f"Report written: {output_csv}")
