"""Snapshot output."""

import json
from pathlib import Path

from rich.console import Console

from ..crawler.models import RepositoryRecord

console = Console()


class SnapshotWriter:
    """Writes repository records to the JSON snapshot read by the web page."""

    def __init__(self, output_path: Path | str):
        self.output_path = Path(output_path)

    def write(self, records: list[RepositoryRecord]) -> Path:
        """Serialize all records, replacing any previous snapshot."""
        console.print(
            f"Writing data to {self.output_path} for {len(records)} repositories..."
        )
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        data = [record.to_dict() for record in records]
        self.output_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        return self.output_path
