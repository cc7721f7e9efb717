"""
CSV Probe Adapter

Read probe exports (randomized_id, lat, lng, spd, seq[, timestamp]) into
RawProbe records. Column names are configurable through the ingest
'columns' section.
"""

import csv
from io import StringIO
from pathlib import Path
from typing import Dict, Iterator, List, Union

from geoos.ingest.probe import RawProbe


class ProbeCSVReader:
    """
    Parse probe CSV content

    Malformed numeric cells never raise here; they reach the validator as
    NaN/None and are counted as filtered rows.
    """

    def __init__(self, columns: Dict[str, str] = None):
        self.columns = columns or {}

    def iter_text(self, content: str) -> Iterator[RawProbe]:
        """Yield probes from CSV text with a header row"""
        reader = csv.DictReader(StringIO(content))
        for record in reader:
            if not any((value or '').strip() for value in record.values() if isinstance(value, str)):
                continue
            yield RawProbe.from_record(record, self.columns)

    def read_text(self, content: str) -> List[RawProbe]:
        return list(self.iter_text(content))

    def read_file(self, path: Union[str, Path]) -> List[RawProbe]:
        """
        Read probes from a CSV file

        Args:
            path: CSV file path

        Returns:
            List of RawProbe records (unvalidated)
        """
        path = Path(path)
        print(f"[INGEST] Starting CSV ingestion from: {path}")
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return self.read_text(f.read())
