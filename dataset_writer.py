"""
Dataset Writer
Appends extracted stock records to the CSV append log.

The file is never rewritten or deduplicated: every run adds its rows at the
end. The header is written once, when the file is first created (or empty).
"""

import csv
import os
from datetime import datetime, timezone
from typing import List, Optional

import config
from errors import PersistenceError
from schemas import StockRecord


class DatasetWriter:
    """Append-only CSV store for StockRecords"""

    def __init__(self, csv_path: str = config.CSV_PATH):
        self.csv_path = csv_path

    def append(self, records: List[StockRecord]):
        """
        Append records as rows (Ticker, Company Name, Market Cap, Extracted At).

        Args:
            records: StockRecords to write; an empty list writes nothing

        Raises:
            PersistenceError: if the file cannot be written
        """
        if not records:
            return

        print(f"[Dataset] Saving {len(records)} records to {self.csv_path}...")
        try:
            directory = os.path.dirname(self.csv_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            write_header = not self.exists() or os.path.getsize(self.csv_path) == 0

            with open(self.csv_path, 'a', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                if write_header:
                    writer.writerow(config.CSV_HEADER)
                for record in records:
                    writer.writerow(record.to_row())
        except (OSError, csv.Error) as e:
            raise PersistenceError(f"Failed to write {self.csv_path}: {e}") from e

        print(f"[Dataset] ✓ Saved {len(records)} records")

    def exists(self) -> bool:
        return os.path.exists(self.csv_path)

    def last_modified(self) -> Optional[str]:
        """ISO timestamp of the last write, or None if the file does not exist"""
        if not self.exists():
            return None
        mtime = os.path.getmtime(self.csv_path)
        return datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()
