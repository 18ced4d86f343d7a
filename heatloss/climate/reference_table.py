"""
Local postcode -> climate reference table.

Records are flat: one location may carry several match keys (full, outcode,
sector, area) for the same design temperature and degree days.

    [{"keys": ["SS89HB", "SS8", "SS89", "SS"], "designTemp": -2, "hdd": 1950}]
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..utils.validation import to_optional_float
from .postcode import normalise_postcode, postcode_keys

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClimateRow:
    """Design external temperature (°C) and heating degree days (base 15.5 °C)."""

    design_temp: Optional[float] = None
    hdd: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.design_temp is None and self.hdd is None


class ClimateTable:
    """Immutable key -> ClimateRow mapping. First record wins for a key."""

    def __init__(self, rows: Optional[Mapping[str, ClimateRow]] = None):
        self._rows: dict[str, ClimateRow] = dict(rows or {})

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: str) -> bool:
        return normalise_postcode(key) in self._rows

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "ClimateTable":
        rows: dict[str, ClimateRow] = {}
        skipped = 0
        for record in records:
            row = ClimateRow(
                design_temp=to_optional_float(record.get("designTemp", record.get("design_temp"))),
                hdd=to_optional_float(record.get("hdd")),
            )
            keys = [normalise_postcode(k) for k in record.get("keys") or []]
            if row.is_empty or not any(keys):
                skipped += 1
                continue
            for key in keys:
                if key:
                    rows.setdefault(key, row)

        if skipped:
            logger.debug(f"Skipped {skipped} climate records without keys or data")
        return cls(rows)

    @classmethod
    def from_json(cls, path: Path | str) -> "ClimateTable":
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"Expected a list of climate records in {path}")
        table = cls.from_records(records)
        logger.info(f"Loaded {len(table)} climate keys from {path}")
        return table

    @classmethod
    def from_csv(
        cls,
        path: Path | str,
        postcode_column: str = "postcode",
        design_column: str = "design_temp",
        hdd_column: str = "hdd",
    ) -> "ClimateTable":
        """Load a spreadsheet export with one postcode (at any granularity) per row."""
        with open(path, "r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            records = [
                {
                    "keys": postcode_keys(row.get(postcode_column, "")),
                    "designTemp": row.get(design_column),
                    "hdd": row.get(hdd_column),
                }
                for row in reader
            ]
        table = cls.from_records(records)
        logger.info(f"Loaded {len(table)} climate keys from {path}")
        return table

    @classmethod
    def load(cls, path: Path | str) -> "ClimateTable":
        """Load by file extension (.json or .csv)."""
        if Path(path).suffix.lower() == ".csv":
            return cls.from_csv(path)
        return cls.from_json(path)

    def get(self, key: str) -> Optional[ClimateRow]:
        return self._rows.get(normalise_postcode(key))

    def lookup(self, postcode: str) -> Optional[ClimateRow]:
        """Most specific key first; None when nothing matches."""
        for key in postcode_keys(postcode):
            row = self._rows.get(key)
            if row is not None:
                return row
        return None
