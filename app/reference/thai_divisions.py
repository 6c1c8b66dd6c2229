# app/reference/thai_divisions.py
"""
Read-only lookup of Thai administrative divisions.

Rows are (province, district, subdistrict) triples loaded once from JSON.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Iterable, NamedTuple, Optional
from common import get_app_logger

logger = get_app_logger(__name__)

DEFAULT_DATA_PATH = Path(__file__).parent / "data" / "thai_divisions.json"


class Division(NamedTuple):
    province: str
    district: str
    subdistrict: str


class ThaiDivisions:
    def __init__(self, rows: Iterable[Division]):
        self._rows: tuple[Division, ...] = tuple(rows)

    @classmethod
    def from_file(cls, path: Optional[Path] = None) -> "ThaiDivisions":
        path = path or DEFAULT_DATA_PATH
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        rows = [
            Division(item["province"], item["district"], item["subdistrict"])
            for item in raw
        ]
        logger.info("Reference divisions loaded", path=str(path), rows=len(rows))
        return cls(rows)

    def __len__(self) -> int:
        return len(self._rows)

    def provinces(self) -> list[str]:
        return sorted({row.province for row in self._rows})

    def districts_of(self, province: str) -> set[str]:
        return {row.district for row in self._rows if row.province == province}

    def subdistricts_of(self, district: str) -> list[str]:
        # file order; duplicates are kept as they appear
        return [row.subdistrict for row in self._rows if row.district == district]


@lru_cache(maxsize=None)
def load_thai_divisions(path: Optional[Path] = None) -> ThaiDivisions:
    return ThaiDivisions.from_file(path)


__all__ = ["Division", "ThaiDivisions", "load_thai_divisions", "DEFAULT_DATA_PATH"]
