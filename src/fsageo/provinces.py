from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProvinceInfo:
    # PRUID as published by Statistics Canada.
    code: str
    alias: str
    name: str
    # First letter of every FSA code in the province.
    first_char_of_code: str

    @property
    def file_stem(self) -> str:
        # Boundary files are named "<letter>-<alias>", e.g. "O-ON".
        return f"{self.first_char_of_code}-{self.alias}"


PROVINCES: tuple[ProvinceInfo, ...] = (
    ProvinceInfo("11", "PEI", "Prince Edward Island", "C"),
    ProvinceInfo("12", "NS", "Nova Scotia", "B"),
    ProvinceInfo("13", "NB", "New Brunswick", "E"),
    ProvinceInfo("10", "NL", "Newfoundland and Labrador", "A"),
    ProvinceInfo("24", "QC", "Quebec", "J"),
    ProvinceInfo("35", "ON", "Ontario", "O"),
)


def find_province(code: str) -> ProvinceInfo | None:
    for p in PROVINCES:
        if p.code == str(code):
            return p
    return None


def province_for_stem(stem: str) -> ProvinceInfo | None:
    for p in PROVINCES:
        if p.file_stem == stem:
            return p
    return None
