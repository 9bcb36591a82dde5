from __future__ import annotations

import csv
import re
from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from stockcount.models import InventoryItem
from stockcount.utils import fold_accents

LOG_HEADER = ["código", "descripción", "físico", "sistema", "diferencia"]
TEMPLATE_HEADER = ["codigo", "descripcion", "fisico", "sistema"]
PRODUCT_HEADER = ["codigo", "descripcion"]

HEADER_KEYWORDS = {"codigo", "code", "sku"}

MODE_PHYSICAL = "physical"
MODE_FULL = "full"
IMPORT_MODES = (MODE_PHYSICAL, MODE_FULL)

_COUNT_RE = re.compile(r"\d+", re.ASCII)

# largest value an SQLite INTEGER column holds
MAX_COUNT = 2**63 - 1

# columns -> (physical index, system index or None)
_LAYOUTS = {
    MODE_PHYSICAL: {2: (1, None), 3: (2, None)},
    MODE_FULL: {3: (1, 2), 4: (2, 3), 5: (2, 3)},
}


@dataclass(frozen=True)
class CountLine:
    code: str
    physical_count: int
    system_count: Optional[int] = None


def _non_blank_lines(text: str) -> list[str]:
    return [ln for ln in (text or "").splitlines() if ln.strip()]


def _split(line: str) -> list[str]:
    sep = ";" if ";" in line else ","
    cells = next(csv.reader([line], delimiter=sep, skipinitialspace=True), [])
    return [c.strip() for c in cells]


def _is_header(line: str) -> bool:
    cells = _split(line)
    return bool(cells) and fold_accents(cells[0]) in HEADER_KEYWORDS


def parse_count(value: str) -> Optional[int]:
    """Non-negative integer that fits an SQLite INTEGER, or None."""
    s = str(value).strip()
    if not _COUNT_RE.fullmatch(s):
        return None
    n = int(s)
    return n if n <= MAX_COUNT else None


def parse_count_lines(payload: str, mode: str = MODE_FULL) -> tuple[list[CountLine], int]:
    """
    Parse a count import payload.

    Returns the structurally valid lines plus the number of lines rejected
    (wrong column count, empty code, unparseable or negative counts).
    Codes are uppercased; whether they exist is checked by the importer.
    """
    if mode not in _LAYOUTS:
        raise ValueError(f"Unknown import mode {mode!r}. Use one of: {', '.join(IMPORT_MODES)}.")

    lines = _non_blank_lines(payload)
    if lines and _is_header(lines[0]):
        lines = lines[1:]

    layouts = _LAYOUTS[mode]
    parsed: list[CountLine] = []
    skipped = 0
    for line in lines:
        cells = _split(line)
        layout = layouts.get(len(cells))
        code = cells[0].upper() if cells else ""
        if layout is None or not code:
            skipped += 1
            continue

        phys_idx, sys_idx = layout
        physical = parse_count(cells[phys_idx])
        system = parse_count(cells[sys_idx]) if sys_idx is not None else None
        if physical is None or (sys_idx is not None and system is None):
            skipped += 1
            continue

        parsed.append(CountLine(code=code, physical_count=physical, system_count=system))
    return parsed, skipped


def parse_products_csv(text: str) -> list[dict[str, str]]:
    """Catalog upload: `codigo,descripcion` lines, header optional."""
    lines = _non_blank_lines(text)
    if lines and _is_header(lines[0]):
        lines = lines[1:]

    out = []
    for line in lines:
        cells = _split(line)
        code = cells[0] if cells else ""
        # an unquoted separator inside the description splits it; rejoin
        sep = ";" if ";" in line else ","
        description = f"{sep} ".join(cells[1:])
        out.append({"code": code, "description": description.strip()})
    return out


def _to_csv(rows: list[list], header: list[str]) -> str:
    return pd.DataFrame(rows, columns=header).to_csv(index=False, lineterminator="\n")


def export_log_csv(items: Iterable[InventoryItem]) -> str:
    rows = [[i.code, i.description, i.physical_count, i.system_count, i.discrepancy] for i in items]
    return _to_csv(rows, LOG_HEADER)


def export_template_csv(items: Iterable[InventoryItem]) -> str:
    rows = [[i.code, i.description, i.physical_count, i.system_count] for i in items]
    return _to_csv(rows, TEMPLATE_HEADER)


def product_template_csv() -> str:
    rows = [
        ["1001", "Coca Cola 2.5L"],
        ["1002", "Papas Fritas 150g"],
        ["1003", "Arroz 1kg"],
    ]
    return _to_csv(rows, PRODUCT_HEADER)
