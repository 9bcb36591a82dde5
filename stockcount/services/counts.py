from __future__ import annotations

import logging
from typing import Any, Optional

from stockcount.db import q, run, run_many, self_healing, transaction
from stockcount.errors import ValidationError
from stockcount.models import UNIT_TYPES, ImportResult, InventoryItem
from stockcount.services.catalog import get_item, items_by_ids
from stockcount.services.csv_io import MAX_COUNT, MODE_FULL, CountLine, parse_count, parse_count_lines
from stockcount.utils import iso_now

logger = logging.getLogger(__name__)


def _as_count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int):
        return value if 0 <= value <= MAX_COUNT else None
    if value is None:
        return None
    return parse_count(str(value))


def validate_counts(physical_count: Any, system_count: Any) -> list[str]:
    errors = []
    if _as_count(physical_count) is None:
        errors.append("Physical count must be a non-negative whole number.")
    if _as_count(system_count) is None:
        errors.append("System count must be a non-negative whole number.")
    return errors


@self_healing
def record_count(
    conn,
    item_id: str,
    physical_count: Any,
    system_count: Any,
    unit_type: Optional[str] = None,
) -> InventoryItem | None:
    """
    Overwrite both counts of one inventory row (last writer wins).

    Returns the updated row, or None when the id no longer exists.
    """
    errors = validate_counts(physical_count, system_count)
    if unit_type is not None and unit_type not in UNIT_TYPES:
        errors.append(f"Unit type must be one of: {', '.join(UNIT_TYPES)}.")
    if errors:
        raise ValidationError(errors)

    physical = _as_count(physical_count)
    system = _as_count(system_count)

    with transaction(conn):
        if unit_type is None:
            n = run(
                conn,
                "UPDATE inventory SET physicalCount=?, systemCount=?, lastUpdated=? WHERE id=?",
                (physical, system, iso_now(), item_id),
            )
        else:
            n = run(
                conn,
                "UPDATE inventory SET physicalCount=?, systemCount=?, unitType=?, lastUpdated=? WHERE id=?",
                (physical, system, unit_type, iso_now(), item_id),
            )

    item = get_item(conn, item_id) if n else None
    if item is None:
        return None
    logger.info("Recorded count for %s: physical=%s system=%s", item.code, physical, system)
    return item


def find_item(conn, branch_id: str, code: str) -> InventoryItem | None:
    rows = q(
        conn,
        "SELECT * FROM inventory WHERE branchId=? AND code=? ORDER BY rowid LIMIT 1",
        (branch_id, str(code).strip().upper()),
    )
    return InventoryItem.from_row(rows[0]) if rows else None


@self_healing
def import_counts_csv(conn, branch_id: str, payload: str, mode: str = MODE_FULL) -> ImportResult:
    """
    Apply a count CSV to the existing inventory rows of one branch.

    Lines that are malformed or name a code the branch does not carry are
    skipped and only counted. Valid lines commit together; with none valid
    nothing is written and the result reports failure.
    In physical mode the stored system count is kept.
    """
    lines, skipped = parse_count_lines(payload, mode)

    rows = q(conn, "SELECT id, code FROM inventory WHERE branchId=?", (branch_id,))
    by_code = {str(r["code"]).upper(): str(r["id"]) for r in rows}

    updates: dict[str, CountLine] = {}
    for line in lines:
        item_id = by_code.get(line.code)
        if item_id is None:
            skipped += 1
            continue
        updates[item_id] = line

    if not updates:
        logger.info("Count import for branch %s: nothing valid (%d skipped)", branch_id, skipped)
        return ImportResult(updated=[], skipped=skipped)

    ts = iso_now()
    with transaction(conn):
        run_many(
            conn,
            "UPDATE inventory SET physicalCount=?, systemCount=?, lastUpdated=? WHERE id=?",
            [
                (ln.physical_count, ln.system_count, ts, item_id)
                for item_id, ln in updates.items()
                if ln.system_count is not None
            ],
        )
        run_many(
            conn,
            "UPDATE inventory SET physicalCount=?, lastUpdated=? WHERE id=?",
            [
                (ln.physical_count, ts, item_id)
                for item_id, ln in updates.items()
                if ln.system_count is None
            ],
        )

    result = ImportResult(updated=items_by_ids(conn, updates.keys()), skipped=skipped)
    logger.info("Count import for branch %s: %s", branch_id, result.summary())
    return result
