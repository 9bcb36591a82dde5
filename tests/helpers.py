from __future__ import annotations

from stockcount.db import q
from stockcount.models import InventoryItem


def inventory_rows(conn, branch_id: str | None = None, code: str | None = None) -> list[InventoryItem]:
    sql = "SELECT * FROM inventory WHERE 1=1"
    params: list = []
    if branch_id is not None:
        sql += " AND branchId=?"
        params.append(branch_id)
    if code is not None:
        sql += " AND code=?"
        params.append(code)
    return [InventoryItem.from_row(r) for r in q(conn, sql + " ORDER BY rowid", params)]


def table_counts(conn) -> dict[str, int]:
    return {
        t: int(q(conn, f"SELECT COUNT(*) AS n FROM {t}")[0]["n"])
        for t in ("branches", "products", "inventory")
    }


def item_for(conn, branch_id: str, code: str) -> InventoryItem:
    rows = inventory_rows(conn, branch_id=branch_id, code=code)
    assert len(rows) == 1, f"expected one row for {code} in {branch_id}, got {len(rows)}"
    return rows[0]
