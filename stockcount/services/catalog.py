from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from stockcount.db import q, self_healing
from stockcount.models import Branch, InventoryItem, Product, Snapshot

SORT_KEYS = {
    "code": lambda i: i.code,
    "description": lambda i: i.description,
    "physical": lambda i: i.physical_count,
    "system": lambda i: i.system_count,
    "discrepancy": lambda i: i.discrepancy,
}


def list_branches(conn) -> list[Branch]:
    return [Branch.from_row(r) for r in q(conn, "SELECT * FROM branches ORDER BY rowid DESC")]


def list_products(conn) -> list[Product]:
    return [Product.from_row(r) for r in q(conn, "SELECT * FROM products ORDER BY rowid DESC")]


def list_inventory(conn, branch_id: Optional[str] = None) -> list[InventoryItem]:
    if branch_id is None:
        rows = q(conn, "SELECT * FROM inventory ORDER BY rowid")
    else:
        rows = q(conn, "SELECT * FROM inventory WHERE branchId=? ORDER BY rowid", (branch_id,))
    return [InventoryItem.from_row(r) for r in rows]


def get_product(conn, product_id: str) -> Optional[Product]:
    rows = q(conn, "SELECT * FROM products WHERE id=?", (product_id,))
    return Product.from_row(rows[0]) if rows else None


def get_item(conn, item_id: str) -> Optional[InventoryItem]:
    rows = q(conn, "SELECT * FROM inventory WHERE id=?", (item_id,))
    return InventoryItem.from_row(rows[0]) if rows else None


def items_by_ids(conn, ids: Iterable[str]) -> list[InventoryItem]:
    ids = list(ids)
    if not ids:
        return []
    marks = ",".join("?" for _ in ids)
    rows = q(conn, f"SELECT * FROM inventory WHERE id IN ({marks}) ORDER BY rowid", ids)
    return [InventoryItem.from_row(r) for r in rows]


@self_healing
def fetch_all(conn) -> Snapshot:
    """
    Full, unfiltered contents of the three tables.

    Reads go to the single primary connection, so the snapshot always reflects
    every committed write.
    """
    return Snapshot(
        branches=list_branches(conn),
        products=list_products(conn),
        inventory=list_inventory(conn),
    )


# -------------------------
# Client-side query helpers
# -------------------------

def search_inventory(
    items: Iterable[InventoryItem],
    query: str = "",
    branch_id: Optional[str] = None,
) -> list[InventoryItem]:
    needle = (query or "").strip().upper()
    out = []
    for item in items:
        if branch_id is not None and item.branch_id != branch_id:
            continue
        if needle and needle not in item.code.upper() and needle not in item.description.upper():
            continue
        out.append(item)
    return out


def search_products(products: Iterable[Product], query: str = "") -> list[Product]:
    needle = (query or "").strip().upper()
    if not needle:
        return list(products)
    return [p for p in products if needle in p.code.upper() or needle in p.description.upper()]


def sort_items(items: Iterable[InventoryItem], key: str = "code", descending: bool = False) -> list[InventoryItem]:
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key {key!r}. Use one of: {', '.join(SORT_KEYS)}.")
    return sorted(items, key=SORT_KEYS[key], reverse=descending)


@dataclass
class Page:
    items: list
    page: int
    total_pages: int


def paginate(items: list, page: int = 1, per_page: int = 10) -> Page:
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(1, int(page)), total_pages)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, total_pages=total_pages)
