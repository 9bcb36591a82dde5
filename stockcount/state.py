"""
Client-side copy of the three tables, kept in the Streamlit session.

The cache is filled once from a fetch_all snapshot and afterwards changed
only from the result payloads returned by the mutators, never by a blind
refetch.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from stockcount.models import (
    Branch,
    BranchCreated,
    InventoryItem,
    Product,
    ProductCreated,
    ProductsCreated,
    ProductUpdated,
    Snapshot,
)
from stockcount.utils import new_id

LOG_CAPACITY = 200


@dataclass
class InventoryCache:
    branches: list[Branch] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    inventory: list[InventoryItem] = field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snap: Snapshot) -> "InventoryCache":
        return cls(list(snap.branches), list(snap.products), list(snap.inventory))

    def branch_name(self, branch_id: str) -> str:
        return next((b.name for b in self.branches if b.id == branch_id), "Unknown branch")

    def get_branch(self, branch_id: str) -> Branch | None:
        return next((b for b in self.branches if b.id == branch_id), None)

    def branch_label(self, branch_id: str) -> str:
        """Picker label; branch names are not unique, so shared names get the location and a short id."""
        br = self.get_branch(branch_id)
        if br is None:
            return "Unknown branch"
        if sum(1 for b in self.branches if b.name == br.name) == 1:
            return br.name
        parts = [br.name, br.location, br.id[-6:]] if br.location else [br.name, br.id[-6:]]
        return " · ".join(parts)

    def items_for(self, branch_id: str) -> list[InventoryItem]:
        return [i for i in self.inventory if i.branch_id == branch_id]

    def apply_branch_created(self, result: BranchCreated) -> None:
        self.branches.insert(0, result.branch)
        self.inventory.extend(result.inventory)

    def apply_branch_deleted(self, branch_id: str) -> None:
        self.branches = [b for b in self.branches if b.id != branch_id]
        self.inventory = [i for i in self.inventory if i.branch_id != branch_id]

    def apply_product_created(self, result: ProductCreated) -> None:
        self.products.insert(0, result.product)
        self.inventory.extend(result.inventory)

    def apply_products_created(self, result: ProductsCreated) -> None:
        self.products = list(result.products) + self.products
        self.inventory.extend(result.inventory)

    def apply_product_updated(self, result: ProductUpdated) -> None:
        self.products = [result.product if p.id == result.product.id else p for p in self.products]
        self.apply_items_updated(result.inventory)
        renamed = {i.id for i in result.inventory}
        self.inventory = [i for i in self.inventory if i.id in renamed or i.code != result.old_code]

    def apply_product_deleted(self, product: Product) -> None:
        self.products = [p for p in self.products if p.id != product.id]
        self.inventory = [i for i in self.inventory if i.code != product.code]

    def apply_items_updated(self, items: Iterable[InventoryItem]) -> None:
        fresh = {i.id: i for i in items}
        merged = []
        for i in self.inventory:
            merged.append(fresh.pop(i.id, i))
        merged.extend(fresh.values())
        self.inventory = merged


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: datetime
    item: InventoryItem
    change: str


class ActivityLog:
    """Most recent changes, newest first. Lives only as long as the session."""

    def __init__(self, capacity: int = LOG_CAPACITY):
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, item: InventoryItem, change: str) -> LogEntry:
        entry = LogEntry(id=new_id("log"), timestamp=datetime.now(timezone.utc), item=item, change=change)
        self._entries.appendleft(entry)
        return entry

    def record_many(self, items: Iterable[InventoryItem], change: str) -> None:
        for item in items:
            self.record(item, change)

    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
