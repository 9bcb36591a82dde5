from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

UNIT_TYPES = ("units", "cases")
DEFAULT_UNIT_TYPE = "units"


@dataclass(frozen=True)
class Branch:
    id: str
    name: str
    location: str

    @classmethod
    def from_row(cls, r) -> "Branch":
        return cls(id=str(r["id"]), name=str(r["name"]), location=str(r["location"] or ""))


@dataclass(frozen=True)
class Product:
    id: str
    code: str
    description: str

    @classmethod
    def from_row(cls, r) -> "Product":
        return cls(id=str(r["id"]), code=str(r["code"]), description=str(r["description"] or ""))


@dataclass(frozen=True)
class InventoryItem:
    """One (product, branch) pairing. code/description are copies of the product."""

    id: str
    code: str
    description: str
    physical_count: int
    system_count: int
    unit_type: str
    branch_id: str
    last_updated: Optional[str] = None

    @property
    def discrepancy(self) -> int:
        return int(self.physical_count) - int(self.system_count)

    @classmethod
    def from_row(cls, r) -> "InventoryItem":
        return cls(
            id=str(r["id"]),
            code=str(r["code"]),
            description=str(r["description"] or ""),
            physical_count=int(r["physicalCount"] or 0),
            system_count=int(r["systemCount"] or 0),
            unit_type=str(r["unitType"] or DEFAULT_UNIT_TYPE),
            branch_id=str(r["branchId"]),
            last_updated=r["lastUpdated"],
        )


# ---- mutator results (payloads the client cache is updated from) ----

@dataclass
class BranchCreated:
    branch: Branch
    inventory: list[InventoryItem] = field(default_factory=list)


@dataclass
class ProductCreated:
    product: Product
    inventory: list[InventoryItem] = field(default_factory=list)


@dataclass
class ProductsCreated:
    products: list[Product] = field(default_factory=list)
    inventory: list[InventoryItem] = field(default_factory=list)


@dataclass
class ProductUpdated:
    product: Product
    old_code: str
    inventory: list[InventoryItem] = field(default_factory=list)


@dataclass
class ImportResult:
    updated: list[InventoryItem] = field(default_factory=list)
    skipped: int = 0

    @property
    def failed(self) -> bool:
        return not self.updated

    def summary(self) -> str:
        return f"{len(self.updated)} updated, {self.skipped} skipped"


@dataclass
class Snapshot:
    branches: list[Branch] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    inventory: list[InventoryItem] = field(default_factory=list)
