from __future__ import annotations

import logging

from stockcount.db import q, run, run_many, self_healing, transaction
from stockcount.errors import ValidationError
from stockcount.models import DEFAULT_UNIT_TYPE, Branch, BranchCreated, InventoryItem
from stockcount.utils import new_id, norm_upper

logger = logging.getLogger(__name__)


@self_healing
def create_branch(conn, name: str, location: str) -> BranchCreated:
    """
    Insert a branch and one zero-count inventory row per existing product.

    Both inserts share one transaction, so a failed fan-out leaves no branch behind.
    """
    name = norm_upper(name)
    location = norm_upper(location)
    if not name:
        raise ValidationError("Branch name is required.")

    branch = Branch(id=new_id("branch"), name=name, location=location)

    with transaction(conn):
        run(
            conn,
            "INSERT INTO branches (id, name, location) VALUES (?, ?, ?)",
            (branch.id, branch.name, branch.location),
        )
        products = q(conn, "SELECT code, description FROM products ORDER BY rowid")
        items = [
            InventoryItem(
                id=new_id("item"),
                code=str(p["code"]),
                description=str(p["description"] or ""),
                physical_count=0,
                system_count=0,
                unit_type=DEFAULT_UNIT_TYPE,
                branch_id=branch.id,
            )
            for p in products
        ]
        run_many(
            conn,
            """
            INSERT INTO inventory (id, code, description, physicalCount, systemCount, unitType, branchId)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [(i.id, i.code, i.description, 0, 0, i.unit_type, i.branch_id) for i in items],
        )

    logger.info("Created branch %s (%s) with %d inventory rows", branch.name, branch.id, len(items))
    return BranchCreated(branch=branch, inventory=items)


@self_healing
def delete_branch(conn, branch_id: str) -> bool:
    """Delete a branch and its inventory rows. Unknown ids are a no-op (False)."""
    with transaction(conn):
        rows = run(conn, "DELETE FROM inventory WHERE branchId=?", (branch_id,))
        deleted = run(conn, "DELETE FROM branches WHERE id=?", (branch_id,))

    if deleted:
        logger.info("Deleted branch %s and %d inventory rows", branch_id, rows)
    return bool(deleted)
