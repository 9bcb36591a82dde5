from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, Mapping

from stockcount.db import q, run, run_many, self_healing, transaction
from stockcount.errors import DuplicateCodeError, ValidationError
from stockcount.models import (
    DEFAULT_UNIT_TYPE,
    InventoryItem,
    Product,
    ProductCreated,
    ProductsCreated,
    ProductUpdated,
)
from stockcount.services.catalog import get_product
from stockcount.utils import new_id, norm_upper

logger = logging.getLogger(__name__)

_INSERT_ITEM = """
    INSERT INTO inventory (id, code, description, physicalCount, systemCount, unitType, branchId)
    VALUES (?, ?, ?, ?, ?, ?, ?)
"""


def _is_unique_violation(e: sqlite3.IntegrityError) -> bool:
    return getattr(e, "sqlite_errorname", "") == "SQLITE_CONSTRAINT_UNIQUE"


def _require_fields(code: str, description: str) -> None:
    errors = []
    if not code:
        errors.append("Product code is required.")
    if not description:
        errors.append("Product description is required.")
    if errors:
        raise ValidationError(errors)


def _code_owner(conn, code: str):
    rows = q(conn, "SELECT id FROM products WHERE code=?", (code,))
    return str(rows[0]["id"]) if rows else None


def _fan_out(conn, products: list[Product]) -> list[InventoryItem]:
    """Insert one zero-count row per (product, branch). Caller owns the transaction."""
    branch_ids = [str(r["id"]) for r in q(conn, "SELECT id FROM branches ORDER BY rowid")]
    items = [
        InventoryItem(
            id=new_id("item"),
            code=p.code,
            description=p.description,
            physical_count=0,
            system_count=0,
            unit_type=DEFAULT_UNIT_TYPE,
            branch_id=b,
        )
        for p in products
        for b in branch_ids
    ]
    run_many(
        conn,
        _INSERT_ITEM,
        [(i.id, i.code, i.description, 0, 0, i.unit_type, i.branch_id) for i in items],
    )
    return items


@self_healing
def create_product(conn, code: str, description: str) -> ProductCreated:
    code = norm_upper(code)
    description = norm_upper(description)
    _require_fields(code, description)

    if _code_owner(conn, code) is not None:
        raise DuplicateCodeError(code)

    product = Product(id=new_id("product"), code=code, description=description)
    try:
        with transaction(conn):
            run(
                conn,
                "INSERT INTO products (id, code, description) VALUES (?, ?, ?)",
                (product.id, product.code, product.description),
            )
            items = _fan_out(conn, [product])
    except sqlite3.IntegrityError as e:
        if _is_unique_violation(e):
            raise DuplicateCodeError(code) from e
        raise

    logger.info("Created product %s with %d inventory rows", product.code, len(items))
    return ProductCreated(product=product, inventory=items)


@self_healing
def create_products_from_csv(conn, rows: Iterable[Mapping[str, str]]) -> ProductsCreated:
    """
    Bulk create. Rows missing a field, rows whose code already exists and
    repeats of a code inside the payload are dropped silently; existing
    products are never overwritten.
    """
    existing = {str(r["code"]) for r in q(conn, "SELECT code FROM products")}
    products: list[Product] = []
    for row in rows:
        code = norm_upper(row.get("code"))
        description = norm_upper(row.get("description"))
        if not code or not description or code in existing:
            continue
        existing.add(code)
        products.append(Product(id=new_id("product"), code=code, description=description))

    if not products:
        return ProductsCreated()

    try:
        with transaction(conn):
            run_many(
                conn,
                "INSERT INTO products (id, code, description) VALUES (?, ?, ?)",
                [(p.id, p.code, p.description) for p in products],
            )
            items = _fan_out(conn, products)
    except sqlite3.IntegrityError as e:
        # Another session inserted one of these codes after the pre-check.
        if _is_unique_violation(e):
            clash = next((p.code for p in products if _code_owner(conn, p.code)), "")
            raise DuplicateCodeError(clash) from e
        raise

    logger.info("Imported %d products with %d inventory rows", len(products), len(items))
    return ProductsCreated(products=products, inventory=items)


@self_healing
def update_product(conn, product_id: str, code: str, description: str) -> ProductUpdated | None:
    """
    Rename a product and every inventory row carrying its old code.

    Returns None when the product no longer exists.
    """
    code = norm_upper(code)
    description = norm_upper(description)
    _require_fields(code, description)

    old = get_product(conn, product_id)
    if old is None:
        return None

    owner = _code_owner(conn, code)
    if owner is not None and owner != product_id:
        raise DuplicateCodeError(code)

    try:
        with transaction(conn):
            run(
                conn,
                "UPDATE products SET code=?, description=? WHERE id=?",
                (code, description, product_id),
            )
            run(
                conn,
                "UPDATE inventory SET code=?, description=? WHERE code=?",
                (code, description, old.code),
            )
    except sqlite3.IntegrityError as e:
        if _is_unique_violation(e):
            raise DuplicateCodeError(code) from e
        raise

    rows = q(conn, "SELECT * FROM inventory WHERE code=? ORDER BY rowid", (code,))
    items = [InventoryItem.from_row(r) for r in rows]
    logger.info("Updated product %s -> %s (%d inventory rows)", old.code, code, len(items))
    return ProductUpdated(
        product=Product(id=product_id, code=code, description=description),
        old_code=old.code,
        inventory=items,
    )


@self_healing
def delete_product(conn, product_id: str) -> Product | None:
    """Delete a product and all inventory rows with its code. None if unknown."""
    product = get_product(conn, product_id)
    if product is None:
        return None

    with transaction(conn):
        rows = run(conn, "DELETE FROM inventory WHERE code=?", (product.code,))
        run(conn, "DELETE FROM products WHERE id=?", (product_id,))

    logger.info("Deleted product %s and %d inventory rows", product.code, rows)
    return product
