from __future__ import annotations

import random

from stockcount.db import ensure_schema, q, run_many, transaction
from stockcount.services.branches import create_branch
from stockcount.services.products import create_products_from_csv

DEMO_BRANCHES = [
    ("Almacén Principal", "Av. Central 100"),
    ("Tienda Central", "Calle 5 de Mayo"),
    ("Tienda Oeste", "Blvd. Poniente 42"),
]
DEMO_PRODUCTS = [
    ("SKU-001", "Granos de Café Premium"),
    ("SKU-002", "Té Verde Orgánico"),
    ("SKU-003", "Croissants de Mantequilla"),
    ("SKU-004", "Jugo de Naranja 1L"),
    ("SKU-005", "Agua Mineral 600ml"),
]


def wipe_all(conn) -> None:
    # Keep schema, delete data (order matters for FKs).
    with transaction(conn):
        for t in ["inventory", "products", "branches"]:
            conn.execute(f"DELETE FROM {t};")


def load_demo_data(conn, *, seed: int = 7) -> None:
    """Demo branches and products, with random counts on the fanned-out rows."""
    rng = random.Random(seed)
    ensure_schema(conn)

    existing = {str(r["name"]) for r in q(conn, "SELECT name FROM branches")}
    for name, location in DEMO_BRANCHES:
        if name.upper() not in existing:
            create_branch(conn, name, location)

    create_products_from_csv(conn, [{"code": c, "description": d} for c, d in DEMO_PRODUCTS])

    codes = [c for c, _ in DEMO_PRODUCTS]
    marks = ",".join("?" for _ in codes)
    counts = []
    for r in q(conn, f"SELECT id FROM inventory WHERE lastUpdated IS NULL AND code IN ({marks})", codes):
        system = rng.randint(20, 250)
        physical = max(0, system + rng.choice([-5, -2, 0, 0, 0, 1, 3]))
        unit = rng.choice(["units", "units", "cases"])
        counts.append((physical, system, unit, str(r["id"])))

    with transaction(conn):
        run_many(
            conn,
            "UPDATE inventory SET physicalCount=?, systemCount=?, unitType=? WHERE id=?",
            counts,
        )
