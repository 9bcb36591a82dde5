from __future__ import annotations

from stockcount.services.branches import create_branch, delete_branch
from stockcount.services.catalog import fetch_all
from stockcount.services.counts import import_counts_csv
from stockcount.services.products import (
    create_product,
    create_products_from_csv,
    delete_product,
    update_product,
)
from stockcount.state import ActivityLog, InventoryCache


def _same_as_db(cache: InventoryCache, conn) -> None:
    snap = fetch_all(conn)
    assert sorted(b.id for b in cache.branches) == sorted(b.id for b in snap.branches)
    assert sorted(p.id for p in cache.products) == sorted(p.id for p in snap.products)
    assert sorted(cache.inventory, key=lambda i: i.id) == sorted(snap.inventory, key=lambda i: i.id)


def test_cache_follows_mutator_results(conn):
    cache = InventoryCache.from_snapshot(fetch_all(conn))

    north = create_branch(conn, "north", "a")
    cache.apply_branch_created(north)
    cache.apply_product_created(create_product(conn, "a", "alpha"))
    cache.apply_products_created(
        create_products_from_csv(conn, [{"code": "b", "description": "beta"}, {"code": "c", "description": "gamma"}])
    )
    south = create_branch(conn, "south", "b")
    cache.apply_branch_created(south)
    _same_as_db(cache, conn)

    product_a = next(p for p in cache.products if p.code == "A")
    cache.apply_product_updated(update_product(conn, product_a.id, "a2", "alpha two"))
    _same_as_db(cache, conn)
    assert not any(i.code == "A" for i in cache.inventory)

    result = import_counts_csv(conn, north.branch.id, "A2,5,6\nB,1,1", "full")
    cache.apply_items_updated(result.updated)
    _same_as_db(cache, conn)

    product_b = next(p for p in cache.products if p.code == "B")
    cache.apply_product_deleted(delete_product(conn, product_b.id))
    delete_branch(conn, south.branch.id)
    cache.apply_branch_deleted(south.branch.id)
    _same_as_db(cache, conn)


def test_description_only_update_keeps_rows(conn):
    cache = InventoryCache.from_snapshot(fetch_all(conn))
    cache.apply_branch_created(create_branch(conn, "north", "a"))
    created = create_product(conn, "a", "alpha")
    cache.apply_product_created(created)

    cache.apply_product_updated(update_product(conn, created.product.id, "a", "renamed"))

    assert [i.description for i in cache.inventory] == ["RENAMED"]
    _same_as_db(cache, conn)


def test_branch_name_lookup(conn):
    result = create_branch(conn, "north", "a")
    cache = InventoryCache.from_snapshot(fetch_all(conn))
    assert cache.branch_name(result.branch.id) == "NORTH"
    assert cache.branch_name("branch-missing") == "Unknown branch"


def test_branches_sharing_a_name_get_distinct_labels(conn):
    first = create_branch(conn, "norte", "a").branch
    second = create_branch(conn, "norte", "b").branch
    solo = create_branch(conn, "sur", "").branch
    cache = InventoryCache.from_snapshot(fetch_all(conn))

    labels = {cache.branch_label(b.id) for b in (first, second)}
    assert len(labels) == 2
    assert cache.branch_label(first.id).startswith("NORTE · ")
    assert cache.branch_label(solo.id) == "SUR"
    assert cache.get_branch(second.id) == second
    assert cache.get_branch("branch-missing") is None


class TestActivityLog:
    def test_newest_first_and_capped(self, conn):
        create_branch(conn, "north", "a")
        created = create_product(conn, "a", "alpha")
        item = created.inventory[0]

        log = ActivityLog(capacity=3)
        for n in range(5):
            log.record(item, f"change {n}")

        assert len(log) == 3
        assert [e.change for e in log.entries()] == ["change 4", "change 3", "change 2"]

    def test_record_many_and_clear(self, conn):
        create_branch(conn, "north", "a")
        created = create_product(conn, "a", "alpha")
        log = ActivityLog()
        log.record_many(created.inventory, "imported")
        assert len(log) == 1
        log.clear()
        assert log.entries() == []
