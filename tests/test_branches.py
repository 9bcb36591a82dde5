from __future__ import annotations

import pytest

from stockcount.errors import ValidationError
from stockcount.services.branches import create_branch, delete_branch
from stockcount.services.products import create_product
from tests.helpers import inventory_rows, item_for, table_counts


class TestCreateBranch:
    def test_normalizes_fields_to_uppercase(self, conn):
        result = create_branch(conn, "  warehouse ", "main st")
        assert result.branch.name == "WAREHOUSE"
        assert result.branch.location == "MAIN ST"
        assert result.branch.id.startswith("branch-")

    def test_without_products_has_no_inventory(self, conn):
        result = create_branch(conn, "WAREHOUSE", "MAIN ST")
        assert result.inventory == []
        assert inventory_rows(conn, branch_id=result.branch.id) == []

    def test_fans_out_one_row_per_existing_product(self, conn):
        first = create_branch(conn, "north", "a")
        create_product(conn, "sku-1", "widget")
        create_product(conn, "sku-2", "gadget")

        result = create_branch(conn, "south", "b")

        codes = sorted(i.code for i in result.inventory)
        assert codes == ["SKU-1", "SKU-2"]
        for item in result.inventory:
            assert item.branch_id == result.branch.id
            assert item.physical_count == 0
            assert item.system_count == 0
            assert item.unit_type == "units"
        assert sorted(i.code for i in inventory_rows(conn, branch_id=result.branch.id)) == codes
        # The older branch is untouched
        assert len(inventory_rows(conn, branch_id=first.branch.id)) == 2

    def test_later_products_fan_out_once(self, conn):
        branch = create_branch(conn, "north", "a").branch
        create_product(conn, "sku-1", "widget")
        create_product(conn, "sku-2", "gadget")
        assert len(inventory_rows(conn, branch_id=branch.id)) == 2
        item_for(conn, branch.id, "SKU-2")

    def test_blank_name_is_rejected_without_writes(self, conn):
        with pytest.raises(ValidationError):
            create_branch(conn, "   ", "somewhere")
        assert table_counts(conn)["branches"] == 0

    def test_failed_fan_out_rolls_back_branch(self, conn):
        create_product(conn, "sku-1", "widget")
        conn.execute(
            """
            CREATE TRIGGER fail_fan_out BEFORE INSERT ON inventory
            BEGIN SELECT RAISE(ABORT, 'fan-out failed'); END;
            """
        )
        with pytest.raises(Exception, match="fan-out failed"):
            create_branch(conn, "north", "a")
        assert table_counts(conn)["branches"] == 0


class TestDeleteBranch:
    def test_removes_only_that_branchs_rows(self, conn):
        north = create_branch(conn, "north", "a").branch
        south = create_branch(conn, "south", "b").branch
        create_product(conn, "sku-1", "widget")
        create_product(conn, "sku-2", "gadget")

        assert delete_branch(conn, north.id) is True

        assert inventory_rows(conn, branch_id=north.id) == []
        assert len(inventory_rows(conn, branch_id=south.id)) == 2
        counts = table_counts(conn)
        assert counts["branches"] == 1
        assert counts["products"] == 2

    def test_unknown_id_is_a_no_op(self, conn):
        create_branch(conn, "north", "a")
        assert delete_branch(conn, "branch-missing") is False
        assert table_counts(conn)["branches"] == 1
