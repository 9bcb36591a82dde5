from __future__ import annotations

import pytest

from stockcount.models import InventoryItem
from stockcount.services.csv_io import (
    MODE_FULL,
    MODE_PHYSICAL,
    CountLine,
    export_log_csv,
    export_template_csv,
    parse_count,
    parse_count_lines,
    parse_products_csv,
    product_template_csv,
)


def _item(code="A", description="ALPHA", physical=0, system=0) -> InventoryItem:
    return InventoryItem(
        id=f"item-{code}",
        code=code,
        description=description,
        physical_count=physical,
        system_count=system,
        unit_type="units",
        branch_id="branch-1",
    )


@pytest.mark.parametrize(
    "value,expected",
    [
        ("0", 0),
        (" 12 ", 12),
        ("-1", None),
        ("1.0", None),
        ("", None),
        ("abc", None),
        ("٣", None),
        (str(2**63 - 1), 2**63 - 1),
        (str(2**63), None),
    ],
)
def test_parse_count(value, expected):
    assert parse_count(value) == expected


class TestParseCountLines:
    def test_full_layouts(self):
        lines, skipped = parse_count_lines("a,1,2\nb,desc,3,4\nc,desc,5,6,-1\n", MODE_FULL)
        assert lines == [
            CountLine("A", 1, 2),
            CountLine("B", 3, 4),
            CountLine("C", 5, 6),
        ]
        assert skipped == 0

    def test_physical_layouts(self):
        lines, skipped = parse_count_lines("a,1\nb,desc,3\nc,desc,5,6\n", MODE_PHYSICAL)
        assert lines == [CountLine("A", 1, None), CountLine("B", 3, None)]
        assert skipped == 1

    def test_header_detection_only_on_first_line(self):
        lines, skipped = parse_count_lines("SKU,fisico\ncode,5\n", MODE_PHYSICAL)
        assert lines == [CountLine("CODE", 5, None)]
        assert skipped == 0

    def test_first_line_without_keyword_is_data(self):
        lines, _ = parse_count_lines("A,1,1", MODE_FULL)
        assert lines == [CountLine("A", 1, 1)]

    def test_empty_code_is_skipped(self):
        lines, skipped = parse_count_lines(",1,1\n ;2;2", MODE_FULL)
        assert lines == []
        assert skipped == 2

    def test_empty_payload(self):
        assert parse_count_lines("   \n\n", MODE_FULL) == ([], 0)


class TestExport:
    def test_log_header_and_difference(self):
        out = export_log_csv([_item(physical=10, system=12)])
        assert out.splitlines() == ["código,descripción,físico,sistema,diferencia", "A,ALPHA,10,12,-2"]

    def test_template_header(self):
        out = export_template_csv([_item(physical=3, system=4)])
        assert out.splitlines() == ["codigo,descripcion,fisico,sistema", "A,ALPHA,3,4"]

    def test_description_quoting(self):
        out = export_template_csv([_item(description='BOX, "LARGE"')])
        assert out.splitlines()[1] == 'A,"BOX, ""LARGE""",0,0'

    def test_no_items_still_writes_header(self):
        assert export_template_csv([]) == "codigo,descripcion,fisico,sistema\n"

    def test_export_can_be_reimported(self):
        out = export_template_csv([_item(description="BOX, SMALL", physical=7, system=8)])
        lines, skipped = parse_count_lines(out, MODE_FULL)
        assert lines == [CountLine("A", 7, 8)]
        assert skipped == 0


class TestProductsCsv:
    def test_header_and_separators(self):
        rows = parse_products_csv("codigo,descripcion\n1001,Coca Cola 2.5L\n1002;Papas; Fritas\n\n")
        assert rows == [
            {"code": "1001", "description": "Coca Cola 2.5L"},
            {"code": "1002", "description": "Papas; Fritas"},
        ]

    def test_description_keeps_commas(self):
        assert parse_products_csv("X1,Rice, white, 1kg") == [{"code": "X1", "description": "Rice, white, 1kg"}]

    def test_doubled_quotes_are_unescaped(self):
        rows = parse_products_csv('codigo,descripcion\n1,"12"" PIPE"\n2;"BOLT; M8"\n')
        assert rows == [
            {"code": "1", "description": '12" PIPE'},
            {"code": "2", "description": "BOLT; M8"},
        ]

    def test_english_header_is_skipped(self):
        assert parse_products_csv("code,description\nX1,widget\n") == [{"code": "X1", "description": "widget"}]

    def test_codigo_inside_a_description_is_data(self):
        rows = parse_products_csv("1001,LECTOR CODIGO BARRAS\n1002,CABLE\n")
        assert [r["code"] for r in rows] == ["1001", "1002"]

    def test_template_parses_back(self):
        rows = parse_products_csv(product_template_csv())
        assert [r["code"] for r in rows] == ["1001", "1002", "1003"]
