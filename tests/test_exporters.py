import csv
import datetime
import io
import os

import pytest

from solar_bom import (
    PartCatalog,
    build_context,
    build_order_text,
    derive_bom,
    format_customer_info,
    generate_order_csv,
    order_file_stem,
    write_order_history,
)
from solar_bom.pdf_generator import generate_order_pdf, group_by_category_runs

STAMP = datetime.datetime(2024, 5, 1, 9, 30, 0)


@pytest.fixture
def derived(sample_texts):
    context, _ = build_context(sample_texts)
    totals = derive_bom(context)
    return context, totals


def test_customer_info_alignment(derived):
    context, _ = derived
    lines = format_customer_info(context.system).splitlines()

    assert lines == [
        "Project Name:" + " " * 12 + "Jane Smith",
        "Lead Source:" + " " * 13 + "Referral",
        "Estimated Delivery:" + " " * 6 + "June 3",
        "Address:" + " " * 17 + "12 Elm St",
    ]


def test_order_text_header(derived):
    context, totals = derived
    report = context.catalog.report(False, totals["system_wattage"])

    text = build_order_text(context.system, report, STAMP)

    assert text.startswith("Solar Parts Order Generated on 2024/05/01 09:30:00\nProject Name:")
    assert "\n\nModules:\n4   - REC 400W Alpha Pure" in text


def test_order_file_stem():
    assert order_file_stem(" Jane Smith ", STAMP) == "2024-05-01_09-30-00_Jane_Smith"


def test_write_order_history_writes_plain_and_cost(derived, tmp_path):
    context, totals = derived
    out_dir = os.path.join(tmp_path, "Order_History")

    paths = write_order_history(
        context.catalog, context.system, totals["system_wattage"], out_dir, STAMP
    )

    assert [os.path.basename(p) for p in paths] == [
        "2024-05-01_09-30-00_Jane_Smith.txt",
        "2024-05-01_09-30-00_Jane_Smith_Cost.txt",
    ]
    with open(paths[0], encoding="utf-8") as f:
        plain = f.read()
    with open(paths[1], encoding="utf-8") as f:
        costed = f.read()

    # The supplier copy never shows prices
    assert "$" not in plain
    assert "Total Cost:" in costed
    assert "(ppw = " in costed


def test_write_order_history_without_wattage_skips_cost(make_part, tmp_path):
    catalog = PartCatalog()
    catalog.load(make_part(qty=1))
    system = {
        "customer_name": "Nobody",
        "project_type": "",
        "delivery_date": "",
        "address": "",
    }

    paths = write_order_history(catalog, system, 0, str(tmp_path), STAMP)

    assert len(paths) == 1
    assert paths[0].endswith("Nobody.txt")


def test_order_csv(derived):
    context, _ = derived

    data = generate_order_csv(context.catalog)

    assert data.startswith(b"\xef\xbb\xbf")
    rows = list(csv.DictReader(io.StringIO(data.decode("utf-8-sig"))))
    assert len(rows) == len(context.catalog.ordered_parts())
    first = rows[0]
    assert first["Category"] == "Modules"
    assert first["Qty"] == "4"
    assert first["Unit Price"] == "250.00"
    assert first["Extended Price"] == "1000.00"


def test_category_runs_match_report_grouping(make_part):
    catalog = PartCatalog()
    catalog.load(make_part("X", "Alpha", qty=1))
    catalog.load(make_part("Y", "Beta", qty=1))
    catalog.load(make_part("X", "Gamma", qty=2))
    catalog.load(make_part("X", "Unordered"))

    groups = group_by_category_runs(catalog)

    assert [g[0] for g in groups] == ["X", "Y", "X"]
    assert groups[2][1] == [("Gamma", 2, 1.0)]


@pytest.mark.parametrize("show_cost", [True, False])
def test_order_pdf_renders(derived, show_cost):
    context, totals = derived

    pdf = generate_order_pdf(
        context.catalog, context.system, show_cost, totals["system_wattage"], STAMP
    )

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 500


def test_order_pdf_lists_misses(derived):
    context, totals = derived
    context.catalog.request("DDome", "spacer pad", 4)

    pdf = generate_order_pdf(context.catalog, context.system, False, totals["system_wattage"])

    assert pdf.startswith(b"%PDF")


def test_order_pdf_cost_needs_wattage(derived):
    context, _ = derived

    with pytest.raises(ValueError):
        generate_order_pdf(context.catalog, context.system, True, 0)
