import csv
import io
import os

import pytest

from solar_bom.constants import (
    FLAT_LAYOUT_AREAS,
    GRID_COLS,
    GRID_ROWS,
    RAIL_COUNT_COLUMN,
    RAIL_COUNT_ROWS,
    RAIL_LAYOUT_CELLS,
    SYSTEM_INFO_ROWS,
    TEMPLATE_FILES,
)

# A small price list covering an Enphase + EcoFoot2+ project.
# (category, name, pkg_qty, qty, price, match_key)
SAMPLE_PARTS = [
    ("Modules", "REC 400W Alpha Pure", 1, 0, 250.00, "rec 400"),
    ("Enphase", "IQ8+ Microinverter", 1, 0, 150.00, "iq8+ micro"),
    ("Enphase", "Cell Modem Kit", 1, 0, 300.00, "cell kit"),
    ("Enphase", "Q Cable Portrait", 1, 0, 20.00, "qcable portrait"),
    ("Enphase", "Q Cable Landscape", 1, 0, 22.00, "qcable landscape"),
    ("Enphase", "Q Sealing Cap (10 pk)", 10, 0, 30.00, "sealing cap"),
    ("Enphase", "Q Terminator Cap", 1, 0, 5.00, "terminator cap"),
    ("Enphase", "IQ Combiner 4", 1, 0, 800.00, "combiner"),
    ("Enphase", "15A Solar Breaker", 1, 0, 12.00, "solar breaker"),
    ("Enphase", "Envoy-S Metered", 1, 0, 400.00, "envoy"),
    ("Fuses and Disconnects", "60A Fused Disconnect", 1, 0, 90.00, "60a disconnect"),
    ("Fuses and Disconnects", "30A Fuse", 1, 0, 8.00, "30a fuse"),
    ("Fuses and Disconnects", "Fuse Reducer", 1, 0, 6.00, "reducer"),
    ("EcoFoot2+", "EcoFoot2+ Panel Clip", 1, 0, 3.00, "clip"),
    ("EcoFoot2+", "EcoFoot2+ Base", 1, 0, 25.00, "base"),
    ("EcoFoot2+", "EcoFoot2+ Clamp", 1, 0, 4.00, "clamp"),
    ("EcoFoot2+", "EcoFoot2+ Deflector Landscape", 1, 0, 30.00, "deflector landscape"),
    ("EcoFoot2+", "EcoFoot2+ Deflector Portrait", 1, 0, 28.00, "deflector portrait"),
    ("EcoFoot2+", "WEEB Ground Lug", 1, 0, 7.00, "ground lug"),
]

SAMPLE_SYSTEM = {
    "customer_name": "Jane Smith",
    "delivery_date": "June 3",
    "project_type": "Referral",
    "address": "12 Elm St",
    "system_type": "Enphase IQ Combiner",
    "panel_type": "REC 400",
    "panel_wattage": "400",
    "panel_level_device": "IQ8+",
    "inverter_type": "n/a",
    "inverter_count": "0",
    "cell_count": "1",
    "disco_rating": "60",
    "fuse_rating": "30",
    "consumption_monitor": "no",
}

SAMPLE_RAIL_LAYOUT = {
    "attachment_type": "QuickMount",
    "tilt_leg": '0"',
    "attachment_override": "-1",
    "panel_height": "1721mm",
    "panel_width": "30mm",
    "panel_thickness": "30mm",
    "qcable_portrait": "0",
    "qcable_landscape": "0",
}


def _to_csv(rows):
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerows(rows)
    return buf.getvalue()


def _blank(n_rows, n_cols):
    return [["" for _ in range(n_cols)] for _ in range(n_rows)]


def build_parts_csv(parts):
    rows = [["Parts List"] + [""] * 7, ["Category", "Part", "Pkg", "Qty", "Price", "", "Key", ""]]
    for category, name, pkg, qty, price, key in parts:
        rows.append([category, name, str(pkg), str(qty), f"${price:,.2f}", "", key, ""])
    return _to_csv(rows)


def build_system_csv(values):
    rows = []
    for field in SYSTEM_INFO_ROWS:
        if field is None:
            rows.append(["System", ""])
        else:
            rows.append([field.replace("_", " ").title(), values[field]])
    return _to_csv(rows)


def build_rail_layout_csv(values):
    rows = _blank(30, 18)
    for field, (r, c) in RAIL_LAYOUT_CELLS.items():
        rows[r][c] = values[field]
    return _to_csv(rows)


def build_rail_counts_csv(values):
    rows = _blank(8, 4)
    rows[0] = ["Part", "", "", "Count"]
    for field, r in RAIL_COUNT_ROWS.items():
        rows[r][0] = field
        rows[r][RAIL_COUNT_COLUMN] = str(values.get(field, 0))
    return _to_csv(rows)


def build_flat_layout_csv(areas):
    """areas: list of (tag, extra, set of (row, col) occupied cells)."""
    rows = _blank(FLAT_LAYOUT_AREAS[-1]["grid_start"] + GRID_ROWS, GRID_COLS)
    for spec, (tag, extra, cells) in zip(FLAT_LAYOUT_AREAS, areas):
        rows[spec["header_row"]][0] = tag
        rows[spec["header_row"]][4] = str(extra)
        for i in range(GRID_ROWS):
            for j in range(GRID_COLS):
                rows[spec["grid_start"] + i][j] = "TRUE" if (i, j) in cells else "FALSE"
    return _to_csv(rows)


@pytest.fixture
def sample_texts():
    """Sheet texts for a 4-panel EcoFoot2+ landscape project on Enphase."""
    return {
        "parts": build_parts_csv(SAMPLE_PARTS),
        "system": build_system_csv(SAMPLE_SYSTEM),
        "rail_layout": build_rail_layout_csv(SAMPLE_RAIL_LAYOUT),
        "rail_counts": build_rail_counts_csv({}),
        "flat_layout": build_flat_layout_csv(
            [
                ("EcoFoot2+ Landscape", 1, {(0, 0), (0, 1), (1, 0), (1, 1)}),
                ("", 0, set()),
            ]
        ),
    }


@pytest.fixture
def template_dir(tmp_path, sample_texts):
    """Writes the sample sheets to a folder using the template filenames."""
    for key, name in TEMPLATE_FILES.items():
        with open(os.path.join(tmp_path, name), "w", encoding="utf-8") as f:
            f.write(sample_texts[key])
    return str(tmp_path)


@pytest.fixture
def make_part():
    """Factory for catalog records with sensible defaults."""

    def _make(category="Misc", name="Widget", pkg_qty=1, qty=0, price=1.0, match_key=None):
        return {
            "category": category,
            "name": name,
            "pkg_qty": pkg_qty,
            "qty": qty,
            "price": price,
            "match_key": match_key if match_key is not None else name.lower(),
        }

    return _make
