"""
Static Knowledge Base for the Solar Ordering Tool.

This module serves as the central repository for:
1.  **Template Layout:** File names and cell coordinates of the exported
    ordering-template sheets.
2.  **Racking Tables:** Per-variant hardware increments for each neighbor case
    of an occupied ballast cell.
3.  **Catalog Requests:** The (counter, name fragment) order in which each
    racking variant's counts are requested from the parts catalog.
4.  **Report Formatting:** Column widths used by the fixed-width order text.
"""

from typing import Any

# --- Template Files ---

TEMPLATE_DIR = "Solar Ordering Template"
ORDER_HISTORY_DIR = "Order_History"

TEMPLATE_FILES = {
    "parts": "Ordering Template-Parts List.csv",
    "system": "Ordering Template-System Info.csv",
    "rail_layout": "Ordering Template-Rail Layout.csv",
    "rail_counts": "Ordering Template-Rail Racking Count.csv",
    "flat_layout": "Ordering Template-Flat Layout.csv",
}

# --- Sheet Coordinates ---

# Parts list: two header rows, then one part per row.
PARTS_HEADER_ROWS = 2
PARTS_COLUMNS = {
    "category": 0,
    "name": 1,
    "pkg_qty": 2,
    "qty": 3,
    "price": 4,
    "match_key": 6,
}

# System info: label/value pairs, value in column 1.
# None marks the spacer row between customer and system details.
SYSTEM_INFO_ROWS: list[str | None] = [
    "customer_name",
    "delivery_date",
    "project_type",
    "address",
    None,
    "system_type",
    "panel_type",
    "panel_wattage",
    "panel_level_device",
    "inverter_type",
    "inverter_count",
    "cell_count",
    "disco_rating",
    "fuse_rating",
    "consumption_monitor",
]
SYSTEM_INFO_INT_FIELDS = (
    "panel_wattage",
    "inverter_count",
    "cell_count",
    "disco_rating",
    "fuse_rating",
)
# Free text that keeps its original casing in the report header
SYSTEM_INFO_CASED_FIELDS = ("customer_name", "delivery_date", "project_type", "address")

# Rail layout: (row, col) per field.
RAIL_LAYOUT_CELLS = {
    "attachment_type": (0, 1),
    "tilt_leg": (1, 1),
    "attachment_override": (2, 1),
    "panel_height": (3, 1),
    "panel_width": (4, 1),
    "panel_thickness": (5, 1),
    "qcable_portrait": (10, 16),
    "qcable_landscape": (29, 16),
}

# Rail racking count: value in column 3 of rows 1-7.
RAIL_COUNT_COLUMN = 3
RAIL_COUNT_ROWS = {
    "pitched_panels": 1,
    "rails": 2,
    "splice_bars": 3,
    "mid_clamps": 4,
    "stopper_sleeves": 5,
    "ground_lugs": 6,
    "attachments": 7,
}

# Flat layout: header row for each ballast area, grid rows follow it.
GRID_ROWS = 10
GRID_COLS = 14
FLAT_LAYOUT_AREAS = (
    {"header_row": 0, "grid_start": 1},
    {"header_row": 11, "grid_start": 12},
)
FLAT_TAG_COL = 0
FLAT_EXTRA_COL = 4

# --- Racking Tables ---

# Per-case increments applied to every occupied cell the variant visits.
# Keys of the case tables match `CellCase` values.
RACKING_TABLES: dict[str, dict[str, Any]] = {
    "ddome": {
        "row_step": 2,
        "per_panel": {"panel_clip": 2, "ballast_porter": 2},
        "cases": {
            "interior": {"base": 1, "mid_clamp": 4, "peak": 1, "corner_strut_kit": 2},
            "top_edge": {"base": 2, "end_clamp": 8, "peak": 2, "corner_strut_kit": 4},
            "left_edge": {"base": 2, "mid_clamp": 4, "peak": 1, "corner_strut_kit": 2},
            "isolated": {
                "ground_lug": 2,
                "base": 4,
                "end_clamp": 8,
                "peak": 2,
                "corner_strut_kit": 4,
            },
        },
    },
    "ecofoot2": {
        "row_step": 1,
        "per_panel": {"panel_clip": 1, "deflector": 1},
        "cases": {
            "interior": {"base": 1, "clamp": 2},
            "top_edge": {"base": 2, "clamp": 4, "ground_lug": 1},
            "left_edge": {"base": 2, "clamp": 2},
            "isolated": {"base": 4, "clamp": 4, "ground_lug": 1},
        },
    },
    "ecofoot5d": {
        "row_step": 1,
        "per_panel": {"panel_clip": 1, "deflector": 1, "ballast_tray": 1},
        "cases": {
            "interior": {"base": 1, "clamp": 2},
            "top_edge": {"base": 2, "clamp": 4},
            "left_edge": {"ballast_tray": 1, "base": 2, "clamp": 2},
            "isolated": {"ballast_tray": 1, "base": 4, "clamp": 4, "ground_lug": 1},
        },
    },
}

DDOME_SPACER_PADS = 4

# DDome clamps come in two sizes, picked by panel width (exclusive bounds).
DDOME_CLAMP_RANGES = (
    (32.0, 34.0, "33"),
    (39.0, 42.0, "40"),
)
DDOME_CLAMP_INCOMPATIBLE = "DDome clamp incompatible with panel width"

# --- Catalog Requests ---

BALLAST_CATEGORIES = {
    "ddome": "DDome",
    "ecofoot2": "ecofoot2+",
    "ecofoot5d": "EcoFoot5D",
}

# (counter key, name fragment) in request order.
# "{clamp}" and "{orientation}" are filled in by the deriver.
BALLAST_REQUESTS: dict[str, list[tuple[str, str]]] = {
    "ddome": [
        ("panel_clip", "clip"),
        ("peak", "peak"),
        ("base", "base"),
        ("protection_mat", "mat"),
        ("spacer_pad", "spacer pad"),
        ("mid_clamp", "mid {clamp}"),
        ("end_clamp", "end {clamp}"),
        ("ballast_porter", "ballast porter"),
        ("corner_strut_kit", "corner strut"),
        ("ground_lug", "ground lug"),
        ("weeb", "weeb"),
    ],
    "ecofoot2": [
        ("panel_clip", "clip"),
        ("base", "base"),
        ("clamp", "clamp"),
        ("deflector", "deflector {orientation}"),
        ("ground_lug", "ground lug"),
    ],
    "ecofoot5d": [
        ("panel_clip", "clip"),
        ("base", "base"),
        ("clamp", "clamp"),
        ("deflector", "deflector"),
        ("ballast_tray", "tray"),
        ("mid_support", "mid support"),
        ("ground_lug", "ground lug"),
    ],
}

# --- Electrical Rules ---

# Panels per branch breaker, keyed by a marker in the panel-level device name.
# Checked in order; the fallback applies when no marker matches.
BREAKER_DIVISORS = (("+", 13), ("x", 12))
BREAKER_DIVISOR_DEFAULT = 16

QCABLE_END_ALLOWANCE = 2
T_BOLTS_PER_PANEL = 1.3

# --- Report Formatting ---

QTY_WIDTH = 4
NAME_WIDTH = 50
PRICE_WIDTH = 12
CATEGORY_WIDTH = 56
HEADER_LABEL_WIDTH = 25

REPORT_TIMESTAMP = "%Y/%m/%d %H:%M:%S"
FILENAME_TIMESTAMP = "%Y-%m-%d_%H-%M-%S"
