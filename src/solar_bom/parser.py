"""
Template ingestion for the exported ordering spreadsheet.

The ordering template is a spreadsheet exported as five CSV sheets. This
module turns the text of each sheet into typed records:

- Parts list -> part definitions (+ parse stats; bad rows are skipped).
- System info, rail layout, rail racking count, flat layout -> project
  parameters (bad numbers raise, since the order cannot be derived).

Cells are addressed by the fixed coordinates in `solar_bom.constants`.
"""

import csv
import io
import logging

import solar_bom.constants as C
from solar_bom.types import (
    BallastArea,
    Grid,
    ParseStats,
    PartDefinition,
    RackingVariant,
    RailCounts,
    RailLayout,
    SystemInfo,
)
from solar_bom.utils import parse_float_cell, parse_int_cell

# Initialize Logger
logger = logging.getLogger(__name__)


def read_rows(text: str) -> list[list[str]]:
    """Splits CSV text into rows of whitespace-trimmed cells."""
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    return [[cell.strip() for cell in row] for row in reader]


def _cell(rows: list[list[str]], row: int, col: int) -> str:
    """Returns a cell, or "" when the export trimmed it away."""
    if row < len(rows) and col < len(rows[row]):
        return rows[row][col]
    return ""


def _col(row: list[str], col: int) -> str:
    return row[col] if col < len(row) else ""


def _required_int(rows: list[list[str]], row: int, col: int, sheet: str, field: str) -> int:
    raw = _cell(rows, row, col)
    try:
        return parse_int_cell(raw)
    except ValueError as e:
        raise ValueError(f"{sheet}: '{field}' is not a number ({raw!r})") from e


def _required_float(
    rows: list[list[str]], row: int, col: int, sheet: str, field: str
) -> float:
    raw = _cell(rows, row, col)
    try:
        return parse_float_cell(raw)
    except ValueError as e:
        raise ValueError(f"{sheet}: '{field}' is not a number ({raw!r})") from e


def parse_parts_list(text: str) -> tuple[list[PartDefinition], ParseStats]:
    """
    Parses the parts-list sheet into part definitions.

    Rows with an empty category are section spacers and are recorded as
    residuals. Rows whose package quantity, quantity or price cannot be read
    are recorded in `errors` and skipped, so one typo does not lose the rest
    of the catalog.

    Args:
        text: CSV text of the parts-list sheet.

    Returns:
        A tuple of (Part definitions in sheet order, Parsing Statistics).
    """
    stats: ParseStats = {
        "rows_read": 0,
        "parts_found": 0,
        "residuals": [],
        "errors": [],
    }
    parts: list[PartDefinition] = []
    cols = C.PARTS_COLUMNS

    rows = read_rows(text)
    for line_no, row in enumerate(rows[C.PARTS_HEADER_ROWS :], start=C.PARTS_HEADER_ROWS + 1):
        if not any(row):
            continue
        stats["rows_read"] += 1

        category = _col(row, cols["category"])
        if not category:
            stats["residuals"].append(",".join(row))
            continue

        try:
            part: PartDefinition = {
                "category": category,
                "name": _col(row, cols["name"]),
                "pkg_qty": parse_int_cell(_col(row, cols["pkg_qty"])),
                "qty": parse_int_cell(_col(row, cols["qty"])),
                "price": parse_float_cell(_col(row, cols["price"])),
                "match_key": _col(row, cols["match_key"]).lower(),
            }
        except ValueError as e:
            logger.error(f"Parts list row {line_no} skipped: {e}")
            stats["errors"].append(f"Row {line_no}: {e}")
            continue

        if part["pkg_qty"] < 1:
            stats["errors"].append(
                f"Row {line_no}: package quantity must be at least 1 ({part['name']})"
            )
            continue

        parts.append(part)
        stats["parts_found"] += 1

    return parts, stats


def parse_system_info(text: str) -> SystemInfo:
    """
    Parses the system-info sheet (label/value pairs, value in column 1).

    Dispatch fields (system type, panel type, devices) are lowercased; the
    four order-header fields (customer name, delivery date, project type,
    address) keep their casing.

    Raises:
        ValueError: If a numeric field cannot be read.
    """
    rows = read_rows(text)
    values: dict = {}

    for row_idx, field in enumerate(C.SYSTEM_INFO_ROWS):
        if field is None:
            continue
        if field in C.SYSTEM_INFO_INT_FIELDS:
            values[field] = _required_int(rows, row_idx, 1, "System Info", field)
            continue

        raw = _cell(rows, row_idx, 1)
        if field == "consumption_monitor":
            values[field] = "yes" in raw.lower()
        elif field in C.SYSTEM_INFO_CASED_FIELDS:
            values[field] = raw
        else:
            values[field] = raw.lower()

    info: SystemInfo = {
        "customer_name": values["customer_name"],
        "delivery_date": values["delivery_date"],
        "project_type": values["project_type"],
        "address": values["address"],
        "system_type": values["system_type"],
        "panel_type": values["panel_type"],
        "panel_wattage": values["panel_wattage"],
        "panel_level_device": values["panel_level_device"],
        "inverter_type": values["inverter_type"],
        "inverter_count": values["inverter_count"],
        "cell_count": values["cell_count"],
        "disco_rating": values["disco_rating"],
        "fuse_rating": values["fuse_rating"],
        "consumption_monitor": values["consumption_monitor"],
    }
    return info


def parse_rail_layout(text: str) -> RailLayout:
    """
    Parses the pitched-roof rail layout sheet.

    Raises:
        ValueError: If a numeric field cannot be read.
    """
    rows = read_rows(text)
    cells = C.RAIL_LAYOUT_CELLS
    sheet = "Rail Layout"

    def num(field: str) -> int:
        return _required_int(rows, *cells[field], sheet, field)

    layout: RailLayout = {
        "attachment_type": _cell(rows, *cells["attachment_type"]).lower(),
        "tilt_leg": num("tilt_leg"),
        "attachment_override": num("attachment_override"),
        "panel_height": _required_float(rows, *cells["panel_height"], sheet, "panel_height"),
        "panel_width": _required_float(rows, *cells["panel_width"], sheet, "panel_width"),
        "panel_thickness": num("panel_thickness"),
        "qcable_portrait": num("qcable_portrait"),
        "qcable_landscape": num("qcable_landscape"),
    }
    return layout


def parse_rail_counts(text: str) -> RailCounts:
    """
    Parses the rail racking count sheet (values in column 3).

    Raises:
        ValueError: If a count cannot be read.
    """
    rows = read_rows(text)
    counts = {
        field: _required_int(rows, row, C.RAIL_COUNT_COLUMN, "Rail Racking Count", field)
        for field, row in C.RAIL_COUNT_ROWS.items()
    }
    result: RailCounts = {
        "pitched_panels": counts["pitched_panels"],
        "rails": counts["rails"],
        "splice_bars": counts["splice_bars"],
        "mid_clamps": counts["mid_clamps"],
        "stopper_sleeves": counts["stopper_sleeves"],
        "ground_lugs": counts["ground_lugs"],
        "attachments": counts["attachments"],
    }
    return result


def parse_grid(rows: list[list[str]], start_row: int) -> Grid:
    """Reads a GRID_ROWS x GRID_COLS block of "true"/"false" cells."""
    return [
        ["true" in _cell(rows, start_row + i, j).lower() for j in range(C.GRID_COLS)]
        for i in range(C.GRID_ROWS)
    ]


def parse_flat_layout(text: str) -> list[BallastArea]:
    """
    Parses both ballast areas from the flat-roof layout sheet.

    Each area has a header row holding the racking tag and the extra
    (overage) count, followed by its occupancy grid.

    Returns:
        The two ballast areas, in sheet order.

    Raises:
        ValueError: If an extra count cannot be read.
    """
    rows = read_rows(text)
    areas: list[BallastArea] = []

    for n, spec in enumerate(C.FLAT_LAYOUT_AREAS, start=1):
        header = spec["header_row"]
        tag = _cell(rows, header, C.FLAT_TAG_COL).lower()
        extra_raw = _cell(rows, header, C.FLAT_EXTRA_COL)
        extra = (
            _required_int(rows, header, C.FLAT_EXTRA_COL, "Flat Layout", f"area {n} extra")
            if extra_raw
            else 0
        )
        variant = RackingVariant.from_tag(tag)
        if tag and variant is None:
            logger.warning(f"Ballast area {n}: unknown racking type {tag!r}")

        areas.append(
            {
                "racking_type": tag,
                "variant": variant,
                "extra": extra,
                "grid": parse_grid(rows, spec["grid_start"]),
            }
        )

    return areas
