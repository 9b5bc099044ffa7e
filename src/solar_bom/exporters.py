import csv
import datetime
import io
import logging
import os

import solar_bom.constants as C
from solar_bom.catalog import PartCatalog
from solar_bom.types import SystemInfo
from solar_bom.utils import format_field

logger = logging.getLogger(__name__)


def format_customer_info(system: SystemInfo) -> str:
    """
    Builds the aligned project header printed above every order.

    Args:
        system (SystemInfo): The parsed system-info sheet.

    Returns:
        str: Four "label   value" lines, each ending in a newline.
    """
    spacing = C.HEADER_LABEL_WIDTH
    return (
        format_field("Project Name:", system["customer_name"], spacing)
        + "\n"
        + format_field("Lead Source:", system["project_type"], spacing)
        + "\n"
        + format_field("Estimated Delivery:", system["delivery_date"], spacing)
        + "\n"
        + format_field("Address:", system["address"], spacing)
        + "\n"
    )


def build_order_text(
    system: SystemInfo, report: str, generated_at: datetime.datetime
) -> str:
    """Prefixes a catalog report with the generation stamp and project header."""
    stamp = generated_at.strftime(C.REPORT_TIMESTAMP)
    return f"Solar Parts Order Generated on {stamp}\n{format_customer_info(system)}{report}\n"


def order_file_stem(customer_name: str, generated_at: datetime.datetime) -> str:
    """
    Returns the timestamped base filename for an order.

    Example:
        "2024-05-01_09-30-00_Jane_Smith"
    """
    safe_name = customer_name.strip().replace(" ", "_")
    return f"{generated_at.strftime(C.FILENAME_TIMESTAMP)}_{safe_name}"


def write_order_history(
    catalog: PartCatalog,
    system: SystemInfo,
    wattage: int,
    out_dir: str = C.ORDER_HISTORY_DIR,
    generated_at: datetime.datetime | None = None,
) -> list[str]:
    """
    Saves the supplier order (no prices) and the internal cost copy.

    The plain file is what gets sent to the supplier; the `_Cost` sibling
    keeps the price and price-per-watt breakdown for job costing. The cost
    copy is skipped when the system has no wattage to divide by.

    Args:
        catalog (PartCatalog): The derived catalog.
        system (SystemInfo): Project header details.
        wattage (int): Total system wattage.
        out_dir (str): Folder for the order history (created if missing).
        generated_at (datetime | None): Timestamp; defaults to now.

    Returns:
        list[str]: Paths of the files written.
    """
    generated_at = generated_at or datetime.datetime.now()
    os.makedirs(out_dir, exist_ok=True)

    stem = order_file_stem(system["customer_name"], generated_at)
    plain_path = os.path.join(out_dir, f"{stem}.txt")
    written = []

    with open(plain_path, "w", encoding="utf-8") as f:
        f.write(build_order_text(system, catalog.report(False, wattage), generated_at))
    written.append(plain_path)

    if wattage > 0:
        cost_path = os.path.join(out_dir, f"{stem}_Cost.txt")
        with open(cost_path, "w", encoding="utf-8") as f:
            f.write(build_order_text(system, catalog.report(True, wattage), generated_at))
        written.append(cost_path)
    else:
        logger.warning("System wattage is 0; cost report not written")

    return written


def generate_order_csv(catalog: PartCatalog) -> bytes:
    """
    Generates a CSV of every part being ordered.

    Args:
        catalog (PartCatalog): The derived catalog.

    Returns:
        bytes: The CSV content encoded as utf-8-sig.
    """
    csv_buf = io.StringIO()
    fields = ["Category", "Part", "Qty", "Unit Price", "Extended Price"]
    writer = csv.DictWriter(csv_buf, fieldnames=fields)
    writer.writeheader()

    for category, name, qty, price in catalog.line_items():
        if qty <= 0:
            continue
        writer.writerow(
            {
                "Category": category,
                "Part": name,
                "Qty": qty,
                "Unit Price": f"{price:.2f}",
                "Extended Price": f"{price * qty:.2f}",
            }
        )

    # encode "utf-8-sig" to ensure Excel opens it correctly with special characters
    return csv_buf.getvalue().encode("utf-8-sig")
