"""
PDF Generation Engine.

This module renders the derived parts order as a printable order sheet:
project header, one table per category run (same grouping as the text
report), optional pricing columns, and the category cost summary.

It uses the `fpdf2` library to generate the PDF in memory.
"""

import datetime

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from solar_bom.catalog import PartCatalog
from solar_bom.types import SystemInfo
from solar_bom.utils import format_money


def _latin1(text: str) -> str:
    """Core PDF fonts are Latin-1 only; replace anything else."""
    return text.encode("latin-1", "replace").decode("latin-1")


class OrderSheet(FPDF):
    """
    FPDF Subclass for the printable parts order.

    Features:
        - Automatic pagination.
        - Custom header/footer.
        - Category tables that repeat their column headers after a page break.
    """

    def __init__(self, show_cost: bool = False):
        super().__init__(format="Letter", unit="mm")
        self.set_auto_page_break(auto=True, margin=15)
        self.set_title("Solar Parts Order")
        self.show_cost = show_cost
        self.add_page()

    def header(self):
        """Renders the header on every page."""
        self.set_font("Courier", "B", 10)
        self.cell(
            0,
            10,
            "Solar Parts Order",
            align="R",
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
        self.line(10, 20, 205, 20)
        self.ln(6)

    def footer(self):
        """Renders the footer on every page."""
        self.set_y(-15)
        self.set_font("Courier", "I", 8)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")

    def add_project_info(self, system: SystemInfo, generated_at: datetime.datetime):
        """Prints the project block at the top of the first page."""
        self.set_font("Courier", "B", 14)
        self.cell(
            0,
            8,
            _latin1(f"Project: {system['customer_name']}"),
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
        self.set_font("Courier", "", 10)
        rows = [
            ("Lead Source", system["project_type"]),
            ("Estimated Delivery", system["delivery_date"]),
            ("Address", system["address"]),
            ("Generated", generated_at.strftime("%Y-%m-%d %H:%M")),
        ]
        for label, value in rows:
            self.cell(45, 6, f"{label}:")
            self.cell(0, 6, _latin1(str(value)), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(4)

    def _table_header(self):
        self.set_font("Courier", "B", 9)
        self.cell(15, 7, "Qty", 1, align="C")
        if self.show_cost:
            self.cell(110, 7, "Part", 1)
            self.cell(35, 7, "Unit", 1, align="R")
            self.cell(0, 7, "Extended", 1, align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        else:
            self.cell(0, 7, "Part", 1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font("Courier", "", 9)

    def add_category(self, category: str, parts: list[tuple[str, int, float]]):
        """
        Adds one category table.

        Args:
            category (str): The category heading.
            parts (list[tuple]): (name, qty, unit price) rows.
        """
        if self.get_y() + 20 > self.page_break_trigger:
            self.add_page()

        self.set_font("Courier", "B", 11)
        self.cell(0, 8, _latin1(category), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self._table_header()

        for name, qty, price in parts:
            # Page Overflow Check: keep each row with a header above it
            if self.get_y() + 7 > self.page_break_trigger:
                self.add_page()
                self._table_header()

            self.cell(15, 7, str(qty), 1, align="C")
            if self.show_cost:
                self.cell(110, 7, _latin1(name)[:60], 1)
                self.cell(35, 7, format_money(price), 1, align="R")
                self.cell(
                    0,
                    7,
                    format_money(price * qty),
                    1,
                    align="R",
                    new_x=XPos.LMARGIN,
                    new_y=YPos.NEXT,
                )
            else:
                self.cell(0, 7, _latin1(name)[:90], 1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        self.ln(3)

    def add_cost_summary(self, catalog: PartCatalog, wattage: int):
        """Prints category subtotals with price per watt, then the grand total."""
        self.ln(4)
        self.set_font("Courier", "B", 11)
        self.cell(0, 8, "Cost Summary", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font("Courier", "", 9)

        for category, cost in catalog.category_cost.items():
            if cost <= 0:
                continue
            self.cell(110, 6, _latin1(category))
            self.cell(40, 6, format_money(cost), align="R")
            self.cell(
                0,
                6,
                f"ppw {format_money(cost / wattage)}",
                align="R",
                new_x=XPos.LMARGIN,
                new_y=YPos.NEXT,
            )

        total = catalog.total_cost()
        self.set_font("Courier", "B", 10)
        self.cell(110, 8, "Total")
        self.cell(40, 8, format_money(total), align="R")
        self.cell(
            0,
            8,
            f"ppw {format_money(total / wattage)}",
            align="R",
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )

    def add_misses(self, misses: list[str]):
        """Lists requests the catalog could not resolve, in red."""
        self.ln(4)
        self.set_font("Courier", "B", 11)
        self.set_text_color(220, 50, 50)  # Red
        self.cell(0, 8, "Unresolved Requests", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font("Courier", "", 9)
        for miss in misses:
            self.multi_cell(0, 5, _latin1(miss), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_text_color(0, 0, 0)  # Reset


def group_by_category_runs(catalog: PartCatalog) -> list[tuple[str, list[tuple[str, int, float]]]]:
    """
    Groups ordered parts the way the text report does: a new group each time
    the category changes in load order.
    """
    groups: list[tuple[str, list[tuple[str, int, float]]]] = []
    for part in catalog.ordered_parts():
        if not groups or groups[-1][0] != part["category"]:
            groups.append((part["category"], []))
        groups[-1][1].append((part["name"], part["qty"], part["price"]))
    return groups


def generate_order_pdf(
    catalog: PartCatalog,
    system: SystemInfo,
    show_cost: bool,
    wattage: int,
    generated_at: datetime.datetime | None = None,
) -> bytes:
    """
    Renders the order sheet PDF.

    Args:
        catalog (PartCatalog): The derived catalog.
        system (SystemInfo): Project header details.
        show_cost (bool): Include prices and the cost summary.
        wattage (int): Total system wattage; must be positive with `show_cost`.
        generated_at (datetime | None): Timestamp; defaults to now.

    Returns:
        bytes: The binary content of the PDF.

    Raises:
        ValueError: If `show_cost` is set and `wattage` is not positive.
    """
    if show_cost and wattage <= 0:
        raise ValueError(f"Price per watt needs a positive wattage, got {wattage}")

    pdf = OrderSheet(show_cost=show_cost)
    pdf.add_project_info(system, generated_at or datetime.datetime.now())

    for category, parts in group_by_category_runs(catalog):
        pdf.add_category(category, parts)

    if show_cost:
        pdf.add_cost_summary(catalog, wattage)
    if catalog.misses:
        pdf.add_misses(catalog.misses)

    return bytes(pdf.output())
