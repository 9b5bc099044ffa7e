"""
Parts catalog: fuzzy resolution, package rounding and cost accumulation.

This module acts as the "Controller" for the ordering library. It handles:
- Loading purchasable parts in template order.
- Resolving symbolic (category, name fragment) requests to a single part.
- Rounding raw unit counts up to whole packages.
- Tracking running per-category costs for the price-per-watt summary.
- Rendering the grouped, fixed-width order text.
"""

import logging
from collections.abc import Iterator

import solar_bom.constants as C
from solar_bom.types import CostMode, PartRecord
from solar_bom.utils import ceil_div, format_money

logger = logging.getLogger(__name__)


def format_part_line(part: PartRecord, show_price: bool = False) -> str:
    """
    Renders one order line: quantity, name and optionally pricing.

    Example:
        "12  - XR10 Rail 168in" + padding + "$1,140.00   ($95.00 each)"

    Args:
        part: The catalog record.
        show_price: Append the extended and unit price columns.

    Returns:
        The fixed-width line (no trailing newline).
    """
    line = f"{part['qty']:<{C.QTY_WIDTH}}- {part['name']:<{C.NAME_WIDTH}}"
    if show_price:
        extended = format_money(part["price"] * part["qty"])
        line += f"{extended:<{C.PRICE_WIDTH}}({format_money(part['price'])} each)"
    return line


class PartCatalog:
    """
    The list of parts available for purchase, with running order totals.

    Records keep their load order, which is also the report order. Category
    costs are tracked separately from the per-record quantities; see
    `CostMode` for how the two update rules differ.
    """

    def __init__(self, cost_mode: CostMode = CostMode.LEGACY):
        self.parts: list[PartRecord] = []
        # Insertion-ordered: report subtotals follow first appearance
        self.category_cost: dict[str, float] = {}
        self.misses: list[str] = []
        self.cost_mode = cost_mode

    def __iter__(self) -> Iterator[PartRecord]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def load(self, part: PartRecord) -> None:
        """
        Appends a part and seeds its category cost from any pre-filled quantity.

        Most template parts start at zero; a positive `qty` marks a part being
        ordered by hand regardless of what the derivation requests.

        Args:
            part: The record to add. It is stored as-is and mutated by later
                requests.

        Raises:
            ValueError: If the package quantity is below 1.
        """
        if part["pkg_qty"] < 1:
            raise ValueError(
                f"Package quantity must be >= 1 for {part['name']!r}, got {part['pkg_qty']}"
            )
        part["match_key"] = part["match_key"].lower()
        self.parts.append(part)

        seeded = part["qty"] * part["price"]
        category = part["category"]

        if category not in self.category_cost:
            self.category_cost[category] = seeded
        elif part["qty"] > 0:
            if self.cost_mode is CostMode.LEGACY:
                # Overwrites rather than sums; matches historical reports
                self.category_cost[category] = seeded
            else:
                self.category_cost[category] += seeded

    def load_all(self, parts: list[PartRecord]) -> None:
        """Loads a sequence of parts in order."""
        for part in parts:
            self.load(part)

    def find(self, category: str, name: str) -> PartRecord | None:
        """
        Returns the first part whose category and match key contain the query.

        Both comparisons are case-insensitive substring checks, so "ecofoot2"
        finds a part in category "EcoFoot2+" and "xr10" finds "xr10 rail".
        When several parts match, the earliest loaded one wins.
        """
        category = category.lower()
        name = name.lower()
        for part in self.parts:
            if category in part["category"].lower() and name in part["match_key"]:
                return part
        return None

    def request(self, category: str, name: str, qty: int) -> tuple[bool, str]:
        """
        Adds a raw unit count to the first matching part.

        The count is converted to whole packages (rounded up) when the part is
        sold in multiples. A miss is recorded and logged but never raised, so
        one unknown part does not stop the rest of the order.

        Args:
            category: Category fragment (e.g., "IronRidge").
            name: Match-key fragment (e.g., "xr10 splice").
            qty: Raw number of units required.

        Returns:
            A tuple containing:
                - bool: True if a part was found and updated.
                - str: "Part Added: <line>" or "<category> - <name> Part not found".
        """
        part = self.find(category, name)
        if part is None:
            message = f"{category} - {name} Part not found"
            self.misses.append(message)
            logger.warning(message)
            return False, message

        if part["pkg_qty"] > 1:
            added = ceil_div(qty, part["pkg_qty"])
        else:
            added = qty
        part["qty"] += added

        old_cost = self.category_cost[part["category"]]
        if self.cost_mode is CostMode.LEGACY:
            # Uses the new running total, not the delta; kept for report parity
            self.category_cost[part["category"]] = old_cost + part["price"] * part["qty"]
        else:
            self.category_cost[part["category"]] = old_cost + part["price"] * added

        message = f"Part Added: {format_part_line(part)}"
        logger.info(message)
        return True, message

    def line_items(self) -> Iterator[tuple[str, str, int, float]]:
        """Yields (category, name, qty, unit price) for every loaded part."""
        for part in self.parts:
            yield part["category"], part["name"], part["qty"], part["price"]

    def ordered_parts(self) -> list[PartRecord]:
        """Returns the parts with a positive quantity, in load order."""
        return [p for p in self.parts if p["qty"] > 0]

    def total_cost(self) -> float:
        """Sums every category cost that is positive."""
        return sum(cost for cost in self.category_cost.values() if cost > 0)

    def report(
        self, show_cost: bool, wattage: int, include_misses: bool = True
    ) -> str:
        """
        Renders the order as grouped, fixed-width text.

        A category header is printed each time the category changes while
        walking parts in load order. A category split across two places in
        the parts list therefore gets two headers.

        With `show_cost`, each line carries its extended and unit price, and a
        summary lists every category with a positive cost, its price per watt,
        and the grand total.

        Args:
            show_cost: Include pricing columns and the cost summary.
            wattage: Total system wattage used for price-per-watt.
            include_misses: Append the list of unresolved requests, if any.

        Returns:
            The report text.

        Raises:
            ValueError: If `show_cost` is set and `wattage` is not positive.
        """
        if show_cost and wattage <= 0:
            raise ValueError(f"Price per watt needs a positive wattage, got {wattage}")

        chunks: list[str] = []
        current_category = ""

        for part in self.ordered_parts():
            if part["category"] != current_category:
                current_category = part["category"]
                chunks.append(f"\n\n{current_category}:")
            chunks.append("\n" + format_part_line(part, show_cost))

        if show_cost:
            chunks.append("\n\n\n")
            total = 0.0
            for category, cost in self.category_cost.items():
                if cost > 0:
                    total += cost
                    money = format_money(cost)
                    chunks.append(
                        f"{category:<{C.CATEGORY_WIDTH}}{money:<{C.PRICE_WIDTH}}"
                        f"(ppw = {format_money(cost / wattage)})\n"
                    )
            chunks.append(f"\n\nTotal Cost: {format_money(total)}")
            chunks.append(f"\nTotal ppW:  {format_money(total / wattage)}\n")

        if include_misses and self.misses:
            chunks.append("\n\nUnresolved Requests:")
            for miss in self.misses:
                chunks.append(f"\n{miss}")
            chunks.append("\n")

        return "".join(chunks)
