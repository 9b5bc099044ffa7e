"""
Type definitions and shared data structures for the ordering library.

This module contains the TypedDicts, enums and the derivation context used
throughout the ingestion, hardware counting and catalog pipeline to ensure
consistent data passing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
    from solar_bom.catalog import PartCatalog

# Rows x columns of booleans; True marks an occupied panel position.
Grid = list[list[bool]]

# Hardware piece name -> required count.
HardwareCounts = dict[str, int]


class CellCase(str, Enum):
    """Neighbor classification of one occupied ballast cell."""

    INTERIOR = "interior"
    TOP_EDGE = "top_edge"
    LEFT_EDGE = "left_edge"
    ISOLATED = "isolated"


class RackingVariant(str, Enum):
    """The three ballast racking kits the counter knows how to tally."""

    DDOME = "ddome"
    ECOFOOT2 = "ecofoot2"
    ECOFOOT5D = "ecofoot5d"

    @classmethod
    def from_tag(cls, tag: str) -> "RackingVariant | None":
        """
        Picks the variant named in a free-text racking tag.

        Args:
            tag: The racking cell from the flat layout (e.g. "EcoFoot2+ Landscape").

        Returns:
            The matching variant, or None if the tag names no known kit.
        """
        lowered = tag.lower()
        if "ddome" in lowered:
            return cls.DDOME
        if "ecofoot2" in lowered:
            return cls.ECOFOOT2
        if "ecofoot5" in lowered:
            return cls.ECOFOOT5D
        return None


class CostMode(str, Enum):
    """
    How category running costs are updated.

    LEGACY reproduces the historical order reports exactly: a pre-filled part
    overwrites its category cost at load time, and each request adds
    `unit_price * new_total_qty`. Both formulas over-count and are kept only
    for parity with past orders.

    CORRECTED sums pre-filled costs at load time and adds
    `unit_price * added_qty` per request.
    """

    LEGACY = "legacy"
    CORRECTED = "corrected"


class PartRecord(TypedDict):
    """
    One purchasable item in the parts catalog.

    Attributes:
        category: Grouping key (e.g. "IronRidge"), matched case-insensitively.
        name: Display name printed on the order.
        pkg_qty: Units per purchasable package (>= 1).
        qty: Running number of packages to order.
        price: Price per package.
        match_key: Lowercase token used for substring resolution.
    """

    category: str
    name: str
    pkg_qty: int
    qty: int
    price: float
    match_key: str


# A parts-list row as read from the template; `qty` is the pre-filled order.
PartDefinition = PartRecord


class ParseStats(TypedDict):
    """
    Tracking metrics and errors for a single parts-list ingestion.

    Attributes:
        rows_read: Data rows seen (headers excluded).
        parts_found: Rows successfully turned into part definitions.
        residuals: Rows skipped because they carry no category.
        errors: Rows rejected because a numeric cell could not be parsed.
    """

    rows_read: int
    parts_found: int
    residuals: list[str]
    errors: list[str]


class SystemInfo(TypedDict):
    customer_name: str
    delivery_date: str
    project_type: str
    address: str
    system_type: str
    panel_type: str
    panel_wattage: int
    panel_level_device: str
    inverter_type: str
    inverter_count: int
    cell_count: int
    disco_rating: int
    fuse_rating: int
    consumption_monitor: bool


class RailLayout(TypedDict):
    """Pitched-roof attachment details. Dimensions are in millimetres."""

    attachment_type: str
    tilt_leg: int
    attachment_override: int
    panel_height: float
    panel_width: float
    panel_thickness: int
    qcable_portrait: int
    qcable_landscape: int


class RailCounts(TypedDict):
    pitched_panels: int
    rails: int
    splice_bars: int
    mid_clamps: int
    stopper_sleeves: int
    ground_lugs: int
    attachments: int


class BallastArea(TypedDict):
    """
    One ballasted (flat roof) panel area.

    Attributes:
        racking_type: The racking tag as entered (lowercased).
        variant: The kit parsed from the tag, or None.
        extra: Overage added to every hardware counter of this area.
        grid: The occupancy grid.
    """

    racking_type: str
    variant: RackingVariant | None
    extra: int
    grid: Grid


class DerivedTotals(TypedDict):
    """
    Project-wide quantities computed before any part is requested.

    Attributes:
        ballasted_panels: Occupied cells across both ballast areas.
        total_panels: Pitched plus ballasted panels.
        system_wattage: total_panels * panel wattage.
        breakers: Branch breakers (panels per branch depend on the device).
        attachments: Roof attachments after the manual override.
        qcable_portrait: Portrait Q-cable drops incl. end allowance.
        qcable_landscape: Landscape Q-cable drops incl. ballast panels.
        fuse_adapter: True when the fuse is larger than the disconnect.
    """

    ballasted_panels: int
    total_panels: int
    system_wattage: int
    breakers: int
    attachments: int
    qcable_portrait: int
    qcable_landscape: int
    fuse_adapter: bool


@dataclass
class DerivationContext:
    """
    Everything a single BOM derivation reads and mutates.

    Built once from the template sheets and passed to the deriver, which
    fills `catalog` with requests. Replaces any module-level project state.
    """

    catalog: "PartCatalog"
    system: SystemInfo
    rail_layout: RailLayout
    rail_counts: RailCounts
    ballast_areas: list[BallastArea] = field(default_factory=list)
    show_cost: bool = True
    verbose: bool = False

