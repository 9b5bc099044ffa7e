"""
Business rules that turn project parameters into catalog requests.

This module contains the ordering rules of the installer, which include:
- Project totals (panel counts, wattage, breakers, Q-cable drops).
- Modules and the inverter/optimizer kit for SolarEdge or Enphase systems.
- Fuses and disconnects.
- Pitched-roof rails and the attachment kit named in the rail layout.
- Ballast racking hardware from the flat-roof grids.

Every rule issues `PartCatalog.request` calls on the context's catalog; a
part the catalog does not stock is recorded as a miss and the rest of the
order is still derived.
"""

import logging
import math

import solar_bom.constants as C
from solar_bom.catalog import PartCatalog
from solar_bom.hardware import count_hardware, count_occupied, select_ddome_clamp_size
from solar_bom.types import (
    BallastArea,
    DerivationContext,
    DerivedTotals,
    RackingVariant,
)
from solar_bom.utils import ceil_div

logger = logging.getLogger(__name__)


def breakers_needed(panel_level_device: str, total_panels: int) -> int:
    """
    Branch breakers for a micro-inverter system.

    The panel-level device name carries the model family: "+" models allow
    13 panels per branch, "x" models 12, everything else 16.
    """
    device = panel_level_device.lower()
    for marker, divisor in C.BREAKER_DIVISORS:
        if marker in device:
            return ceil_div(total_panels, divisor)
    return ceil_div(total_panels, C.BREAKER_DIVISOR_DEFAULT)


def compute_totals(context: DerivationContext) -> DerivedTotals:
    """
    Computes the project-wide quantities the rules depend on.

    Args:
        context: The loaded derivation context.

    Returns:
        The derived totals. Nothing is requested yet.
    """
    system = context.system
    layout = context.rail_layout
    counts = context.rail_counts

    ballasted = 0
    non_empty_areas = 0
    for area in context.ballast_areas:
        occupied = count_occupied(area["grid"])
        ballasted += occupied
        if occupied:
            non_empty_areas += 1

    qcable_portrait = layout["qcable_portrait"]
    if qcable_portrait > 0:
        qcable_portrait += C.QCABLE_END_ALLOWANCE

    qcable_landscape = layout["qcable_landscape"]
    if qcable_landscape > 0:
        qcable_landscape += C.QCABLE_END_ALLOWANCE
    # Each ballast area is its own branch run
    qcable_landscape += C.QCABLE_END_ALLOWANCE * non_empty_areas + ballasted

    attachments = counts["attachments"]
    if layout["attachment_override"] > -1:
        attachments = layout["attachment_override"]

    total = counts["pitched_panels"] + ballasted

    totals: DerivedTotals = {
        "ballasted_panels": ballasted,
        "total_panels": total,
        "system_wattage": total * system["panel_wattage"],
        "breakers": breakers_needed(system["panel_level_device"], total),
        "attachments": attachments,
        "qcable_portrait": qcable_portrait,
        "qcable_landscape": qcable_landscape,
        "fuse_adapter": system["fuse_rating"] > system["disco_rating"],
    }
    return totals


def _request_solaredge(catalog: PartCatalog, context: DerivationContext, totals: DerivedTotals) -> None:
    system = context.system
    category = "solaredge"
    catalog.request(category, system["inverter_type"], system["inverter_count"])
    catalog.request(category, system["panel_level_device"], totals["total_panels"])
    catalog.request(category, "cell kit", system["cell_count"])
    if system["consumption_monitor"]:
        catalog.request(category, "CT", 2)
        catalog.request(category, "energy meter", 1)


def _request_enphase(catalog: PartCatalog, context: DerivationContext, totals: DerivedTotals) -> None:
    system = context.system
    category = "enphase"
    total = totals["total_panels"]

    catalog.request(category, system["panel_level_device"], total)
    catalog.request(category, "cell kit", system["cell_count"])
    catalog.request(category, "Qcable Portrait", totals["qcable_portrait"])
    catalog.request(category, "Qcable Landscape", totals["qcable_landscape"])

    # Every drop without a panel on it gets capped
    spare_drops = totals["qcable_portrait"] + totals["qcable_landscape"] - total
    catalog.request(category, "sealing cap", max(0, spare_drops))
    catalog.request(category, "terminator cap", totals["breakers"] + 1)

    if "iq combiner" in system["system_type"]:
        catalog.request(category, "combiner", 1)
        catalog.request(category, "solar breaker", totals["breakers"])
    else:
        catalog.request(category, "envoy", 1)

    if system["consumption_monitor"]:
        catalog.request(category, "ct", 2)


def _request_fuses(catalog: PartCatalog, context: DerivationContext, totals: DerivedTotals) -> None:
    system = context.system
    category = "Fuses and Disconnects"
    catalog.request(category, f"{system['disco_rating']}A Disconnect", 1)
    catalog.request(category, f"{system['fuse_rating']}A Fuse", 2)
    if totals["fuse_adapter"]:
        catalog.request(category, "reducer", 2)


def _request_pitched_racking(
    catalog: PartCatalog, context: DerivationContext, totals: DerivedTotals
) -> None:
    """IronRidge rails plus whichever attachment kits the layout names."""
    layout = context.rail_layout
    counts = context.rail_counts
    attachment = layout["attachment_type"]
    attachments = totals["attachments"]
    pitched = counts["pitched_panels"]

    category = "IronRidge"
    rail_size = "100" if "curb" in attachment else "10"

    catalog.request(category, "rail bolt", attachments)
    catalog.request(category, f"XR{rail_size}", counts["rails"])
    catalog.request(category, f"XR{rail_size} splice", counts["splice_bars"])
    catalog.request(category, "UFO", counts["mid_clamps"])
    catalog.request(category, f"sleeve {layout['panel_thickness']}", counts["stopper_sleeves"])
    catalog.request(category, "lug", counts["ground_lugs"])
    catalog.request(category, "T Bolt", math.ceil(pitched * C.T_BOLTS_PER_PANEL))

    if "quickmount" in attachment:
        catalog.request("quickmount", "QM Flashing Kit", attachments)

    if "roof tech" in attachment:
        category = "roof tech"
        catalog.request(category, "base", attachments)
        catalog.request(category, "bolt", attachments)
        screws_each = 2 if "rafter" in attachment else 5
        catalog.request(category, "screw", attachments * screws_each)
        catalog.request(category, "LFoot", attachments)

    if "curb" in attachment:
        category = "curb attachment"
        catalog.request(category, "curb kit", attachments)
        catalog.request(category, "standoff", attachments)
        catalog.request(category, "LFoot", attachments)
        catalog.request(category, "Lag Screw", attachments * 2)
        if layout["tilt_leg"] > 0:
            catalog.request(category, f'{layout["tilt_leg"]}" tilt leg kit', attachments)

    if "s5" in attachment:
        catalog.request("S5", "S5", attachments)
        catalog.request("S5", "Lfoot", attachments)


def request_ballast_area(
    catalog: PartCatalog, area: BallastArea, panel_width: float
) -> int:
    """
    Counts one ballast area's hardware and requests it from the catalog.

    Args:
        catalog: The catalog to add parts to.
        area: The ballast area (tag, variant, extra, grid).
        panel_width: Panel frame width in mm, used to size DDome clamps.

    Returns:
        The number of requests issued (0 for an empty or untagged area).
    """
    variant = area["variant"]
    if variant is None or count_occupied(area["grid"]) == 0:
        return 0

    counts = count_hardware(variant, area["grid"], area["extra"])
    if not any(counts.values()):
        return 0

    fill = {
        "clamp": "",
        "orientation": "landscape" if "landscape" in area["racking_type"] else "portrait",
    }
    if variant is RackingVariant.DDOME:
        fill["clamp"] = select_ddome_clamp_size(panel_width)

    category = C.BALLAST_CATEGORIES[variant.value]
    issued = 0
    for counter, fragment in C.BALLAST_REQUESTS[variant.value]:
        catalog.request(category, fragment.format(**fill), counts[counter])
        issued += 1
    return issued


def derive_bom(context: DerivationContext) -> DerivedTotals:
    """
    Runs every ordering rule against the context's catalog.

    Rules run in a fixed order so that reports are reproducible: modules,
    inverter kit, fuses, pitched racking, then each ballast area. A project
    with no panels orders nothing.

    Args:
        context: The loaded derivation context. Its catalog is mutated.

    Returns:
        The derived totals (used for price-per-watt and summaries).
    """
    catalog = context.catalog
    system = context.system
    totals = compute_totals(context)

    if totals["total_panels"] <= 0:
        logger.warning("No panels in the layout; nothing to order")
        return totals

    catalog.request("modules", system["panel_type"], totals["total_panels"])

    if system["system_type"] == "solaredge":
        _request_solaredge(catalog, context, totals)
    if "enphase" in system["system_type"]:
        _request_enphase(catalog, context, totals)

    _request_fuses(catalog, context, totals)

    if context.rail_counts["pitched_panels"] > 0:
        _request_pitched_racking(catalog, context, totals)

    if totals["ballasted_panels"] > 0:
        for area in context.ballast_areas:
            request_ballast_area(catalog, area, context.rail_layout["panel_width"])

    logger.info(
        f"Derived order for {totals['total_panels']} panels "
        f"({totals['system_wattage']} W), {len(catalog.misses)} unresolved"
    )
    return totals
