"""
Ballast racking hardware counts from panel occupancy grids.

Each occupied cell of a flat-roof layout is classified by whether the panel
to its left and the panel above it are also present. The racking kit then
assigns a fixed bundle of hardware to each of the four cases, plus a
per-panel bundle that every occupied cell receives.

The counters here are pure: they read a grid and return counts, and never
touch the parts catalog. `solar_bom.deriver` turns the counts into requests.
"""

import logging
from collections import Counter
from collections.abc import Callable, Iterator

import solar_bom.constants as C
from solar_bom.types import CellCase, Grid, HardwareCounts, RackingVariant

logger = logging.getLogger(__name__)

# Every counter each variant reports, including derived ones.
VARIANT_COUNTERS: dict[RackingVariant, tuple[str, ...]] = {
    RackingVariant.DDOME: (
        "panel_clip",
        "peak",
        "base",
        "protection_mat",
        "spacer_pad",
        "mid_clamp",
        "end_clamp",
        "ballast_porter",
        "corner_strut_kit",
        "ground_lug",
        "weeb",
    ),
    RackingVariant.ECOFOOT2: (
        "panel_clip",
        "base",
        "clamp",
        "deflector",
        "ground_lug",
    ),
    RackingVariant.ECOFOOT5D: (
        "panel_clip",
        "base",
        "clamp",
        "deflector",
        "ballast_tray",
        "mid_support",
        "ground_lug",
    ),
}


def classify_cell(grid: Grid, i: int, j: int) -> CellCase:
    """
    Classifies an occupied cell by its left and top neighbors.

    Args:
        grid: The occupancy grid.
        i: Row index.
        j: Column index.

    Returns:
        Exactly one of the four neighbor cases.
    """
    is_left = j > 0 and grid[i][j - 1]
    is_top = i > 0 and grid[i - 1][j]

    if is_left and is_top:
        return CellCase.INTERIOR
    if is_top:
        return CellCase.TOP_EDGE
    if is_left:
        return CellCase.LEFT_EDGE
    return CellCase.ISOLATED


def iter_occupied_cells(
    grid: Grid, row_step: int = 1
) -> Iterator[tuple[int, int, CellCase]]:
    """
    Yields (row, col, case) for every occupied cell on the visited rows.

    Args:
        grid: The occupancy grid.
        row_step: 2 visits only even rows, for kits that span a row pair.
    """
    for i in range(0, len(grid), row_step):
        for j, occupied in enumerate(grid[i]):
            if occupied:
                yield i, j, classify_cell(grid, i, j)


def count_occupied(grid: Grid) -> int:
    """Counts every occupied cell, on all rows."""
    return sum(1 for row in grid for cell in row if cell)


def case_histogram(grid: Grid, row_step: int = 1) -> Counter:
    """Tallies how many visited cells fall in each neighbor case."""
    return Counter(case for _, _, case in iter_occupied_cells(grid, row_step))


def _tally(variant: RackingVariant, grid: Grid) -> tuple[Counter, int]:
    """
    Runs the main grid pass for a variant using its increment table.

    Returns:
        The raw counter totals and the number of cells visited.
    """
    table = C.RACKING_TABLES[variant.value]
    totals: Counter = Counter({name: 0 for name in VARIANT_COUNTERS[variant]})
    visited = 0

    for _, _, case in iter_occupied_cells(grid, table["row_step"]):
        visited += 1
        totals.update(table["per_panel"])
        totals.update(table["cases"][case.value])

    return totals, visited


def _empty_counts(variant: RackingVariant) -> HardwareCounts:
    return {name: 0 for name in VARIANT_COUNTERS[variant]}


def _add_extra(totals: Counter, names: tuple[str, ...], extra: int) -> None:
    for name in names:
        totals[name] += extra


def count_ddome_hardware(grid: Grid, extra: int) -> HardwareCounts:
    """
    Tallies DDome (dual-tilt dome) hardware.

    A DDome bay holds two panels back to back, so the grid is walked two rows
    at a time and every per-cell increment already covers the pair. Odd rows
    are only consulted as the "top" neighbor of the row pair below.

    Derived counters:
        protection_mat = peak + base (before extras)
        spacer_pad = fixed allowance per area
        weeb = end_clamp + mid_clamp (after extras)

    Args:
        grid: The occupancy grid.
        extra: Overage added to every accumulated counter.

    Returns:
        Every DDome counter; all zero if no panel was visited.
    """
    totals, visited = _tally(RackingVariant.DDOME, grid)
    if visited == 0:
        return _empty_counts(RackingVariant.DDOME)

    totals["protection_mat"] = totals["peak"] + totals["base"]
    _add_extra(
        totals,
        (
            "panel_clip",
            "peak",
            "base",
            "protection_mat",
            "mid_clamp",
            "end_clamp",
            "ballast_porter",
            "corner_strut_kit",
            "ground_lug",
        ),
        extra,
    )
    totals["spacer_pad"] = C.DDOME_SPACER_PADS
    totals["weeb"] = totals["end_clamp"] + totals["mid_clamp"]

    return dict(totals)


def count_ecofoot2_hardware(grid: Grid, extra: int) -> HardwareCounts:
    """
    Tallies EcoFoot2+ (two-piece, low profile) hardware.

    Ground lugs go on every panel that starts a new column run: the
    top-edge and isolated cases.
    """
    totals, visited = _tally(RackingVariant.ECOFOOT2, grid)
    if visited == 0:
        return _empty_counts(RackingVariant.ECOFOOT2)

    _add_extra(totals, VARIANT_COUNTERS[RackingVariant.ECOFOOT2], extra)
    return dict(totals)


def count_ecofoot5d_hardware(grid: Grid, extra: int) -> HardwareCounts:
    """
    Tallies EcoFoot5D (five-piece, low profile) hardware.

    Panels that start a row run (left-edge or isolated) need a second ballast
    tray. Mid supports are sold one per tray, so `mid_support` mirrors the
    final tray count rather than being counted on its own.
    """
    totals, visited = _tally(RackingVariant.ECOFOOT5D, grid)
    if visited == 0:
        return _empty_counts(RackingVariant.ECOFOOT5D)

    _add_extra(
        totals,
        ("panel_clip", "base", "clamp", "deflector", "ballast_tray", "ground_lug"),
        extra,
    )
    totals["mid_support"] = totals["ballast_tray"]
    return dict(totals)


HardwareCounter = Callable[[Grid, int], HardwareCounts]

COUNTERS: dict[RackingVariant, HardwareCounter] = {
    RackingVariant.DDOME: count_ddome_hardware,
    RackingVariant.ECOFOOT2: count_ecofoot2_hardware,
    RackingVariant.ECOFOOT5D: count_ecofoot5d_hardware,
}


def count_hardware(variant: RackingVariant, grid: Grid, extra: int = 0) -> HardwareCounts:
    """
    Dispatches to the counter for a racking variant.

    Args:
        variant: The racking kit.
        grid: The occupancy grid.
        extra: Manual overage added to every counter.

    Returns:
        The full set of named counts for that kit.
    """
    counts = COUNTERS[variant](grid, extra)
    logger.debug(f"{variant.value} hardware: {counts}")
    return counts


def select_ddome_clamp_size(panel_width: float) -> str:
    """
    Picks the DDome clamp size that fits a panel frame.

    Args:
        panel_width: Panel frame width in mm.

    Returns:
        "33" or "40"; otherwise the incompatibility label, which is carried
        into the part request so the miss shows up on the order.
    """
    for low, high, size in C.DDOME_CLAMP_RANGES:
        if low < panel_width < high:
            return size
    logger.warning(f"No DDome clamp fits a {panel_width}mm panel")
    return C.DDOME_CLAMP_INCOMPATIBLE
