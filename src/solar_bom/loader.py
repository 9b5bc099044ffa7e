"""
Input handling and template orchestration.

This module abstracts the source of the template sheets (local folder, URL,
uploaded bytes) from the logic used to parse them. It reads the five sheet
texts and assembles a ready-to-derive `DerivationContext`.
"""

import logging
import os

import requests

import solar_bom.constants as C
from solar_bom.catalog import PartCatalog
from solar_bom.parser import (
    parse_flat_layout,
    parse_parts_list,
    parse_rail_counts,
    parse_rail_layout,
    parse_system_info,
)
from solar_bom.types import CostMode, DerivationContext, ParseStats

logger = logging.getLogger(__name__)


def read_source(source: str) -> str:
    """
    Returns the text of a sheet from a local path or an http(s) URL.

    Args:
        source: File path, or a URL such as a published price sheet.

    Returns:
        The decoded text.

    Raises:
        FileNotFoundError: If a local path does not exist.
        requests.HTTPError: If the URL answers with an error status.
    """
    if source.lower().startswith(("http://", "https://")):
        response = requests.get(source, timeout=10)
        response.raise_for_status()
        return response.text

    with open(source, "r", encoding="utf-8-sig", errors="replace") as f:
        return f.read()


def read_template_sources(folder: str = C.TEMPLATE_DIR) -> dict[str, str]:
    """
    Reads every template sheet from an export folder.

    Args:
        folder: Directory holding the exported CSV sheets.

    Returns:
        Sheet key (see `TEMPLATE_FILES`) -> CSV text.

    Raises:
        FileNotFoundError: Listing every sheet that is missing.
    """
    missing = [
        name
        for name in C.TEMPLATE_FILES.values()
        if not os.path.exists(os.path.join(folder, name))
    ]
    if missing:
        raise FileNotFoundError(
            f"Missing template sheets in '{folder}': {', '.join(missing)}"
        )

    return {
        key: read_source(os.path.join(folder, name))
        for key, name in C.TEMPLATE_FILES.items()
    }


def build_context(
    texts: dict[str, str],
    cost_mode: CostMode = CostMode.LEGACY,
    show_cost: bool = True,
    verbose: bool = False,
) -> tuple[DerivationContext, ParseStats]:
    """
    Parses the sheet texts and loads the parts catalog.

    Args:
        texts: Sheet key -> CSV text, as returned by `read_template_sources`.
        cost_mode: How category costs accumulate.
        show_cost: Whether reports for this run include pricing.
        verbose: Log every part added.

    Returns:
        A tuple of (Derivation context, Parts-list parse statistics).

    Raises:
        KeyError: If a sheet is missing from `texts`.
        ValueError: If a project sheet holds an unreadable number.
    """
    parts, stats = parse_parts_list(texts["parts"])
    catalog = PartCatalog(cost_mode=cost_mode)
    catalog.load_all(parts)

    if stats["errors"]:
        logger.error(f"{len(stats['errors'])} parts-list rows could not be read")

    context = DerivationContext(
        catalog=catalog,
        system=parse_system_info(texts["system"]),
        rail_layout=parse_rail_layout(texts["rail_layout"]),
        rail_counts=parse_rail_counts(texts["rail_counts"]),
        ballast_areas=parse_flat_layout(texts["flat_layout"]),
        show_cost=show_cost,
        verbose=verbose,
    )
    return context, stats


def load_template(
    folder: str = C.TEMPLATE_DIR,
    cost_mode: CostMode = CostMode.LEGACY,
    show_cost: bool = True,
    verbose: bool = False,
) -> tuple[DerivationContext, ParseStats]:
    """Reads a template export folder and builds its derivation context."""
    texts = read_template_sources(folder)
    return build_context(texts, cost_mode=cost_mode, show_cost=show_cost, verbose=verbose)
