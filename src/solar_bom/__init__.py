"""
Solar Ordering Tool Library (Package Entry Point).

Exposes the core logic and data structures for template ingestion, ballast
hardware counting, catalog resolution and order reporting.
"""

from .catalog import PartCatalog, format_part_line
from .deriver import breakers_needed, compute_totals, derive_bom, request_ballast_area
from .exporters import (
    build_order_text,
    format_customer_info,
    generate_order_csv,
    order_file_stem,
    write_order_history,
)
from .hardware import (
    case_histogram,
    classify_cell,
    count_ddome_hardware,
    count_ecofoot2_hardware,
    count_ecofoot5d_hardware,
    count_hardware,
    count_occupied,
    select_ddome_clamp_size,
)
from .loader import build_context, load_template, read_source, read_template_sources
from .parser import (
    parse_flat_layout,
    parse_parts_list,
    parse_rail_counts,
    parse_rail_layout,
    parse_system_info,
)
from .types import (
    BallastArea,
    CellCase,
    CostMode,
    DerivationContext,
    DerivedTotals,
    Grid,
    HardwareCounts,
    ParseStats,
    PartDefinition,
    PartRecord,
    RackingVariant,
    RailCounts,
    RailLayout,
    SystemInfo,
)
from .utils import format_field, format_money

__all__ = [
    # types
    "BallastArea",
    "CellCase",
    "CostMode",
    "DerivationContext",
    "DerivedTotals",
    "Grid",
    "HardwareCounts",
    "ParseStats",
    "PartDefinition",
    "PartRecord",
    "RackingVariant",
    "RailCounts",
    "RailLayout",
    "SystemInfo",
    # catalog
    "PartCatalog",
    "format_part_line",
    # hardware
    "case_histogram",
    "classify_cell",
    "count_ddome_hardware",
    "count_ecofoot2_hardware",
    "count_ecofoot5d_hardware",
    "count_hardware",
    "count_occupied",
    "select_ddome_clamp_size",
    # deriver
    "breakers_needed",
    "compute_totals",
    "derive_bom",
    "request_ballast_area",
    # parser
    "parse_flat_layout",
    "parse_parts_list",
    "parse_rail_counts",
    "parse_rail_layout",
    "parse_system_info",
    # loader
    "build_context",
    "load_template",
    "read_source",
    "read_template_sources",
    # exporters
    "build_order_text",
    "format_customer_info",
    "generate_order_csv",
    "order_file_stem",
    "write_order_history",
    # utils
    "format_field",
    "format_money",
]
