import datetime
import logging
from typing import cast

import streamlit as st

from solar_bom import (
    CostMode,
    DerivationContext,
    DerivedTotals,
    ParseStats,
    build_context,
    build_order_text,
    derive_bom,
    format_customer_info,
    generate_order_csv,
    order_file_stem,
    read_template_sources,
)
from solar_bom.constants import TEMPLATE_DIR, TEMPLATE_FILES
from solar_bom.pdf_generator import generate_order_pdf

logger = logging.getLogger(__name__)

SHEET_LABELS = {
    "parts": "Parts List",
    "system": "System Info",
    "rail_layout": "Rail Layout",
    "rail_counts": "Rail Racking Count",
    "flat_layout": "Flat Layout",
}

st.set_page_config(page_title="Solar Ordering Tool", page_icon="☀️")

st.title("☀️ Solar Ordering Tool")
st.markdown("""
**Build an exact parts order for a residential solar project.**

Export the ordering template sheets to CSV and load them below.
The tool counts racking hardware from your ballast layouts, matches every part against the price list, and rounds up to whole packages.
""")

if "context" not in st.session_state:
    st.session_state.context = None
if "totals" not in st.session_state:
    st.session_state.totals = None
if "stats" not in st.session_state:
    st.session_state.stats = None

st.divider()
st.subheader("1. Template")

source_method = st.radio(
    "Template Source",
    ["Upload Sheets", "Template Folder"],
    horizontal=True,
    label_visibility="collapsed",
)

uploads = {}
folder = TEMPLATE_DIR
if source_method == "Upload Sheets":
    cols = st.columns(2)
    for i, (key, label) in enumerate(SHEET_LABELS.items()):
        uploads[key] = cols[i % 2].file_uploader(
            label,
            type=["csv"],
            key=f"upload_{key}",
            help=TEMPLATE_FILES[key],
        )
else:
    folder = st.text_input("Folder", value=TEMPLATE_DIR)

st.subheader("2. Options")
c1, c2 = st.columns(2)
show_cost = c1.toggle("Show expected cost", value=True)
corrected = c2.toggle(
    "Corrected category totals",
    value=False,
    help="Off reproduces historical order reports exactly. On sums each part's cost once.",
)

st.divider()

if st.button("Generate Order", type="primary", use_container_width=True):
    texts: dict[str, str] = {}
    try:
        if source_method == "Upload Sheets":
            missing = [SHEET_LABELS[k] for k, f in uploads.items() if f is None]
            if missing:
                raise FileNotFoundError(f"Upload the missing sheets: {', '.join(missing)}")
            texts = {
                k: f.getvalue().decode("utf-8-sig", errors="replace")
                for k, f in uploads.items()
            }
        else:
            texts = read_template_sources(folder)

        context, stats = build_context(
            texts,
            cost_mode=CostMode.CORRECTED if corrected else CostMode.LEGACY,
            show_cost=show_cost,
        )
        totals = derive_bom(context)

        st.session_state.context = context
        st.session_state.totals = totals
        st.session_state.stats = stats
        st.toast("Order generated!", icon="☀️")
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Template could not be loaded: {e}")
        st.session_state.context = None
        st.error(str(e))

# Main Process
if st.session_state.context:
    context = cast(DerivationContext, st.session_state.context)
    totals = cast(DerivedTotals, st.session_state.totals)
    stats = cast(ParseStats, st.session_state.stats)
    catalog = context.catalog
    wattage = totals["system_wattage"]

    # 1. Show Stats
    with st.container():
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Panels", totals["total_panels"])
        m2.metric("System Size", f"{wattage / 1000:.2f} kW")
        m3.metric("Line Items", len(catalog.ordered_parts()))
        if context.show_cost and wattage > 0:
            m4.metric("Expected Cost", f"${catalog.total_cost():,.0f}")

    if stats["errors"]:
        st.warning(f"⚠️ Skipped {len(stats['errors'])} unreadable rows in the parts list:")
        with st.expander("Show skipped rows"):
            for line in stats["errors"]:
                st.code(line)

    if catalog.misses:
        st.warning(f"⚠️ {len(catalog.misses)} requested parts are not in the parts list:")
        with st.expander("Show unresolved requests"):
            for miss in catalog.misses:
                st.code(miss)
    else:
        st.success("✅ Every requested part was found.")

    cost_view = context.show_cost and wattage > 0
    if context.show_cost and not cost_view:
        st.info("System wattage is 0, so costs are hidden.")

    # 2. Render
    st.subheader("🧾 Order")
    report = catalog.report(cost_view, wattage)
    st.code(format_customer_info(context.system) + report, language=None)

    # 3. Downloads
    st.subheader("💾 Export")
    now = datetime.datetime.now()
    stem = order_file_stem(context.system["customer_name"], now)

    d1, d2, d3 = st.columns(3)
    d1.download_button(
        "Download Order (.txt)",
        data=build_order_text(context.system, report, now).encode("utf-8"),
        file_name=f"{stem}{'_Cost' if cost_view else ''}.txt",
        mime="text/plain",
        type="primary",
    )
    d2.download_button(
        "Download CSV",
        data=generate_order_csv(catalog),
        file_name=f"{stem}.csv",
        mime="text/csv",
    )
    d3.download_button(
        "Download PDF",
        data=generate_order_pdf(catalog, context.system, cost_view, wattage, now),
        file_name=f"{stem}.pdf",
        mime="application/pdf",
    )
