import logging
import sys

from solar_bom import (
    CostMode,
    derive_bom,
    format_customer_info,
    load_template,
    write_order_history,
)
from solar_bom.constants import ORDER_HISTORY_DIR, TEMPLATE_DIR

MISSING_TEMPLATE_BANNER = (
    "\n\n***************************************************************\n"
    "Error:\nSolar ordering template csv not found.\n"
    "Perhaps you exported the Numbers file to your downloads folder?\n"
    "Make sure to export it to the same folder as the Numbers file.\n"
    "***************************************************************\n\n"
)


def _flag_value(args, flag, default):
    if flag in args:
        idx = args.index(flag)
        if idx + 1 < len(args):
            return args[idx + 1]
    return default


def main(args):
    show_cost = "--no-cost" not in args
    verbose = "--verbose" in args
    cost_mode = CostMode.CORRECTED if "--corrected-costs" in args else CostMode.LEGACY
    folder = _flag_value(args, "--template", TEMPLATE_DIR)

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 1. Ingest
    try:
        context, stats = load_template(
            folder, cost_mode=cost_mode, show_cost=show_cost, verbose=verbose
        )
    except FileNotFoundError as e:
        print(MISSING_TEMPLATE_BANNER)
        print(f"   {e}")
        return 1
    except ValueError as e:
        print(f"❌ Template error: {e}")
        return 1

    print(f"📂 Loaded {stats['parts_found']} parts from '{folder}'")
    if stats["errors"]:
        print(f"\n⚠️  Skipped {len(stats['errors'])} unreadable part rows:")
        for err in stats["errors"]:
            print(f"   ? {err}")

    if context.verbose:
        print("\n\n Parts List:\n")
        for category, name, qty, price in context.catalog.line_items():
            print(f"{qty} {category} {name} {price}")

    # 2. Derive
    totals = derive_bom(context)
    wattage = totals["system_wattage"]

    # 3. Report
    show_cost = context.show_cost
    if show_cost and wattage <= 0:
        print("⚠️  System wattage is 0; showing order without costs.")
        show_cost = False

    report = context.catalog.report(show_cost, wattage)
    print("\n\n" + format_customer_info(context.system) + report)

    # 4. Save
    try:
        paths = write_order_history(context.catalog, context.system, wattage, ORDER_HISTORY_DIR)
    except PermissionError as e:
        print(f"\n❌ Error: could not write order history ({e})")
        return 1

    for path in paths:
        print(f"✅ Saved: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
