from __future__ import annotations

import pandas as pd
import streamlit as st

from stockcount.errors import StockCountError
from stockcount.models import UNIT_TYPES
from stockcount.services.counts import find_item, record_count
from stockcount.services.csv_io import export_log_csv
from stockcount.services.validation import ValidationRequest, validate_inventory_data
from stockcount.ui import activity_log, items_frame, page_context, session_cache

st.title("📦 Stock Count Dashboard")
st.caption("Physical vs system counts across every branch. Discrepancy = physical − system.")

settings, conn = page_context()
cache = session_cache(conn)
log = activity_log()

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")
    st.write(f"**AI validation:** {'on (' + settings.ai_model + ')' if settings.ai_enabled else 'off'}")

if not cache.branches:
    st.info(
        "No branches yet. Create one in **🏢 Branches** (or load demo data in **🧪 Data Management**), "
        "then add products in **🏷️ Products**.",
        icon="ℹ️",
    )

branch_id = st.selectbox(
    "Branch",
    options=[None] + [b.id for b in cache.branches],
    format_func=lambda bid: "All branches" if bid is None else cache.branch_label(bid),
)

items = cache.inventory if branch_id is None else cache.items_for(branch_id)

c1, c2, c3 = st.columns(3)
c1.metric("Inventory rows", len(items))
c2.metric("With discrepancy", sum(1 for i in items if i.discrepancy != 0))
c3.metric("Net discrepancy", sum(i.discrepancy for i in items))

if items:
    st.dataframe(items_frame(items, cache), use_container_width=True, hide_index=True)
else:
    st.caption("No inventory rows for this selection.")

st.divider()

with st.expander("Add count entry (AI validated)", expanded=False):
    if not cache.branches:
        st.caption("Create a branch first.")
    else:
        with st.form("add_count", clear_on_submit=True):
            form_branch = st.selectbox(
                "Branch", options=[b.id for b in cache.branches], format_func=cache.branch_label
            )
            code = st.text_input("Product code", placeholder="e.g. SKU-006")
            description = st.text_input("Description")
            col_a, col_b, col_c = st.columns(3)
            physical = col_a.number_input("Physical count", min_value=0, value=0, step=1)
            system = col_b.number_input("System count", min_value=0, value=0, step=1)
            unit_type = col_c.selectbox("Unit type", options=list(UNIT_TYPES))
            submitted = st.form_submit_button("Validate & Save", type="primary")

        if submitted:
            br = cache.get_branch(form_branch)
            try:
                request = ValidationRequest(
                    code=code,
                    description=description,
                    physical_count=int(physical),
                    system_count=int(system),
                    branch=br.name,
                )
                with st.spinner("Validating entry..."):
                    verdict = validate_inventory_data(request, settings)

                if not verdict.is_valid:
                    st.error("Validation failed:\n\n" + "\n".join(f"- {e}" for e in verdict.errors))
                else:
                    target = find_item(conn, br.id, code)
                    if target is None:
                        st.error(f"{code.strip().upper()} is not in the catalog of {br.name}. Add it in Products first.")
                    else:
                        item = record_count(conn, target.id, int(physical), int(system), unit_type=unit_type)
                        if item is None:
                            st.warning("That inventory row was removed meanwhile.")
                        else:
                            cache.apply_items_updated([item])
                            log.record(item, "Count entry added")
                            st.success(f"Saved count for {item.description}.")
                            st.rerun()
            except StockCountError as e:
                st.error(str(e))

st.subheader("Activity log")
entries = log.entries()
if entries:
    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Time": e.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                    "Branch": cache.branch_name(e.item.branch_id),
                    "Code": e.item.code,
                    "Change": e.change,
                    "Physical": e.item.physical_count,
                    "System": e.item.system_count,
                }
                for e in entries
            ]
        ),
        use_container_width=True,
        hide_index=True,
    )
    st.download_button(
        "Download log (CSV)",
        data=export_log_csv(e.item for e in entries),
        file_name="registro_inventario.csv",
        mime="text/csv",
    )
else:
    st.caption("No changes recorded in this session yet.")
