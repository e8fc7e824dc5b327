"""
Streamlit UI for the workflow quote engine.

Features:
- Upload an n8n workflow and see its price list
- Manual-review items called out separately
- Single-node calculator with breakdown
- Price table browser
"""
import json

import pandas as pd
import streamlit as st

from workflow_quote.config.log_setup import setup_logging
from workflow_quote.config.settings import get_settings
from workflow_quote.engine import PricingEngine, ModifierType
from workflow_quote.services.price_list import generate_price_list, price_workflow
from workflow_quote.workflow.parser import parse_n8n_to_structured
from workflow_quote.workflow.validator import validate_workflow_bytes


st.set_page_config(
    page_title="Workflow Quote Generator",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    setup_logging(get_settings().log_level)
    return PricingEngine()


engine = get_engine()
settings = get_settings()


# ============================================================================
# SIDEBAR: Price table status
# ============================================================================
with st.sidebar:
    st.header("Price Table")
    if engine.loaded:
        st.success(f"**{len(engine.get_available_node_types())} node types loaded**")
    else:
        st.warning("No price table loaded - every node will need manual review")
    st.caption(f"`{engine.table_path}`")

    if st.button("Reload price table"):
        get_engine.clear()
        st.rerun()


tab_quote, tab_calc, tab_table = st.tabs(["Workflow Quote", "Node Calculator", "Price Table"])


# ============================================================================
# TAB 1: Workflow upload → price list
# ============================================================================
with tab_quote:
    st.subheader("Price an n8n workflow")
    uploaded = st.file_uploader("n8n workflow export", type=["json"])

    if uploaded is not None:
        validation, data = validate_workflow_bytes(uploaded.getvalue(), settings.max_upload_bytes)

        if not validation.is_valid:
            st.error(validation.message)
            if validation.details:
                st.json(validation.details)
            st.stop()

        if validation.warning:
            st.warning(validation.warning)

        structured = parse_n8n_to_structured(data)
        price_list = generate_price_list(structured, engine)
        quote = price_workflow(structured, engine)

        c1, c2, c3 = st.columns(3)
        c1.metric("Workflow", structured.workflow_name)
        c2.metric("Nodes", price_list.summary["total_items"])
        c3.metric("Base Total", f"${price_list.summary['estimated_base_total']:,.2f}")

        items_df = pd.DataFrame([item.__dict__ for item in price_list.items])
        if not items_df.empty:
            items_df["final_price"] = items_df["id"].map(
                lambda node_id: quote.results[node_id].final_price if quote.results[node_id].success else None
            )
            items_df["modifiers"] = items_df["modifiers"].map(", ".join)
            st.dataframe(
                items_df[["label", "node_type", "base_price", "final_price", "modifiers", "notes", "requires_manual_review"]],
                use_container_width=True,
                hide_index=True,
            )

        review = price_list.review_items()
        if review:
            st.warning(f"{len(review)} node(s) require manual review")
            st.dataframe(
                pd.DataFrame([{"label": i.label, "node_type": i.node_type, "notes": i.notes} for i in review]),
                use_container_width=True,
                hide_index=True,
            )


# ============================================================================
# TAB 2: Single-node calculator
# ============================================================================
with tab_calc:
    st.subheader("Node calculator")
    node_types = engine.get_available_node_types()

    if not node_types:
        st.info("Price table is empty.")
    else:
        node_type = st.selectbox("Node type", node_types)
        pricing = engine.get_pricing_for_node_type(node_type)

        values = {}
        for rule in pricing.modifiers:
            use = st.checkbox(f"Set {rule.name} ({rule.type})", key=f"use_{node_type}_{rule.name}")
            if not use:
                continue
            if rule.type == ModifierType.BOOLEAN:
                values[rule.name] = st.toggle(rule.name, key=f"val_{node_type}_{rule.name}")
            elif rule.type == ModifierType.MULTIPLIER:
                values[rule.name] = True
            else:
                values[rule.name] = st.number_input(rule.name, min_value=0.0, value=1.0, key=f"val_{node_type}_{rule.name}")

        result = engine.calculate_price_for_node(node_type, values)
        st.metric("Final Price", f"{result.final_price:,.2f} {result.currency}")
        st.dataframe(
            pd.DataFrame([line.to_dict() for line in result.breakdown]),
            use_container_width=True,
            hide_index=True,
        )


# ============================================================================
# TAB 3: Price table browser
# ============================================================================
with tab_table:
    rows = []
    for name in engine.get_available_node_types():
        pricing = engine.get_pricing_for_node_type(name)
        rules = pricing.price_rules
        rows.append({
            "node_type": name,
            "label": pricing.label,
            "base_price": pricing.base_price,
            "min": rules.min if rules else None,
            "max": rules.max if rules else None,
            "modifiers": ", ".join(f"{m.name} ({m.type})" for m in pricing.modifiers),
        })
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    with st.expander("Global modifiers"):
        st.code(json.dumps(engine.get_global_modifiers(), indent=2), language="json")
