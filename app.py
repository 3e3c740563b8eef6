# StockPulse/app.py
import streamlit as st
import os
import sys

# Ensure project root is in sys.path for the flat package imports
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import logging

from utils.config_loader import APP_CONFIG, get_section
from data_ingestion.field_normalizer import IngestionError
from data_ingestion.file_loader import load_raw_rows
from replenishment_engine.pipeline import run_pipeline
from replenishment_engine.forecast import project_depletion, forecast_to_frame, DEFAULT_HORIZON_DAYS
from replenishment_engine.bundling import get_bundle_groups
from replenishment_engine.order_suggestions import (
    filter_order_suggestions, get_vendor_list, get_priority_counts, build_vendor_order_lines,
)
from analytics_dashboard.kpi_calculations import calculate_inventory_metrics
from analytics_dashboard.charts import create_forecast_chart, create_priority_chart, create_vendor_order_chart
from notifications.message_generator import generate_bulk_order_email, DEFAULT_COMPANY, DEFAULT_SENDER_TEAM, DEFAULT_PRODUCT_BASE_URL
from notifications.email_sender import GmailSender, DEFAULT_GMAIL_API_BASE_URL

logger = logging.getLogger(__name__)

st.set_page_config(page_title="StockPulse - Inventory Replenishment", layout="wide")

if "error" in APP_CONFIG:
    st.warning(f"settings.yaml could not be loaded, running with defaults. {APP_CONFIG['error']}")

classification_params = get_section('classification')
forecast_config = get_section('forecast')
notification_config = get_section('notifications')

# --- Session State: the single slot holding the latest processed upload ---
if 'stockpulse_result' not in st.session_state:
    st.session_state.stockpulse_result = None


def _get_gmail_token():
    try:
        return st.secrets.gmail.access_token
    except (AttributeError, KeyError, FileNotFoundError):
        return None


st.title("📦 StockPulse")
st.markdown("Upload the inventory planning sheet to get stock health, bundled order quantities and ranked purchase suggestions.")

uploaded_file = st.file_uploader("Upload Inventory Sheet", type=["xlsx", "xlsm", "csv"], key="inventory_file_uploader")

if st.button("Process Sheet", key="process_sheet_button", disabled=not uploaded_file):
    with st.spinner("Processing inventory sheet..."):
        try:
            raw_rows = load_raw_rows(uploaded_file, file_name=uploaded_file.name)
            products_df, suggestions_df = run_pipeline(raw_rows, classification_params)
            st.session_state.stockpulse_result = {
                'file_name': uploaded_file.name,
                'products': products_df,
                'suggestions': suggestions_df,
            }
            st.success(f"Processed {len(products_df)} products from '{uploaded_file.name}'.")
        except IngestionError as e:
            logger.warning(f"APP: Upload rejected: {e}")
            st.error(str(e))

result = st.session_state.stockpulse_result
if not result:
    st.info("No data loaded yet. Upload a sheet to begin.")
    st.stop()

products_df = result['products']
suggestions_df = result['suggestions']
st.caption(f"Showing results for **{result['file_name']}**")

# --- KPIs ---
metrics = calculate_inventory_metrics(products_df)
kpi_cols = st.columns(5)
kpi_cols[0].metric("Products", f"{metrics['total_products']:,}")
kpi_cols[1].metric("Warehouse Units", f"{metrics['total_value']:,.0f}")
kpi_cols[2].metric("Low Stock", metrics['low_stock_items'], delta=f"{metrics['stockout_rate']:.1f}%", delta_color="inverse")
kpi_cols[3].metric("Overstock", metrics['overstock_items'], delta=f"{metrics['overstock_rate']:.1f}%", delta_color="inverse")
kpi_cols[4].metric("Health Score", metrics['inventory_health_score'])

kpi_cols = st.columns(5)
kpi_cols[0].metric("Avg PASD", f"{metrics['avg_pasd']:.1f}")
kpi_cols[1].metric("Avg Days of Cover", f"{metrics['avg_doc']:.1f}")
kpi_cols[2].metric("Target Achievement", f"{metrics['target_achievement']:.1f}%")
kpi_cols[3].metric("In Transit", f"{metrics['total_transit']:,.0f}", help=f"{metrics['items_in_transit']} products")
kpi_cols[4].metric("Sheet To Order", f"{metrics['total_to_order']:,.0f}", help=f"{metrics['items_to_order']} products")

tab_suggestions, tab_forecast, tab_bundles, tab_order = st.tabs(
    ["Order Suggestions", "Forecast", "Bundles", "Vendor Order E-mail"]
)

# --- Order Suggestions ---
with tab_suggestions:
    counts = get_priority_counts(suggestions_df)
    count_cols = st.columns(4)
    count_cols[0].metric("P1", counts['P1'])
    count_cols[1].metric("P2", counts['P2'])
    count_cols[2].metric("P3", counts['P3'])
    count_cols[3].metric("Total", counts['total'])

    filter_cols = st.columns([3, 1, 2, 1])
    search = filter_cols[0].text_input("Search name or SKU", key="suggestion_search")
    priority = filter_cols[1].selectbox("Priority", ['all', 'P1', 'P2', 'P3'], key="suggestion_priority")
    vendor = filter_cols[2].selectbox("Vendor", ['all'] + get_vendor_list(suggestions_df), key="suggestion_vendor")
    exclude_bundled = filter_cols[3].checkbox("Hide bundled variants", key="suggestion_exclude_bundled")

    filtered_df = filter_order_suggestions(suggestions_df, search, priority, vendor, exclude_bundled)
    st.dataframe(
        filtered_df.drop(columns=['product_id', 'bundled_skus'], errors='ignore'),
        use_container_width=True,
        hide_index=True,
    )
    st.download_button(
        "Download Suggestions CSV",
        filtered_df.to_csv(index=False).encode('utf-8'),
        file_name="order_suggestions.csv",
        mime="text/csv",
        key="download_suggestions",
    )

    chart_cols = st.columns(2)
    chart_cols[0].plotly_chart(create_priority_chart(counts), use_container_width=True)
    chart_cols[1].plotly_chart(create_vendor_order_chart(suggestions_df), use_container_width=True)

# --- Forecast ---
with tab_forecast:
    horizon = st.slider(
        "Horizon (days)", min_value=7, max_value=365,
        value=int(forecast_config.get('horizon_days', DEFAULT_HORIZON_DAYS)), key="forecast_horizon",
    )
    forecast_df = forecast_to_frame(project_depletion(products_df, horizon))
    st.plotly_chart(create_forecast_chart(forecast_df), use_container_width=True)
    st.caption("Linear depletion of warehouse stock at PASD per day. Incoming stock is not modeled.")

# --- Bundles ---
with tab_bundles:
    bundle_groups_df = get_bundle_groups(products_df)
    if bundle_groups_df.empty:
        st.info("No bundle families found in this sheet.")
    else:
        st.dataframe(bundle_groups_df, use_container_width=True, hide_index=True)

# --- Vendor Order E-mail ---
with tab_order:
    vendors = get_vendor_list(suggestions_df)
    if not vendors:
        st.info("No vendors with order suggestions.")
    else:
        order_vendor = st.selectbox("Vendor", vendors, key="order_vendor")
        hide_non_positive = st.checkbox("Hide zero and negative quantities", value=True, key="order_hide_non_positive")
        lines = build_vendor_order_lines(products_df, order_vendor, hide_non_positive=hide_non_positive)

        company = notification_config.get('company_name', DEFAULT_COMPANY)
        subject, body = generate_bulk_order_email(
            order_vendor,
            lines,
            company=company,
            team=notification_config.get('sender_team', DEFAULT_SENDER_TEAM),
            base_url=notification_config.get('amazon_product_base_url', DEFAULT_PRODUCT_BASE_URL),
        )

        recipient = st.text_input("Vendor e-mail", key="order_recipient")
        subject = st.text_input("Subject", value=subject, key=f"order_subject_{order_vendor}")
        body = st.text_area("Body", value=body, height=350, key=f"order_body_{order_vendor}")

        access_token = _get_gmail_token() or st.text_input("Gmail access token", type="password", key="gmail_token")
        if st.button("Send via Gmail", key="send_order_email", disabled=not recipient or not access_token):
            sender = GmailSender(access_token, notification_config.get('gmail_api_base_url', DEFAULT_GMAIL_API_BASE_URL))
            if sender.send_email(recipient, subject, body):
                st.success(f"Order e-mail sent to {recipient}.")
            else:
                st.error("Failed to send e-mail. Check the logs for details.")
