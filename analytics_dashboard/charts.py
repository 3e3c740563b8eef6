# StockPulse/analytics_dashboard/charts.py
import pandas as pd
import plotly.express as px
import logging

logger = logging.getLogger(__name__)

PRIORITY_COLORS = {'P1': '#d62728', 'P2': '#ff7f0e', 'P3': '#2ca02c'}


def create_forecast_chart(forecast_df: pd.DataFrame, title: str = 'Projected Inventory Depletion'):
    """
    Line chart of aggregate warehouse stock per projected day.

    Args:
        forecast_df (pd.DataFrame): 'day' and 'stock' columns, as built by forecast_to_frame.
        title (str): The title of the chart.

    Returns:
        plotly.graph_objects.Figure: The Plotly figure object.
    """
    if forecast_df is None or forecast_df.empty:
        logger.warning("CHART_GEN: Forecast DataFrame is empty. Cannot generate forecast chart.")
        fig = px.line(title="No data available for forecast chart.")
        fig.update_layout(xaxis_title="Day", yaxis_title="Stock (units)")
        return fig

    if 'day' not in forecast_df.columns or 'stock' not in forecast_df.columns:
        logger.error("CHART_GEN: 'day' or 'stock' column missing in forecast DataFrame.")
        fig = px.line(title="Error: Forecast columns missing.")
        fig.update_layout(xaxis_title="Day", yaxis_title="Stock (units)")
        return fig

    try:
        fig = px.line(
            forecast_df.sort_values(by='day'),
            x='day',
            y='stock',
            title=title,
            labels={'day': 'Day', 'stock': 'Stock (units)'},
        )
        fig.update_layout(hovermode="x unified")
        logger.info(f"CHART_GEN: Successfully generated '{title}' chart over {len(forecast_df)} days.")
    except Exception as e:
        logger.error(f"CHART_GEN: Error generating forecast chart: {e}", exc_info=True)
        fig = px.line(title=f"Error generating chart: {e}")
        fig.update_layout(xaxis_title="Day", yaxis_title="Stock (units)")

    return fig


def create_priority_chart(priority_counts: dict, title: str = 'Order Suggestions by Priority'):
    """Donut of P1/P2/P3 suggestion counts; takes the dict from get_priority_counts."""
    counts_df = pd.DataFrame(
        [(level, count) for level, count in (priority_counts or {}).items() if level in PRIORITY_COLORS and count > 0],
        columns=['priority', 'count'],
    )
    if counts_df.empty:
        logger.warning(f"CHART_GEN: No order suggestions to plot for '{title}'.")
        return px.pie(title="No order suggestions to chart.")

    try:
        fig = px.pie(
            counts_df,
            names='priority',
            values='count',
            title=title,
            hole=0.3,
            color='priority',
            color_discrete_map=PRIORITY_COLORS,
            category_orders={'priority': list(PRIORITY_COLORS)},
        )
        fig.update_traces(textposition='inside', textinfo='value+label')
        logger.info(f"CHART_GEN: Successfully generated priority chart over {int(counts_df['count'].sum())} suggestions.")
    except Exception as e:
        logger.error(f"CHART_GEN: Error generating priority chart: {e}", exc_info=True)
        fig = px.pie(title=f"Error generating chart: {e}")

    return fig


def create_vendor_order_chart(suggestions_df: pd.DataFrame, top_n: int = 10, title: str = 'Order Quantity by Vendor'):
    """Horizontal bars of total final order quantity for the busiest vendors."""
    if suggestions_df is None or suggestions_df.empty:
        logger.warning(f"CHART_GEN: Suggestion data for '{title}' is empty.")
        return px.bar(title="No order suggestions to chart.")

    if 'vendor' not in suggestions_df.columns or 'final_order_quantity' not in suggestions_df.columns:
        logger.error(f"CHART_GEN: 'vendor' or 'final_order_quantity' column missing for '{title}'.")
        return px.bar(title="Error: Missing required columns.")

    vendor_totals = (
        suggestions_df.groupby('vendor', as_index=False)['final_order_quantity'].sum()
        .sort_values('final_order_quantity', ascending=False, kind='stable')
        .head(top_n)
    )
    try:
        fig = px.bar(
            vendor_totals,
            x='final_order_quantity',
            y='vendor',
            title=title,
            orientation='h',
            labels={'final_order_quantity': 'Units to Order', 'vendor': 'Vendor'},
        )
        # largest vendor on top
        fig.update_layout(yaxis={'categoryorder': 'total ascending'}, hovermode="y unified")
        logger.info(f"CHART_GEN: Successfully generated vendor chart for {len(vendor_totals)} vendors.")
    except Exception as e:
        logger.error(f"CHART_GEN: Error generating vendor chart: {e}", exc_info=True)
        fig = px.bar(title=f"Error generating chart: {e}")

    return fig
