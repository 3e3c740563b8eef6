# StockPulse/run_pipeline.py
import argparse
import logging
import os
import sys

# Ensure project root is in sys.path if running from a different directory or for imports
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from utils.config_loader import APP_CONFIG, get_section  # This also sets up logging
from data_ingestion.field_normalizer import IngestionError
from data_ingestion.file_loader import load_raw_rows
from replenishment_engine.pipeline import run_pipeline
from analytics_dashboard.kpi_calculations import calculate_inventory_metrics

logger = logging.getLogger(__name__)


def _csv_ready(df):
    """Bundled SKU lists flattened to a ';'-joined string for CSV output."""
    out = df.copy()
    if 'bundled_skus' in out.columns:
        out['bundled_skus'] = out['bundled_skus'].map(lambda skus: ';'.join(skus) if isinstance(skus, list) else '')
    return out


def process_file(input_path: str, output_dir: str) -> dict:
    """Runs the full pipeline over one sheet, writes both result CSVs and returns the KPIs."""
    raw_rows = load_raw_rows(input_path)
    products_df, suggestions_df = run_pipeline(raw_rows, get_section('classification'))

    os.makedirs(output_dir, exist_ok=True)
    products_path = os.path.join(output_dir, 'products.csv')
    suggestions_path = os.path.join(output_dir, 'order_suggestions.csv')
    _csv_ready(products_df).to_csv(products_path, index=False)
    _csv_ready(suggestions_df).to_csv(suggestions_path, index=False)
    logger.info(f"RUNNER: Wrote {products_path} and {suggestions_path}")

    metrics = calculate_inventory_metrics(products_df)
    for key, value in metrics.items():
        logger.info(f"RUNNER: KPI {key} = {value:,.2f}" if isinstance(value, float) else f"RUNNER: KPI {key} = {value}")
    return metrics


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Process an inventory planning sheet into order suggestions.")
    parser.add_argument('input_file', help="Excel (.xlsx) or CSV inventory sheet")
    parser.add_argument('--output', default='output', help="Directory for products.csv and order_suggestions.csv")
    args = parser.parse_args(argv)

    if "error" in APP_CONFIG:
        logger.warning(f"RUNNER: Running with default parameters. {APP_CONFIG['error']}")

    try:
        process_file(args.input_file, args.output)
    except IngestionError as e:
        logger.error(f"RUNNER: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
