"""Tests for the full recomputation pipeline and the file loader feeding it."""

import pandas as pd
import pytest

from data_ingestion.field_normalizer import IngestionError
from data_ingestion.file_loader import load_raw_rows
from replenishment_engine.pipeline import run_pipeline


class TestRunPipeline:
    """Normalizer -> bundler -> classifier -> suggestions."""

    def test_returns_products_and_suggestions(self, raw_family_rows):
        products_df, suggestions_df = run_pipeline(raw_family_rows)
        assert len(products_df) == 4
        for column in ("is_base_unit", "conversion_multiplier", "is_low_stock", "priority", "urgency"):
            assert column in products_df.columns
        assert len(suggestions_df) == 3

    def test_rerun_is_identical_apart_from_ids(self, raw_family_rows):
        first_products, first_suggestions = run_pipeline(raw_family_rows)
        second_products, second_suggestions = run_pipeline(raw_family_rows)

        id_columns = ["id", "base_unit_id"]
        pd.testing.assert_frame_equal(
            first_products.drop(columns=id_columns), second_products.drop(columns=id_columns)
        )
        pd.testing.assert_frame_equal(
            first_suggestions.drop(columns=["product_id"]), second_suggestions.drop(columns=["product_id"])
        )

    def test_parameters_reach_classifier(self, raw_family_rows):
        products_df, _ = run_pipeline(raw_family_rows, {"risk_vendor_marker": "acme"})
        assert products_df["is_risk_vendor"].tolist() == [True, True, True, False]

    def test_empty_input_raises(self):
        with pytest.raises(IngestionError):
            run_pipeline([])


class TestFileLoader:
    """Spreadsheet reading."""

    def test_csv(self, tmp_path):
        path = tmp_path / "sheet.csv"
        path.write_text("SKU,WH,PASD\nA,10,2\n,,\nB,,1\n", encoding="utf-8")
        rows = load_raw_rows(str(path))
        assert len(rows) == 2
        assert rows[0]["SKU"] == "A"
        assert rows[1]["WH"] is None

    def test_csv_latin1_fallback(self, tmp_path):
        path = tmp_path / "sheet.csv"
        path.write_bytes("SKU,Remark\nA,Caf\xe9\n".encode("latin-1"))
        rows = load_raw_rows(str(path))
        assert rows[0]["Remark"] == "Caf\xe9"

    def test_xlsx(self, tmp_path):
        path = tmp_path / "sheet.xlsx"
        pd.DataFrame({"SKU": ["A"], "WH": [5]}).to_excel(path, index=False)
        rows = load_raw_rows(str(path))
        assert rows == [{"SKU": "A", "WH": 5}]

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "sheet.pdf"
        path.write_bytes(b"%PDF")
        with pytest.raises(IngestionError, match="Unsupported"):
            load_raw_rows(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestionError):
            load_raw_rows(str(tmp_path / "absent.csv"))

    def test_blank_lead_time_column_uses_lt_column(self, tmp_path):
        path = tmp_path / "sheet.csv"
        path.write_text("SKU,WH,PASD,Lead Time,LT\nA,0,2,,7\n", encoding="utf-8")
        products_df, _ = run_pipeline(load_raw_rows(str(path)))
        assert products_df.loc[0, "lead_time"] == 7.0
        assert products_df.loc[0, "is_low_stock"]
