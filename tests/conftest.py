"""Shared fixtures: raw sheet rows shaped like a real planning export."""

import pytest


@pytest.fixture
def raw_family_rows():
    """One three-variant family plus a standalone product from a risk vendor."""
    return [
        {
            "Brand": "Boldfit", "Product": "Whey", "Variant": "60 Tablets", "SKU": "W60",
            "WH": 0, "Transit": 0, "MP Demand": 10, "PASD": 2, "Lead Time": 10,
            "No.of Days Inv Inhand": 5, "Vendor 2": "Acme Foods", "ASINs": "B0A, B0B",
        },
        {
            "Brand": "Boldfit", "Product": "Whey", "Variant": "120 Tablets", "SKU": "W120",
            "WH": 0, "Transit": 0, "MP Demand": 4, "PASD": 1, "Lead Time": 10,
            "No.of Days Inv Inhand": 20, "Vendor 2": "Acme Foods",
        },
        {
            "Brand": "Boldfit", "Product": "Whey", "Variant": "180 Tablets", "SKU": "W180",
            "WH": 0, "Transit": 0, "MP Demand": 2, "PASD": 1, "Lead Time": 10,
            "No.of Days Inv Inhand": 40, "Vendor 2": "Acme Foods",
        },
        {
            "Brand": "Boldfit", "Product": "Gloves", "Variant": "Large", "SKU": "GL-L",
            "WH": 100, "FBA": 0, "PASD": 1, "Lead Time": 20, "Order Frequ": 30,
            "To Order": 0, "No.of Days Inv Inhand": 100, "Vendor AMZ": "China Sports Co",
        },
    ]
