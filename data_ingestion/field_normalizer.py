# StockPulse/data_ingestion/field_normalizer.py
import logging
import re
import uuid

import numpy as np
import pandas as pd

from .utils import parse_number, clean_text_value, is_absent

logger = logging.getLogger(__name__)


class IngestionError(ValueError):
    """Raised when an uploaded dataset is empty or wholly unparsable."""


# Canonical attribute -> extra header aliases.
# The canonical name itself (normalized) is always accepted as well.
TEXT_FIELD_ALIASES = {
    'brand': [],
    'product': [],
    'variant': [],
    'name': ['productname', 'product name', 'name'],
    'sku': ['skuid', 'productid', 'sku id'],
    'category': ['productcategory'],
    'asins': ['asin'],
    'gs1_code': ['gs1 code'],
    'fsn': [],
    'vendor_amz': ['vendor amz', 'amazon vendor'],
    'vendor2': ['vendor 2', 'vendor'],
    'column1': [],
    'launch_type': ['launch type'],
    'remark': ['remarks'],
    'final_order': ['final order'],
}

NUMERIC_FIELD_ALIASES = {
    'fba_sales': ['fba sales'],
    'rkrz_sale': ['rk/rz sale', 'rkrz sale'],
    'amazon_sale': ['amazon sale'],
    'amazon_asd': ['amazon asd'],
    'amazon_growth': ['amazon growth'],
    'max_drr': ['max drr'],
    'amazon_pasd': ['amazon pasd'],
    'diff': [],
    'ct_target_inventory': ['ct target inventory', 'target inventory'],
    'amazon_inventory': ['amazon inventory'],
    'fba': ['fba stock', 'fba inventory'],
    'amazon_demand': ['amazon demand'],
    'fk_alpha_sales': ['fk alpha sales'],
    'fk_alpha_inv': ['fk alpha inv'],
    'fk_sales': ['fk sales'],
    'fbf_inv': ['fbf inv'],
    'fk_sales_total': ['fk sales total'],
    'fk_inv': ['fk inv'],
    'fk_asd': ['fk asd'],
    'fk_growth': ['fk growth'],
    'max_drr2': ['max drr2', 'max drr 2'],
    'fk_pasd': ['fk pasd'],
    'fk_demand': ['fk demand'],
    'other_mp_sales': ['other mp sales'],
    'qc_pasd': ['qc pasd'],
    'qcommerce_demand': ['qcommerce demand', 'qc demand'],
    'wh': ['warehouse', 'wh stock', 'warehouse stock'],
    'lead_time': ['lead time', 'reorder time', 'lt'],
    'order_freq': ['order frequ', 'order freq', 'order frequency'],
    'pasd': ['drr'],
    'mp_demand': ['mp demand'],
    'transit': ['in transit'],
    'to_order': ['to order'],
    'days_inv_in_hand': ['no.of days inv inhand', 'no. of days inv in hand', 'days inv in hand', 'doc'],
    'days_inv_total': ['no.of days inv total', 'no. of days inv total', 'days inv total'],
}

# final_order may hold free text ("hold", "as per mail"), so it is kept as-is
RAW_FIELDS = {'final_order'}

DERIVED_FIELDS = {
    'drr': 'pasd',
    'doc': 'days_inv_in_hand',
    'target': 'ct_target_inventory',
}

PRODUCT_COLUMNS = (
    ['id']
    + list(TEXT_FIELD_ALIASES.keys())
    + list(NUMERIC_FIELD_ALIASES.keys())
    + list(DERIVED_FIELDS.keys())
)

_HEADER_NOISE = re.compile(r'[\s_]+')


def normalize_header(header) -> str:
    """Lowercases a header and strips whitespace, underscores and newlines."""
    return _HEADER_NOISE.sub('', str(header)).lower()


def _build_alias_lookup():
    lookup = {}
    for aliases_map in (TEXT_FIELD_ALIASES, NUMERIC_FIELD_ALIASES):
        for field, aliases in aliases_map.items():
            lookup[field] = [normalize_header(field)] + [normalize_header(a) for a in aliases]
    return lookup


FIELD_ALIASES = _build_alias_lookup()


def resolve_columns(headers) -> dict:
    """
    Maps each recognized header to its canonical attribute.
    When several headers match the same attribute, the one matching the
    earliest alias wins. Per row, normalize_rows also skips blank cells.
    """
    normalized = {}
    for header in headers:
        normalized.setdefault(normalize_header(header), header)

    resolved = {}
    for field, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias in normalized:
                resolved[normalized[alias]] = field
                break
    return resolved


def unrecognized_headers(headers) -> list:
    """Headers that do not resolve to any canonical attribute."""
    resolved = resolve_columns(headers)
    return [h for h in headers if h not in resolved]


def _extract_field(normalized_row: dict, field: str):
    """First non-blank value among the field's aliases; blank cells fall through to later aliases."""
    for alias in FIELD_ALIASES[field]:
        value = normalized_row.get(alias)
        if not is_absent(value):
            return value
    return None


def _normalize_row(raw_row: dict, row_index: int) -> tuple:
    """Returns (product dict, number of recognized attributes)."""
    normalized_row = {}
    for key, value in raw_row.items():
        header = normalize_header(key)
        if is_absent(normalized_row.get(header)):
            normalized_row[header] = value

    row_id = uuid.uuid4().hex[:8]
    record = {'id': row_id}
    recognized = 0

    for field in TEXT_FIELD_ALIASES:
        value = _extract_field(normalized_row, field)
        if not is_absent(value):
            recognized += 1
        if field in RAW_FIELDS:
            record[field] = value.strip() if isinstance(value, str) else (None if is_absent(value) else value)
        else:
            record[field] = clean_text_value(value)

    for field in NUMERIC_FIELD_ALIASES:
        value = _extract_field(normalized_row, field)
        number = parse_number(value)
        if not is_absent(value):
            recognized += 1
            if np.isnan(number):
                logger.warning(f"NORMALIZER: Row {row_index}: could not parse '{field}' value {value!r}; treating as absent.")
        record[field] = number

    if not record['name']:
        composed = ' '.join(p for p in (record['brand'], record['product'], record['variant']) if p)
        record['name'] = composed or f"Product {row_id}"
    if not record['sku']:
        record['sku'] = f"SKU-{row_id}"
    if not record['category']:
        record['category'] = 'Uncategorized'

    for derived, source in DERIVED_FIELDS.items():
        record[derived] = record[source]

    return record, recognized


def normalize_rows(rows) -> pd.DataFrame:
    """
    Maps raw spreadsheet rows onto the canonical product schema.

    One product per input row, in input order; rows are never dropped.
    Missing or unparsable attributes are left absent (NaN/None), never zero.

    Raises:
        IngestionError: when the input holds no rows, or when no row
            carries a single recognized attribute.
    """
    if isinstance(rows, pd.DataFrame):
        rows = rows.to_dict('records')
    rows = list(rows or [])
    if not rows:
        raise IngestionError("Uploaded dataset contains no rows.")

    logger.info(f"NORMALIZER: Normalizing {len(rows)} raw rows.")

    records = []
    total_recognized = 0
    seen_headers = []
    for index, raw_row in enumerate(rows):
        if not isinstance(raw_row, dict):
            raw_row = {}
        for header in raw_row:
            if header not in seen_headers:
                seen_headers.append(header)
        record, recognized = _normalize_row(raw_row, index)
        records.append(record)
        total_recognized += recognized

    if total_recognized == 0:
        raise IngestionError(
            f"No recognized inventory columns found. Headers seen: {[str(h) for h in seen_headers]}"
        )

    skipped = unrecognized_headers(seen_headers)
    if skipped:
        logger.info(f"NORMALIZER: Ignoring {len(skipped)} unrecognized columns: {skipped}")

    products_df = pd.DataFrame(records, columns=PRODUCT_COLUMNS)
    numeric_cols = list(NUMERIC_FIELD_ALIASES.keys()) + list(DERIVED_FIELDS.keys())
    products_df[numeric_cols] = products_df[numeric_cols].astype(float)

    logger.info(f"NORMALIZER: Produced {len(products_df)} canonical products.")
    return products_df
