# StockPulse/data_ingestion/utils.py
import re
import numpy as np
import pandas as pd

_NUMBER_NOISE = re.compile(r'[,\s₹$€£]')


def is_absent(value):
    """True for None, NaN/NA and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_number(value):
    """
    Coerces a spreadsheet cell to a float.
    Thousands separators, currency symbols and a trailing '%' are stripped.
    Returns np.nan when the value is absent or not unambiguously numeric.
    """
    if is_absent(value):
        return np.nan
    if isinstance(value, bool):
        return np.nan
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)

    s_value = _NUMBER_NOISE.sub('', str(value))
    if s_value.endswith('%'):
        s_value = s_value[:-1]
    try:
        return float(s_value) if s_value else np.nan
    except ValueError:
        return np.nan


def clean_text_value(value):
    """Strips a text cell; absent or blank cells become None."""
    if is_absent(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # Excel hands back numeric codes (FSN, GS1) as floats
        return str(int(value))
    return str(value).strip()
