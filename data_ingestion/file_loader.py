# StockPulse/data_ingestion/file_loader.py
import logging
import os

import pandas as pd

from .field_normalizer import IngestionError

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = ('.xlsx', '.xlsm')
CSV_EXTENSIONS = ('.csv',)


def _read_csv(source, file_name):
    try:
        return pd.read_csv(source, encoding='utf-8-sig')
    except UnicodeDecodeError:
        logger.info(f"FILE_LOADER: UTF-8 decoding failed for {file_name}. Retrying with 'latin-1'.")
        if hasattr(source, 'seek'):
            source.seek(0)
        return pd.read_csv(source, encoding='latin-1')


def load_raw_rows(source, file_name=None, sheet_name=0) -> list:
    """
    Reads an uploaded spreadsheet into a list of raw row dicts.

    `source` may be a path or a file-like object (e.g. a Streamlit upload);
    `file_name` is required for file-like objects so the format can be
    inferred from the extension. Blank cells come back as None.
    """
    file_name = file_name or getattr(source, 'name', None) or str(source)
    extension = os.path.splitext(file_name)[1].lower()
    logger.info(f"FILE_LOADER: Reading '{file_name}'")

    try:
        if extension in EXCEL_EXTENSIONS:
            df = pd.read_excel(source, sheet_name=sheet_name)
        elif extension in CSV_EXTENSIONS:
            df = _read_csv(source, file_name)
        else:
            raise IngestionError(f"Unsupported file type '{extension or file_name}'. Upload an Excel or CSV file.")
    except IngestionError:
        raise
    except FileNotFoundError as e:
        raise IngestionError(f"File not found: {file_name}") from e
    except (ValueError, OSError, pd.errors.ParserError) as e:
        logger.error(f"FILE_LOADER: Could not read {file_name}: {e}", exc_info=True)
        raise IngestionError(f"Could not read {file_name}: {e}") from e

    df = df.dropna(how='all')
    df = df.astype(object).where(pd.notna(df), None)
    rows = df.to_dict('records')
    logger.info(f"FILE_LOADER: Loaded {len(rows)} rows with {len(df.columns)} columns from '{file_name}'")
    return rows
