"""Reading uploaded .xlsx/.csv sheets into DataFrames."""
import logging
import zipfile

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 MB


def clean_value(val):
    """Clean a value from pandas, handling NaN and whitespace."""
    if val is None or pd.isna(val):
        return ''
    return str(val).strip()


def read_sheet(file, required_columns=(), max_size=MAX_FILE_SIZE):
    """
    Load an uploaded .xlsx/.csv into a DataFrame.

    Column names are normalized to snake case ("Course Code" -> "course_code").
    """
    if file.size > max_size:
        raise ValidationError(f'File too large. Maximum size is {max_size // (1024 * 1024)}MB.')

    ext = file.name.split('.')[-1].lower()
    if ext not in ['xlsx', 'csv']:
        raise ValidationError('Only .xlsx and .csv files are supported.')

    try:
        if ext == 'xlsx':
            df = pd.read_excel(file, engine='openpyxl')
        else:
            df = pd.read_csv(file)
    except (ValueError, OSError, zipfile.BadZipFile, InvalidFileException) as e:
        logger.warning(f"Could not read uploaded sheet {file.name}: {e}")
        raise ValidationError(f'Error reading file: {e}')

    if df.empty:
        raise ValidationError('The file is empty.')

    df.columns = df.columns.astype(str).str.strip().str.lower().str.replace(' ', '_')
    missing = [col for col in required_columns if col not in df.columns]
    if missing:
        raise ValidationError('Missing required columns', missing_columns=missing)
    return df
