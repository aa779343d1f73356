"""
Holiday import from Excel/CSV sheets.

Expected columns: ``name``, ``start_date`` and optionally ``end_date``.
``start_date`` may also hold a whole range, e.g. "2025-10-20 to 2025-10-24",
"2025-10-20 - 2025-10-24" or a short "20-24" meaning days of the current month.
"""

import datetime
import logging
import numbers
import os
import re

import pandas as pd

from .models import Holiday

logger = logging.getLogger(__name__)

ISO_RANGE_RE = re.compile(
    r'(\d{4}[-/.]\d{2}[-/.]\d{2})\s*(?:-|to)\s*(\d{4}[-/.]\d{2}[-/.]\d{2})',
    re.IGNORECASE
)
SHORT_RANGE_RE = re.compile(r'^(\d{1,2})\s*-\s*(\d{1,2})$')
TO_SPLIT_RE = re.compile(r'\s+to\s+', re.IGNORECASE)

# Excel's day zero for serial dates
EXCEL_EPOCH = datetime.date(1899, 12, 30)


def read_holiday_sheet(uploaded_file):
    """Read an uploaded file into a DataFrame with normalised column names."""
    _, ext = os.path.splitext(uploaded_file.name)
    ext = ext.lower()
    if ext == '.csv':
        df = pd.read_csv(uploaded_file, dtype=str)
    else:
        engine = "xlrd" if ext == ".xls" else "openpyxl"
        df = pd.read_excel(uploaded_file, engine=engine)

    df.columns = [str(col).strip().lower().replace(' ', '_') for col in df.columns]
    return df


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    return bool(pd.isna(value))


def parse_date_value(value):
    """Parse one cell into a date. Returns None when it is not a single date."""
    if _is_blank(value):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return EXCEL_EPOCH + datetime.timedelta(days=int(value))

    text = str(value).strip()
    if re.fullmatch(r'\d+(\.0+)?', text):
        return EXCEL_EPOCH + datetime.timedelta(days=int(float(text)))
    if ISO_RANGE_RE.search(text) or TO_SPLIT_RE.search(text) or SHORT_RANGE_RE.match(text):
        return None

    parsed = pd.to_datetime(text, errors='coerce')
    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_date_range(start_value, end_value=None, today=None):
    """
    Work out (start_date, end_date) for one row.
    Returns (None, None) when no start date can be found.
    """
    today = today or datetime.date.today()
    start_date = parse_date_value(start_value)
    end_date = parse_date_value(end_value)

    if end_date is None and not _is_blank(start_value) and isinstance(start_value, str):
        text = start_value.strip()
        iso_match = ISO_RANGE_RE.search(text)
        short_match = SHORT_RANGE_RE.match(text)
        if iso_match:
            start_date = parse_date_value(iso_match.group(1))
            end_date = parse_date_value(iso_match.group(2))
        elif short_match:
            start_date = today.replace(day=int(short_match.group(1)))
            end_date = today.replace(day=int(short_match.group(2)))
        else:
            parts = TO_SPLIT_RE.split(text)
            if len(parts) == 2:
                start_date = parse_date_value(parts[0])
                end_date = parse_date_value(parts[1])

    if start_date is None:
        return None, None
    if end_date is None:
        end_date = start_date
    return start_date, end_date


def build_holidays(df, today=None):
    """
    Turn sheet rows into unsaved global Holiday objects.
    Rows without a name or a usable start date are skipped.
    """
    holidays = []
    skipped = 0
    for index, row in df.iterrows():
        name = row.get('name')
        start_value = row.get('start_date')
        if _is_blank(name) or _is_blank(start_value):
            skipped += 1
            continue

        try:
            start_date, end_date = parse_date_range(start_value, row.get('end_date'), today=today)
        except ValueError as e:
            logger.warning("Row %s: could not parse dates (%s)", index, e)
            skipped += 1
            continue

        if start_date is None or end_date < start_date:
            logger.warning("Row %s: unusable dates %r / %r", index, start_value, row.get('end_date'))
            skipped += 1
            continue

        holidays.append(Holiday(
            name=str(name).strip(),
            start_date=start_date,
            end_date=end_date,
            holiday_type=Holiday.GLOBAL,
            department=None,
            location=None,
        ))
    return holidays, skipped
