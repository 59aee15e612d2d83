"""
Formatting helpers for VCC certificates
Digit spelling, date normalization and the Arabic script-ratio test
"""
import re
from datetime import date, datetime
from typing import Optional

DIGIT_WORDS = ["ZERO", "ONE", "TWO", "THREE", "FOUR", "FIVE", "SIX", "SEVEN", "EIGHT", "NINE"]

ARABIC_CHARS = re.compile(r'[\u0600-\u06FF\u0750-\u077F]')
WHITESPACE = re.compile(r'\s')

_DMY = re.compile(r'^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$')
_ISO = re.compile(r'^\s*(\d{4})-(\d{2})-(\d{2})')


def spell_digits(value) -> str:
    """'2021' -> 'TWO ZERO TWO ONE'. Digits are read one by one, not as a number."""
    if not value:
        return ''
    return ' '.join(DIGIT_WORDS[int(ch)] for ch in str(value) if ch.isdigit())


def parse_date(value) -> Optional[date]:
    """Parse ISO-8601 or DD/MM/YYYY input into a date. Returns None when it can't."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value)
    try:
        match = _DMY.match(text)
        if match:
            day, month, year = (int(g) for g in match.groups())
            return date(year, month, day)
        match = _ISO.match(text)
        if match:
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day)
    except ValueError:
        return None
    return None


def format_date_dmy(value, sep: str = '/') -> str:
    """Format a date as DD/MM/YYYY (zero padded). Blank when missing or unparseable."""
    d = parse_date(value)
    if d is None:
        return ''
    return f"{d.day:02d}{sep}{d.month:02d}{sep}{d.year:04d}"


def normalize_date(value) -> str:
    """Normalize DD/MM/YYYY or ISO input to YYYY-MM-DD before storing"""
    if value is None:
        return ''
    d = parse_date(value)
    if d is None:
        text = str(value).strip()
        return text[:10] if _ISO.match(text) else text
    return d.isoformat()


def arabic_ratio(text) -> float:
    """Share of Arabic characters among the non-whitespace characters of text"""
    if not text:
        return 0.0
    text = str(text)
    total = len(WHITESPACE.sub('', text))
    if total == 0:
        return 0.0
    return len(ARABIC_CHARS.findall(text)) / total


def is_predominantly_rtl(text) -> bool:
    # strictly more than half; an even split stays left-aligned
    return arabic_ratio(text) > 0.5
