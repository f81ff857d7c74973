"""Cookie date parsing and formatting.

The parser follows the algorithm of RFC 6265bis section 5.1.1: the input
is split into tokens on delimiter characters and every token is matched,
first match wins, against the time, day-of-month, month and year
productions in that order.

"""

import re
from datetime import datetime, timezone
from email.utils import format_datetime

__all__ = ['parse_date', 'format_date', 'format_iso', 'parse_iso']


MAX_DATE_LENGTH = 4096

# delimiter = %x09 / %x20-2F / %x3B-40 / %x5B-60 / %x7B-7E
DATE_DELIM_RE = re.compile(r"[\x09\x20-\x2F\x3B-\x40\x5B-\x60\x7B-\x7E]")

MONTHS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12,
}


def _is_digit(char):
    # only ASCII digits count, str.isdigit() accepts far more
    return '0' <= char <= '9'


def _parse_digits(token, min_digits, max_digits, trailing_ok):
    count = 0
    while count < len(token) and _is_digit(token[count]):
        count += 1
    if count < min_digits or count > max_digits:
        return None
    if not trailing_ok and count != len(token):
        return None
    return int(token[:count])


def _parse_time(token):
    # hms-time = time-field ":" time-field ":" time-field
    parts = token.split(':')
    if len(parts) != 3:
        return None
    result = []
    for i, part in enumerate(parts):
        # only the seconds field may be followed by a non-digit trailer
        num = _parse_digits(part, 1, 2, i == 2)
        if num is None:
            return None
        result.append(num)
    return result


def _parse_month(token):
    return MONTHS.get(token[:3].lower())


def parse_date(text):
    """Parse a cookie-date string.

    Returns an aware UTC datetime, or None when *text* is not a valid
    cookie date.  Never raises for bad input.

    """
    if not text or not isinstance(text, str):
        return None
    if len(text) > MAX_DATE_LENGTH:
        return None

    hour = minute = second = None
    day_of_month = None
    month = None
    year = None

    for token in DATE_DELIM_RE.split(text):
        token = token.strip()
        if not token:
            continue

        if second is None:
            found = _parse_time(token)
            if found is not None:
                hour, minute, second = found
                continue

        if day_of_month is None:
            found = _parse_digits(token, 1, 2, True)
            if found is not None:
                day_of_month = found
                continue

        if month is None:
            found = _parse_month(token)
            if found is not None:
                month = found
                continue

        if year is None:
            found = _parse_digits(token, 2, 4, True)
            if found is not None:
                year = found
                if 70 <= year <= 99:
                    year += 1900
                elif 0 <= year <= 69:
                    year += 2000

    if None in (second, day_of_month, month, year):
        return None
    if not 1 <= day_of_month <= 31:
        return None
    if year < 1601:
        return None
    if hour > 23 or minute > 59 or second > 59:
        return None

    try:
        return datetime(year, month, day_of_month, hour, minute, second,
                        tzinfo=timezone.utc)
    except ValueError:
        # 30 Feb and friends
        return None


def format_date(dt):
    """Render *dt* as an RFC 1123 date, e.g. 'Tue, 18 Oct 2011 07:05:03 GMT'."""
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def format_iso(dt):
    if dt is None:
        return None
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_iso(text):
    if text is None:
        return None
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
