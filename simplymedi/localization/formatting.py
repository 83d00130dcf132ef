"""
Locale-aware formatting of dates, numbers and currency amounts.

Thin wrappers over Babel. None of these functions raise: malformed input
or an unknown locale is logged and rendered with str().
"""

from datetime import date, datetime
from typing import Union

from babel import Locale, dates, numbers
from babel.core import UnknownLocaleError

from simplymedi.models.schemas import TimeFormat
from simplymedi.utils.logger import get_logger

logger = get_logger("formatting")

DateInput = Union[date, datetime, str]
NumberInput = Union[int, float, str]

FORMAT_ERRORS = (ValueError, TypeError, LookupError, ArithmeticError, UnknownLocaleError)

DATE_SKELETON = "yMMdd"
TIME_24H_PATTERN = "HH:mm"
TIME_12H_PATTERN = "h:mm a"


def to_babel_locale(locale: str) -> Locale:
    """Parse a BCP 47 ("en-US") or POSIX ("en_US") locale identifier."""
    return Locale.parse(locale.replace("-", "_"))


def _parse_date(value: DateInput) -> Union[date, datetime]:
    if isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    # A bare "2024-01-15" carries no time component
    return parsed.date() if len(text) <= 10 else parsed


def format_date(
    value: DateInput,
    locale: str = "en",
    time_format: Union[TimeFormat, str] = TimeFormat.TWELVE_HOUR,
    timezone: str = "UTC"
) -> str:
    """
    Format a date or datetime as a numeric date for a locale.

    Datetimes are converted to `timezone` (naive values are taken as UTC)
    and also show the time of day: "HH:mm" when `time_format` is "24h",
    "h:mm a" otherwise. Date and time are joined with the locale's short
    date-time pattern, e.g. "01/15/2024, 14:30" in English.
    """
    try:
        parsed = _parse_date(value)
        babel_locale = to_babel_locale(locale)

        if not isinstance(parsed, datetime):
            return dates.format_skeleton(DATE_SKELETON, parsed, locale=babel_locale)

        tzinfo = dates.get_timezone(timezone)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=dates.UTC)
        local = parsed.astimezone(tzinfo)

        pattern = (
            TIME_24H_PATTERN
            if TimeFormat(time_format) == TimeFormat.TWENTY_FOUR_HOUR
            else TIME_12H_PATTERN
        )
        date_part = dates.format_skeleton(DATE_SKELETON, local.date(), locale=babel_locale)
        time_part = dates.format_time(local, pattern, tzinfo=tzinfo, locale=babel_locale)

        return (
            str(dates.get_datetime_format("short", locale=babel_locale))
            .replace("'", "")
            .replace("{0}", time_part)
            .replace("{1}", date_part)
        )
    except FORMAT_ERRORS as e:
        logger.warning("Date formatting error", value=str(value), locale=locale, error=str(e))
        return str(value)


def format_number(value: NumberInput, number_format: str = "en-US") -> str:
    """Format a number with the grouping and decimal symbols of a locale."""
    try:
        return numbers.format_decimal(value, locale=to_babel_locale(number_format))
    except FORMAT_ERRORS as e:
        logger.warning("Number formatting error", value=str(value), locale=number_format, error=str(e))
        return str(value)


def format_currency(
    amount: NumberInput,
    currency: str = "USD",
    locale: str = "en"
) -> str:
    """Format a monetary amount, e.g. 1234.5 USD in "en" -> "$1,234.50"."""
    try:
        return numbers.format_currency(amount, currency, locale=to_babel_locale(locale))
    except FORMAT_ERRORS as e:
        logger.warning(
            "Currency formatting error",
            value=str(amount),
            currency=currency,
            locale=locale,
            error=str(e)
        )
        return str(amount)
