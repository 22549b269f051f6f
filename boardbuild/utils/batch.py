import re
from datetime import date
from typing import Optional

BATCH_DATE_PATTERN = re.compile(r"^\d{5,6}$")
BATCH_DATE_HELP = "MYYYY or MMYYYY, e.g. 12025 or 102025"


def batch_date_error(value: str) -> Optional[str]:
    """Return an error message for an invalid batch date, None when valid."""
    if not BATCH_DATE_PATTERN.match(value):
        return f"Please enter a valid batch date in {BATCH_DATE_HELP}"
    # 5 digits: M + YYYY, 6 digits: MM + YYYY
    month = int(value[:1]) if len(value) == 5 else int(value[:2])
    if month < 1 or month > 12:
        return "Please enter a valid month (1-12)"
    return None


def is_valid_batch_date(value: str) -> bool:
    return batch_date_error(value) is None


def default_batch_date(today: Optional[date] = None) -> str:
    today = today or date.today()
    # Month is not zero-padded
    return f"{today.month}{today.year}"
