from datetime import datetime

from ngo_portal.exceptions import ValidationError


def parse_date(value: str, field: str) -> datetime:
    """Accept 'YYYY-MM-DD' or a full ISO timestamp from form fields."""
    value = (value or "").strip()
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid {field}", details={"expected": "YYYY-MM-DD"})
