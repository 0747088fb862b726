"""Required-field checks shared by the profile repository and edit sessions."""
from typing import List, Optional

from medbook.errors import ValidationError
from medbook.models import UserProfile

REQUIRED_PROFILE_FIELDS = ("name", "email", "phone", "cpf")


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return value is None or not str(value).strip()


def missing_required_fields(profile: UserProfile) -> List[str]:
    """
    List required profile fields that are blank.

    Args:
        profile: Profile or draft to check

    Returns:
        Field names in declaration order; empty if the profile is complete
    """
    return [
        field for field in REQUIRED_PROFILE_FIELDS
        if is_blank(getattr(profile, field))
    ]


def validate_profile(profile: UserProfile) -> None:
    """
    Validate required profile fields.

    Raises:
        ValidationError: If any of name, email, phone or cpf is blank
    """
    missing = missing_required_fields(profile)
    if missing:
        raise ValidationError(missing)
