"""Tests for profile/settings/appointment models and the profile codec."""
import json
from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from medbook.errors import CorruptDataError, UnknownFieldError
from medbook.models import AppSettings, AppointmentRequest, UserProfile


def test_optional_fields_default_to_empty(ana_profile):
    """Optional profile fields should default to empty strings."""
    assert ana_profile.birth_date == ""
    assert ana_profile.address == ""
    assert ana_profile.emergency_contact == ""


def test_to_json_uses_camel_case_keys(full_profile):
    """Serialized profile should use the app's camelCase keys."""
    data = json.loads(full_profile.to_json())

    assert data["birthDate"] == "15/03/1985"
    assert data["emergencyContact"] == "Maria Oliveira (11) 97777-6666"
    assert "birth_date" not in data
    assert set(data) == {
        "name", "email", "phone", "cpf", "birthDate", "address", "emergencyContact"
    }


def test_to_json_keeps_non_ascii(full_profile):
    assert "São Paulo" in full_profile.to_json()


def test_from_json_tolerates_missing_keys():
    """Keys absent from stored JSON should read as empty strings."""
    profile = UserProfile.from_json('{"name": "Ana", "email": "a@x.com"}')

    assert profile.name == "Ana"
    assert profile.phone == ""
    assert profile.emergency_contact == ""


def test_from_json_ignores_unknown_keys():
    profile = UserProfile.from_json('{"name": "Ana", "avatar": "x.png"}')
    assert profile.name == "Ana"
    assert not hasattr(profile, "avatar")


@pytest.mark.parametrize("raw", [
    "not json",
    "{\"name\": ",
    "[1, 2, 3]",
    "\"Ana\"",
    "null",
    "{\"name\": 42}",
    "{\"cpf\": null}",
])
def test_from_json_rejects_corrupt_values(raw):
    """Undecodable or wrongly-shaped values should raise CorruptDataError."""
    with pytest.raises(CorruptDataError):
        UserProfile.from_json(raw)


def test_resolve_field_accepts_alias_and_attribute_names():
    assert UserProfile.resolve_field("name") == "name"
    assert UserProfile.resolve_field("birthDate") == "birth_date"
    assert UserProfile.resolve_field("birth_date") == "birth_date"
    assert UserProfile.resolve_field("emergencyContact") == "emergency_contact"


def test_resolve_field_rejects_unknown():
    with pytest.raises(UnknownFieldError):
        UserProfile.resolve_field("avatar")


def test_profile_is_frozen(ana_profile):
    """Profiles cannot be changed in place."""
    with pytest.raises(PydanticValidationError):
        ana_profile.name = "Ghost"
    assert ana_profile.name == "Ana"


def test_with_field_returns_updated_copy(ana_profile):
    updated = ana_profile.with_field("emergencyContact", "João 1188887777")

    assert updated.emergency_contact == "João 1188887777"
    assert updated.name == "Ana"
    assert ana_profile.emergency_contact == ""


def test_with_field_is_type_checked(ana_profile):
    """Replacing a field with a non-string should fail."""
    with pytest.raises(PydanticValidationError):
        ana_profile.with_field("name", 123)
    with pytest.raises(UnknownFieldError):
        ana_profile.with_field("avatar", "x.png")


def test_from_json_rejects_deeply_nested_value():
    """Nesting deep enough to exhaust the JSON decoder counts as corruption."""
    with pytest.raises(CorruptDataError):
        UserProfile.from_json("[" * 100000 + "]" * 100000)


def test_app_settings_defaults():
    settings = AppSettings()
    assert settings.notifications is True
    assert settings.dark_mode is False


def test_appointment_request_accepts_camel_case():
    request = AppointmentRequest.model_validate({
        "patientName": "João",
        "patientAge": "34",
        "phoneNumber": "11999990000",
        "specialty": "Cardiologia",
        "date": "2030-01-15",
    })

    assert request.patient_name == "João"
    assert request.date == date(2030, 1, 15)
    assert request.symptoms == ""


def test_appointment_request_date_defaults_to_today():
    assert AppointmentRequest().date == date.today()
