"""Pydantic models for the profile, app settings and appointment requests.

Stored JSON uses the mobile app's camelCase keys; Python attributes are
snake_case with camelCase aliases.
"""
import json
import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from medbook.errors import CorruptDataError, UnknownFieldError


class UserProfile(BaseModel):
    """
    The single user profile persisted on the device.

    Required fields (name, email, phone, cpf) are enforced when saving,
    not on construction: a draft under edit may be temporarily invalid.

    Instances are frozen. Changing a field means building a new profile
    with with_field(), so a profile handed out can never change under
    its holder.
    """
    name: str = Field(default="", description="Full name")
    email: str = Field(default="", description="E-mail address")
    phone: str = Field(default="", description="Phone number")
    cpf: str = Field(default="", description="Brazilian taxpayer ID")
    birth_date: str = Field(default="", alias="birthDate", description="Birth date as typed")
    address: str = Field(default="", description="Postal address")
    emergency_contact: str = Field(
        default="",
        alias="emergencyContact",
        description="Emergency contact name/phone"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "name": "Ana",
                "email": "a@x.com",
                "phone": "1199999999",
                "cpf": "11122233344",
                "birthDate": "",
                "address": "",
                "emergencyContact": ""
            }
        }
    )

    @classmethod
    def resolve_field(cls, key: str) -> str:
        """
        Map a stored (camelCase) or attribute (snake_case) key to the attribute name.

        Raises:
            UnknownFieldError: If the key names no profile field
        """
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        raise UnknownFieldError(f"UserProfile has no field '{key}'")

    def with_field(self, key: str, value: str) -> "UserProfile":
        """
        Return a copy with one field replaced. The value is type-checked.

        Raises:
            UnknownFieldError: If the key names no profile field
        """
        field = self.resolve_field(key)
        return self.model_validate({**self.model_dump(), field: value})

    def to_json(self) -> str:
        """Serialize the whole record with camelCase keys."""
        return json.dumps(self.model_dump(by_alias=True), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> "UserProfile":
        """
        Decode a stored profile.

        Missing keys read as empty strings; unknown keys are ignored.

        Raises:
            CorruptDataError: If the text is not a JSON object of strings
        """
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            raise CorruptDataError(f"Stored profile is not valid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise CorruptDataError(
                f"Stored profile is a JSON {type(data).__name__}, expected an object"
            )

        try:
            return cls.model_validate(data)
        except ValueError as exc:
            raise CorruptDataError(f"Stored profile has invalid fields: {exc}") from exc


class AppSettings(BaseModel):
    """The two independent app preferences."""
    notifications: bool = Field(default=True, description="Notifications enabled")
    dark_mode: bool = Field(default=False, alias="darkMode", description="Dark theme enabled")

    model_config = ConfigDict(populate_by_name=True)


class AppointmentRequest(BaseModel):
    """Transient appointment form payload. Never persisted."""
    patient_name: str = Field(default="", alias="patientName")
    patient_age: str = Field(default="", alias="patientAge")
    phone_number: str = Field(default="", alias="phoneNumber")
    specialty: str = Field(default="", description="One of config.SPECIALTIES")
    date: Optional[datetime.date] = Field(default_factory=datetime.date.today, description="Calendar date, no time")
    symptoms: str = Field(default="", description="Optional free-text symptoms")

    model_config = ConfigDict(populate_by_name=True)
