"""Appointment request validation.

Pure functions: nothing here is stored. A valid request only yields the
confirmation message shown to the user.
"""
import datetime
from dataclasses import dataclass, field
from typing import List, Optional

from medbook import config
from medbook.logging_config import get_logger
from medbook.models import AppointmentRequest

logger = get_logger(__name__)

REQUIRED_APPOINTMENT_FIELDS = ("patient_name", "patient_age", "phone_number", "specialty")


@dataclass
class AppointmentResult:
    """Validation outcome for an appointment request."""
    is_valid: bool
    title: str
    message: str
    missing_fields: List[str] = field(default_factory=list)


def format_display_date(value: datetime.date) -> str:
    """Format a date as dd/mm/yyyy."""
    return value.strftime(config.DISPLAY_DATE_FORMAT)


def validate_appointment(
    request: AppointmentRequest,
    today: Optional[datetime.date] = None
) -> AppointmentResult:
    """
    Check an appointment request.

    Rules:
    - patient name, age, phone and specialty are non-empty (no trimming,
      matching the mobile form)
    - specialty is one of config.SPECIALTIES
    - date is present and not before today

    Args:
        request: Form payload
        today: Reference date (default: date.today())

    Returns:
        AppointmentResult; on success the message is the booking confirmation
    """
    if today is None:
        today = datetime.date.today()

    missing = [
        name for name in REQUIRED_APPOINTMENT_FIELDS
        if not getattr(request, name)
    ]
    if request.date is None:
        missing.append("date")

    if missing:
        return AppointmentResult(
            is_valid=False,
            title="Erro no Formulário",
            message="Por favor, preencha todos os campos obrigatórios.",
            missing_fields=missing
        )

    if request.specialty not in config.SPECIALTIES:
        return AppointmentResult(
            is_valid=False,
            title="Erro no Formulário",
            message=f"Especialidade inválida: {request.specialty}."
        )

    if request.date < today:
        return AppointmentResult(
            is_valid=False,
            title="Erro no Formulário",
            message="A data da consulta não pode ser anterior a hoje."
        )

    return AppointmentResult(
        is_valid=True,
        title="Consulta Agendada!",
        message=(
            f"Sua consulta foi agendada com sucesso para {format_display_date(request.date)}. "
            "Você receberá uma confirmação por SMS."
        )
    )


def submit_appointment(
    request: AppointmentRequest,
    today: Optional[datetime.date] = None
) -> AppointmentResult:
    """Validate a submission and log the outcome. No record is kept."""
    result = validate_appointment(request, today=today)
    if result.is_valid:
        logger.info("appointment_acknowledged", specialty=request.specialty, date=str(request.date))
    else:
        logger.info("appointment_rejected", missing_fields=result.missing_fields)
    return result
