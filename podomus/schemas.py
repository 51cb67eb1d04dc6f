from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

import email_validator
from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic_core import PydanticCustomError

from .models import AppointmentStatus, MessageStatus, ServiceType

# syntax check only: reserved names (.test, .local, ...) are valid addresses here
email_validator.SPECIAL_USE_DOMAIN_NAMES.clear()

_datetime = TypeAdapter(datetime)


# =========================
# Field validators
# =========================
def Required(message: str) -> AfterValidator:
    """Non-empty string check reporting `message` for the field."""

    def check(value: str) -> str:
        if len(value) < 1:
            raise PydanticCustomError("required", message)
        return value

    return AfterValidator(check)


def _valid_email(value: str) -> str:
    # syntax only; the address is stored exactly as given (no case folding)
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email", "Valid email is required") from None
    return value


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _calendar_date(value: Any) -> Any:
    # a full timestamp keeps its calendar date as written
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        try:
            return _datetime.validate_python(value).date()
        except ValidationError:
            return value
    return value


def _whole_cents(value: float) -> float:
    if Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) <= 0:
        raise PydanticCustomError("price_too_small", "Price must be at least 0.01")
    return value


Email = Annotated[str, AfterValidator(_valid_email)]
Timestamp = Annotated[datetime, AfterValidator(_naive_utc)]
CalendarDate = Annotated[date, BeforeValidator(_calendar_date)]
PositiveInt = Annotated[int, Field(gt=0)]
Price = Annotated[float, Field(gt=0, allow_inf_nan=False), AfterValidator(_whole_cents)]


# =========================
# Input schemas
# =========================
class PatientCreateIn(BaseModel):
    first_name: Annotated[str, Required("First name is required")]
    last_name: Annotated[str, Required("Last name is required")]
    email: Email
    phone: Annotated[str, Required("Phone number is required")]
    date_of_birth: CalendarDate | None = None
    address: str | None = None
    medical_history: str | None = None


class PatientByEmailIn(BaseModel):
    email: Email


class AppointmentCreateIn(BaseModel):
    # no status field: every appointment starts as "pending"
    patient_id: PositiveInt
    service_type: ServiceType
    appointment_date: Timestamp
    duration_minutes: PositiveInt
    notes: str | None = None


class AppointmentsByDateRangeIn(BaseModel):
    start_date: Timestamp
    end_date: Timestamp


class AppointmentStatusUpdateIn(BaseModel):
    id: PositiveInt
    status: AppointmentStatus


class ContactMessageCreateIn(BaseModel):
    name: Annotated[str, Required("Name is required")]
    email: Email
    phone: str | None = None
    subject: Annotated[str, Required("Subject is required")]
    message: Annotated[str, Required("Message is required")]
    is_appointment_request: bool = False


class ContactMessageStatusUpdateIn(BaseModel):
    id: PositiveInt
    status: MessageStatus


class ServiceCreateIn(BaseModel):
    name: Annotated[str, Required("Service name is required")]
    slug: Annotated[str, Required("Service slug is required")]
    description: Annotated[str, Required("Description is required")]
    duration_minutes: PositiveInt
    price: Price | None = None
    is_active: bool = True


class ServiceBySlugIn(BaseModel):
    slug: Annotated[str, Required("Service slug is required")]


# =========================
# Output schemas
# =========================
class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PatientOut(_Record):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: date | None
    address: str | None
    medical_history: str | None
    created_at: datetime
    updated_at: datetime


class AppointmentOut(_Record):
    id: int
    patient_id: int
    service_type: ServiceType
    appointment_date: datetime
    duration_minutes: int
    status: AppointmentStatus
    notes: str | None
    created_at: datetime
    updated_at: datetime


class ContactMessageOut(_Record):
    id: int
    name: str
    email: str
    phone: str | None
    subject: str
    message: str
    is_appointment_request: bool
    status: MessageStatus
    created_at: datetime


class ServiceOut(_Record):
    id: int
    name: str
    slug: str
    description: str
    duration_minutes: int
    price: float | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class HealthOut(BaseModel):
    status: str
    timestamp: datetime
