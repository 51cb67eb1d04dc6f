"""Field-level validation of the input schemas."""
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from podomus.models import AppointmentStatus, MessageStatus, ServiceType
from podomus.schemas import (
    AppointmentCreateIn,
    AppointmentsByDateRangeIn,
    AppointmentStatusUpdateIn,
    ContactMessageCreateIn,
    ContactMessageStatusUpdateIn,
    PatientCreateIn,
    ServiceCreateIn,
)

VALID_PATIENT = {
    "first_name": "Jean",
    "last_name": "Dupont",
    "email": "jean.dupont@example.com",
    "phone": "28 451 433",
}


def _errors(exc_info) -> dict[str, dict]:
    return {".".join(str(p) for p in e["loc"]): e for e in exc_info.value.errors()}


@pytest.mark.parametrize(
    "field, message",
    [
        ("first_name", "First name is required"),
        ("last_name", "Last name is required"),
        ("phone", "Phone number is required"),
    ],
)
def test_patient_required_text(field, message):
    with pytest.raises(ValidationError) as exc:
        PatientCreateIn(**{**VALID_PATIENT, field: ""})

    errors = _errors(exc)
    assert list(errors) == [field]
    assert errors[field]["msg"] == message


def test_patient_invalid_email():
    with pytest.raises(ValidationError) as exc:
        PatientCreateIn(**{**VALID_PATIENT, "email": "not-an-email"})

    assert _errors(exc)["email"]["msg"] == "Valid email is required"


def test_patient_optional_fields_default_to_none():
    p = PatientCreateIn(**VALID_PATIENT)
    assert p.date_of_birth is None
    assert p.address is None
    assert p.medical_history is None


def test_patient_email_kept_as_given():
    p = PatientCreateIn(**{**VALID_PATIENT, "email": "Jean.Dupont@Example.com"})
    assert p.email == "Jean.Dupont@Example.com"


def test_patient_date_of_birth_from_string():
    p = PatientCreateIn(**VALID_PATIENT, date_of_birth="1985-05-15")
    assert p.date_of_birth == date(1985, 5, 15)


def test_appointment_input_coerces_and_normalizes_dates():
    a = AppointmentCreateIn(
        patient_id=1,
        service_type="pedicurie_medicale",
        appointment_date="2024-02-15T11:00:00+01:00",
        duration_minutes=60,
    )
    assert a.service_type is ServiceType.PEDICURIE_MEDICALE
    # stored as naive UTC
    assert a.appointment_date == datetime(2024, 2, 15, 10, 0)
    assert a.notes is None


def test_appointment_input_has_no_status():
    a = AppointmentCreateIn(
        patient_id=1,
        service_type="semelles_orthopediques",
        appointment_date=datetime(2024, 2, 15, 10, 0),
        duration_minutes=90,
        status="confirmed",
    )
    assert "status" not in a.model_dump()


@pytest.mark.parametrize("field", ["patient_id", "duration_minutes"])
@pytest.mark.parametrize("value", [0, -5])
def test_appointment_positive_integers(field, value):
    payload = {
        "patient_id": 1,
        "service_type": "pedicurie_medicale",
        "appointment_date": "2024-02-15T10:00:00",
        "duration_minutes": 30,
        field: value,
    }
    with pytest.raises(ValidationError) as exc:
        AppointmentCreateIn(**payload)

    assert _errors(exc)[field]["type"] == "greater_than"


def test_appointment_unknown_service_type():
    with pytest.raises(ValidationError) as exc:
        AppointmentCreateIn(
            patient_id=1,
            service_type="massage",
            appointment_date="2024-02-15T10:00:00",
            duration_minutes=30,
        )

    assert "service_type" in _errors(exc)


def test_date_range_input():
    r = AppointmentsByDateRangeIn(start_date="2024-01-01", end_date=datetime(2024, 1, 31, 23, 59))
    assert r.start_date == datetime(2024, 1, 1)
    assert r.end_date == datetime(2024, 1, 31, 23, 59)


def test_status_update_inputs():
    assert AppointmentStatusUpdateIn(id=3, status="cancelled").status is AppointmentStatus.CANCELLED
    assert ContactMessageStatusUpdateIn(id=3, status="responded").status is MessageStatus.RESPONDED

    with pytest.raises(ValidationError):
        AppointmentStatusUpdateIn(id=3, status="archived")
    with pytest.raises(ValidationError):
        ContactMessageStatusUpdateIn(id=0, status="read")


@pytest.mark.parametrize(
    "field, message",
    [
        ("name", "Name is required"),
        ("subject", "Subject is required"),
        ("message", "Message is required"),
    ],
)
def test_contact_message_required_text(field, message):
    payload = {
        "name": "Marie Martin",
        "email": "marie@example.com",
        "subject": "Demande de rendez-vous",
        "message": "Bonjour",
        field: "",
    }
    with pytest.raises(ValidationError) as exc:
        ContactMessageCreateIn(**payload)

    assert _errors(exc)[field]["msg"] == message


def test_contact_message_defaults():
    m = ContactMessageCreateIn(name="Marie", email="marie@example.com", subject="Tarifs", message="Bonjour")
    assert m.is_appointment_request is False
    assert m.phone is None


@pytest.mark.parametrize(
    "field, message",
    [
        ("name", "Service name is required"),
        ("slug", "Service slug is required"),
        ("description", "Description is required"),
    ],
)
def test_service_required_text(field, message):
    payload = {
        "name": "Pédicurie Médicale",
        "slug": "pedicurie-medicale",
        "description": "Soins des pieds",
        "duration_minutes": 45,
        field: "",
    }
    with pytest.raises(ValidationError) as exc:
        ServiceCreateIn(**payload)

    assert _errors(exc)[field]["msg"] == message


@pytest.mark.parametrize("price", [0, -10.5])
def test_service_price_must_be_positive(price):
    with pytest.raises(ValidationError) as exc:
        ServiceCreateIn(name="X", slug="x", description="d", duration_minutes=30, price=price)

    assert _errors(exc)["price"]["type"] == "greater_than"


def test_service_defaults():
    s = ServiceCreateIn(name="X", slug="x", description="d", duration_minutes=30)
    assert s.is_active is True
    assert s.price is None


@pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan")])
def test_service_price_must_be_finite(price):
    with pytest.raises(ValidationError) as exc:
        ServiceCreateIn(name="X", slug="x", description="d", duration_minutes=30, price=price)

    assert "price" in _errors(exc)


@pytest.mark.parametrize("price", [0.001, 0.0049])
def test_service_price_below_one_cent(price):
    with pytest.raises(ValidationError) as exc:
        ServiceCreateIn(name="X", slug="x", description="d", duration_minutes=30, price=price)

    assert _errors(exc)["price"]["msg"] == "Price must be at least 0.01"


def test_service_price_rounding_up_to_one_cent():
    assert ServiceCreateIn(name="X", slug="x", description="d", duration_minutes=30, price=0.005).price == 0.005


@pytest.mark.parametrize("email", ["marie@clinic.test", "a@b.local", "cabinet@podomus.tn"])
def test_email_syntax_only(email):
    m = ContactMessageCreateIn(name="Marie", email=email, subject="Tarifs", message="Bonjour")
    assert m.email == email


@pytest.mark.parametrize("value", ["1985-05-15T10:00:00Z", "1985-05-15T23:30:00+02:00", datetime(1985, 5, 15, 8, 0)])
def test_patient_date_of_birth_from_timestamp(value):
    p = PatientCreateIn(**VALID_PATIENT, date_of_birth=value)
    assert p.date_of_birth == date(1985, 5, 15)


def test_patient_date_of_birth_garbage():
    with pytest.raises(ValidationError) as exc:
        PatientCreateIn(**VALID_PATIENT, date_of_birth="sometime in 1985")

    assert "date_of_birth" in _errors(exc)
