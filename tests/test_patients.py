from datetime import date, datetime

import pytest

from podomus.errors import DuplicateRecordError
from podomus.schemas import PatientByEmailIn, PatientCreateIn
from podomus.services import create_patient, get_patient_by_email


def test_create_patient(db, patient_input):
    result = create_patient(db, patient_input)

    assert result.id > 0
    assert result.first_name == "Jean"
    assert result.last_name == "Dupont"
    assert result.email == "jean.dupont@example.com"
    assert result.phone == "+33 1 23 45 67 89"
    assert result.date_of_birth == date(1985, 5, 15)
    assert result.address == patient_input.address
    assert result.medical_history == patient_input.medical_history
    assert isinstance(result.created_at, datetime)
    assert result.updated_at == result.created_at


def test_create_then_get_by_email_round_trips(db, patient_input):
    created = create_patient(db, patient_input)

    found = get_patient_by_email(db, PatientByEmailIn(email=patient_input.email))

    assert found == created
    assert found.date_of_birth == date(1985, 5, 15)


def test_create_patient_with_nullable_fields(db):
    result = create_patient(
        db,
        PatientCreateIn(first_name="Amel", last_name="Ben Salah", email="amel@example.com", phone="22 000 111"),
    )

    assert result.date_of_birth is None
    assert result.address is None
    assert result.medical_history is None


def test_duplicate_email_fails_and_keeps_first(db, patient_input):
    first = create_patient(db, patient_input)

    with pytest.raises(DuplicateRecordError) as exc:
        create_patient(db, patient_input.model_copy(update={"first_name": "Paul"}))

    assert exc.value.code == "UNIQUE_VIOLATION"
    assert "unique" in exc.value.message
    assert get_patient_by_email(db, PatientByEmailIn(email=patient_input.email)) == first


def test_get_patient_by_email_not_found(db, patient):
    assert get_patient_by_email(db, PatientByEmailIn(email="nobody@example.com")) is None


def test_get_patient_by_email_is_case_sensitive(db, patient):
    assert get_patient_by_email(db, PatientByEmailIn(email="JEAN.DUPONT@EXAMPLE.COM")) is None
