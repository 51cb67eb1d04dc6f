from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from podomus.api_main import create_app
from podomus.db import Database
from podomus.schemas import PatientCreateIn
from podomus.services import create_patient, init_db


@pytest.fixture
def db():
    database = Database("sqlite://")
    init_db(database)
    yield database
    database.dispose()


@pytest.fixture
def client(db):
    app = create_app(db, seed=False)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def patient_input() -> PatientCreateIn:
    return PatientCreateIn(
        first_name="Jean",
        last_name="Dupont",
        email="jean.dupont@example.com",
        phone="+33 1 23 45 67 89",
        date_of_birth=date(1985, 5, 15),
        address="123 Rue de la Paix, 75001 Paris",
        medical_history="Diabète type 2, problèmes de circulation",
    )


@pytest.fixture
def patient(db, patient_input):
    return create_patient(db, patient_input)
