import pytest

from podomus import cli
from podomus.db import Database
from podomus.seed import CATALOG, seed_services
from podomus.services import get_services


def test_seed_is_idempotent(db):
    assert seed_services(db) == len(CATALOG)
    assert seed_services(db) == 0

    services = get_services(db)
    assert [s.slug for s in services] == [item["slug"] for item in CATALOG]
    assert all(s.is_active for s in services)


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    return f"sqlite:///{tmp_path / 'podomus.sqlite'}"


def run(db_url, *argv) -> int:
    return cli.main(["--database-url", db_url, *argv])


def test_init_and_list_services(db_url, capsys):
    assert run(db_url, "init") == 0
    assert run(db_url, "add-service", "--name", "Bilan", "--slug", "bilan", "--description", "Bilan postural",
               "--duration", "40", "--price", "55.5", "--inactive") == 0
    capsys.readouterr()

    assert run(db_url, "services") == 0
    out = capsys.readouterr().out
    assert "pedicurie-medicale" in out
    assert "bilan" in out and "55.50" in out

    assert run(db_url, "services", "--active") == 0
    assert "bilan" not in capsys.readouterr().out


def test_patient_booking_and_status(db_url, capsys):
    assert run(db_url, "add-patient", "--first-name", "Jean", "--last-name", "Dupont",
               "--email", "jean@example.com", "--phone", "28 451 433", "--date-of-birth", "1985-05-15") == 0
    assert run(db_url, "book", "--patient-id", "1", "--service-type", "pedicurie_medicale",
               "--date", "2026-01-14T10:30", "--duration", "45") == 0
    assert "pending" in capsys.readouterr().out

    assert run(db_url, "appointment-status", "1", "confirmed") == 0
    assert run(db_url, "appointments", "--start", "2026-01-14T10:30", "--end", "2026-01-14T10:30") == 0
    assert "confirmed" in capsys.readouterr().out


def test_errors_exit_non_zero(db_url, capsys):
    assert run(db_url, "book", "--patient-id", "99", "--service-type", "pedicurie_medicale",
               "--date", "2026-01-14T10:30", "--duration", "45") == 1
    assert "Patient with id 99 does not exist" in capsys.readouterr().out

    assert run(db_url, "add-patient", "--first-name", "", "--last-name", "X",
               "--email", "x@example.com", "--phone", "1") == 2
    assert "First name is required" in capsys.readouterr().out

    assert run(db_url, "message-status", "5", "read") == 1
    assert "not found" in capsys.readouterr().out


def test_messages_listing(db_url, capsys):
    assert run(db_url, "messages") == 0
    assert "Aucun message" in capsys.readouterr().out


def test_database_handle_repr(db_url):
    d = Database(db_url)
    try:
        assert "podomus.sqlite" in repr(d)
    finally:
        d.dispose()


def test_non_finite_price_is_a_validation_error(db_url, capsys):
    assert run(db_url, "add-service", "--name", "X", "--slug", "x", "--description", "d",
               "--duration", "10", "--price", "inf") == 2
    assert "price" in capsys.readouterr().out
