import pytest

from podomus.errors import RecordNotFoundError
from podomus.models import MessageStatus
from podomus.schemas import ContactMessageCreateIn, ContactMessageStatusUpdateIn
from podomus.services import create_contact_message, get_contact_messages, update_contact_message_status


def _message(**overrides) -> ContactMessageCreateIn:
    data = {
        "name": "Marie Martin",
        "email": "marie.martin@example.com",
        "phone": "28 451 433",
        "subject": "Demande de rendez-vous",
        "message": "Bonjour, je souhaiterais prendre rendez-vous pour des semelles.",
        "is_appointment_request": True,
    }
    data.update(overrides)
    return ContactMessageCreateIn(**data)


def test_create_contact_message(db):
    result = create_contact_message(db, _message())

    assert result.id > 0
    assert result.name == "Marie Martin"
    assert result.email == "marie.martin@example.com"
    assert result.phone == "28 451 433"
    assert result.is_appointment_request is True
    assert result.status is MessageStatus.NEW
    assert result.created_at is not None


def test_create_contact_message_without_phone(db):
    data = ContactMessageCreateIn(
        name="Ali",
        email="ali@example.com",
        subject="Tarifs",
        message="Quels sont vos tarifs ?",
    )
    result = create_contact_message(db, data)

    assert result.phone is None
    assert result.is_appointment_request is False
    assert result.status is MessageStatus.NEW


def test_contact_messages_newest_first(db):
    a = create_contact_message(db, _message(subject="A"))
    b = create_contact_message(db, _message(subject="B"))
    c = create_contact_message(db, _message(subject="C"))

    assert [m.id for m in get_contact_messages(db)] == [c.id, b.id, a.id]


def test_contact_messages_empty(db):
    assert get_contact_messages(db) == []


def test_status_read_then_responded(db):
    msg = create_contact_message(db, _message())

    read = update_contact_message_status(db, ContactMessageStatusUpdateIn(id=msg.id, status="read"))
    assert read.status is MessageStatus.READ

    done = update_contact_message_status(db, ContactMessageStatusUpdateIn(id=msg.id, status="responded"))
    assert done.status is MessageStatus.RESPONDED

    for field in ["name", "email", "phone", "subject", "message", "is_appointment_request", "created_at"]:
        assert getattr(done, field) == getattr(msg, field), field


def test_status_can_go_back_to_new(db):
    msg = create_contact_message(db, _message())
    update_contact_message_status(db, ContactMessageStatusUpdateIn(id=msg.id, status="responded"))

    again = update_contact_message_status(db, ContactMessageStatusUpdateIn(id=msg.id, status="new"))
    assert again.status is MessageStatus.NEW


def test_status_update_not_found(db):
    with pytest.raises(RecordNotFoundError, match=r"Contact message with id 777 not found"):
        update_contact_message_status(db, ContactMessageStatusUpdateIn(id=777, status="read"))
