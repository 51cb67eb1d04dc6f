from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import structlog
from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError

from .db import Database
from .errors import DuplicateRecordError, RecordNotFoundError, ReferenceNotFoundError
from .models import (
    Appointment,
    AppointmentStatus,
    ContactMessage,
    MessageStatus,
    Patient,
    Service,
    utcnow,
)
from .schemas import (
    AppointmentCreateIn,
    AppointmentOut,
    AppointmentsByDateRangeIn,
    AppointmentStatusUpdateIn,
    ContactMessageCreateIn,
    ContactMessageOut,
    ContactMessageStatusUpdateIn,
    PatientByEmailIn,
    PatientCreateIn,
    PatientOut,
    ServiceBySlugIn,
    ServiceCreateIn,
    ServiceOut,
)

log = structlog.get_logger(__name__)

PRICE_QUANTUM = Decimal("0.01")


# =========================
# Bootstrap DB
# =========================
def init_db(db: Database) -> None:
    """Create the tables if they do not exist."""
    db.create_all()


# =========================
# Price conversion
# =========================
def price_to_text(price: float | None) -> str | None:
    """Float -> fixed-precision decimal text (2 digits), as stored."""
    if price is None:
        return None
    return str(Decimal(str(price)).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP))


def price_from_text(price: str | None) -> float | None:
    """Stored decimal text -> float, as returned to callers."""
    if price is None:
        return None
    return float(Decimal(price))


def _service_out(service: Service) -> ServiceOut:
    return ServiceOut(
        id=service.id,
        name=service.name,
        slug=service.slug,
        description=service.description,
        duration_minutes=service.duration_minutes,
        price=price_from_text(service.price),
        is_active=service.is_active,
        created_at=service.created_at,
        updated_at=service.updated_at,
    )


# =========================
# Patients
# =========================
def create_patient(db: Database, data: PatientCreateIn) -> PatientOut:
    try:
        with db.session() as s:
            now = utcnow()
            p = Patient(
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                phone=data.phone,
                date_of_birth=data.date_of_birth,
                address=data.address,
                medical_history=data.medical_history,
                created_at=now,
                updated_at=now,
            )
            s.add(p)
            s.flush()
            result = PatientOut.model_validate(p)
    except IntegrityError as e:
        log.warning("patient_create_failed", reason="duplicate_email", error=str(e.orig))
        raise DuplicateRecordError("Patient", "email", data.email) from e
    except Exception as e:
        log.error("patient_create_failed", error=str(e))
        raise

    log.info("patient_created", patient_id=result.id)
    return result


def get_patient_by_email(db: Database, data: PatientByEmailIn) -> PatientOut | None:
    """Exact, case-sensitive lookup. None when no patient matches."""
    try:
        with db.session() as s:
            p = s.scalars(select(Patient).where(Patient.email == data.email).limit(1)).first()
            return PatientOut.model_validate(p) if p else None
    except Exception as e:
        log.error("patient_lookup_failed", error=str(e))
        raise


# =========================
# Appointments
# =========================
def create_appointment(db: Database, data: AppointmentCreateIn) -> AppointmentOut:
    """
    Book an appointment for an existing patient.
    - the patient must exist (explicit check, the FK backs it up)
    - status always starts as PENDING
    """
    try:
        with db.session() as s:
            if s.get(Patient, data.patient_id) is None:
                raise ReferenceNotFoundError("Patient", data.patient_id)

            now = utcnow()
            app = Appointment(
                patient_id=data.patient_id,
                service_type=data.service_type,
                appointment_date=data.appointment_date,
                duration_minutes=data.duration_minutes,
                status=AppointmentStatus.PENDING,
                notes=data.notes,
                created_at=now,
                updated_at=now,
            )
            s.add(app)
            s.flush()
            result = AppointmentOut.model_validate(app)
    except ReferenceNotFoundError as e:
        log.warning("appointment_create_failed", error=e.message)
        raise
    except Exception as e:
        log.error("appointment_create_failed", error=str(e))
        raise

    log.info("appointment_created", appointment_id=result.id, patient_id=result.patient_id)
    return result


def get_appointments_by_date_range(db: Database, data: AppointmentsByDateRangeIn) -> list[AppointmentOut]:
    """Appointments in [start_date, end_date] (both inclusive), earliest first."""
    try:
        with db.session() as s:
            q = (
                select(Appointment)
                .where(
                    and_(
                        Appointment.appointment_date >= data.start_date,
                        Appointment.appointment_date <= data.end_date,
                    )
                )
                .order_by(Appointment.appointment_date.asc(), Appointment.id.asc())
            )
            return [AppointmentOut.model_validate(a) for a in s.scalars(q)]
    except Exception as e:
        log.error("appointment_range_query_failed", error=str(e))
        raise


def update_appointment_status(db: Database, data: AppointmentStatusUpdateIn) -> AppointmentOut:
    """Any status may follow any other. Only status and updated_at change."""
    try:
        with db.session() as s:
            app = s.get(Appointment, data.id)
            if app is None:
                raise RecordNotFoundError("Appointment", data.id)

            app.status = data.status
            app.updated_at = utcnow()
            s.flush()
            result = AppointmentOut.model_validate(app)
    except RecordNotFoundError as e:
        log.warning("appointment_status_update_failed", error=e.message)
        raise
    except Exception as e:
        log.error("appointment_status_update_failed", error=str(e))
        raise

    log.info("appointment_status_updated", appointment_id=result.id, status=result.status.value)
    return result


# =========================
# Contact messages
# =========================
def create_contact_message(db: Database, data: ContactMessageCreateIn) -> ContactMessageOut:
    try:
        with db.session() as s:
            msg = ContactMessage(
                name=data.name,
                email=data.email,
                phone=data.phone,
                subject=data.subject,
                message=data.message,
                is_appointment_request=data.is_appointment_request,
                status=MessageStatus.NEW,
                created_at=utcnow(),
            )
            s.add(msg)
            s.flush()
            result = ContactMessageOut.model_validate(msg)
    except Exception as e:
        log.error("contact_message_create_failed", error=str(e))
        raise

    log.info(
        "contact_message_created",
        message_id=result.id,
        is_appointment_request=result.is_appointment_request,
    )
    return result


def get_contact_messages(db: Database) -> list[ContactMessageOut]:
    """All messages, most recent first."""
    try:
        with db.session() as s:
            q = select(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
            return [ContactMessageOut.model_validate(m) for m in s.scalars(q)]
    except Exception as e:
        log.error("contact_messages_query_failed", error=str(e))
        raise


def update_contact_message_status(db: Database, data: ContactMessageStatusUpdateIn) -> ContactMessageOut:
    try:
        with db.session() as s:
            msg = s.get(ContactMessage, data.id)
            if msg is None:
                raise RecordNotFoundError("Contact message", data.id)

            msg.status = data.status
            s.flush()
            result = ContactMessageOut.model_validate(msg)
    except RecordNotFoundError as e:
        log.warning("contact_message_status_update_failed", error=e.message)
        raise
    except Exception as e:
        log.error("contact_message_status_update_failed", error=str(e))
        raise

    log.info("contact_message_status_updated", message_id=result.id, status=result.status.value)
    return result


# =========================
# Services (catalog)
# =========================
def create_service(db: Database, data: ServiceCreateIn) -> ServiceOut:
    try:
        with db.session() as s:
            now = utcnow()
            svc = Service(
                name=data.name,
                slug=data.slug,
                description=data.description,
                duration_minutes=data.duration_minutes,
                price=price_to_text(data.price),
                is_active=data.is_active,
                created_at=now,
                updated_at=now,
            )
            s.add(svc)
            s.flush()
            result = _service_out(svc)
    except IntegrityError as e:
        log.warning("service_create_failed", reason="duplicate_slug", error=str(e.orig))
        raise DuplicateRecordError("Service", "slug", data.slug) from e
    except Exception as e:
        log.error("service_create_failed", error=str(e))
        raise

    log.info("service_created", service_id=result.id, slug=result.slug)
    return result


def get_services(db: Database) -> list[ServiceOut]:
    """Every service, active or not, in insertion order."""
    try:
        with db.session() as s:
            return [_service_out(svc) for svc in s.scalars(select(Service).order_by(Service.id.asc()))]
    except Exception as e:
        log.error("services_query_failed", error=str(e))
        raise


def get_active_services(db: Database) -> list[ServiceOut]:
    try:
        with db.session() as s:
            q = select(Service).where(Service.is_active.is_(True)).order_by(Service.id.asc())
            return [_service_out(svc) for svc in s.scalars(q)]
    except Exception as e:
        log.error("active_services_query_failed", error=str(e))
        raise


def get_service_by_slug(db: Database, data: ServiceBySlugIn) -> ServiceOut | None:
    try:
        with db.session() as s:
            svc = s.scalars(select(Service).where(Service.slug == data.slug).limit(1)).first()
            return _service_out(svc) if svc else None
    except Exception as e:
        log.error("service_lookup_failed", slug=data.slug, error=str(e))
        raise
