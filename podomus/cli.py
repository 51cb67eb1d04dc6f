from __future__ import annotations

import argparse
from datetime import datetime

from pydantic import ValidationError

from .config import get_settings
from .db import Database
from .errors import PodomusError
from .logging_config import configure_logging
from .schemas import (
    AppointmentCreateIn,
    AppointmentsByDateRangeIn,
    AppointmentStatusUpdateIn,
    ContactMessageStatusUpdateIn,
    PatientCreateIn,
    ServiceCreateIn,
)
from .seed import seed_services
from .services import (
    create_appointment,
    create_patient,
    create_service,
    get_active_services,
    get_appointments_by_date_range,
    get_contact_messages,
    get_services,
    init_db,
    update_appointment_status,
    update_contact_message_status,
)


def cmd_init(db: Database, args: argparse.Namespace) -> None:
    init_db(db)
    created = seed_services(db)
    print(f"DB initialisée ({created} service(s) ajouté(s)).")


def cmd_services(db: Database, args: argparse.Namespace) -> None:
    services = get_active_services(db) if args.active else get_services(db)
    if not services:
        print("Aucun service.")
    for s in services:
        price = f"{s.price:.2f} €" if s.price is not None else "-"
        state = "actif" if s.is_active else "inactif"
        print(f"{s.id} | {s.slug} | {s.name} | {s.duration_minutes} min | {price} | {state}")


def cmd_add_service(db: Database, args: argparse.Namespace) -> None:
    svc = create_service(
        db,
        ServiceCreateIn(
            name=args.name,
            slug=args.slug,
            description=args.description,
            duration_minutes=args.duration,
            price=args.price,
            is_active=not args.inactive,
        ),
    )
    print(f"Service créé : {svc.id} ({svc.slug})")


def cmd_messages(db: Database, args: argparse.Namespace) -> None:
    messages = get_contact_messages(db)
    if not messages:
        print("Aucun message.")
    for m in messages:
        rdv = " [RDV]" if m.is_appointment_request else ""
        print(f"[{m.id}] {m.status.value} | {m.created_at:%d/%m/%Y %H:%M} | {m.name} <{m.email}>{rdv} | {m.subject}")


def cmd_message_status(db: Database, args: argparse.Namespace) -> None:
    m = update_contact_message_status(db, ContactMessageStatusUpdateIn(id=args.id, status=args.status))
    print(f"Message {m.id} : {m.status.value}")


def cmd_add_patient(db: Database, args: argparse.Namespace) -> None:
    p = create_patient(
        db,
        PatientCreateIn(
            first_name=args.first_name,
            last_name=args.last_name,
            email=args.email,
            phone=args.phone,
            date_of_birth=args.date_of_birth,
            address=args.address,
            medical_history=args.medical_history,
        ),
    )
    print(f"Patient créé : {p.id}")


def cmd_book(db: Database, args: argparse.Namespace) -> None:
    a = create_appointment(
        db,
        AppointmentCreateIn(
            patient_id=args.patient_id,
            service_type=args.service_type,
            appointment_date=datetime.fromisoformat(args.date),  # ex: 2026-01-14T10:30
            duration_minutes=args.duration,
            notes=args.notes,
        ),
    )
    print(f"Rendez-vous créé : {a.id} ({a.status.value})")


def cmd_appointments(db: Database, args: argparse.Namespace) -> None:
    items = get_appointments_by_date_range(db, AppointmentsByDateRangeIn(start_date=args.start, end_date=args.end))
    if not items:
        print("Aucun rendez-vous sur la période.")
    for a in items:
        print(
            f"{a.id} | {a.appointment_date:%d/%m/%Y %H:%M} | patient {a.patient_id} | "
            f"{a.service_type.value} ({a.duration_minutes} min) | {a.status.value} | {a.notes or '-'}"
        )


def cmd_appointment_status(db: Database, args: argparse.Namespace) -> None:
    a = update_appointment_status(db, AppointmentStatusUpdateIn(id=args.id, status=args.status))
    print(f"Rendez-vous {a.id} : {a.status.value}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="podomus", description="Administration du cabinet Podomus")
    p.add_argument("--database-url", default=None, help="Par défaut: DATABASE_URL")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Crée les tables et le catalogue des services")
    p_init.set_defaults(func=cmd_init)

    p_srv = sub.add_parser("services", help="Liste des services")
    p_srv.add_argument("--active", action="store_true", help="Seulement les services actifs")
    p_srv.set_defaults(func=cmd_services)

    p_adds = sub.add_parser("add-service", help="Crée un service")
    p_adds.add_argument("--name", required=True)
    p_adds.add_argument("--slug", required=True)
    p_adds.add_argument("--description", required=True)
    p_adds.add_argument("--duration", type=int, required=True, help="Durée en minutes")
    p_adds.add_argument("--price", type=float, default=None)
    p_adds.add_argument("--inactive", action="store_true")
    p_adds.set_defaults(func=cmd_add_service)

    p_msg = sub.add_parser("messages", help="Messages de contact (plus récents d'abord)")
    p_msg.set_defaults(func=cmd_messages)

    p_msgst = sub.add_parser("message-status", help="Change le statut d'un message")
    p_msgst.add_argument("id", type=int)
    p_msgst.add_argument("status", choices=["new", "read", "responded"])
    p_msgst.set_defaults(func=cmd_message_status)

    p_addp = sub.add_parser("add-patient", help="Crée un patient")
    p_addp.add_argument("--first-name", required=True)
    p_addp.add_argument("--last-name", required=True)
    p_addp.add_argument("--email", required=True)
    p_addp.add_argument("--phone", required=True)
    p_addp.add_argument("--date-of-birth", default=None, help="AAAA-MM-JJ")
    p_addp.add_argument("--address", default=None)
    p_addp.add_argument("--medical-history", default=None)
    p_addp.set_defaults(func=cmd_add_patient)

    p_book = sub.add_parser("book", help="Crée un rendez-vous")
    p_book.add_argument("--patient-id", type=int, required=True)
    p_book.add_argument(
        "--service-type",
        required=True,
        choices=["pedicurie_medicale", "semelles_orthopediques", "orthoplastie_onychoplastie"],
    )
    p_book.add_argument("--date", required=True, help="Date ISO ex: 2026-01-14T10:30")
    p_book.add_argument("--duration", type=int, required=True, help="Durée en minutes")
    p_book.add_argument("--notes", default=None)
    p_book.set_defaults(func=cmd_book)

    p_app = sub.add_parser("appointments", help="Rendez-vous entre deux dates (incluses)")
    p_app.add_argument("--start", required=True, help="Date ISO")
    p_app.add_argument("--end", required=True, help="Date ISO")
    p_app.set_defaults(func=cmd_appointments)

    p_appst = sub.add_parser("appointment-status", help="Change le statut d'un rendez-vous")
    p_appst.add_argument("id", type=int)
    p_appst.add_argument("status", choices=["pending", "confirmed", "completed", "cancelled"])
    p_appst.set_defaults(func=cmd_appointment_status)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level="WARNING")

    db = Database(args.database_url or get_settings().database_url)
    try:
        init_db(db)  # guarantees the tables
        args.func(db, args)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "input"
            print(f"Erreur ({field}) : {err['msg']}")
        return 2
    except PodomusError as e:
        print(f"Erreur : {e.message}")
        return 1
    finally:
        db.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
