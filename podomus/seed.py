from __future__ import annotations

import structlog
from sqlalchemy import select

from .db import Database
from .models import Service
from .schemas import ServiceCreateIn
from .services import create_service

log = structlog.get_logger(__name__)

# The clinic's three services (slugs match the website routes)
CATALOG: list[dict] = [
    {
        "name": "Pédicurie Médicale",
        "slug": "pedicurie-medicale",
        "description": (
            "Soins professionnels des pieds : traitement des cors, durillons, ongles incarnés "
            "et soins adaptés aux patients diabétiques."
        ),
        "duration_minutes": 45,
        "price": None,
    },
    {
        "name": "Semelles Orthopédiques",
        "slug": "semelles-orthopediques",
        "description": (
            "Orthèses plantaires sur mesure après bilan podologique et analyse de la marche, "
            "pour corriger les troubles posturaux et soulager les douleurs."
        ),
        "duration_minutes": 60,
        "price": None,
    },
    {
        "name": "Orthoplastie & Onychoplastie",
        "slug": "orthoplastie-onychoplastie",
        "description": (
            "Correction des déformations des orteils par orthèses en silicone moulées "
            "et reconstruction esthétique des ongles abîmés."
        ),
        "duration_minutes": 30,
        "price": None,
    },
]


def seed_services(db: Database) -> int:
    """
    Load the service catalog (idempotent): only missing slugs are inserted.
    Returns the number of services created.
    """
    with db.session() as s:
        existing = set(s.scalars(select(Service.slug)))

    created = 0
    for item in CATALOG:
        if item["slug"] in existing:
            continue
        create_service(db, ServiceCreateIn(**item))
        created += 1

    if created:
        log.info("service_catalog_seeded", created=created)
    return created
