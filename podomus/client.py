from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

import requests
from pydantic import TypeAdapter

from .models import AppointmentStatus, MessageStatus, ServiceType
from .schemas import AppointmentOut, ContactMessageOut, HealthOut, PatientOut, ServiceOut

_patients = TypeAdapter(PatientOut | None)
_appointments = TypeAdapter(list[AppointmentOut])
_messages = TypeAdapter(list[ContactMessageOut])
_services = TypeAdapter(list[ServiceOut])
_service = TypeAdapter(ServiceOut | None)


class RPCError(Exception):
    """Failed procedure call, as reported by the server error envelope."""

    def __init__(self, code: str, message: str, http_status: int, data: dict | None = None) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.http_status = http_status
        self.data = data or {}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (ServiceType, AppointmentStatus, MessageStatus)):
        return value.value
    return value


def _clean(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: _jsonable(v) for k, v in payload.items()}


class PodomusClient:
    """
    Typed client for the /trpc procedures.
    Responses are parsed back into the output models, so dates and nulls
    come back as `datetime` / `date` / `None`.
    """

    def __init__(self, base_url: str, session: Any | None = None, timeout: float = 10) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # transport

    def _url(self, procedure: str) -> str:
        return f"{self.base_url}/trpc/{procedure}"

    def _unwrap(self, response: Any) -> Any:
        try:
            body = response.json()
        except ValueError:
            response.raise_for_status()
            raise
        if "error" in body:
            err = body["error"]
            raise RPCError(err.get("code", "UNKNOWN"), err.get("message", ""), response.status_code, err.get("data"))
        return body["result"]["data"]

    def query(self, procedure: str, payload: dict[str, Any] | None = None) -> Any:
        params = {"input": json.dumps(_clean(payload))} if payload else None
        r = self.session.get(self._url(procedure), params=params, timeout=self.timeout)
        return self._unwrap(r)

    def mutate(self, procedure: str, payload: dict[str, Any]) -> Any:
        r = self.session.post(self._url(procedure), json=_clean(payload), timeout=self.timeout)
        return self._unwrap(r)

    # procedures

    def healthcheck(self) -> HealthOut:
        return HealthOut.model_validate(self.query("healthcheck"))

    def create_patient(self, **fields: Any) -> PatientOut:
        return PatientOut.model_validate(self.mutate("createPatient", fields))

    def get_patient_by_email(self, email: str) -> PatientOut | None:
        return _patients.validate_python(self.query("getPatientByEmail", {"email": email}))

    def create_appointment(self, **fields: Any) -> AppointmentOut:
        return AppointmentOut.model_validate(self.mutate("createAppointment", fields))

    def get_appointments_by_date_range(self, start_date: datetime, end_date: datetime) -> list[AppointmentOut]:
        data = self.query("getAppointmentsByDateRange", {"start_date": start_date, "end_date": end_date})
        return _appointments.validate_python(data)

    def update_appointment_status(self, id: int, status: AppointmentStatus | str) -> AppointmentOut:
        return AppointmentOut.model_validate(self.mutate("updateAppointmentStatus", {"id": id, "status": status}))

    def create_contact_message(self, **fields: Any) -> ContactMessageOut:
        return ContactMessageOut.model_validate(self.mutate("createContactMessage", fields))

    def get_contact_messages(self) -> list[ContactMessageOut]:
        return _messages.validate_python(self.query("getContactMessages"))

    def update_contact_message_status(self, id: int, status: MessageStatus | str) -> ContactMessageOut:
        data = self.mutate("updateContactMessageStatus", {"id": id, "status": status})
        return ContactMessageOut.model_validate(data)

    def create_service(self, **fields: Any) -> ServiceOut:
        return ServiceOut.model_validate(self.mutate("createService", fields))

    def get_services(self) -> list[ServiceOut]:
        return _services.validate_python(self.query("getServices"))

    def get_active_services(self) -> list[ServiceOut]:
        return _services.validate_python(self.query("getActiveServices"))

    def get_service_by_slug(self, slug: str) -> ServiceOut | None:
        return _service.validate_python(self.query("getServiceBySlug", {"slug": slug}))
