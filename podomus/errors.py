from __future__ import annotations


class PodomusError(Exception):
    """Base class for domain errors raised by the handlers."""

    code = "PODOMUS_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ReferenceNotFoundError(PodomusError):
    """A create references a parent row that does not exist."""

    code = "REFERENCE_NOT_FOUND"

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} with id {entity_id} does not exist")
        self.entity = entity
        self.entity_id = entity_id


class DuplicateRecordError(PodomusError):
    """Unique constraint violated (Patient.email, Service.slug)."""

    code = "UNIQUE_VIOLATION"

    def __init__(self, entity: str, field: str, value: str) -> None:
        super().__init__(f"{entity} with {field} '{value}' already exists (unique constraint violation)")
        self.entity = entity
        self.field = field
        self.value = value


class RecordNotFoundError(PodomusError):
    """Update targeting an id with no row."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} with id {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id
