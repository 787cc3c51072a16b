"""
Error taxonomy shared by every domain service.

Services raise these; ``src.main`` maps each category to an HTTP status so
callers can tell validation problems from missing records or store failures.
"""


class EngineError(Exception):
    """Base class for all errors raised by the engine."""
    category = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EngineError):
    """Input is incomplete or violates a business rule. Raised before any write."""
    category = "validation"
    status_code = 422


class NotFoundError(EngineError):
    """A referenced contract, installment or request does not exist."""
    category = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(EngineError):
    """Duplicate record or stale optimistic-concurrency token."""
    category = "conflict"
    status_code = 409


class DomainError(EngineError):
    """The request is well formed but the domain state forbids it."""
    category = "domain"
    status_code = 400


class PersistenceError(EngineError):
    """The store rejected a write; the transaction has been rolled back."""
    category = "persistence"
    status_code = 500
