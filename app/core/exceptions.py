"""
Domain errors raised by the planning and execution services.

The API layer maps each class to an HTTP status code (see ``app.main``).
"""


class DomainError(Exception):
    """Base class for every error raised by the route services."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed input: missing ids, identical endpoints, duplicate route."""
    status_code = 400


class NotFoundError(DomainError):
    """Referenced route, segment, option or vehicle does not exist."""
    status_code = 404


class CapacityError(DomainError):
    """Cargo exceeds the vehicle's weight or volume limit."""
    status_code = 409


class StateError(DomainError):
    """Well-formed input rejected by the current state of the aggregate."""
    status_code = 409


class OracleFailure(DomainError):
    """No usable distance measurement could be obtained."""
    status_code = 422


class IntegrationFailure(DomainError):
    """A collaborating service could not be reached or answered badly."""
    status_code = 502
