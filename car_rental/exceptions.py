"""Errors raised by the services and translated to HTTP responses by the routes."""

REQUEST_PARTS = ("body", "query", "path", "header", "cookie")


class CarRentalError(Exception):
    default_message = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(CarRentalError):
    default_message = "Missing required fields"

    @classmethod
    def from_errors(cls, errors):
        """Name the offending fields of a pydantic error list without echoing their values."""
        fields = [".".join(str(part) for part in e["loc"] if part not in REQUEST_PARTS) for e in errors]
        fields = list(dict.fromkeys(f for f in fields if f))
        if not fields:
            return cls("Invalid request body")
        return cls(f"Invalid value for: {', '.join(fields)}")


class Unauthenticated(CarRentalError):
    default_message = "Not authenticated"


class Forbidden(CarRentalError):
    default_message = "Access denied"


class NotFound(CarRentalError):
    default_message = "Resource not found"


class Conflict(CarRentalError):
    default_message = "Resource already exists"


class CarUnavailable(Conflict):
    default_message = "Car is not available"


class DateConflict(Conflict):
    default_message = "Car is not available for selected dates"


class AuthenticationError(CarRentalError):
    default_message = "Invalid credentials"


class TenantNotFound(AuthenticationError):
    default_message = "Tenant not found"


class UserNotFound(AuthenticationError):
    default_message = "User not found"


class NotMemberOfTenant(AuthenticationError):
    default_message = "User not associated with this tenant"


class InvalidPassword(AuthenticationError):
    default_message = "Invalid password"
