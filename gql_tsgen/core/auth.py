"""Authentication for introspection requests.

The config file's `input.authorization` value is sent verbatim as the
Authorization header of the introspection POST. Programmatic callers can pass
anything with a `get_headers()` method instead.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Auth(Protocol):
    """Supplies extra headers for the introspection request.

    Example:
        class TenantAuth:
            def __init__(self, tenant: str):
                self.tenant = tenant

            def get_headers(self) -> dict[str, str]:
                return {"X-Tenant": self.tenant}
    """

    def get_headers(self) -> dict[str, str]:
        ...


class AuthorizationHeader:
    """A raw Authorization header value, e.g. "Bearer abc" or an API key."""

    def __init__(self, value: str):
        self.value = value

    def get_headers(self) -> dict[str, str]:
        return {"Authorization": self.value}


class NoAuth:
    """Public endpoints."""

    def get_headers(self) -> dict[str, str]:
        return {}


def auth_from_authorization(authorization: str | None) -> Auth:
    """Build an Auth from the configured Authorization value."""
    if not authorization:
        return NoAuth()
    return AuthorizationHeader(authorization)
