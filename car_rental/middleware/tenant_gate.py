"""
Tenant routing gate.

Every page request is routed to the tenant named by the leftmost label of its
host (``acme.example.com`` serves tenant ``acme``). The gate also keeps a
session inside the tenant it was issued for: protected pages require a
session, and a session from another tenant is refused there.
"""

import logging
from typing import Callable
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from car_rental.config import Settings
from car_rental.responses.error import forbidden_error, not_found_error
from car_rental.services.tenant_service import extract_tenant_domain, is_dev_host
from car_rental.utils.dependencies import decode_access_token, extract_token

logger = logging.getLogger(__name__)

EXEMPT_PREFIXES = ("/api", "/static", "/docs", "/redoc")


def is_exempt(path: str) -> bool:
    # Anything with a dot is a file (openapi.json, favicon.ico, ...)
    return path.startswith(EXEMPT_PREFIXES) or "." in path


class TenantGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    def is_protected(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.settings.PROTECTED_PREFIXES)

    def login_redirect(self, request: Request) -> Response:
        callback = request.url.path
        if request.url.query:
            callback = f"{callback}?{request.url.query}"
        return RedirectResponse(
            f"{self.settings.LOGIN_PATH}?{urlencode({'callbackUrl': callback})}",
            status_code=307,
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if is_exempt(path):
            return await call_next(request)

        token = extract_token(request, self.settings)
        identity = decode_access_token(token, self.settings) if token else None
        protected = self.is_protected(path)

        if protected and identity is None:
            return self.login_redirect(request)

        host = request.headers.get("host", "")
        if is_dev_host(host, self.settings.DEV_HOSTS):
            return await call_next(request)

        tenant = extract_tenant_domain(host)
        if not tenant:
            logger.warning("Tenant resolution failed: no tenant in host %r", host)
            return not_found_error("Tenant not found")

        if protected and identity.tenant != tenant:
            logger.warning(
                "Tenant mismatch: session of tenant %s used on tenant %s", identity.tenant, tenant
            )
            return forbidden_error("You do not have access to this tenant")

        request.state.tenant = tenant
        return await call_next(request)
