import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.http import JsonResponse

from dealers.models import Dealer
from tenancy.context import reset_current_dealer, set_current_dealer


LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "testserver"})


@dataclass(frozen=True)
class TenantResolutionResult:
    dealer: Optional[Dealer]
    error_response: Optional[JsonResponse] = None


class TenantContextMiddleware:
    """Bind the acting dealer to the request.

    Resolution order:
    - `X-Dealer-ID` header (dealer slug), mainly for local hosts and API clients.
    - `<subdomain>.<TENANT_BASE_DOMAIN>` host.
    - A dealer's verified `custom_domain`.

    When both header and host resolve, they must agree. The resolved dealer is
    exposed as `request.dealer` and bound to `tenancy.context` for the
    duration of the request so tenant-scoped managers fail closed elsewhere.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.logger = logging.getLogger(__name__)
        self.tenant_id_header = getattr(settings, "TENANT_ID_HEADER", "X-Dealer-ID")
        self.required_path_prefixes = tuple(
            getattr(settings, "TENANT_REQUIRED_PATH_PREFIXES", ["/api/"])
        )
        self.exempt_path_prefixes = tuple(
            getattr(settings, "TENANT_EXEMPT_PATH_PREFIXES", ["/api/auth/token/"])
        )
        self.public_hosts = set(
            host.lower() for host in getattr(settings, "TENANT_PUBLIC_HOSTS", [])
        )
        self.reserved_subdomains = set(
            subdomain.lower()
            for subdomain in getattr(settings, "TENANT_RESERVED_SUBDOMAINS", [])
        )
        self.base_domain = getattr(settings, "TENANT_BASE_DOMAIN", "").lower()

    def __call__(self, request):
        request.correlation_id = self._resolve_correlation_id(request)
        tenant_resolution = self._resolve_dealer(request)

        if tenant_resolution.error_response is not None:
            tenant_resolution.error_response["X-Correlation-ID"] = request.correlation_id
            return tenant_resolution.error_response

        token = set_current_dealer(tenant_resolution.dealer)
        request.dealer = tenant_resolution.dealer
        try:
            response = self.get_response(request)
            response["X-Correlation-ID"] = request.correlation_id
            return response
        finally:
            reset_current_dealer(token)

    def _resolve_dealer(self, request) -> TenantResolutionResult:
        if request.path.startswith(self.exempt_path_prefixes):
            return TenantResolutionResult(dealer=None)

        if not request.path.startswith(self.required_path_prefixes):
            return TenantResolutionResult(dealer=None)

        header_value = request.headers.get(self.tenant_id_header, "").strip().lower()
        host_dealer = self._dealer_from_host(request.get_host())

        if header_value:
            header_dealer = (
                Dealer.all_objects.filter(slug=header_value)
                .only("id", "slug", "is_active", "deleted_at", "rbac_overrides")
                .first()
            )
            if header_dealer is None:
                return TenantResolutionResult(
                    dealer=None,
                    error_response=JsonResponse(
                        {"detail": "Invalid dealer identifier."},
                        status=404,
                    ),
                )

            if host_dealer is not None and host_dealer.id != header_dealer.id:
                return TenantResolutionResult(
                    dealer=None,
                    error_response=JsonResponse(
                        {"detail": "Dealer mismatch between host and header."},
                        status=400,
                    ),
                )

            return self._validate_dealer_access(request, header_dealer)

        if host_dealer is not None:
            return self._validate_dealer_access(request, host_dealer)

        return TenantResolutionResult(
            dealer=None,
            error_response=JsonResponse(
                {"detail": "Dealer not provided. Send X-Dealer-ID or use the dealer domain."},
                status=400,
            ),
        )

    def _validate_dealer_access(self, request, dealer: Dealer) -> TenantResolutionResult:
        if dealer.is_active and dealer.deleted_at is None:
            return TenantResolutionResult(dealer=dealer)

        self.logger.warning(
            "dealer request blocked",
            extra={
                "correlation_id": request.correlation_id,
                "dealer_id": dealer.id,
                "reason": "INACTIVE",
                "path": request.path,
            },
        )
        return TenantResolutionResult(
            dealer=None,
            error_response=JsonResponse(
                {
                    "detail": "Dealer is inactive.",
                    "reason": "INACTIVE",
                    "correlation_id": request.correlation_id,
                },
                status=403,
            ),
        )

    def _dealer_from_host(self, host_with_port: str) -> Optional[Dealer]:
        host = host_with_port.split(":", 1)[0].strip().lower()
        if not host or host in LOCAL_HOSTS or host in self.public_hosts:
            return None

        subdomain = self._extract_subdomain(host)
        if subdomain and subdomain not in self.reserved_subdomains:
            dealer = (
                Dealer.all_objects.filter(subdomain=subdomain)
                .only("id", "slug", "is_active", "deleted_at", "rbac_overrides")
                .first()
            )
            if dealer is not None:
                return dealer

        return (
            Dealer.all_objects.filter(custom_domain=host)
            .only("id", "slug", "is_active", "deleted_at", "rbac_overrides")
            .first()
        )

    def _extract_subdomain(self, host: str) -> Optional[str]:
        if self.base_domain:
            suffix = self.base_domain
            if not suffix.startswith("."):
                suffix = f".{suffix}"

            if host.endswith(suffix):
                subdomain = host[: -len(suffix)]
                if subdomain and "." not in subdomain:
                    return subdomain
                return None

        if host.endswith(".localhost"):
            local_subdomain = host.split(".", 1)[0]
            return local_subdomain if local_subdomain else None

        return None

    @staticmethod
    def _resolve_correlation_id(request) -> str:
        header_value = (request.headers.get("X-Correlation-ID", "") or "").strip()
        return header_value or str(uuid.uuid4())
