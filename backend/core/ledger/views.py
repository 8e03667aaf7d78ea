from rest_framework.response import Response
from rest_framework.views import APIView

from ledger.models import LedgerEntry
from ledger.serializers import LedgerEntrySerializer
from tenancy.permissions import IsTenantRoleAllowed


DEFAULT_LIMIT = 200
MAX_LIMIT = 1000


class DealerLedgerEntryListAPIView(APIView):
    """Most recent audit entries on the acting dealer's chain."""

    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "ledger"

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", DEFAULT_LIMIT))
        except ValueError:
            limit = DEFAULT_LIMIT
        limit = max(1, min(limit, MAX_LIMIT))

        entries = LedgerEntry.all_objects.filter(
            scope=LedgerEntry.SCOPE_DEALER,
            dealer=request.dealer,
        )
        event_type = (request.query_params.get("event_type") or "").strip()
        if event_type:
            entries = entries.filter(event_type=event_type)

        entries = entries.order_by("-occurred_at", "-id")[:limit]
        return Response(LedgerEntrySerializer(entries, many=True).data)
