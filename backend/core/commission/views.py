from rest_framework.response import Response
from rest_framework.views import APIView

from commission import selectors
from commission.serializers import (
    ChildDealerRefSerializer,
    CommissionPayoutSerializer,
    CommissionReportSerializer,
    CommissionStatsSerializer,
    CommissionStatusSerializer,
    CommissionTransactionSerializer,
    DealerCommissionSerializer,
    PendingPayoutSerializer,
    ReportQuerySerializer,
)
from commission.services import (
    calculate_order_commission,
    create_or_update_commission_settings,
    delete_commission_settings,
    process_commission_payout,
    toggle_commission_status,
)
from shop.models import ShopOrder
from tenancy.permissions import IsTenantRoleAllowed
from tenancy.results import ServiceResult


def _respond(result: ServiceResult, *, data=None):
    payload = result.as_dict()
    if data is not None:
        payload["data"] = data
    return Response(payload, status=result.http_status())


def _settings_response(request, child_dealer_id, data):
    result = create_or_update_commission_settings(
        request.dealer,
        child_dealer_id,
        data,
        actor=request.user,
        request=request,
    )
    data = None
    if result.success:
        contract = selectors.get_commission_settings(parent=request.dealer, child_dealer_id=child_dealer_id)
        data = DealerCommissionSerializer(contract).data
    return _respond(result, data=data)


class CommissionSettingsListAPIView(APIView):
    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "commissions"

    def get(self, request):
        contracts = selectors.get_commissions_by_parent(parent=request.dealer)
        return Response(DealerCommissionSerializer(contracts, many=True).data)

    def post(self, request):
        serializer = ChildDealerRefSerializer(data=request.data)
        if not serializer.is_valid():
            return _respond(ServiceResult.invalid(serializer.errors))
        return _settings_response(request, serializer.validated_data["child_dealer_id"], request.data)


class CommissionSettingsDetailAPIView(APIView):
    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "commissions"

    def get(self, request, child_dealer_id):
        contract = selectors.get_commission_settings(parent=request.dealer, child_dealer_id=child_dealer_id)
        if contract is None:
            return _respond(ServiceResult.fail("commissionNotFound"))
        return Response(DealerCommissionSerializer(contract).data)

    def put(self, request, child_dealer_id):
        return _settings_response(request, child_dealer_id, request.data)

    def delete(self, request, child_dealer_id):
        result = delete_commission_settings(
            request.dealer, child_dealer_id, actor=request.user, request=request
        )
        return _respond(result)


class CommissionStatusAPIView(APIView):
    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "commissions"

    def post(self, request, child_dealer_id):
        serializer = CommissionStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return _respond(ServiceResult.invalid(serializer.errors))
        result = toggle_commission_status(
            request.dealer,
            child_dealer_id,
            serializer.validated_data["is_active"],
            actor=request.user,
            request=request,
        )
        return _respond(result)


class OrderCommissionCalculateAPIView(APIView):
    """Accrue commission for an order placed by one of the acting dealer's sub-dealers."""

    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "commission_calculations"

    def post(self, request, order_id):
        order_visible = ShopOrder.all_objects.filter(
            pk=order_id,
            dealer__parent_dealer=request.dealer,
        ).exists()
        if not order_visible:
            return _respond(ServiceResult.fail("orderNotFound"))
        result = calculate_order_commission(order_id, actor=request.user, request=request)
        return _respond(result)


class CommissionPayoutListAPIView(APIView):
    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "commission_payouts"

    def get(self, request):
        child_dealer_id = request.query_params.get("child_dealer_id")
        payouts = selectors.list_payouts(
            parent=request.dealer,
            child_dealer_id=int(child_dealer_id) if (child_dealer_id or "").isdigit() else None,
        )
        return Response(CommissionPayoutSerializer(payouts, many=True).data)


class CommissionPayoutProcessAPIView(APIView):
    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "commission_payouts"

    def post(self, request, child_dealer_id):
        result = process_commission_payout(
            request.dealer,
            child_dealer_id,
            processed_by=request.user,
            request=request,
        )
        data = CommissionPayoutSerializer(result.instance).data if result.success else None
        return _respond(result, data=data)


class CommissionReportingAPIView(APIView):
    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "commission_reports"

    def report_filters(self, request):
        serializer = ReportQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


class PendingPayoutsAPIView(CommissionReportingAPIView):
    def get(self, request):
        rows = selectors.get_pending_payouts(parent=request.dealer)
        return Response(PendingPayoutSerializer(rows, many=True).data)


class CommissionTransactionsAPIView(CommissionReportingAPIView):
    def get(self, request):
        filters = self.report_filters(request)
        rows, total = selectors.get_commission_transactions(
            parent=request.dealer,
            child_dealer_id=filters["child_dealer_id"],
            status=filters["status"],
            start_date=filters["start_date"],
            end_date=filters["end_date"],
            page=request.query_params.get("page", 1),
            limit=request.query_params.get("limit", 20),
        )
        return Response({"total": total, "results": CommissionTransactionSerializer(rows, many=True).data})


class CommissionReportAPIView(CommissionReportingAPIView):
    def get(self, request):
        filters = self.report_filters(request)
        report = selectors.get_commission_report(
            parent=request.dealer,
            start_date=filters["start_date"],
            end_date=filters["end_date"],
        )
        return Response(CommissionReportSerializer(report).data)


class CommissionStatsAPIView(CommissionReportingAPIView):
    def get(self, request):
        return Response(CommissionStatsSerializer(selectors.get_commission_stats(parent=request.dealer)).data)
