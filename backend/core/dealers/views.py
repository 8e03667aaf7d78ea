from rest_framework.response import Response
from rest_framework.views import APIView

from dealers import selectors, services
from dealers.serializers import (
    HierarchyNodeSerializer,
    InheritanceToggleSerializer,
    StatusToggleSerializer,
    SubDealerDetailSerializer,
    SubDealerListSerializer,
)
from tenancy.pagination import parse_bool
from tenancy.permissions import IsTenantRoleAllowed
from tenancy.results import ServiceResult


class SubDealerAPIView(APIView):
    permission_classes = [IsTenantRoleAllowed]
    tenant_resource_key = "sub_dealers"

    def respond(self, result: ServiceResult, *, created=False):
        payload = result.as_dict()
        if result.success and result.instance is not None:
            refreshed = selectors.get_sub_dealer(parent=self.request.dealer, sub_dealer_id=result.instance.pk)
            if refreshed is not None:
                payload["data"] = SubDealerDetailSerializer(refreshed).data
        return Response(payload, status=result.http_status(created=created))


class SubDealerListCreateAPIView(SubDealerAPIView):
    def get(self, request):
        params = request.query_params
        rows, total = selectors.get_sub_dealers(
            parent=request.dealer,
            search=(params.get("search") or "").strip() or None,
            is_active=parse_bool(params.get("is_active")),
            page=params.get("page", 1),
            limit=params.get("limit", 10),
        )
        return Response({"total": total, "results": SubDealerListSerializer(rows, many=True).data})

    def post(self, request):
        result = services.create_sub_dealer(request.dealer, request.data, actor=request.user, request=request)
        return self.respond(result, created=True)


class SubDealerDetailAPIView(SubDealerAPIView):
    def get(self, request, sub_dealer_id):
        sub_dealer = selectors.get_sub_dealer(parent=request.dealer, sub_dealer_id=sub_dealer_id)
        if sub_dealer is None:
            return self.respond(ServiceResult.fail("notFound"))
        return Response(SubDealerDetailSerializer(sub_dealer).data)

    def put(self, request, sub_dealer_id):
        result = services.update_sub_dealer(
            request.dealer, sub_dealer_id, request.data, actor=request.user, request=request
        )
        return self.respond(result)

    def patch(self, request, sub_dealer_id):
        result = services.update_sub_dealer(
            request.dealer, sub_dealer_id, request.data, partial=True, actor=request.user, request=request
        )
        return self.respond(result)

    def delete(self, request, sub_dealer_id):
        result = services.delete_sub_dealer(request.dealer, sub_dealer_id, actor=request.user, request=request)
        return self.respond(result)


class SubDealerStatusAPIView(SubDealerAPIView):
    def post(self, request, sub_dealer_id):
        serializer = StatusToggleSerializer(data=request.data)
        if not serializer.is_valid():
            return self.respond(ServiceResult.invalid(serializer.errors))
        result = services.toggle_sub_dealer_status(
            request.dealer,
            sub_dealer_id,
            serializer.validated_data["is_active"],
            actor=request.user,
            request=request,
        )
        return self.respond(result)


class SubDealerInheritanceAPIView(SubDealerAPIView):
    def post(self, request, sub_dealer_id):
        serializer = InheritanceToggleSerializer(data=request.data)
        if not serializer.is_valid():
            return self.respond(ServiceResult.invalid(serializer.errors))
        result = services.update_product_inheritance(
            request.dealer,
            sub_dealer_id,
            serializer.validated_data["inherit_parent_products"],
            actor=request.user,
            request=request,
        )
        return self.respond(result)


class SubDealerHierarchyAPIView(SubDealerAPIView):
    def get(self, request):
        nodes = selectors.get_sub_dealer_hierarchy(dealer=request.dealer)
        return Response(HierarchyNodeSerializer(nodes, many=True).data)


class SubDealerStatsAPIView(SubDealerAPIView):
    def get(self, request):
        return Response(selectors.get_sub_dealer_stats(parent=request.dealer))
