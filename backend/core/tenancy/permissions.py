from rest_framework.permissions import BasePermission

from dealers.models import DealerMembership
from tenancy.rbac import DEFAULT_TENANT_ROLE_MATRIX, get_role_matrix_for_resource, role_can


def _active_membership(request):
    dealer = getattr(request, "dealer", None)
    membership = (
        DealerMembership.objects.filter(
            dealer=dealer,
            user=request.user,
            is_active=True,
        )
        .only("id", "role")
        .first()
    )
    request.dealer_membership = membership
    return membership


class IsTenantRoleAllowed(BasePermission):
    message = "User role is not allowed for this action in the current dealer."

    def has_permission(self, request, view):
        user = request.user
        dealer = getattr(request, "dealer", None)

        if not user or not user.is_authenticated:
            return False
        if dealer is None:
            return False
        if user.is_superuser:
            return True

        membership = _active_membership(request)
        if membership is None:
            return False

        role_matrix = getattr(view, "tenant_role_matrix", None)
        if role_matrix is None:
            resource_key = getattr(view, "tenant_resource_key", None)
            if resource_key:
                role_matrix = get_role_matrix_for_resource(resource_key, dealer=dealer)
            else:
                role_matrix = DEFAULT_TENANT_ROLE_MATRIX

        return role_can(role_matrix, membership.role, request.method)
