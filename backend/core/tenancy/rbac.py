"""Role matrices for dealer-scoped resources.

A matrix maps an HTTP method to the membership roles allowed to use it.
Defaults live in `DEFAULT_RESOURCE_ROLE_MATRICES`; deployments may override
them with the `TENANT_ROLE_MATRICES` setting and each dealer with its own
`rbac_overrides`, both shaped as `{"<resource>": {"<METHOD>": ["ROLE", ...]}}`.
Malformed overrides are ignored at lookup time and rejected on save.
"""
from copy import deepcopy

from django.conf import settings
from django.core.exceptions import ValidationError

ROLE_MEMBER = "MEMBER"
ROLE_MANAGER = "MANAGER"
ROLE_OWNER = "OWNER"

VALID_ROLES = frozenset((ROLE_MEMBER, ROLE_MANAGER, ROLE_OWNER))
READ_METHODS = ("GET", "HEAD", "OPTIONS")
WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")
VALID_METHODS = frozenset((*READ_METHODS, *WRITE_METHODS, "*"))

ANYONE = VALID_ROLES
STAFF = frozenset((ROLE_MANAGER, ROLE_OWNER))
OWNER_ONLY = frozenset((ROLE_OWNER,))
NOBODY = frozenset()


def build_role_matrix(*, read=ANYONE, create=STAFF, update=STAFF, delete=OWNER_ONLY):
    matrix = {method: frozenset(read) for method in READ_METHODS}
    matrix["POST"] = frozenset(create)
    matrix["PUT"] = matrix["PATCH"] = frozenset(update)
    matrix["DELETE"] = frozenset(delete)
    return matrix


def _read_only(roles=STAFF):
    return build_role_matrix(read=roles, create=NOBODY, update=NOBODY, delete=NOBODY)


DEFAULT_RESOURCE_ROLE_MATRICES = {
    "sub_dealers": build_role_matrix(),
    "commissions": build_role_matrix(),
    "commission_payouts": build_role_matrix(read=STAFF, create=OWNER_ONLY, update=NOBODY, delete=NOBODY),
    "commission_calculations": build_role_matrix(read=STAFF, update=NOBODY, delete=NOBODY),
    "commission_reports": _read_only(),
    "ledger": _read_only(),
}

DEFAULT_TENANT_ROLE_MATRIX = build_role_matrix()
KNOWN_RBAC_RESOURCES = frozenset(DEFAULT_RESOURCE_ROLE_MATRICES)


def _upper_set(raw_roles) -> set[str]:
    return {str(role).upper() for role in raw_roles}


def _method_errors(method_map) -> list[str]:
    if not isinstance(method_map, dict):
        return ["Resource value must be an object of HTTP methods to role lists."]

    errors = []
    for method, raw_roles in method_map.items():
        method_name = str(method).upper()
        if method_name not in VALID_METHODS:
            errors.append(f"Method '{method_name}' is invalid. Allowed: {sorted(VALID_METHODS)}")
        elif not isinstance(raw_roles, list) or not raw_roles:
            errors.append(f"Method '{method_name}' must contain a non-empty role list.")
        elif not _upper_set(raw_roles) <= VALID_ROLES:
            errors.append(
                f"Method '{method_name}' contains invalid roles. Allowed roles: {sorted(VALID_ROLES)}"
            )
    return errors


def validate_rbac_overrides_schema(overrides) -> None:
    if overrides in (None, {}):
        return
    if not isinstance(overrides, dict):
        raise ValidationError("rbac_overrides must be a JSON object (dictionary).")

    errors = {}
    for resource_key, method_map in overrides.items():
        resource_errors = []
        if str(resource_key) not in KNOWN_RBAC_RESOURCES:
            resource_errors.append(
                f"Unknown resource '{resource_key}'. Allowed: {sorted(KNOWN_RBAC_RESOURCES)}"
            )
        resource_errors.extend(_method_errors(method_map))
        if resource_errors:
            errors[str(resource_key)] = resource_errors

    if errors:
        raise ValidationError(errors)


def _merge(matrices: dict, overrides) -> None:
    try:
        validate_rbac_overrides_schema(overrides)
    except ValidationError:
        return
    for resource_key, method_map in (overrides or {}).items():
        resource_matrix = matrices.setdefault(str(resource_key), {})
        for method, raw_roles in method_map.items():
            resource_matrix[str(method).upper()] = frozenset(_upper_set(raw_roles))


def get_resource_role_matrices(dealer=None) -> dict:
    matrices = deepcopy(DEFAULT_RESOURCE_ROLE_MATRICES)
    _merge(matrices, getattr(settings, "TENANT_ROLE_MATRICES", {}))
    if dealer is not None:
        _merge(matrices, getattr(dealer, "rbac_overrides", {}))
    return matrices


def get_role_matrix_for_resource(resource_key: str, dealer=None) -> dict:
    return get_resource_role_matrices(dealer=dealer).get(resource_key, DEFAULT_TENANT_ROLE_MATRIX)


def role_can(role_matrix, role, method) -> bool:
    return role in role_matrix.get(method, role_matrix.get("*", NOBODY))
