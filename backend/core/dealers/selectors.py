from django.db.models import Count, Q

from dealers.models import Dealer
from shop.models import ShopOrder
from tenancy.pagination import page_window


def _with_counts(queryset):
    return queryset.annotate(
        sub_dealer_count=Count(
            "sub_dealers",
            filter=Q(sub_dealers__deleted_at__isnull=True),
            distinct=True,
        ),
        order_count=Count("orders", distinct=True),
    )


def get_sub_dealers(*, parent, search=None, is_active=None, page=1, limit=10):
    """Direct children of `parent`, newest first. Returns `(rows, total)`."""
    queryset = Dealer.objects.filter(parent_dealer=parent)
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(slug__icontains=search) | Q(email__icontains=search)
        )
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)

    total = queryset.count()
    offset, limit = page_window(page, limit, default_limit=10)
    rows = list(_with_counts(queryset).order_by("-created_at", "-id")[offset : offset + limit])
    return rows, total


def get_sub_dealer(*, parent, sub_dealer_id):
    return (
        _with_counts(Dealer.objects.filter(pk=sub_dealer_id, parent_dealer=parent))
        .annotate(
            member_count=Count(
                "memberships",
                filter=Q(memberships__is_active=True),
                distinct=True,
            )
        )
        .select_related("parent_dealer")
        .first()
    )


def get_sub_dealer_hierarchy(*, dealer):
    """Every live descendant of `dealer` in depth-first order, siblings by name.

    Each row carries a `depth` attribute (1 for direct children). Descendants
    are loaded one level per query.
    """
    children_by_parent = {}
    seen = {dealer.pk}
    frontier = [dealer.pk]
    while frontier:
        level = list(
            _with_counts(Dealer.objects.filter(parent_dealer_id__in=frontier)).order_by("name", "id")
        )
        frontier = []
        for child in level:
            if child.pk in seen:
                continue
            seen.add(child.pk)
            children_by_parent.setdefault(child.parent_dealer_id, []).append(child)
            frontier.append(child.pk)

    ordered = []
    stack = [(child, 1) for child in reversed(children_by_parent.get(dealer.pk, []))]
    while stack:
        node, depth = stack.pop()
        node.depth = depth
        ordered.append(node)
        for child in reversed(children_by_parent.get(node.pk, [])):
            stack.append((child, depth + 1))
    return ordered


def get_sub_dealer_stats(*, parent) -> dict:
    counts = Dealer.objects.filter(parent_dealer=parent).aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
    )
    total_orders = ShopOrder.all_objects.filter(
        dealer__parent_dealer=parent,
        dealer__deleted_at__isnull=True,
    ).count()
    return {
        "total_sub_dealers": counts["total"],
        "active_sub_dealers": counts["active"],
        "total_orders": total_orders,
    }


def sub_dealer_slug_exists(slug, exclude_id=None) -> bool:
    # Tombstoned dealers keep their slug reserved.
    queryset = Dealer.all_objects.filter(slug=slug)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return queryset.exists()
