DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def page_window(page, limit, *, default_limit: int = DEFAULT_PAGE_SIZE) -> tuple[int, int]:
    """Return `(offset, limit)` for 1-based page numbers, clamping bad input."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = default_limit
    page = max(page, 1)
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    return (page - 1) * limit, limit


def parse_bool(value):
    """Query-string boolean: `None` when absent or unrecognised."""
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if normalized in ("1", "true", "yes"):
        return True
    if normalized in ("0", "false", "no"):
        return False
    return None
