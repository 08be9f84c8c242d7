"""Selecting the products offered on the POS screen."""

ALL_CATEGORIES = "All"


def filter_products(products, query="", category=None):
    """Return sellable products matching ``query`` and ``category``.

    Only active products with stock on hand are returned. ``query`` is matched
    case-insensitively against name and category; ``category`` must match
    exactly unless it is empty or "All".
    """
    result = [p for p in products if p.is_sellable]

    if category and category != ALL_CATEGORIES:
        result = [p for p in result if p.category == category]

    if query:
        needle = query.lower()
        result = [
            p for p in result
            if needle in (p.name or "").lower() or needle in (p.category or "").lower()
        ]
    return result


def list_categories(products):
    seen = []
    for p in products:
        if p.is_sellable and p.category and p.category not in seen:
            seen.append(p.category)
    return [ALL_CATEGORIES] + seen


def stock_status(quantity, low_threshold=10):
    if quantity <= 0:
        return "Out of Stock"
    if quantity < low_threshold:
        return "Low Stock"
    return "In Stock"
