"""Number categories served by the upstream evaluation service."""

from dataclasses import dataclass
from typing import Dict


class InvalidCategory(ValueError):
    """Raised when a request names a category outside the known set."""
    def __init__(self, category_id: str = None, message: str = None):
        self.category_id = category_id
        self.message = message or "Invalid number ID. Use p, f, e, or r."
        super().__init__(self.message)


@dataclass(frozen=True)
class Category:
    """Represents a number category with its short id and upstream URL."""
    id: str             # short id used in the route, e.g., "p"
    label: str          # human label, e.g., "Prime numbers"
    url: str            # upstream endpoint returning {"numbers": [...]}


CATEGORY_LABELS = {
    "p": "Prime numbers",
    "f": "Fibonacci numbers",
    "e": "Even numbers",
    "r": "Random numbers",
}

VALID_CATEGORY_IDS = tuple(CATEGORY_LABELS)


def build_categories(endpoints: Dict[str, str]) -> Dict[str, Category]:
    """
    Bind each known category id to its configured upstream URL.

    Args:
        endpoints: Mapping of category id to upstream URL

    Returns:
        Dictionary of category id -> Category

    Raises:
        ValueError: If a category has no endpoint configured
    """
    missing = [cid for cid in VALID_CATEGORY_IDS if not endpoints.get(cid)]
    if missing:
        raise ValueError(f"No upstream endpoint configured for categories: {', '.join(missing)}")
    return {
        cid: Category(id=cid, label=CATEGORY_LABELS[cid], url=endpoints[cid])
        for cid in VALID_CATEGORY_IDS
    }


def resolve_category(categories: Dict[str, Category], category_id: str) -> Category:
    """
    Look up a category by id.

    Args:
        categories: Mapping built by build_categories
        category_id: Id from the request path

    Returns:
        Matching Category

    Raises:
        InvalidCategory: If the id is not one of p, f, e, r
    """
    category = categories.get(category_id)
    if category is None:
        raise InvalidCategory(category_id)
    return category
