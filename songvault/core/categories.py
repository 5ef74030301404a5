"""Category alias normalization."""

# User-facing category tokens mapped to the category stored on song records.
CATEGORY_ALIASES: dict[str, str] = {
    "ผู้สูงวัย": "เพลงสำหรับผู้สูงวัย",
    "เปียโน": "ดนตรีเปียโน",
}

DEFAULT_CATEGORY = "Uncategorized"


def normalize_category(category: str) -> str:
    """Translate a category alias to its stored name; other values pass through."""
    return CATEGORY_ALIASES.get(category, category)
