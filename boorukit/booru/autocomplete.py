"""Tag autocomplete suggestions."""

from dataclasses import dataclass, asdict
from typing import Dict, Optional
import re

CATEGORY_NAMES = {
    0: 'general',
    1: 'artist',
    3: 'copyright',
    4: 'character',
    5: 'meta',
}

# Gelbooru reports categories by name
CATEGORY_IDS = {
    'general': 0,
    'tag': 0,
    'artist': 1,
    'copyright': 3,
    'series': 3,
    'character': 4,
    'meta': 5,
    'metadata': 5,
}

_LABEL_COUNT = re.compile(r'\((\d+)\)\s*$')


@dataclass
class TagSuggestion:
    """A tag suggestion returned by a backend's autocomplete endpoint."""

    name: str
    label: str
    post_count: Optional[int] = None
    category: Optional[int] = None

    def category_name(self) -> Optional[str]:
        if self.category is None:
            return None
        return CATEGORY_NAMES.get(self.category, 'unknown')

    def to_dict(self) -> Dict:
        return asdict(self)


def parse_post_count_from_label(label: str) -> Optional[int]:
    """Parse the post count out of labels like ``cat_ears (177448)``."""
    match = _LABEL_COUNT.search(label or '')
    return int(match.group(1)) if match else None


def parse_category(category) -> Optional[int]:
    """Map a category name or numeric string to its id."""
    if category is None:
        return None
    if isinstance(category, int):
        return category
    value = str(category).strip().lower()
    if value in CATEGORY_IDS:
        return CATEGORY_IDS[value]
    return int(value) if value.isdigit() else None
