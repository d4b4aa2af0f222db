"""Post and rating types for the supported booru backends."""

from dataclasses import dataclass, asdict, fields
from enum import Enum
from typing import Any, Dict, Optional


class Sort(str, Enum):
    """Sort orders understood by every backend (prefixed with order:/sort:)."""

    ID = 'id'
    SCORE = 'score'
    RATING = 'rating'
    USER = 'user'
    HEIGHT = 'height'
    WIDTH = 'width'
    SOURCE = 'source'
    UPDATED = 'updated'
    RANDOM = 'random'

    def __str__(self) -> str:
        return self.value


class DanbooruRating(str, Enum):
    """Danbooru ratings. The API sends single-letter codes, queries use full names."""

    EXPLICIT = 'explicit'
    QUESTIONABLE = 'questionable'
    SENSITIVE = 'sensitive'
    GENERAL = 'general'

    @classmethod
    def _missing_(cls, value):
        codes = {'e': cls.EXPLICIT, 'q': cls.QUESTIONABLE, 's': cls.SENSITIVE, 'g': cls.GENERAL}
        if isinstance(value, str):
            return codes.get(value.lower())
        return None

    def __str__(self) -> str:
        return self.value


class GelbooruRating(str, Enum):
    EXPLICIT = 'explicit'
    QUESTIONABLE = 'questionable'
    SAFE = 'safe'
    SENSITIVE = 'sensitive'
    GENERAL = 'general'

    def __str__(self) -> str:
        return self.value


class Rule34Rating(str, Enum):
    EXPLICIT = 'explicit'
    QUESTIONABLE = 'questionable'
    SAFE = 'safe'
    GENERAL = 'general'
    SENSITIVE = 'sensitive'

    def __str__(self) -> str:
        return self.value


class SafebooruRating(str, Enum):
    # Questionable/explicit only show up when querying deleted content
    SAFE = 'safe'
    GENERAL = 'general'
    QUESTIONABLE = 'questionable'
    EXPLICIT = 'explicit'

    def __str__(self) -> str:
        return self.value


def _pick(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the keys the dataclass declares."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def _none_if_empty(value: Optional[str]) -> Optional[str]:
    return value or None


@dataclass
class BasePost:
    """Fields and accessors shared by every backend's post type."""

    id: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Build a post from a decoded JSON object, ignoring unknown keys."""
        return cls(**_pick(cls, data))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to a JSON-compatible dict (rating enums become strings)."""
        result = asdict(self)
        if isinstance(result.get('rating'), Enum):
            result['rating'] = result['rating'].value
        return result


@dataclass
class DanbooruPost(BasePost):
    tag_string: str = ''
    tag_string_general: str = ''
    tag_string_artist: str = ''
    tag_string_copyright: str = ''
    tag_string_character: str = ''
    tag_string_meta: str = ''
    rating: Optional[DanbooruRating] = None
    source: str = ''
    md5: Optional[str] = None
    file_url: Optional[str] = None
    large_file_url: Optional[str] = None
    preview_file_url: Optional[str] = None
    file_ext: str = ''
    file_size: int = 0
    image_width: int = 0
    image_height: int = 0
    score: int = 0
    up_score: int = 0
    down_score: int = 0
    fav_count: int = 0
    parent_id: Optional[int] = None
    pixiv_id: Optional[int] = None
    uploader_id: Optional[int] = None
    approver_id: Optional[int] = None
    created_at: str = ''
    updated_at: str = ''
    has_children: bool = False
    is_deleted: bool = False
    is_pending: bool = False
    is_flagged: bool = False
    is_banned: bool = False

    def __post_init__(self):
        if self.rating is not None and not isinstance(self.rating, DanbooruRating):
            self.rating = DanbooruRating(self.rating)

    @property
    def width(self) -> int:
        return self.image_width

    @property
    def height(self) -> int:
        return self.image_height

    @property
    def tags(self) -> str:
        return self.tag_string

    @property
    def checksum(self) -> Optional[str]:
        return self.md5

    @property
    def source_url(self) -> Optional[str]:
        return _none_if_empty(self.source)


@dataclass
class GelbooruPost(BasePost):
    created_at: str = ''
    score: int = 0
    width: int = 0
    height: int = 0
    md5: str = ''
    file_url: str = ''
    preview_url: str = ''
    sample_url: str = ''
    tags: str = ''
    image: str = ''
    source: str = ''
    rating: Optional[GelbooruRating] = None
    owner: str = ''
    parent_id: int = 0
    status: str = ''

    def __post_init__(self):
        if self.rating is not None and not isinstance(self.rating, GelbooruRating):
            self.rating = GelbooruRating(self.rating)

    @property
    def checksum(self) -> Optional[str]:
        return _none_if_empty(self.md5)

    @property
    def source_url(self) -> Optional[str]:
        return _none_if_empty(self.source)


@dataclass
class Rule34Post(BasePost):
    score: int = 0
    width: int = 0
    height: int = 0
    file_url: str = ''
    preview_url: str = ''
    sample_url: str = ''
    tags: str = ''
    rating: Optional[Rule34Rating] = None
    source: str = ''
    has_notes: bool = False
    comment_count: int = 0
    owner: str = ''
    parent_id: int = 0
    status: str = ''
    change: int = 0
    directory: int = 0
    image: str = ''
    hash: str = ''

    def __post_init__(self):
        if self.rating is not None and not isinstance(self.rating, Rule34Rating):
            self.rating = Rule34Rating(self.rating)

    @property
    def checksum(self) -> Optional[str]:
        return _none_if_empty(self.hash)

    @property
    def source_url(self) -> Optional[str]:
        return _none_if_empty(self.source)


@dataclass
class SafebooruPost(BasePost):
    score: Optional[int] = None
    height: int = 0
    width: int = 0
    hash: str = ''
    tags: str = ''
    image: str = ''
    directory: int = 0
    file_url: str = ''
    preview_url: str = ''
    sample_url: str = ''
    source: str = ''
    change: int = 0
    rating: Optional[SafebooruRating] = None

    def __post_init__(self):
        if self.rating is not None and not isinstance(self.rating, SafebooruRating):
            self.rating = SafebooruRating(self.rating)

    @property
    def checksum(self) -> Optional[str]:
        return _none_if_empty(self.hash)

    @property
    def source_url(self) -> Optional[str]:
        return _none_if_empty(self.source)
