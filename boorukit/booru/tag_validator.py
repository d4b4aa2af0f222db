"""Tag validation: spot booru tags that are likely to be mistyped or non-portable."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional
import logging

from ..errors import InvalidTag

logger = logging.getLogger(__name__)

MAX_TAG_LENGTH = 100

# Characters besides alphanumerics that show up in legitimate tags and meta tags
ALLOWED_CHARACTERS = set('_-:()<>=.*?')

# Meta tags most boorus understand
COMMON_META_TAGS = {
    'rating', 'score', 'order', 'sort', 'user', 'height', 'width',
    'id', 'md5', 'source', 'parent', 'pool'
}

# Meta tags only Danbooru understands
DANBOORU_ONLY_META_TAGS = {
    'pixiv_id', 'favcount', 'gentags', 'arttags', 'chartags',
    'copytags', 'approver', 'commenter', 'noter', 'flagger'
}


class WarningKind(Enum):
    SPACES_FOUND = 'spaces_found'
    LEADING_TRAILING_WHITESPACE = 'leading_trailing_whitespace'
    EMPTY_TAG = 'empty_tag'
    CONSECUTIVE_UNDERSCORES = 'consecutive_underscores'
    VERY_LONG_TAG = 'very_long_tag'
    UNUSUAL_CHARACTERS = 'unusual_characters'
    UNSUPPORTED_META_TAG = 'unsupported_meta_tag'


@dataclass(frozen=True)
class TagWarning:
    kind: WarningKind
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class TagValidation:
    """Outcome of validating a single tag."""

    original: str
    normalized: Optional[str] = None
    warnings: List[TagWarning] = field(default_factory=list)
    is_valid: bool = True

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def tag(self) -> str:
        """The tag to send: normalized form if one was suggested, else the original."""
        return self.normalized if self.normalized is not None else self.original

    def kinds(self) -> List[WarningKind]:
        return [w.kind for w in self.warnings]


def validate_tag(tag: str) -> TagValidation:
    """Inspect a tag and report normalization and portability warnings.

    Only an empty tag is invalid; everything else is a warning the caller
    may choose to ignore.

    Args:
        tag: Raw tag as typed by the user

    Returns:
        TagValidation with the suggested normalized form (if any) and warnings
    """
    if not tag:
        return TagValidation(
            original=tag,
            warnings=[TagWarning(WarningKind.EMPTY_TAG, "Tag is empty")],
            is_valid=False,
        )

    warnings = []
    normalized = None

    working = tag.strip()
    if working != tag:
        warnings.append(TagWarning(WarningKind.LEADING_TRAILING_WHITESPACE,
                                   "Tag has leading or trailing whitespace"))
        normalized = working

    if not working:
        warnings.append(TagWarning(WarningKind.EMPTY_TAG, "Tag is empty"))
        return TagValidation(original=tag, normalized=working, warnings=warnings, is_valid=False)

    if ' ' in working:
        suggested = working.replace(' ', '_')
        warnings.append(TagWarning(WarningKind.SPACES_FOUND,
                                   f"Tag contains spaces: '{working}'. Did you mean '{suggested}'?"))
        normalized = suggested

    if '__' in working:
        warnings.append(TagWarning(WarningKind.CONSECUTIVE_UNDERSCORES,
                                   "Tag contains consecutive underscores"))

    if len(working) > MAX_TAG_LENGTH:
        warnings.append(TagWarning(WarningKind.VERY_LONG_TAG,
                                   f"Tag is very long ({len(working)} chars), may cause issues"))

    unusual = [c for c in working
               if not c.isalnum() and c != ' ' and c not in ALLOWED_CHARACTERS]
    if unusual:
        warnings.append(TagWarning(WarningKind.UNUSUAL_CHARACTERS,
                                   f"Tag contains unusual characters: {unusual}"))

    prefix, sep, _ = working.partition(':')
    if sep and prefix not in COMMON_META_TAGS and prefix in DANBOORU_ONLY_META_TAGS:
        warnings.append(TagWarning(WarningKind.UNSUPPORTED_META_TAG,
                                   f"Meta tag '{prefix}:' may not be supported on all booru sites"))

    return TagValidation(original=tag, normalized=normalized, warnings=warnings)


def validate_tag_strict(tag: str) -> str:
    """Validate a tag, treating any warning as fatal.

    Raises:
        InvalidTag: On an empty tag or the first warning reported
    """
    result = validate_tag(tag)
    if result.warnings:
        raise InvalidTag(tag, str(result.warnings[0]))
    return tag


def normalize_tag(tag: str) -> str:
    """Return the normalized form of a tag, tolerating warnings.

    Raises:
        InvalidTag: Only if the tag is empty
    """
    result = validate_tag(tag)
    if not result.is_valid:
        raise InvalidTag(tag, "Tag is empty")
    for warning in result.warnings:
        logger.debug(f"Tag '{tag}': {warning}")
    return result.tag


def validate_tags(tags: Iterable[str], strict: bool = False) -> List[str]:
    """Normalize several tags, stopping at the first invalid one.

    Args:
        tags: Raw tags
        strict: Treat warnings as fatal instead of normalizing

    Returns:
        List of normalized tags in input order
    """
    check = validate_tag_strict if strict else normalize_tag
    return [check(t) for t in tags]
