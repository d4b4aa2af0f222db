"""JSON schemas for the parts of each backend response the clients rely on.

Only the fields the post dataclasses need are constrained; everything else a
backend sends is allowed through and ignored.
"""

from typing import Any, Dict

import jsonschema

from ..errors import ParseError

_NULLABLE_STRING = {'type': ['string', 'null']}
_NULLABLE_INT = {'type': ['integer', 'null']}

DANBOORU_POST = {
    'type': 'object',
    'required': ['id'],
    'properties': {
        'id': {'type': 'integer'},
        'tag_string': {'type': 'string'},
        'rating': {'enum': ['e', 'q', 's', 'g', None]},
        'md5': _NULLABLE_STRING,
        'file_url': _NULLABLE_STRING,
        'image_width': {'type': 'integer'},
        'image_height': {'type': 'integer'},
        'score': {'type': 'integer'},
        'parent_id': _NULLABLE_INT,
    },
}

GELBOORU_POST = {
    'type': 'object',
    'required': ['id', 'file_url', 'tags', 'rating'],
    'properties': {
        'id': {'type': 'integer'},
        'score': {'type': 'integer'},
        'width': {'type': 'integer'},
        'height': {'type': 'integer'},
        'md5': {'type': 'string'},
        'file_url': {'type': 'string'},
        'tags': {'type': 'string'},
        'rating': {'enum': ['explicit', 'questionable', 'safe', 'sensitive', 'general']},
    },
}

# Gelbooru wraps results: {"@attributes": {...}, "post": [...]}. "post" is
# omitted entirely when a query matches nothing.
GELBOORU_ENVELOPE = {
    'type': 'object',
    'properties': {
        'post': {'type': 'array', 'items': GELBOORU_POST},
    },
}

RULE34_POST = {
    'type': 'object',
    'required': ['id', 'file_url', 'tags', 'rating'],
    'properties': {
        'id': {'type': 'integer'},
        'score': {'type': 'integer'},
        'width': {'type': 'integer'},
        'height': {'type': 'integer'},
        'file_url': {'type': 'string'},
        'tags': {'type': 'string'},
        'rating': {'enum': ['explicit', 'questionable', 'safe', 'general', 'sensitive']},
        'hash': {'type': 'string'},
    },
}

SAFEBOORU_POST = {
    'type': 'object',
    'required': ['id', 'hash', 'tags', 'file_url', 'rating'],
    'properties': {
        'id': {'type': 'integer'},
        'score': _NULLABLE_INT,
        'width': {'type': 'integer'},
        'height': {'type': 'integer'},
        'hash': {'type': 'string'},
        'tags': {'type': 'string'},
        'file_url': {'type': 'string'},
        'rating': {'enum': ['safe', 'general', 'questionable', 'explicit']},
    },
}


def array_of(item_schema: Dict[str, Any]) -> Dict[str, Any]:
    return {'type': 'array', 'items': item_schema}


def validate(data: Any, schema: Dict[str, Any]) -> None:
    """Validate decoded JSON against a schema.

    Raises:
        ParseError: If the document does not match
    """
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = '/'.join(str(p) for p in e.absolute_path) or '<root>'
        raise ParseError(f"{e.message} (at {path})") from e
