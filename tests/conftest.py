"""Pytest configuration and shared fixtures."""

import pytest
import tempfile
from pathlib import Path


def pytest_configure(config):
    config.addinivalue_line("markers", "benchmark: performance benchmarks (deselect with -m \"not benchmark\")")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    """Provide a fake clock for time-dependent components."""
    return FakeClock()


@pytest.fixture
def sample_config():
    """Provide a sample configuration for testing."""
    return {
        'http': {
            'timeout': 15,
            'connect_timeout': 5,
            'max_connections': 10,
            'max_keepalive_connections': 5,
            'user_agent': 'boorukit-tests/1.0'
        },
        'retry': {
            'max_retries': 2,
            'initial_delay': 0.01,
            'max_delay': 0.05,
            'backoff_factor': 2.0
        },
        'rate_limit': {
            'requests': 5,
            'per_seconds': 1.0
        },
        'cache': {
            'ttl_seconds': 120,
            'max_entries': 50
        },
        'credentials': {
            'gelbooru': {
                'api_key': 'test_gelbooru_key',
                'user_id': '1234'
            }
        },
        'logging': {
            'level': 'DEBUG',
            'file': 'logs/test.log',
            'console_output': False
        }
    }


def make_gelbooru_post(post_id: int, **overrides):
    """Build a raw post in the Gelbooru/Rule34/Safebooru JSON shape."""
    post = {
        'id': post_id,
        'score': 10,
        'width': 1200,
        'height': 800,
        'md5': f'md5{post_id}',
        'hash': f'md5{post_id}',
        'file_url': f'https://img.example.com/images/{post_id}.jpg',
        'preview_url': f'https://img.example.com/thumbs/{post_id}.jpg',
        'tags': 'cat_ears blue_eyes',
        'source': '',
        'rating': 'general',
        'owner': 'uploader',
        'directory': 1,
        'image': f'{post_id}.jpg',
    }
    post.update(overrides)
    return post


@pytest.fixture
def post_factory():
    """Factory for raw posts; call with an id and optional field overrides."""
    return make_gelbooru_post


@pytest.fixture
def two_posts():
    """Two raw posts with ids 12345 and 12346."""
    return [make_gelbooru_post(12345), make_gelbooru_post(12346, source='https://pixiv.net/1')]


@pytest.fixture
def mock_danbooru_post():
    """Provide a mock Danbooru post response."""
    return {
        'id': 12345,
        'tag_string': 'blue_eyes long_hair naruto hinata_hyuga_(naruto)',
        'tag_string_general': 'blue_eyes long_hair',
        'tag_string_character': 'hinata_hyuga_(naruto)',
        'tag_string_copyright': 'naruto',
        'tag_string_artist': 'artist_name',
        'rating': 's',
        'md5': 'd41d8cd98f00b204e9800998ecf8427e',
        'source': '',
        'file_url': 'https://cdn.donmai.us/original/d4/1d/d41d8cd98f00b204e9800998ecf8427e.jpg',
        'file_ext': 'jpg',
        'image_width': 1000,
        'image_height': 1500,
        'score': 42,
        'parent_id': None,
        'pools': [],
    }
