"""Unit tests for the query builder."""

import pytest
import httpx
from boorukit.booru import (
    DanbooruClient,
    DanbooruRating,
    GelbooruClient,
    GelbooruRating,
    Rule34Client,
    SafebooruClient,
    SafebooruRating,
    Sort,
)
from boorukit.booru.cache_manager import ResponseCache
from boorukit.booru.query_builder import Query, QueryBuilder
from boorukit.errors import InvalidTag, TagLimitExceeded


class TestQuery:
    """Test cases for the frozen Query."""

    def test_tag_string_preserves_order(self):
        """Test tags are space-joined in insertion order."""
        query = Query(tags=('b', 'a', 'rating:general'))
        assert query.tag_string == 'b a rating:general'

    def test_has_credentials_needs_both(self):
        """Test credentials count only when both parts are set."""
        assert Query(api_key='k', user_id='u').has_credentials
        assert not Query(api_key='k').has_credentials
        assert not Query().has_credentials

    def test_fingerprint(self):
        """Test the fingerprint sorts tags."""
        query = Query(tags=('b', 'a'), limit=10, page=2)
        assert query.fingerprint('gelbooru') == 'gelbooru:a,b:limit=10:page=2'

    def test_query_is_frozen(self):
        """Test a Query cannot be mutated."""
        with pytest.raises(AttributeError):
            Query().limit = 5


class TestQueryBuilder:
    """Test cases for QueryBuilder class."""

    def test_defaults(self):
        """Test a fresh builder's query."""
        builder = GelbooruClient.builder()

        assert isinstance(builder, QueryBuilder)
        assert builder.query.tags == ()
        assert builder.query.limit == 100
        assert builder.query.page == 0
        assert builder.query.base_url == 'https://gelbooru.com'
        assert not builder.has_tags()

    def test_tags_in_insertion_order(self):
        """Test tags keep the order they were added in."""
        builder = SafebooruClient.builder().tag('cat_ears').tag('blue_eyes').tags(['smile', 'solo'])
        assert builder.query.tags == ('cat_ears', 'blue_eyes', 'smile', 'solo')
        assert builder.tag_count() == 4

    def test_builder_is_immutable(self):
        """Test every method returns a new builder."""
        base = GelbooruClient.builder()
        tagged = base.tag('cat_ears').limit(10).page(3)

        assert base.query.tags == ()
        assert base.query.limit == 100
        assert tagged.query.tags == ('cat_ears',)
        assert tagged.query.limit == 10
        assert tagged.query.page == 3

    def test_danbooru_tag_limit(self):
        """Test the third tag on Danbooru is rejected."""
        builder = DanbooruClient.builder().tag('a').tag('b')

        with pytest.raises(TagLimitExceeded) as exc_info:
            builder.tag('c')

        error = exc_info.value
        assert error.client == 'DanbooruClient'
        assert error.max == 2
        assert error.attempted == 3

    def test_failed_tag_leaves_builder_unchanged(self):
        """Test a rejected tag does not corrupt the builder it was called on."""
        builder = DanbooruClient.builder().tag('a').tag('b')

        with pytest.raises(TagLimitExceeded):
            builder.tag('c')

        assert builder.query.tags == ('a', 'b')
        assert builder.build().query.tag_string == 'a b'

    def test_rating_and_sort_count_towards_limit(self):
        """Test meta tags added by rating()/sort() use up the tag budget."""
        builder = DanbooruClient.builder().rating(DanbooruRating.GENERAL).sort(Sort.SCORE)

        assert builder.query.tags == ('rating:general', 'order:score')
        with pytest.raises(TagLimitExceeded):
            builder.tag('cat_ears')

    def test_tags_bulk_fails_on_first_over_limit(self):
        """Test tags() stops at the tag that crosses the limit."""
        builder = DanbooruClient.builder()

        with pytest.raises(TagLimitExceeded) as exc_info:
            builder.tags(['a', 'b', 'c', 'd'])

        assert exc_info.value.attempted == 3
        assert builder.query.tags == ()

    def test_unlimited_backends(self):
        """Test Gelbooru-style backends accept many tags."""
        tags = [f'tag_{i}' for i in range(50)]
        for client_cls in (GelbooruClient, Rule34Client, SafebooruClient):
            assert client_cls.builder().tags(tags).tag_count() == 50

    def test_sort_prefix_per_backend(self):
        """Test order: on Danbooru and sort: elsewhere."""
        assert DanbooruClient.builder().sort(Sort.SCORE).query.tags == ('order:score',)
        assert GelbooruClient.builder().sort(Sort.UPDATED).query.tags == ('sort:updated',)
        assert Rule34Client.builder().random().query.tags == ('sort:random',)

    def test_rating_type_checked(self):
        """Test a rating from another backend is rejected."""
        with pytest.raises(TypeError):
            GelbooruClient.builder().rating(DanbooruRating.GENERAL)

        builder = SafebooruClient.builder().rating(SafebooruRating.SAFE)
        assert builder.query.tags == ('rating:safe',)

    def test_blacklist(self):
        """Test excluded tags are prefixed with a dash."""
        builder = GelbooruClient.builder().tag('cat_ears').blacklist_tags(['blurry', 'lowres'])
        assert builder.query.tag_string == 'cat_ears -blurry -lowres'

    def test_blacklist_counts_towards_limit(self):
        """Test excluded tags use up the Danbooru tag budget."""
        with pytest.raises(TagLimitExceeded):
            DanbooruClient.builder().tag('a').blacklist_tag('b').blacklist_tag('c')

    def test_credentials_and_url(self):
        """Test credentials and base URL overrides."""
        builder = (Rule34Client.builder()
                   .set_credentials('secret', '99')
                   .with_custom_url('http://localhost:8080'))

        assert builder.query.api_key == 'secret'
        assert builder.query.user_id == '99'
        assert builder.query.base_url == 'http://localhost:8080'
        assert builder.default_url('http://mirror.test').query.base_url == 'http://mirror.test'

    def test_strict_mode(self):
        """Test strict mode rejects tags with warnings before adding them."""
        builder = GelbooruClient.builder().strict()

        with pytest.raises(InvalidTag):
            builder.tag('cat ears')

        assert builder.tag('cat_ears').query.tags == ('cat_ears',)
        # Lenient by default
        assert GelbooruClient.builder().tag('cat ears').query.tags == ('cat ears',)

    def test_strict_mode_blacklist(self):
        """Test strict mode also validates excluded tags."""
        builder = GelbooruClient.builder().strict()

        with pytest.raises(InvalidTag):
            builder.blacklist_tag('cat ears')
        with pytest.raises(InvalidTag):
            builder.blacklist_tags(['dog', 'long  hair'])

        assert builder.blacklist_tag('dog').query.tags == ('-dog',)
        assert builder.tag_count() == 0

    def test_build_freezes_query(self):
        """Test the built client carries the builder's query, cache and HTTP client."""
        cache = ResponseCache()
        http_client = httpx.AsyncClient()
        builder = (GelbooruClient.builder()
                   .tag('cat_ears')
                   .limit(10)
                   .with_cache(cache)
                   .with_http_client(http_client))

        client = builder.build()

        assert isinstance(client, GelbooruClient)
        assert client.query == builder.query
        assert client.cache is cache
        assert client.http_client is http_client

        # Later builder changes do not leak into the built client
        builder.tag('blue_eyes')
        assert client.query.tags == ('cat_ears',)

    def test_builder_http_client_argument(self):
        """Test an HTTP client can be passed straight to builder()."""
        http_client = httpx.AsyncClient()
        assert DanbooruClient.builder(http_client).build().http_client is http_client

    def test_repr(self):
        """Test the builder repr names the backend."""
        assert 'DanbooruClient' in repr(DanbooruClient.builder().tag('a'))
