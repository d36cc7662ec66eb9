"""
Tests for domain models, relation type normalization and small utils
"""

from datetime import datetime, timezone

import pytest

from lineage.errors import UnknownRelationTypeError, ValidationError
from lineage.models import (
    Post,
    PostKind,
    PostStatus,
    PostType,
    Relation,
    RelationType,
    normalize_relation_type,
)
from lineage.utils.id_generator import generate_post_id, generate_relation_id, get_id_type, validate_id
from lineage.utils.text import make_excerpt


class TestNormalizeRelationType:

    @pytest.mark.parametrize("raw,expected", [
        ('origin', RelationType.ORIGIN),
        ('reply', RelationType.REPLY),
        ('quote', RelationType.QUOTE),
        ('cross_link', RelationType.CROSS_LINK),
        ('hard', RelationType.REPLY),
        ('soft', RelationType.CROSS_LINK),
        (' Reply ', RelationType.REPLY),
    ])
    def test_known_values(self, raw, expected):
        assert normalize_relation_type(raw) == expected

    def test_enum_passes_through(self):
        assert normalize_relation_type(RelationType.QUOTE) is RelationType.QUOTE

    @pytest.mark.parametrize("raw", ['strong', '', None, 3])
    def test_unknown_rejected(self, raw):
        with pytest.raises(UnknownRelationTypeError):
            normalize_relation_type(raw)

    def test_unknown_is_validation_error(self):
        with pytest.raises(ValidationError):
            normalize_relation_type('weak')


class TestRelation:

    def test_legacy_type_stored_canonical(self):
        relation = Relation(id='', parent_post_id='a', child_post_id='b', relation_type='hard')

        assert relation.relation_type == RelationType.REPLY
        assert relation.is_hard
        assert not relation.is_soft
        assert relation.label == 'Continuation'

    def test_id_generated(self):
        relation = Relation(id='', parent_post_id='a', child_post_id='b', relation_type='quote')

        assert relation.id.startswith('rl_')
        assert validate_id(relation.id)

    def test_other_side(self):
        relation = Relation(id='rl_1', parent_post_id='a', child_post_id='b', relation_type='cross_link')

        assert relation.other_side('a') == 'b'
        assert relation.other_side('b') == 'a'
        with pytest.raises(ValueError):
            relation.other_side('c')

    def test_from_row_parses_timestamp(self):
        relation = Relation.from_row({
            'id': 'rl_abc12345',
            'parent_post_id': 'a',
            'child_post_id': 'b',
            'relation_type': 'soft',
            'created_at': '2025-03-01T10:00:00Z',
        })

        assert relation.relation_type == RelationType.CROSS_LINK
        assert relation.created_at == datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


class TestPost:

    def test_enum_coercion(self):
        post = Post(id='', user_id='u1', content='x', type='insight', kind='BusinessInsight', status='archived')

        assert post.id.startswith('ps_')
        assert post.type == PostType.INSIGHT
        assert post.kind == PostKind.BUSINESS_INSIGHT
        assert post.status == PostStatus.ARCHIVED
        assert post.is_business_insight
        assert not post.is_spark
        assert not post.is_active

    def test_spark(self):
        post = Post(id='ps_1', user_id='u1', content='x', type='brainstorm', kind='Spark')
        assert post.is_spark

    def test_from_row_metadata_json(self):
        row = {
            'id': 'ps_abc12345', 'user_id': 42, 'content': 'hello', 'type': 'brainstorm',
            'kind': 'Spark', 'title': None, 'body': None, 'visibility': 'public',
            'mode': 'public', 'status': 'active', 'org_id': None,
            'likes_count': None, 'comments_count': 2, 'views_count': 0,
            't_score': 1.5, 'u_score': None, 'created_at': None,
            'updated_at': None, 'published_at': None, 'metadata': '{"tags": ["a"]}',
        }
        post = Post.from_row(row)

        assert post.user_id == '42'
        assert post.likes_count == 0
        assert post.metadata == {'tags': ['a']}

    def test_display_title_falls_back_to_content(self):
        post = Post(id='ps_1', user_id='u1', content='A fairly long opening sentence for a spark post')
        assert post.display_title == 'A fairly long opening sentence...'


class TestUtils:

    def test_excerpt_short_content_untouched(self):
        assert make_excerpt("short  text\n here") == "short text here"

    def test_excerpt_cut(self):
        assert make_excerpt("abcdefghij", 4) == "abcd..."

    def test_id_types(self):
        assert get_id_type(generate_post_id()) == 'post'
        assert get_id_type(generate_relation_id()) == 'relation'
        assert not validate_id('xx_123')
