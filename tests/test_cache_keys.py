"""
Tests for the AI cache key scheme.
"""

from flowerbase.services.cache_keys import (
    derive_key,
    namespace_prefix,
    summary_key,
    translation_key,
)


def test_key_layout():
    assert derive_key('translate', 'abc123', 'hi') == 'flora_ai:translate:abc123:hi'


def test_variant_defaults_to_empty():
    assert derive_key('summarize', 'abc123') == 'flora_ai:summarize:abc123:'
    assert summary_key('abc123') == derive_key('summarize', 'abc123', '')


def test_same_inputs_same_key():
    assert derive_key('translate', 'f1', 'ml') == derive_key('translate', 'f1', 'ml')


def test_languages_get_distinct_keys():
    assert translation_key('f1', 'hi') != translation_key('f1', 'ml')


def test_kinds_get_distinct_keys():
    assert derive_key('translate', 'f1') != derive_key('summarize', 'f1')


def test_delimiter_inside_components_cannot_collide():
    # Without encoding both would read 'flora_ai:translate:a:b:c'
    first = derive_key('translate', 'a:b', 'c')
    second = derive_key('translate', 'a', 'b:c')

    assert first != second
    assert first.count(':') == 3
    assert second.count(':') == 3


def test_every_key_starts_with_namespace_prefix():
    for key in (translation_key('x', 'hi'), summary_key('y'), derive_key('other', 'z', 'v')):
        assert key.startswith(namespace_prefix())


def test_custom_prefix_isolated_from_default():
    assert not derive_key('translate', 'f1', 'hi', prefix='test').startswith(namespace_prefix())
