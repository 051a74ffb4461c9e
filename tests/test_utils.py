"""
Tests for utility functions module.

Tests JSON helpers, DocumentLoader and the URL helpers without touching the
network.
"""

import io

import pytest

from restbridge.common.url_utils import (
    URLTools,
    decode_component,
    encode_component,
    encode_form,
)
from restbridge.common.utils import DocumentLoader, new_id, pretty_json, safe_json_parse


class TestJsonHelpers:
    """Test suite for the JSON helpers."""

    def test_safe_json_parse_valid(self):
        """Test parsing a valid document."""
        assert safe_json_parse('{"a": [1, 2]}') == {'a': [1, 2]}

    def test_safe_json_parse_invalid(self):
        """Test fallback to the default on bad input."""
        assert safe_json_parse('{bad', default={}) == {}
        assert safe_json_parse(None) is None
        assert safe_json_parse('') is None

    def test_pretty_json(self):
        assert pretty_json('{"a":1}') == '{\n  "a": 1\n}'

    def test_pretty_json_keeps_unicode(self):
        assert pretty_json('{"name":"Zoë"}') == '{\n  "name": "Zoë"\n}'

    def test_pretty_json_not_json(self):
        assert pretty_json('plain text') == 'plain text'

    def test_new_id(self):
        assert new_id() != new_id()
        assert len(new_id()) == 36


class TestDocumentLoader:
    """Test suite for DocumentLoader."""

    def test_load_file(self, tmp_path):
        path = tmp_path / 'doc.txt'
        path.write_text('curl https://x.com', encoding='utf-8')

        assert DocumentLoader(str(path)).load() == 'curl https://x.com'
        assert DocumentLoader.load_from_file(str(path)) == 'curl https://x.com'

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError, match='Input file not found'):
            DocumentLoader(str(tmp_path / 'missing.json')).load()

    def test_load_stdin(self, monkeypatch):
        monkeypatch.setattr('sys.stdin', io.StringIO('from stdin'))
        assert DocumentLoader('-').load() == 'from stdin'

    def test_load_json(self, tmp_path):
        path = tmp_path / 'doc.json'
        path.write_text('{"a": 1}', encoding='utf-8')
        assert DocumentLoader(str(path)).load_json() == {'a': 1}

    def test_load_json_invalid(self, tmp_path):
        path = tmp_path / 'doc.json'
        path.write_text('not json', encoding='utf-8')

        with pytest.raises(ValueError, match='Invalid JSON'):
            DocumentLoader(str(path)).load_json()


class TestURLTools:
    """Test suite for URL helpers."""

    def test_split_url(self):
        assert URLTools.split_url('https://api.example.com/a?b=1') == ('https', 'api.example.com', '/a', 'b=1')

    def test_split_url_root(self):
        assert URLTools.split_url('http://localhost:8080') == ('http', 'localhost:8080', '/', '')

    def test_split_url_relative(self):
        assert URLTools.split_url('/just/a/path') is None

    def test_parse_absolute_adds_scheme(self):
        assert URLTools.parse_absolute('api.example.com/users') == ('https', 'api.example.com', '/users', '')

    def test_query_pairs(self):
        assert URLTools.query_pairs('a=1&b=&c=x+y&a=2') == [('a', '1'), ('b', ''), ('c', 'x y'), ('a', '2')]

    def test_append_query(self):
        assert URLTools.append_query('https://x.com/a', [('q', 'a b')]) == 'https://x.com/a?q=a+b'
        assert URLTools.append_query('https://x.com/a?x=1', [('y', '2')]) == 'https://x.com/a?x=1&y=2'
        assert URLTools.append_query('https://x.com/a?', [('y', '2')]) == 'https://x.com/a?y=2'

    def test_append_query_keeps_fragment(self):
        assert URLTools.append_query('https://x.com/a#top', [('y', '2')]) == 'https://x.com/a?y=2#top'

    def test_append_query_with_placeholder(self):
        assert URLTools.append_query('<<baseUrl>>/a', [('y', '2')]) == '<<baseUrl>>/a?y=2'

    def test_append_nothing(self):
        assert URLTools.append_query('https://x.com/a', []) == 'https://x.com/a'

    def test_origin_and_path(self):
        assert URLTools.origin_and_path('https', 'x.com', '') == 'https://x.com/'


class TestComponentEncoding:
    """Test suite for percent-encoding."""

    def test_encode_component(self):
        assert encode_component('a b&c/d') == 'a%20b%26c%2Fd'
        assert encode_component("-_.!~*'()") == "-_.!~*'()"

    def test_decode_component(self):
        assert decode_component('a%20b+c') == 'a b+c'

    def test_encode_form(self):
        assert encode_form([('name', 'Ada Lovelace'), ('tag', 'x=y')]) == 'name=Ada%20Lovelace&tag=x%3Dy'
