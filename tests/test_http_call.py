"""
Tests for HTTP call preparation

Tests prepare_http_call including:
- Query parameter and API key placement
- Auth headers and header precedence
- Body encoding and Content-Type defaults
"""

import pytest

from restbridge.models import (
    ApiKeyAuth,
    ApiKeyLocation,
    ApiRequest,
    BasicAuth,
    BearerAuth,
    FormDataBody,
    InheritAuth,
    JsonBody,
    KeyValue,
    RawBody,
    UrlEncodedBody,
)
from restbridge.resolve.http_call import PreparedCall, basic_credentials, prepare_http_call


class TestURL:
    """Test final URL construction."""

    def test_params_appended(self):
        request = ApiRequest(
            name='r',
            url='https://api.example.com/items',
            params=[KeyValue('page', '2'), KeyValue('q', 'a b'), KeyValue('off', 'x', enabled=False)]
        )
        call = prepare_http_call(request)
        assert call.url == 'https://api.example.com/items?page=2&q=a+b'

    def test_existing_query_kept(self):
        request = ApiRequest(name='r', url='https://x.com/a?x=1', params=[KeyValue('y', '2')])
        assert prepare_http_call(request).url == 'https://x.com/a?x=1&y=2'

    def test_no_params(self):
        request = ApiRequest(name='r', url='https://x.com/a?x=1')
        assert prepare_http_call(request).url == 'https://x.com/a?x=1'

    def test_api_key_in_query(self):
        request = ApiRequest(
            name='r',
            url='https://x.com/a',
            params=[KeyValue('page', '1')],
            auth=ApiKeyAuth(key='api_key', value='secret', add_to=ApiKeyLocation.QUERY)
        )
        call = prepare_http_call(request)

        assert call.url == 'https://x.com/a?page=1&api_key=secret'
        assert call.get_header('api_key') is None

    def test_variables_in_url_and_params(self):
        request = ApiRequest(name='r', url='<<baseUrl>>/users', params=[KeyValue('id', '<<id>>')])
        call = prepare_http_call(
            request,
            [KeyValue('baseUrl', 'https://prod.example.com'), KeyValue('id', '1')],
            [KeyValue('baseUrl', 'https://dev.example.com')]
        )
        assert call.url == 'https://dev.example.com/users?id=1'


class TestHeaders:
    """Test header and auth resolution."""

    def test_enabled_headers_only(self):
        request = ApiRequest(
            name='r',
            url='https://x.com',
            headers=[KeyValue(' Accept ', 'application/json'), KeyValue('X-Off', '1', enabled=False), KeyValue('', 'x')]
        )
        assert prepare_http_call(request).headers == [('Accept', 'application/json')]

    def test_bearer(self):
        request = ApiRequest(name='r', url='https://x.com', auth=BearerAuth(token='<<t>>'))
        call = prepare_http_call(request, [KeyValue('t', 'abc')])
        assert call.get_header('authorization') == 'Bearer abc'

    def test_basic(self):
        request = ApiRequest(name='r', url='https://x.com', auth=BasicAuth(username='u', password='p'))
        assert prepare_http_call(request).get_header('Authorization') == 'Basic dTpw'
        assert basic_credentials('u', 'p') == 'dTpw'

    def test_api_key_header(self):
        request = ApiRequest(name='r', url='https://x.com', auth=ApiKeyAuth(key='X-API-Key', value='k'))
        assert prepare_http_call(request).get_header('x-api-key') == 'k'

    def test_auth_overrides_manual_header(self):
        request = ApiRequest(
            name='r',
            url='https://x.com',
            headers=[KeyValue('authorization', 'Bearer manual')],
            auth=BearerAuth(token='auto')
        )
        call = prepare_http_call(request)
        assert call.headers == [('Authorization', 'Bearer auto')]

    def test_empty_credentials_skipped(self):
        for auth in (BearerAuth(token='  '), BasicAuth(username='', password='p'), ApiKeyAuth(key='K', value='')):
            call = prepare_http_call(ApiRequest(name='r', url='https://x.com', auth=auth))
            assert call.headers == []

    def test_inherited_auth(self):
        request = ApiRequest(name='r', url='https://x.com', auth=InheritAuth())
        call = prepare_http_call(request, inherited_auth=BearerAuth(token='parent'))
        assert call.get_header('Authorization') == 'Bearer parent'

    def test_inherit_without_source(self):
        request = ApiRequest(name='r', url='https://x.com', auth=InheritAuth())
        assert prepare_http_call(request).headers == []


class TestBody:
    """Test body encoding."""

    def test_json_default_content_type(self):
        request = ApiRequest(name='r', method='POST', url='https://x.com', body=JsonBody(raw='{"a": "<<v>>"}'))
        call = prepare_http_call(request, [KeyValue('v', '1')])

        assert call.body_kind == 'json'
        assert call.body_text == '{"a": "1"}'
        assert call.get_header('Content-Type') == 'application/json'

    def test_json_custom_content_type_kept(self):
        request = ApiRequest(
            name='r',
            method='POST',
            url='https://x.com',
            headers=[KeyValue('content-type', 'application/vnd.api+json')],
            body=JsonBody(raw='{}')
        )
        call = prepare_http_call(request)
        assert call.headers == [('content-type', 'application/vnd.api+json')]

    def test_empty_json_means_no_body(self):
        request = ApiRequest(name='r', method='POST', url='https://x.com', body=JsonBody(raw=''))
        call = prepare_http_call(request)

        assert not call.has_body
        assert call.body_text is None
        assert call.headers == []

    def test_raw_without_content_type(self):
        request = ApiRequest(name='r', method='PUT', url='https://x.com', body=RawBody(raw='hello'))
        call = prepare_http_call(request)

        assert call.body_kind == 'raw'
        assert call.body_text == 'hello'
        assert call.get_header('Content-Type') is None

    def test_urlencoded(self):
        request = ApiRequest(
            name='r',
            method='POST',
            url='https://x.com',
            body=UrlEncodedBody(fields=[KeyValue('a', '1 2'), KeyValue('b', 'x&y'), KeyValue('c', 'z', enabled=False)])
        )
        call = prepare_http_call(request)

        assert call.body_text == 'a=1%202&b=x%26y'
        assert call.form_fields == [('a', '1 2'), ('b', 'x&y')]
        assert call.get_header('Content-Type') == 'application/x-www-form-urlencoded'

    def test_multipart_drops_content_type(self):
        request = ApiRequest(
            name='r',
            method='POST',
            url='https://x.com',
            headers=[KeyValue('Content-Type', 'multipart/form-data')],
            body=FormDataBody(fields=[KeyValue('f', 'v')])
        )
        call = prepare_http_call(request)

        assert call.body_kind == 'form-data'
        assert call.form_fields == [('f', 'v')]
        assert call.get_header('Content-Type') is None

    @pytest.mark.parametrize('method', ['GET', 'HEAD', 'get'])
    def test_bodyless_methods(self, method):
        request = ApiRequest(name='r', method=method, url='https://x.com', body=JsonBody(raw='{"a": 1}'))
        call = prepare_http_call(request)

        assert call.method == method.upper()
        assert not call.has_body
        assert call.get_header('Content-Type') is None

    def test_prepared_call_defaults(self):
        call = PreparedCall(method='GET', url='https://x.com')
        assert call.headers == []
        assert not call.has_body
