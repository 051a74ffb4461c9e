"""
Tests for RestBridge request execution

Tests the RequestExecutor including:
- Translating a prepared call into a session request
- Transport error handling
- Concurrent collection runs with inherited auth
- History entries with secrets masked
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from restbridge.common.config import EngineConfig
from restbridge.execute.executor import RequestExecutor, build_history_entry, error_response
from restbridge.models import (
    ApiRequest,
    ApiResponse,
    BearerAuth,
    Collection,
    FormDataBody,
    InheritAuth,
    JsonBody,
    KeyValue,
    RequestFolder,
)


def _mock_response(status_code=200, reason='OK', text='{"ok": true}', headers=None):
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    response.text = text
    response.content = text.encode('utf-8')
    response.headers = headers or {'Content-Type': 'application/json'}
    return response


@pytest.fixture
def json_request():
    return ApiRequest(
        name='Create',
        method='POST',
        url='<<baseUrl>>/items',
        params=[KeyValue('dry', '1')],
        body=JsonBody(raw='{"name": "<<name>>"}'),
        auth=BearerAuth(token='<<token>>')
    )


@pytest.fixture
def executor():
    executor = RequestExecutor(EngineConfig(timeout=5, verify_ssl=False, follow_redirects=False))
    executor.session = Mock()
    return executor


class TestExecute:
    """Test sending a single request."""

    def test_session_request_arguments(self, executor, json_request):
        executor.session.request.return_value = _mock_response()

        executor.execute(
            json_request,
            [KeyValue('baseUrl', 'https://api.example.com'), KeyValue('name', 'widget')],
            [KeyValue('token', 'env-token')]
        )

        kwargs = executor.session.request.call_args.kwargs
        assert kwargs['method'] == 'POST'
        assert kwargs['url'] == 'https://api.example.com/items?dry=1'
        assert kwargs['headers'] == {'Authorization': 'Bearer env-token', 'Content-Type': 'application/json'}
        assert kwargs['data'] == b'{"name": "widget"}'
        assert kwargs['files'] is None
        assert kwargs['timeout'] == 5
        assert kwargs['verify'] is False
        assert kwargs['allow_redirects'] is False

    def test_response_mapping(self, executor, json_request):
        executor.session.request.return_value = _mock_response(201, 'Created', '{"id": 1}')

        response = executor.execute(json_request)

        assert response.status == 201
        assert response.status_text == 'Created'
        assert response.body == '{"id": 1}'
        assert response.size == 9
        assert response.headers == {'Content-Type': 'application/json'}
        assert response.time_ms >= 0
        assert response.ok

    def test_form_data_uses_files(self, executor):
        executor.session.request.return_value = _mock_response()
        request = ApiRequest(
            name='Upload',
            method='POST',
            url='https://x.com/upload',
            body=FormDataBody(fields=[KeyValue('a', '1'), KeyValue('b', '2')])
        )

        executor.execute(request)

        kwargs = executor.session.request.call_args.kwargs
        assert kwargs['files'] == [('a', (None, '1')), ('b', (None, '2'))]
        assert kwargs['data'] is None
        assert 'Content-Type' not in kwargs['headers']

    def test_get_sends_no_body(self, executor):
        executor.session.request.return_value = _mock_response()
        request = ApiRequest(name='Get', url='https://x.com', body=JsonBody(raw='{}'))

        executor.execute(request)

        assert executor.session.request.call_args.kwargs['data'] is None

    def test_connection_error(self, executor, json_request):
        executor.session.request.side_effect = requests.exceptions.ConnectionError('Connection refused')

        response = executor.execute(json_request)

        assert response.status == 0
        assert response.status_text == 'Error'
        assert json.loads(response.body) == {'error': 'Connection refused'}
        assert not response.ok

    def test_invalid_url(self, executor):
        executor.session.request.side_effect = requests.exceptions.MissingSchema('No scheme supplied')

        response = executor.execute(ApiRequest(name='Bad', url='<<missing>>/x'))

        assert response.status == 0
        assert 'No scheme supplied' in json.loads(response.body)['error']

    def test_server_error_is_a_response(self, executor, json_request):
        executor.session.request.return_value = _mock_response(503, 'Service Unavailable', 'down')

        response = executor.execute(json_request)

        assert response.status == 503
        assert not response.ok


class TestExecuteCollection:
    """Test running a whole collection."""

    @pytest.fixture
    def collection(self):
        folder = RequestFolder(
            name='Secured',
            auth=BearerAuth(token='folder-token'),
            requests=[ApiRequest(name='Inside', url='https://x.com/inside', auth=InheritAuth())]
        )
        return Collection(
            name='Run',
            folders=[folder],
            requests=[
                ApiRequest(name='First', url='<<host>>/first', auth=InheritAuth()),
                ApiRequest(name='Second', url='<<host>>/second')
            ],
            variables=[KeyValue('host', 'https://x.com')],
            auth=BearerAuth(token='root-token')
        )

    def test_order_and_auth(self, executor, collection):
        seen = {}

        def fake_request(**kwargs):
            seen[kwargs['url']] = kwargs['headers'].get('Authorization')
            return _mock_response(text=kwargs['url'])

        executor.session.request.side_effect = fake_request

        results = executor.execute_collection(collection, max_workers=3)

        assert [r.name for r, _ in results] == ['Inside', 'First', 'Second']
        assert [resp.body for _, resp in results] == [
            'https://x.com/inside', 'https://x.com/first', 'https://x.com/second'
        ]
        assert seen == {
            'https://x.com/inside': 'Bearer folder-token',
            'https://x.com/first': 'Bearer root-token',
            'https://x.com/second': None,
        }

    def test_environment_overrides(self, executor, collection):
        executor.session.request.return_value = _mock_response()

        executor.execute_collection(collection, [KeyValue('host', 'https://staging.x.com')], max_workers=1)

        urls = sorted(call.kwargs['url'] for call in executor.session.request.call_args_list)
        assert urls == ['https://staging.x.com/first', 'https://staging.x.com/second', 'https://x.com/inside']


class TestHistory:
    """Test history entries."""

    def test_secret_masked(self, json_request):
        response = ApiResponse(status=200, status_text='OK')
        variables = [
            KeyValue('baseUrl', 'https://api.example.com'),
            KeyValue('name', 'widget'),
            KeyValue('token', 's3cret', is_secret=True)
        ]

        entry = build_history_entry(json_request, response, variables)

        assert entry.request.url == 'https://api.example.com/items'
        assert entry.request.body.raw == '{"name": "widget"}'
        assert entry.request.auth == BearerAuth(token='<<token>>')
        assert 's3cret' not in json.dumps(entry.to_dict())
        assert entry.response is response
        assert entry.timestamp > 0

    def test_error_response(self):
        response = error_response('boom', 12)

        assert response.status == 0
        assert response.body == '{"error": "boom"}'
        assert response.size == len(response.body)
        assert response.time_ms == 12


class TestExecutorConfiguration:
    """Test session setup from config."""

    def test_defaults(self):
        executor = RequestExecutor()
        assert executor.config.timeout == 30.0
        assert executor.config.verify_ssl is True

    def test_retry_strategy(self):
        executor = RequestExecutor(EngineConfig(max_retries=5))
        retries = executor.session.get_adapter('https://example.com').max_retries

        assert retries.total == 5
        assert 503 in retries.status_forcelist
        assert retries.backoff_factor == 0.5

    @patch('restbridge.execute.executor.requests.Session')
    def test_adapters_mounted(self, mock_session_class):
        mock_session = Mock()
        mock_session_class.return_value = mock_session

        executor = RequestExecutor()

        assert executor.session is mock_session
        mounted = [call.args[0] for call in mock_session.mount.call_args_list]
        assert mounted == ['http://', 'https://']
