"""
Tests for environment file import and export
"""

import json

import pytest

from restbridge.convert.environment import (
    ENVIRONMENT_TYPE,
    environment_to_dict,
    export_environment,
    import_environment,
)
from restbridge.models import Environment, KeyValue


@pytest.fixture
def environment():
    return Environment(
        name='Staging',
        variables=[
            KeyValue('baseUrl', 'https://staging.example.com', description='API root'),
            KeyValue('token', 's3cret', is_secret=True),
            KeyValue('legacy', 'x', enabled=False)
        ]
    )


class TestExportEnvironment:
    """Test environment serialization."""

    def test_shape(self, environment):
        document = json.loads(export_environment(environment))

        assert document['_type'] == ENVIRONMENT_TYPE
        assert document['name'] == 'Staging'
        assert document['variables'][0] == {
            'key': 'baseUrl',
            'value': 'https://staging.example.com',
            'enabled': True,
            'isSecret': False,
            'description': 'API root'
        }
        assert document['variables'][1]['isSecret'] is True
        assert document['variables'][2]['enabled'] is False

    def test_ids_not_exported(self, environment):
        assert 'id' not in environment_to_dict(environment)
        assert all('id' not in v for v in environment_to_dict(environment)['variables'])

    def test_indented(self, environment):
        assert export_environment(environment).startswith('{\n  "_type"')


class TestImportEnvironment:
    """Test environment parsing."""

    def test_round_trip(self, environment):
        restored = import_environment(export_environment(environment))

        assert restored.name == environment.name
        assert [(v.key, v.value, v.enabled, v.is_secret, v.description) for v in restored.variables] == \
            [(v.key, v.value, v.enabled, v.is_secret, v.description) for v in environment.variables]

    def test_fresh_ids(self, environment):
        restored = import_environment(export_environment(environment))

        assert restored.id != environment.id
        assert {v.id for v in restored.variables}.isdisjoint({v.id for v in environment.variables})

    def test_value_coercion(self):
        text = json.dumps({'_type': 'environment', 'name': 'n', 'variables': [
            {'key': 'port', 'value': 8080},
            {'key': 'empty', 'value': None}
        ]})
        restored = import_environment(text)

        assert [(v.key, v.value, v.enabled) for v in restored.variables] == [('port', '8080', True), ('empty', '', True)]

    def test_invalid_json(self):
        with pytest.raises(ValueError, match='Invalid environment file'):
            import_environment('{oops')

    @pytest.mark.parametrize('document', [
        [],
        {'name': 'n', 'variables': []},
        {'_type': 'collection', 'name': 'n', 'variables': []},
        {'_type': 'environment', 'variables': []},
        {'_type': 'environment', 'name': 'n', 'variables': {}},
    ])
    def test_invalid_format(self, document):
        with pytest.raises(ValueError, match='Invalid environment file format'):
            import_environment(json.dumps(document))
