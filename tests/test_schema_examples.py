"""
Tests for schema example synthesis

Tests generate_example_from_schema and resolve_ref including:
- Primitive defaults and string formats
- Objects, arrays and combinators
- $ref resolution, cycles and sibling references
"""

import pytest

from restbridge.convert.schema_examples import (
    STRING_FORMAT_EXAMPLES,
    generate_example_from_schema,
    resolve_ref,
)


@pytest.fixture
def document():
    """Components used by the reference tests."""
    return {
        'servers': [{'url': 'https://api.example.com'}],
        'paths': {'/pets/{id}': {'get': {'summary': 'Get pet'}}},
        'components': {
            'schemas': {
                'Node': {
                    'type': 'object',
                    'properties': {
                        'value': {'type': 'integer'},
                        'children': {'type': 'array', 'items': {'$ref': '#/components/schemas/Node'}}
                    }
                },
                'A': {'type': 'object', 'properties': {'b': {'$ref': '#/components/schemas/B'}}},
                'B': {'type': 'object', 'properties': {'a': {'$ref': '#/components/schemas/A'}}},
                'Leaf': {'type': 'object', 'properties': {'n': {'type': 'integer'}}},
                'Pair': {
                    'type': 'object',
                    'properties': {
                        'left': {'$ref': '#/components/schemas/Leaf'},
                        'right': {'$ref': '#/components/schemas/Leaf'}
                    }
                },
                'Base': {'type': 'object', 'properties': {'id': {'type': 'integer'}}}
            }
        }
    }


class TestPrimitives:
    """Test scalar schema examples."""

    def test_string(self):
        assert generate_example_from_schema({'type': 'string'}, {}) == 'string'

    @pytest.mark.parametrize('fmt', sorted(STRING_FORMAT_EXAMPLES))
    def test_string_formats(self, fmt):
        schema = {'type': 'string', 'format': fmt}
        assert generate_example_from_schema(schema, {}) == STRING_FORMAT_EXAMPLES[fmt]

    def test_known_format_values(self):
        assert generate_example_from_schema({'type': 'string', 'format': 'date'}, {}) == '2024-01-15'
        assert generate_example_from_schema({'type': 'string', 'format': 'email'}, {}) == 'user@example.com'

    def test_enum_uses_first_value(self):
        schema = {'type': 'string', 'enum': ['dog', 'cat']}
        assert generate_example_from_schema(schema, {}) == 'dog'

    def test_unknown_format_falls_back(self):
        schema = {'type': 'string', 'format': 'password'}
        assert generate_example_from_schema(schema, {}) == 'string'

    def test_integer_and_number(self):
        assert generate_example_from_schema({'type': 'integer'}, {}) == 0
        assert generate_example_from_schema({'type': 'number'}, {}) == 0.0

    def test_minimum_and_default(self):
        assert generate_example_from_schema({'type': 'integer', 'minimum': 5}, {}) == 5
        assert generate_example_from_schema({'type': 'integer', 'minimum': 5, 'default': 7}, {}) == 7

    def test_boolean(self):
        assert generate_example_from_schema({'type': 'boolean'}, {}) is True

    def test_explicit_example_wins(self):
        schema = {'type': 'integer', 'example': 42, 'default': 1}
        assert generate_example_from_schema(schema, {}) == 42

    def test_unknown_type(self):
        assert generate_example_from_schema({'type': 'null'}, {}) is None

    def test_not_a_schema(self):
        assert generate_example_from_schema('string', {}) is None


class TestStructures:
    """Test objects, arrays and combinators."""

    def test_object(self):
        schema = {
            'type': 'object',
            'properties': {
                'name': {'type': 'string'},
                'age': {'type': 'integer'},
                'active': {'type': 'boolean'}
            }
        }
        assert generate_example_from_schema(schema, {}) == {'name': 'string', 'age': 0, 'active': True}

    def test_object_without_properties(self):
        assert generate_example_from_schema({'type': 'object'}, {}) == {}

    def test_type_inferred_from_properties(self):
        schema = {'properties': {'id': {'type': 'integer'}}}
        assert generate_example_from_schema(schema, {}) == {'id': 0}

    def test_array(self):
        schema = {'type': 'array', 'items': {'type': 'string'}}
        assert generate_example_from_schema(schema, {}) == ['string']

    def test_array_without_items(self):
        assert generate_example_from_schema({'type': 'array'}, {}) == []

    def test_all_of_merges(self, document):
        schema = {
            'allOf': [
                {'$ref': '#/components/schemas/Base'},
                {'properties': {'extra': {'type': 'boolean'}}}
            ]
        }
        assert generate_example_from_schema(schema, document) == {'id': 0, 'extra': True}

    def test_all_of_with_sibling_properties(self, document):
        schema = {
            'allOf': [{'$ref': '#/components/schemas/Base'}],
            'properties': {'name': {'type': 'string'}}
        }
        assert generate_example_from_schema(schema, document) == {'id': 0, 'name': 'string'}

    def test_one_of_uses_first(self):
        schema = {'oneOf': [{'type': 'string'}, {'type': 'integer'}]}
        assert generate_example_from_schema(schema, {}) == 'string'

    def test_any_of_uses_first(self):
        schema = {'anyOf': [{'type': 'integer'}, {'type': 'string'}]}
        assert generate_example_from_schema(schema, {}) == 0


class TestReferences:
    """Test $ref handling."""

    def test_simple_ref(self, document):
        schema = {'$ref': '#/components/schemas/Leaf'}
        assert generate_example_from_schema(schema, document) == {'n': 0}

    def test_self_referencing_schema_terminates(self, document):
        schema = {'$ref': '#/components/schemas/Node'}
        assert generate_example_from_schema(schema, document) == {'value': 0, 'children': [{}]}

    def test_mutual_recursion_terminates(self, document):
        schema = {'$ref': '#/components/schemas/A'}
        assert generate_example_from_schema(schema, document) == {'b': {'a': {}}}

    def test_sibling_refs_both_expand(self, document):
        schema = {'$ref': '#/components/schemas/Pair'}
        assert generate_example_from_schema(schema, document) == {'left': {'n': 0}, 'right': {'n': 0}}

    def test_dangling_ref(self, document):
        schema = {'$ref': '#/components/schemas/Missing'}
        assert generate_example_from_schema(schema, document) == {}

    def test_external_ref(self, document):
        schema = {'$ref': 'other.yaml#/components/schemas/Leaf'}
        assert generate_example_from_schema(schema, document) == {}


class TestResolveRef:
    """Test JSON pointer resolution."""

    def test_component(self, document):
        assert resolve_ref('#/components/schemas/Leaf', document) == document['components']['schemas']['Leaf']

    def test_escaped_slash(self, document):
        assert resolve_ref('#/paths/~1pets~1{id}/get', document) == {'summary': 'Get pet'}

    def test_list_index(self, document):
        assert resolve_ref('#/servers/0/url', document) == 'https://api.example.com'

    def test_missing(self, document):
        assert resolve_ref('#/components/schemas/Nope', document) is None
        assert resolve_ref('#/servers/3', document) is None

    def test_non_local(self, document):
        assert resolve_ref('http://example.com/schema.json', document) is None
