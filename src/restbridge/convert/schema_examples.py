"""
Example values synthesized from OpenAPI schemas.

Used to seed request bodies when importing an OpenAPI document.
"""

import logging
from typing import Any, Dict, FrozenSet, Optional


logger = logging.getLogger("restbridge.openapi")

# Placeholder values for well-known string formats
STRING_FORMAT_EXAMPLES = {
    'date-time': '2024-01-15T10:30:00Z',
    'date': '2024-01-15',
    'email': 'user@example.com',
    'uuid': '550e8400-e29b-41d4-a716-446655440000',
    'uri': 'https://example.com',
}


def resolve_ref(ref: str, document: Any) -> Optional[Any]:
    """
    Resolve a local ``#/...`` reference as a JSON pointer into the document.

    Returns:
        The referenced node, or None for external or dangling references
    """
    if not isinstance(ref, str) or not ref.startswith('#/'):
        return None

    current = document
    for part in ref[2:].split('/'):
        part = part.replace('~1', '/').replace('~0', '~')
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
    return current


def generate_example_from_schema(
    schema: Any,
    document: Any,
    visited: FrozenSet[str] = frozenset()
) -> Any:
    """
    Build an example value for a schema.

    Args:
        schema: Schema object (may be a $ref)
        document: Whole OpenAPI document, the root for $ref lookups
        visited: Refs already expanded on the current branch

    Returns:
        JSON-compatible example value

    Each branch gets its own visited set, so a schema referenced by two
    sibling properties expands in both while a cycle stops at ``{}``.
    """
    if not isinstance(schema, dict):
        return None

    ref = schema.get('$ref')
    if ref is not None:
        if ref in visited:
            return {}
        resolved = resolve_ref(ref, document)
        if not isinstance(resolved, dict):
            logger.debug(f"Unresolvable schema reference: {ref}")
            return {}
        return generate_example_from_schema(resolved, document, visited | {ref})

    if 'example' in schema:
        return schema['example']

    if 'allOf' in schema:
        return _merge_all_of(schema, document, visited)

    for combinator in ('oneOf', 'anyOf'):
        alternatives = schema.get(combinator)
        if isinstance(alternatives, list) and alternatives:
            return generate_example_from_schema(alternatives[0], document, visited)

    schema_type = schema.get('type')
    if schema_type is None:
        if 'properties' in schema:
            schema_type = 'object'
        elif 'items' in schema:
            schema_type = 'array'

    if schema_type == 'object':
        properties = schema.get('properties')
        if not isinstance(properties, dict):
            return {}
        return {
            name: generate_example_from_schema(prop, document, visited)
            for name, prop in properties.items()
        }

    if schema_type == 'array':
        items = schema.get('items')
        if not isinstance(items, dict):
            return []
        return [generate_example_from_schema(items, document, visited)]

    if schema_type == 'string':
        fmt = schema.get('format')
        if fmt in STRING_FORMAT_EXAMPLES:
            return STRING_FORMAT_EXAMPLES[fmt]
        enum = schema.get('enum')
        if isinstance(enum, list) and enum:
            return enum[0]
        return 'string'

    if schema_type in ('integer', 'number'):
        for key in ('default', 'minimum'):
            if key in schema:
                return schema[key]
        return 0 if schema_type == 'integer' else 0.0

    if schema_type == 'boolean':
        return True

    return None


def _merge_all_of(schema: Dict[str, Any], document: Any, visited: FrozenSet[str]) -> Any:
    merged: Dict[str, Any] = {}
    parts = [part for part in schema.get('allOf') or []]
    # Sibling properties next to allOf belong to the same object
    if 'properties' in schema:
        parts.append({'type': 'object', 'properties': schema['properties']})

    last = None
    for part in parts:
        value = generate_example_from_schema(part, document, visited)
        if isinstance(value, dict):
            merged.update(value)
        else:
            last = value

    if merged or last is None:
        return merged
    return last
