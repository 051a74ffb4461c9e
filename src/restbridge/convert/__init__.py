"""
RestBridge Converters

Import and export between cURL commands, Postman collections, OpenAPI
documents, environment files and the canonical request model.
"""

from .curl_parser import CURL_FLAGS, FlagSpec, parse_curl_command, tokenize
from .postman import (
    PostmanExporter,
    PostmanImporter,
    export_to_postman,
    import_postman_collection,
)
from .openapi import OpenAPIImporter, import_openapi_spec, openapi_environment
from .schema_examples import generate_example_from_schema, resolve_ref
from .environment import export_environment, import_environment

__all__ = [
    'CURL_FLAGS',
    'FlagSpec',
    'parse_curl_command',
    'tokenize',
    'PostmanExporter',
    'PostmanImporter',
    'export_to_postman',
    'import_postman_collection',
    'OpenAPIImporter',
    'import_openapi_spec',
    'openapi_environment',
    'generate_example_from_schema',
    'resolve_ref',
    'export_environment',
    'import_environment',
]
