"""
RestBridge - HTTP request interchange and resolution

Converts between cURL commands, Postman collections, OpenAPI documents and a
canonical request model, and resolves that model into executed HTTP calls or
code snippets in eight languages.
"""

from .models import (
    ApiKeyAuth,
    ApiKeyLocation,
    ApiRequest,
    ApiResponse,
    BasicAuth,
    BearerAuth,
    Collection,
    Environment,
    FormDataBody,
    HistoryEntry,
    InheritAuth,
    JsonBody,
    KeyValue,
    NoAuth,
    NoBody,
    RawBody,
    RequestFolder,
    UrlEncodedBody,
)
from .common.config import EngineConfig
from .convert import (
    export_environment,
    export_to_postman,
    generate_example_from_schema,
    import_environment,
    import_openapi_spec,
    import_postman_collection,
    openapi_environment,
    parse_curl_command,
)
from .resolve import (
    find_inherited_auth,
    prepare_http_call,
    replace_variables,
    resolve_effective_auth,
    resolve_request_variables,
)
from .codegen import LANGUAGES, generate_code
from .execute import RequestExecutor, build_history_entry

__version__ = '1.0.0'

__all__ = [
    'ApiKeyAuth',
    'ApiKeyLocation',
    'ApiRequest',
    'ApiResponse',
    'BasicAuth',
    'BearerAuth',
    'Collection',
    'Environment',
    'FormDataBody',
    'HistoryEntry',
    'InheritAuth',
    'JsonBody',
    'KeyValue',
    'NoAuth',
    'NoBody',
    'RawBody',
    'RequestFolder',
    'UrlEncodedBody',
    'EngineConfig',
    'export_environment',
    'export_to_postman',
    'generate_example_from_schema',
    'import_environment',
    'import_openapi_spec',
    'import_postman_collection',
    'openapi_environment',
    'parse_curl_command',
    'find_inherited_auth',
    'prepare_http_call',
    'replace_variables',
    'resolve_effective_auth',
    'resolve_request_variables',
    'LANGUAGES',
    'generate_code',
    'RequestExecutor',
    'build_history_entry',
]
