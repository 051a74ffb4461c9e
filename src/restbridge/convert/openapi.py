"""
OpenAPI / Swagger import.

Builds a Collection from an OpenAPI 3.x or Swagger 2.0 document in JSON or
YAML: one request per operation, grouped into folders by first tag, with
path parameters turned into <<name>> placeholders and bodies seeded from the
declared schemas. Documents are duck-typed by the fields they carry.
"""

import datetime
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..models import (
    ApiRequest,
    Collection,
    Environment,
    FormDataBody,
    JsonBody,
    KeyValue,
    NoBody,
    RequestBody,
    RequestFolder,
    UrlEncodedBody,
)
from .schema_examples import generate_example_from_schema, resolve_ref


logger = logging.getLogger("restbridge.openapi")

# Operation keys of a path item, in import order
OPENAPI_METHODS = ('get', 'post', 'put', 'patch', 'delete', 'head', 'options')

# Request body media types in order of preference
BODY_MEDIA_TYPES = (
    'application/json',
    'application/x-www-form-urlencoded',
    'multipart/form-data',
)

PATH_PARAM_PATTERN = re.compile(r'\{([^{}/]+)\}')


def parse_document(text: str) -> Dict[str, Any]:
    """
    Parse an OpenAPI document, trying JSON first and YAML second.

    Raises:
        ValueError: If the text is empty or parses as neither
    """
    content = (text or '').strip()
    if not content:
        raise ValueError("Empty content provided")

    try:
        document = json.loads(content)
    except json.JSONDecodeError as json_error:
        try:
            document = yaml.safe_load(content)
        except yaml.YAMLError as yaml_error:
            raise ValueError(
                f"Failed to parse as JSON or YAML. JSON error: {json_error}; YAML error: {yaml_error}"
            ) from yaml_error
        if not isinstance(document, dict):
            raise ValueError(
                f"Failed to parse as JSON or YAML. JSON error: {json_error}; "
                f"YAML error: document is not a mapping"
            )

    if not isinstance(document, dict):
        raise ValueError("Invalid OpenAPI specification: parsed content is not an object")

    return document


def validate_document(document: Dict[str, Any]):
    """Check the fields every importable document needs."""
    if not document.get('info'):
        raise ValueError('Invalid OpenAPI specification: missing "info" field')

    paths = document.get('paths')
    if paths is None:
        raise ValueError("Invalid OpenAPI specification: no paths found")
    if not isinstance(paths, dict) or not paths:
        raise ValueError("Invalid OpenAPI specification: paths object is empty")


def get_base_url(document: Dict[str, Any]) -> str:
    """First server URL (OpenAPI 3) or scheme://host/basePath (Swagger 2)."""
    servers = document.get('servers')
    if isinstance(servers, list) and servers and isinstance(servers[0], dict):
        return str(servers[0].get('url') or '').rstrip('/')

    host = document.get('host')
    if host:
        schemes = document.get('schemes') or ['https']
        base_path = str(document.get('basePath') or '').rstrip('/')
        return f"{schemes[0]}://{host}{base_path}"

    return str(document.get('basePath') or '').rstrip('/')


def placeholder_path(path: str) -> str:
    """Turn /pets/{petId} into /pets/<<petId>>."""
    return PATH_PARAM_PATTERN.sub(lambda m: f"<<{m.group(1)}>>", path)


class OpenAPIImporter:
    """
    Convert a parsed OpenAPI document into a Collection.

    Example:
        collection = OpenAPIImporter(document).to_collection()
    """

    def __init__(self, document: Dict[str, Any]):
        """
        Initialize importer.

        Args:
            document: Parsed OpenAPI/Swagger document
        """
        self.document = document
        self.base_url = get_base_url(document)

    def to_collection(self) -> Collection:
        validate_document(self.document)
        info = self.document['info']

        tagged: Dict[str, List[ApiRequest]] = {}
        untagged: List[ApiRequest] = []

        for path, method, operation, path_params in self.iter_operations():
            request = self._convert_operation(path, method, operation, path_params)

            tags = operation.get('tags')
            if isinstance(tags, list) and tags:
                tagged.setdefault(str(tags[0]), []).append(request)
            else:
                untagged.append(request)

        folders = [RequestFolder(name=tag, requests=reqs) for tag, reqs in tagged.items()]

        collection = Collection(
            name=(info.get('title') if isinstance(info, dict) else None) or 'Imported API',
            description=(info.get('description') if isinstance(info, dict) else None) or None,
            folders=folders,
            requests=untagged,
        )
        logger.info(f"Imported OpenAPI spec '{collection.name}' "
                    f"({sum(1 for _ in collection.iter_requests())} operations, {len(folders)} tags)")
        return collection

    def iter_operations(self):
        """Yield (path, method, operation, path_level_parameters) for every operation."""
        for path, path_item in self.document['paths'].items():
            if not isinstance(path_item, dict):
                continue
            path_item = self._deref(path_item)
            path_params = path_item.get('parameters') or []

            for method, operation in path_item.items():
                if method.lower() not in OPENAPI_METHODS or not isinstance(operation, dict):
                    continue
                yield path, method.lower(), operation, path_params

    def path_parameters(self) -> List[Dict[str, Any]]:
        """Every distinct path parameter, in first-appearance order."""
        seen = {}
        for path, method, operation, path_params in self.iter_operations():
            for param in self._merge_parameters(path_params, operation.get('parameters') or []):
                if param.get('in') == 'path' and param.get('name') and param['name'] not in seen:
                    seen[param['name']] = param
        return list(seen.values())

    def _deref(self, node: Any) -> Any:
        """Follow $ref chains on a node; dangling refs resolve to {}."""
        seen = set()
        while isinstance(node, dict) and '$ref' in node:
            ref = node['$ref']
            if ref in seen:
                return {}
            seen.add(ref)
            resolved = resolve_ref(ref, self.document)
            if resolved is None:
                logger.debug(f"Unresolvable reference: {ref}")
                return {}
            node = resolved
        return node

    def _merge_parameters(self, path_params: List[Any], op_params: List[Any]) -> List[Dict[str, Any]]:
        """Path-level parameters overridden by operation parameters with the same name and location."""
        merged: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for raw in list(path_params) + list(op_params):
            param = self._deref(raw)
            if not isinstance(param, dict) or not param.get('name'):
                continue
            merged[(param['name'], param.get('in', ''))] = param
        return list(merged.values())

    def _convert_operation(
        self,
        path: str,
        method: str,
        operation: Dict[str, Any],
        path_params: List[Any]
    ) -> ApiRequest:
        headers: List[KeyValue] = []
        params: List[KeyValue] = []
        body_params: List[Dict[str, Any]] = []
        form_params: List[Dict[str, Any]] = []

        for param in self._merge_parameters(path_params, operation.get('parameters') or []):
            location = param.get('in')
            if location == 'header':
                headers.append(_parameter_key_value(param))
            elif location == 'query':
                params.append(_parameter_key_value(param))
            elif location == 'body':
                body_params.append(param)
            elif location == 'formData':
                form_params.append(param)

        body = self._request_body(operation)
        if isinstance(body, NoBody) and (body_params or form_params):
            body = self._swagger2_body(operation, body_params, form_params)

        if isinstance(body, JsonBody) and not any(h.key.lower() == 'content-type' for h in headers):
            headers.append(KeyValue(key='Content-Type', value='application/json'))

        return ApiRequest(
            name=operation.get('summary') or operation.get('operationId') or f"{method.upper()} {path}",
            method=method.upper(),
            url=f"{self.base_url}{placeholder_path(path)}",
            headers=headers,
            params=params,
            body=body,
        )

    def _request_body(self, operation: Dict[str, Any]) -> RequestBody:
        """Body from an OpenAPI 3 requestBody."""
        request_body = self._deref(operation.get('requestBody'))
        if not isinstance(request_body, dict):
            return NoBody()

        content = request_body.get('content')
        if not isinstance(content, dict):
            return NoBody()

        for media_type in BODY_MEDIA_TYPES:
            if media_type not in content:
                continue
            media = content[media_type] if isinstance(content[media_type], dict) else {}
            if media_type == 'application/json':
                return JsonBody(raw=self._json_example(media))
            fields = self._form_fields(media.get('schema'))
            if media_type == 'application/x-www-form-urlencoded':
                return UrlEncodedBody(fields=fields)
            return FormDataBody(fields=fields)

        return NoBody()

    def _swagger2_body(
        self,
        operation: Dict[str, Any],
        body_params: List[Dict[str, Any]],
        form_params: List[Dict[str, Any]]
    ) -> RequestBody:
        """Body from Swagger 2 'in: body' or 'in: formData' parameters."""
        if body_params:
            return JsonBody(raw=self._json_example(body_params[0]))

        consumes = operation.get('consumes') or self.document.get('consumes') or []
        fields = [
            KeyValue(
                key=p['name'],
                value=_example_text(generate_example_from_schema(p, self.document)) if p.get('type') != 'file' else '',
                enabled=True,
                description=p.get('description') or None,
            )
            for p in form_params
        ]
        if 'multipart/form-data' in consumes or any(p.get('type') == 'file' for p in form_params):
            return FormDataBody(fields=fields)
        return UrlEncodedBody(fields=fields)

    def _json_example(self, media: Dict[str, Any]) -> str:
        """Example JSON for a media type object (or Swagger 2 body parameter)."""
        if 'example' in media:
            example = media['example']
        elif isinstance(media.get('examples'), dict) and media['examples']:
            first = self._deref(next(iter(media['examples'].values())))
            example = first.get('value', {}) if isinstance(first, dict) else {}
        elif isinstance(media.get('schema'), dict):
            example = generate_example_from_schema(media['schema'], self.document)
        else:
            return '{}'

        if example is None:
            return '{}'
        return json.dumps(example, indent=2, ensure_ascii=False, default=_json_default)

    def _form_fields(self, schema: Any) -> List[KeyValue]:
        """One field per schema property, valued with its example."""
        schema = self._deref(schema)
        if not isinstance(schema, dict):
            return []

        example = generate_example_from_schema(schema, self.document)
        properties = schema.get('properties')
        if not isinstance(properties, dict):
            # allOf and friends still produce an example object
            if isinstance(example, dict):
                return [KeyValue(key=k, value=_example_text(v)) for k, v in example.items()]
            return []

        values = example if isinstance(example, dict) else {}
        return [KeyValue(key=name, value=_example_text(values.get(name))) for name in properties]


def _parameter_key_value(param: Dict[str, Any]) -> KeyValue:
    return KeyValue(
        key=param['name'],
        value='',
        enabled=bool(param.get('required', False)),
        description=param.get('description') or None,
    )


def _json_default(value: Any) -> str:
    # YAML loads unquoted dates and timestamps as date/datetime objects
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _example_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=_json_default)
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _parameter_example(param: Dict[str, Any]) -> str:
    for source in (param, param.get('schema') or {}):
        if not isinstance(source, dict):
            continue
        for key in ('example', 'default'):
            if key in source:
                return _example_text(source[key])
    return ''


def import_openapi_spec(text: str) -> Collection:
    """
    Import an OpenAPI 3.x or Swagger 2.0 document (JSON or YAML).

    Args:
        text: Document text

    Returns:
        Collection with one folder per tag

    Raises:
        ValueError: If the text is unparseable or lacks info/paths
    """
    return OpenAPIImporter(parse_document(text)).to_collection()


def openapi_environment(text: str, name: Optional[str] = None) -> Environment:
    """
    Build an environment for an OpenAPI document.

    Holds a ``baseUrl`` variable with the server URL plus one variable per
    path parameter, valued from its example or default.

    Raises:
        ValueError: If the text is unparseable or lacks info/paths
    """
    document = parse_document(text)
    validate_document(document)
    importer = OpenAPIImporter(document)

    info = document['info'] if isinstance(document['info'], dict) else {}
    variables = [KeyValue(key='baseUrl', value=importer.base_url)]
    for param in importer.path_parameters():
        variables.append(KeyValue(
            key=param['name'],
            value=_parameter_example(param),
            description=param.get('description') or None,
        ))

    return Environment(
        name=name or f"{info.get('title') or 'Imported API'} Environment",
        variables=variables,
    )
