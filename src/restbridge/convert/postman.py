"""
Postman Collection v2.1 import and export.

Converts a Postman collection into a Collection tree (folders, requests,
variables, auth) and back. Exporting and re-importing a collection keeps the
method, URL, enabled headers/params and body of every request.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..models import (
    ApiKeyAuth,
    ApiKeyLocation,
    ApiRequest,
    BasicAuth,
    BearerAuth,
    Collection,
    FormDataBody,
    InheritAuth,
    JsonBody,
    KeyValue,
    NoAuth,
    NoBody,
    RawBody,
    RequestAuth,
    RequestBody,
    RequestFolder,
    UrlEncodedBody,
)


logger = logging.getLogger("restbridge.postman")

POSTMAN_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

class PostmanImporter:
    """Parse Postman Collection v2.1 JSON into a Collection."""

    @staticmethod
    def load(text: str) -> Collection:
        """
        Parse a Postman collection document.

        Args:
            text: Collection JSON

        Returns:
            Collection with folders, requests, variables and auth

        Raises:
            ValueError: If the text is empty, not JSON, or not a collection
        """
        content = (text or '').strip()
        if not content:
            raise ValueError("Empty content provided")

        try:
            postman = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid Postman collection: {e}") from e

        if not isinstance(postman, dict):
            raise ValueError("Invalid Postman collection: parsed content is not an object")
        if 'info' not in postman:
            raise ValueError('Invalid Postman collection format: missing "info" field')
        if 'item' not in postman:
            raise ValueError('Invalid Postman collection format: missing "item" field')

        info = postman.get('info') or {}
        schema = info.get('schema', '')
        if schema and 'v2.1' not in schema:
            logger.warning(f"Collection schema is {schema}, expected v2.1")

        folders, requests = PostmanImporter._convert_items(postman.get('item') or [])

        # The collection is the root of inheritance; absent auth means none
        collection_auth = PostmanImporter._convert_auth(postman.get('auth'), default=NoAuth())
        if isinstance(collection_auth, InheritAuth):
            collection_auth = NoAuth()

        variables = [
            KeyValue(
                key=str(v.get('key', '')),
                value=_as_text(v.get('value')),
                enabled=not v.get('disabled', False),
                description=_description(v.get('description')),
            )
            for v in postman.get('variable') or []
            if isinstance(v, dict)
        ]

        collection = Collection(
            name=info.get('name') or 'Imported Collection',
            description=_description(info.get('description')),
            folders=folders,
            requests=requests,
            variables=variables,
            auth=collection_auth,
        )
        logger.info(f"Imported Postman collection '{collection.name}' "
                    f"({sum(1 for _ in collection.iter_requests())} requests)")
        return collection

    @staticmethod
    def _convert_items(items: List[Dict[str, Any]]) -> Tuple[List[RequestFolder], List[ApiRequest]]:
        """Recursively convert an item array into folders and requests."""
        folders = []
        requests = []

        for item in items:
            if not isinstance(item, dict):
                continue
            if isinstance(item.get('item'), list):
                # This is a folder
                sub_folders, sub_requests = PostmanImporter._convert_items(item['item'])
                folders.append(RequestFolder(
                    name=item.get('name') or 'Unnamed Folder',
                    description=_description(item.get('description')),
                    folders=sub_folders,
                    requests=sub_requests,
                    auth=PostmanImporter._convert_auth(item.get('auth'), default=InheritAuth()),
                ))
            elif isinstance(item.get('request'), (dict, str)):
                requests.append(PostmanImporter._convert_request(item))

        return folders, requests

    @staticmethod
    def _convert_request(item: Dict[str, Any]) -> ApiRequest:
        request_data = item['request']
        # A request may be given as a bare URL string
        if isinstance(request_data, str):
            request_data = {'url': request_data}

        url, params = PostmanImporter._convert_url(request_data.get('url', ''))

        return ApiRequest(
            name=item.get('name') or 'Unnamed Request',
            method=str(request_data.get('method') or 'GET').upper(),
            url=url,
            headers=_key_values(request_data.get('header')),
            params=params,
            body=PostmanImporter._convert_body(request_data.get('body')),
            auth=PostmanImporter._convert_auth(request_data.get('auth'), default=InheritAuth()),
        )

    @staticmethod
    def _convert_url(url_data: Any) -> Tuple[str, List[KeyValue]]:
        """Extract URL and query params from the string or object form."""
        if isinstance(url_data, str):
            return url_data, []

        if not isinstance(url_data, dict):
            return '', []

        params = _key_values(url_data.get('query'))

        raw = url_data.get('raw')
        if raw:
            return raw, params

        # Reconstruct from components
        protocol = url_data.get('protocol', 'https')
        host = url_data.get('host') or []
        path = url_data.get('path') or []
        port = url_data.get('port')

        host_text = '.'.join(host) if isinstance(host, list) else str(host)
        if port:
            host_text = f"{host_text}:{port}"
        path_text = '/'.join(str(p) for p in path) if isinstance(path, list) else str(path).lstrip('/')

        url = f"{protocol}://{host_text}" if host_text else ''
        if path_text:
            url = f"{url}/{path_text}"
        return url, params

    @staticmethod
    def _convert_body(body_data: Optional[Dict[str, Any]]) -> RequestBody:
        if not isinstance(body_data, dict):
            return NoBody()

        mode = body_data.get('mode')
        if mode == 'raw':
            language = ((body_data.get('options') or {}).get('raw') or {}).get('language')
            raw = body_data.get('raw') or ''
            return JsonBody(raw=raw) if language == 'json' else RawBody(raw=raw)
        if mode == 'urlencoded':
            return UrlEncodedBody(fields=_key_values(body_data.get('urlencoded')))
        if mode == 'formdata':
            return FormDataBody(fields=_key_values(body_data.get('formdata')))

        if mode:
            logger.debug(f"Unsupported Postman body mode '{mode}', importing without body")
        return NoBody()

    @staticmethod
    def _convert_auth(auth_data: Optional[Dict[str, Any]], default: RequestAuth) -> RequestAuth:
        """
        Convert a Postman auth block.

        Postman encodes auth fields as [{key, value}] arrays; the plain object
        form is accepted too. A missing block yields ``default``.
        """
        if not isinstance(auth_data, dict):
            return default

        auth_type = auth_data.get('type')

        if auth_type == 'noauth':
            return NoAuth()
        if auth_type == 'basic':
            fields = _auth_fields(auth_data.get('basic'))
            return BasicAuth(username=fields.get('username', ''), password=fields.get('password', ''))
        if auth_type == 'bearer':
            fields = _auth_fields(auth_data.get('bearer'))
            return BearerAuth(token=fields.get('token', ''))
        if auth_type == 'apikey':
            fields = _auth_fields(auth_data.get('apikey'))
            add_to = ApiKeyLocation.QUERY if fields.get('in') == 'query' else ApiKeyLocation.HEADER
            return ApiKeyAuth(key=fields.get('key', ''), value=fields.get('value', ''), add_to=add_to)
        if auth_type == 'inherit':
            return default

        logger.debug(f"Unsupported Postman auth type '{auth_type}', importing as no auth")
        return NoAuth()


def _as_text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _description(value: Any) -> Optional[str]:
    """Postman descriptions are either a string or {content, type}."""
    if isinstance(value, dict):
        value = value.get('content')
    return value or None


def _key_values(items: Any) -> List[KeyValue]:
    if not isinstance(items, list):
        return []
    return [
        KeyValue(
            key=str(item.get('key', '')),
            value=_as_text(item.get('value')),
            enabled=not item.get('disabled', False),
            description=_description(item.get('description')),
        )
        for item in items
        if isinstance(item, dict)
    ]


def _auth_fields(encoded: Any) -> Dict[str, str]:
    if isinstance(encoded, list):
        return {
            str(entry.get('key')): _as_text(entry.get('value'))
            for entry in encoded
            if isinstance(entry, dict) and 'key' in entry
        }
    if isinstance(encoded, dict):
        return {str(k): _as_text(v) for k, v in encoded.items()}
    return {}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

class PostmanExporter:
    """
    Exports collections to Postman Collection v2.1 format.
    """

    @staticmethod
    def to_dict(collection: Collection) -> Dict[str, Any]:
        """Build the Postman document for a collection."""
        info = {
            'name': collection.name,
            'schema': POSTMAN_SCHEMA,
        }
        if collection.description:
            info['description'] = collection.description

        document = {
            'info': info,
            'item': PostmanExporter._convert_level(collection.folders, collection.requests),
        }

        auth = PostmanExporter._convert_auth(collection.auth)
        if auth is not None:
            document['auth'] = auth

        if collection.variables:
            document['variable'] = [
                {'key': v.key, 'value': v.value, 'disabled': not v.enabled}
                for v in collection.variables
            ]

        return document

    @staticmethod
    def dumps(collection: Collection) -> str:
        """Serialize a collection as Postman JSON (indent 2)."""
        return json.dumps(PostmanExporter.to_dict(collection), indent=2, ensure_ascii=False)

    @staticmethod
    def export(collection: Collection, output_path: str) -> None:
        """
        Export a collection to a Postman Collection v2.1 file.

        Args:
            collection: Collection to export
            output_path: Where to save the collection file
        """
        output_file = Path(output_path)
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            print(f"❌ Error creating directory {output_file.parent}: {e}", flush=True)
            raise

        try:
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(PostmanExporter.dumps(collection))
        except OSError as e:
            print(f"❌ Error writing to {output_path}: {e}", flush=True)
            raise

        count = sum(1 for _ in collection.iter_requests())
        print(f"✓ Exported {count} requests → {output_path}", flush=True)

    @staticmethod
    def _convert_level(folders: List[RequestFolder], requests: List[ApiRequest]) -> List[Dict[str, Any]]:
        # Folders before requests at every level
        return [PostmanExporter._convert_folder(f) for f in folders] + \
            [PostmanExporter._convert_request(r) for r in requests]

    @staticmethod
    def _convert_folder(folder: RequestFolder) -> Dict[str, Any]:
        item = {
            'name': folder.name,
            'item': PostmanExporter._convert_level(folder.folders, folder.requests),
        }
        if folder.description:
            item['description'] = folder.description
        auth = PostmanExporter._convert_auth(folder.auth)
        if auth is not None:
            item['auth'] = auth
        return item

    @staticmethod
    def _convert_request(request: ApiRequest) -> Dict[str, Any]:
        request_data = {
            'method': request.method,
            'header': [_export_key_value(h) for h in request.headers],
            'url': {
                'raw': request.url,
                'query': [_export_key_value(p) for p in request.params],
            },
        }

        body = PostmanExporter._convert_body(request.body)
        if body is not None:
            request_data['body'] = body

        auth = PostmanExporter._convert_auth(request.auth)
        if auth is not None:
            request_data['auth'] = auth

        return {'name': request.name, 'request': request_data}

    @staticmethod
    def _convert_body(body: RequestBody) -> Optional[Dict[str, Any]]:
        if isinstance(body, JsonBody):
            return {'mode': 'raw', 'raw': body.raw, 'options': {'raw': {'language': 'json'}}}
        if isinstance(body, RawBody):
            return {'mode': 'raw', 'raw': body.raw}
        if isinstance(body, UrlEncodedBody):
            return {'mode': 'urlencoded', 'urlencoded': [_export_key_value(f) for f in body.fields]}
        if isinstance(body, FormDataBody):
            return {
                'mode': 'formdata',
                'formdata': [dict(_export_key_value(f), type='text') for f in body.fields],
            }
        return None

    @staticmethod
    def _convert_auth(auth: Optional[RequestAuth]) -> Optional[Dict[str, Any]]:
        """Encode auth in Postman's key-array form; inherit and unset are omitted."""
        if auth is None or isinstance(auth, InheritAuth):
            return None
        if isinstance(auth, BasicAuth):
            return {'type': 'basic', 'basic': [
                {'key': 'username', 'value': auth.username, 'type': 'string'},
                {'key': 'password', 'value': auth.password, 'type': 'string'},
            ]}
        if isinstance(auth, BearerAuth):
            return {'type': 'bearer', 'bearer': [
                {'key': 'token', 'value': auth.token, 'type': 'string'},
            ]}
        if isinstance(auth, ApiKeyAuth):
            return {'type': 'apikey', 'apikey': [
                {'key': 'key', 'value': auth.key, 'type': 'string'},
                {'key': 'value', 'value': auth.value, 'type': 'string'},
                {'key': 'in', 'value': auth.add_to.value, 'type': 'string'},
            ]}
        return {'type': 'noauth'}


def _export_key_value(item: KeyValue) -> Dict[str, Any]:
    data = {'key': item.key, 'value': item.value, 'disabled': not item.enabled}
    if item.description:
        data['description'] = item.description
    return data


def import_postman_collection(text: str) -> Collection:
    """
    Import a Postman Collection v2.1 document.

    Raises:
        ValueError: If the document is empty, not JSON, or lacks info/item
    """
    return PostmanImporter.load(text)


def export_to_postman(collection: Collection) -> str:
    """Export a collection as Postman Collection v2.1 JSON."""
    return PostmanExporter.dumps(collection)
