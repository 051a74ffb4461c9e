"""
RestBridge Request Model

Canonical data shapes shared by every converter, resolver and generator.

Auth and body are closed sum types: one dataclass per variant, each carrying a
class-level ``kind`` tag that matches the JSON ``type`` field. Serialization
keeps the camelCase field names of the canonical JSON documents.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from .common.utils import new_id


HTTP_METHODS = ('GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS')


@dataclass
class KeyValue:
    """A single name/value pair used for headers, params, form fields and variables."""

    key: str
    value: str = ''
    enabled: bool = True
    is_secret: bool = False
    description: Optional[str] = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'key': self.key,
            'value': self.value,
            'enabled': self.enabled,
        }
        if self.is_secret:
            data['isSecret'] = True
        if self.description:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KeyValue':
        value = data.get('value')
        return cls(
            key=str(data.get('key') or ''),
            value='' if value is None else str(value),
            enabled=data.get('enabled', True) is not False,
            is_secret=bool(data.get('isSecret', False)),
            description=data.get('description') or None,
            id=data.get('id') or new_id(),
        )


# ---------------------------------------------------------------------------
# Auth variants
# ---------------------------------------------------------------------------

class ApiKeyLocation(str, Enum):
    """Where an API key is sent."""

    HEADER = 'header'
    QUERY = 'query'


@dataclass
class NoAuth:
    kind: ClassVar[str] = 'none'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind}


@dataclass
class InheritAuth:
    """Use the auth of the enclosing folder or collection."""

    kind: ClassVar[str] = 'inherit'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind}


@dataclass
class BasicAuth:
    kind: ClassVar[str] = 'basic'

    username: str = ''
    password: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind,
            'basic': {'username': self.username, 'password': self.password},
        }


@dataclass
class BearerAuth:
    kind: ClassVar[str] = 'bearer'

    token: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind, 'bearer': {'token': self.token}}


@dataclass
class ApiKeyAuth:
    kind: ClassVar[str] = 'api-key'

    key: str = ''
    value: str = ''
    add_to: ApiKeyLocation = ApiKeyLocation.HEADER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind,
            'apiKey': {'key': self.key, 'value': self.value, 'addTo': self.add_to.value},
        }


RequestAuth = Union[NoAuth, InheritAuth, BasicAuth, BearerAuth, ApiKeyAuth]


def is_concrete_auth(auth: Optional[RequestAuth]) -> bool:
    """True for auth that can be applied directly (not none, not inherit)."""
    return isinstance(auth, (BasicAuth, BearerAuth, ApiKeyAuth))


def auth_from_dict(data: Optional[Dict[str, Any]]) -> RequestAuth:
    """
    Build an auth variant from its canonical JSON form.

    Unknown or missing types load as NoAuth.
    """
    if not isinstance(data, dict):
        return NoAuth()

    auth_type = data.get('type', 'none')

    if auth_type == BasicAuth.kind:
        basic = data.get('basic') or {}
        return BasicAuth(
            username=str(basic.get('username', '')),
            password=str(basic.get('password', '')),
        )
    if auth_type == BearerAuth.kind:
        bearer = data.get('bearer') or {}
        return BearerAuth(token=str(bearer.get('token', '')))
    if auth_type == ApiKeyAuth.kind:
        api_key = data.get('apiKey') or {}
        add_to = ApiKeyLocation.QUERY if api_key.get('addTo') == 'query' else ApiKeyLocation.HEADER
        return ApiKeyAuth(
            key=str(api_key.get('key', '')),
            value=str(api_key.get('value', '')),
            add_to=add_to,
        )
    if auth_type == InheritAuth.kind:
        return InheritAuth()
    return NoAuth()


# ---------------------------------------------------------------------------
# Body variants
# ---------------------------------------------------------------------------

@dataclass
class NoBody:
    kind: ClassVar[str] = 'none'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind}


@dataclass
class JsonBody:
    kind: ClassVar[str] = 'json'

    raw: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind, 'raw': self.raw}


@dataclass
class RawBody:
    kind: ClassVar[str] = 'raw'

    raw: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind, 'raw': self.raw}


@dataclass
class UrlEncodedBody:
    kind: ClassVar[str] = 'x-www-form-urlencoded'

    fields: List[KeyValue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind, 'urlencoded': [f.to_dict() for f in self.fields]}


@dataclass
class FormDataBody:
    kind: ClassVar[str] = 'form-data'

    fields: List[KeyValue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.kind, 'formData': [f.to_dict() for f in self.fields]}


RequestBody = Union[NoBody, JsonBody, RawBody, UrlEncodedBody, FormDataBody]


def body_from_dict(data: Optional[Dict[str, Any]]) -> RequestBody:
    """Build a body variant from its canonical JSON form."""
    if not isinstance(data, dict):
        return NoBody()

    body_type = data.get('type', 'none')

    if body_type == JsonBody.kind:
        return JsonBody(raw=data.get('raw') or '')
    if body_type == RawBody.kind:
        return RawBody(raw=data.get('raw') or '')
    if body_type == UrlEncodedBody.kind:
        return UrlEncodedBody(fields=_key_values(data.get('urlencoded')))
    if body_type == FormDataBody.kind:
        return FormDataBody(fields=_key_values(data.get('formData')))
    return NoBody()


def _key_values(items: Optional[List[Dict[str, Any]]]) -> List[KeyValue]:
    return [KeyValue.from_dict(item) for item in items or [] if isinstance(item, dict)]


# ---------------------------------------------------------------------------
# Requests, folders, collections
# ---------------------------------------------------------------------------

@dataclass
class ApiRequest:
    """A single HTTP request as edited by the user."""

    name: str
    method: str = 'GET'
    url: str = ''
    headers: List[KeyValue] = field(default_factory=list)
    params: List[KeyValue] = field(default_factory=list)
    body: RequestBody = field(default_factory=NoBody)
    auth: RequestAuth = field(default_factory=NoAuth)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'method': self.method,
            'url': self.url,
            'headers': [h.to_dict() for h in self.headers],
            'params': [p.to_dict() for p in self.params],
            'body': self.body.to_dict(),
            'auth': self.auth.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApiRequest':
        return cls(
            name=data.get('name', 'Untitled Request'),
            method=str(data.get('method') or 'GET').upper(),
            url=data.get('url', ''),
            headers=_key_values(data.get('headers')),
            params=_key_values(data.get('params')),
            body=body_from_dict(data.get('body')),
            auth=auth_from_dict(data.get('auth')),
            id=data.get('id') or new_id(),
        )


@dataclass
class RequestFolder:
    """A folder in the collection tree; folders nest to any depth."""

    name: str
    requests: List[ApiRequest] = field(default_factory=list)
    folders: List['RequestFolder'] = field(default_factory=list)
    auth: Optional[RequestAuth] = None
    description: Optional[str] = None
    expanded: bool = True
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'requests': [r.to_dict() for r in self.requests],
            'folders': [f.to_dict() for f in self.folders],
            'expanded': self.expanded,
        }
        if self.auth is not None:
            data['auth'] = self.auth.to_dict()
        if self.description:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RequestFolder':
        return cls(
            name=data.get('name', 'Unnamed Folder'),
            requests=[ApiRequest.from_dict(r) for r in data.get('requests') or []],
            folders=[RequestFolder.from_dict(f) for f in data.get('folders') or []],
            auth=auth_from_dict(data['auth']) if data.get('auth') else None,
            description=data.get('description') or None,
            expanded=data.get('expanded', True) is not False,
            id=data.get('id') or new_id(),
        )


@dataclass
class Collection:
    """Root of a request tree, with its own variables and optional auth."""

    name: str
    requests: List[ApiRequest] = field(default_factory=list)
    folders: List[RequestFolder] = field(default_factory=list)
    variables: List[KeyValue] = field(default_factory=list)
    auth: Optional[RequestAuth] = None
    description: Optional[str] = None
    expanded: bool = True
    id: str = field(default_factory=new_id)

    def iter_requests(self):
        """Yield every request in the tree, nested folders first."""
        for folder in self._walk(self.folders):
            yield from folder.requests
        yield from self.requests

    def _walk(self, folders: List[RequestFolder]):
        for folder in folders:
            yield from self._walk(folder.folders)
            yield folder

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'requests': [r.to_dict() for r in self.requests],
            'folders': [f.to_dict() for f in self.folders],
            'variables': [v.to_dict() for v in self.variables],
            'expanded': self.expanded,
        }
        if self.auth is not None:
            data['auth'] = self.auth.to_dict()
        if self.description:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Collection':
        auth = auth_from_dict(data['auth']) if data.get('auth') else None
        # A collection has no parent to inherit from
        if isinstance(auth, InheritAuth):
            auth = NoAuth()

        return cls(
            name=data.get('name', 'Untitled Collection'),
            requests=[ApiRequest.from_dict(r) for r in data.get('requests') or []],
            folders=[RequestFolder.from_dict(f) for f in data.get('folders') or []],
            variables=_key_values(data.get('variables')),
            auth=auth,
            description=data.get('description') or None,
            expanded=data.get('expanded', True) is not False,
            id=data.get('id') or new_id(),
        )


@dataclass
class Environment:
    """A named set of variables; which one is active is the caller's concern."""

    name: str
    variables: List[KeyValue] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'variables': [v.to_dict() for v in self.variables],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Environment':
        return cls(
            name=data.get('name', 'Untitled Environment'),
            variables=_key_values(data.get('variables')),
            id=data.get('id') or new_id(),
        )


@dataclass
class ApiResponse:
    """Result of executing a request; status 0 means the call never completed."""

    status: int
    status_text: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ''
    time_ms: int = 0
    size: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'statusText': self.status_text,
            'headers': dict(self.headers),
            'body': self.body,
            'time': self.time_ms,
            'size': self.size,
        }


@dataclass
class HistoryEntry:
    """A sent request (secrets masked) with the response it produced."""

    request: ApiRequest
    response: Optional[ApiResponse]
    timestamp: int
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'request': self.request.to_dict(),
            'response': self.response.to_dict() if self.response else None,
            'timestamp': self.timestamp,
        }
