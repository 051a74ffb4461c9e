"""
RestBridge HTTP Call Preparation

Turns a request plus its variable and auth context into the concrete call:
final URL, header list and body. The executor and every code generator go
through prepare_http_call, so a sent request and a generated snippet always
carry the same URL, headers and body.
"""

import base64
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..common.url_utils import URLTools, encode_form
from ..models import (
    ApiKeyAuth,
    ApiKeyLocation,
    ApiRequest,
    BasicAuth,
    BearerAuth,
    FormDataBody,
    JsonBody,
    KeyValue,
    NoBody,
    RawBody,
    RequestAuth,
    UrlEncodedBody,
)
from .auth import apply_inherited_auth
from .variables import VariableSubstitutor


# Methods that never carry a body
BODYLESS_METHODS = ('GET', 'HEAD')


@dataclass
class PreparedCall:
    """A fully resolved HTTP call."""

    method: str
    url: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body_kind: str = NoBody.kind
    body_text: Optional[str] = None
    form_fields: List[Tuple[str, str]] = field(default_factory=list)

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    @property
    def has_body(self) -> bool:
        return self.body_kind != NoBody.kind


def basic_credentials(username: str, password: str) -> str:
    """Base64-encode user:pass for a Basic Authorization header."""
    return base64.b64encode(f"{username}:{password}".encode('utf-8')).decode('ascii')


def _set_header(headers: List[Tuple[str, str]], name: str, value: str):
    headers[:] = [(k, v) for k, v in headers if k.lower() != name.lower()]
    headers.append((name, value))


def _remove_header(headers: List[Tuple[str, str]], name: str):
    headers[:] = [(k, v) for k, v in headers if k.lower() != name.lower()]


def _has_header(headers: List[Tuple[str, str]], name: str) -> bool:
    return any(k.lower() == name.lower() for k, _ in headers)


def _enabled_pairs(items: List[KeyValue], substitutor: VariableSubstitutor) -> List[Tuple[str, str]]:
    return [(item.key, substitutor.substitute(item.value)) for item in items if item.enabled and item.key]


def auth_headers(auth: RequestAuth, substitutor: VariableSubstitutor) -> List[Tuple[str, str]]:
    """
    Headers contributed by an auth variant.

    Empty credentials contribute nothing, so a half-filled auth form never
    sends a bare "Bearer " header.
    """
    if isinstance(auth, BearerAuth):
        token = substitutor.substitute(auth.token)
        if token.strip():
            return [('Authorization', f"Bearer {token}")]
    elif isinstance(auth, BasicAuth):
        username = substitutor.substitute(auth.username)
        password = substitutor.substitute(auth.password)
        if username.strip():
            return [('Authorization', f"Basic {basic_credentials(username, password)}")]
    elif isinstance(auth, ApiKeyAuth) and auth.add_to == ApiKeyLocation.HEADER:
        key = substitutor.substitute(auth.key)
        value = substitutor.substitute(auth.value)
        if key.strip() and value.strip():
            return [(key, value)]
    return []


def auth_query_pairs(auth: RequestAuth, substitutor: VariableSubstitutor) -> List[Tuple[str, str]]:
    """Query parameters contributed by an API key placed in the query string."""
    if isinstance(auth, ApiKeyAuth) and auth.add_to == ApiKeyLocation.QUERY:
        key = substitutor.substitute(auth.key)
        value = substitutor.substitute(auth.value)
        if key.strip() and value.strip():
            return [(key, value)]
    return []


def prepare_http_call(
    request: ApiRequest,
    collection_variables: Optional[Iterable[KeyValue]] = None,
    environment_variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> PreparedCall:
    """
    Resolve a request into the call that would go on the wire.

    Args:
        request: Request to resolve
        collection_variables: Collection variables
        environment_variables: Environment variables (take precedence)
        inherited_auth: Auth to use when the request is set to inherit

    Returns:
        PreparedCall with resolved URL, headers and body
    """
    substitutor = VariableSubstitutor.from_scopes(collection_variables, environment_variables)
    auth = apply_inherited_auth(request.auth, inherited_auth)
    method = (request.method or 'GET').upper()

    query = _enabled_pairs(request.params, substitutor) + auth_query_pairs(auth, substitutor)
    url = URLTools.append_query(substitutor.substitute(request.url), query)

    headers: List[Tuple[str, str]] = []
    for header in request.headers:
        if header.enabled and header.key and header.key.strip():
            headers.append((header.key.strip(), substitutor.substitute(header.value)))

    for name, value in auth_headers(auth, substitutor):
        _set_header(headers, name, value)

    call = PreparedCall(method=method, url=url, headers=headers)
    if method in BODYLESS_METHODS:
        return call

    body = request.body
    if isinstance(body, (JsonBody, RawBody)) and body.raw:
        call.body_kind = body.kind
        call.body_text = substitutor.substitute(body.raw)
        if isinstance(body, JsonBody) and not _has_header(headers, 'Content-Type'):
            headers.append(('Content-Type', 'application/json'))
    elif isinstance(body, UrlEncodedBody):
        call.body_kind = body.kind
        call.form_fields = _enabled_pairs(body.fields, substitutor)
        call.body_text = encode_form(call.form_fields)
        if not _has_header(headers, 'Content-Type'):
            headers.append(('Content-Type', 'application/x-www-form-urlencoded'))
    elif isinstance(body, FormDataBody):
        call.body_kind = body.kind
        call.form_fields = _enabled_pairs(body.fields, substitutor)
        # The multipart boundary is chosen by whoever encodes the body
        _remove_header(headers, 'Content-Type')

    return call
