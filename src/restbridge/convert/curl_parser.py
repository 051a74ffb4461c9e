"""
Parse cURL commands into requests.

Handles quoting, line continuations, the common curl flags, body type
detection and auth extraction from headers and query parameters. Real-world
commands are messy, so anything unrecognised is skipped rather than rejected.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, NamedTuple, Optional

from ..common.config import EngineConfig
from ..common.url_utils import URLTools, decode_component
from ..common.utils import pretty_json, safe_json_parse
from ..models import (
    ApiKeyAuth,
    ApiKeyLocation,
    ApiRequest,
    BasicAuth,
    BearerAuth,
    FormDataBody,
    JsonBody,
    KeyValue,
    NoAuth,
    NoBody,
    RawBody,
    RequestAuth,
    RequestBody,
    UrlEncodedBody,
)


logger = logging.getLogger("restbridge.curl")


@dataclass
class CurlState:
    """Everything collected while walking the tokens of one command."""

    method: str = 'GET'
    method_explicit: bool = False
    url: str = ''
    headers: List[KeyValue] = field(default_factory=list)
    data: List[str] = field(default_factory=list)
    body: RequestBody = field(default_factory=NoBody)
    auth: RequestAuth = field(default_factory=NoAuth)

    def find_header(self, name: str) -> Optional[KeyValue]:
        for header in self.headers:
            if header.key.lower() == name.lower():
                return header
        return None


class FlagSpec(NamedTuple):
    """A flag handler and whether the flag consumes the next token."""

    handler: Callable[[CurlState, Optional[str]], None]
    takes_value: bool


# ---------------------------------------------------------------------------
# Flag handlers
# ---------------------------------------------------------------------------

def _set_method(state: CurlState, value: Optional[str]):
    state.method = (value or 'GET').upper()
    state.method_explicit = True


def _set_url(state: CurlState, value: Optional[str]):
    if value and not state.url:
        state.url = _normalize_url_token(value)


def _add_header(state: CurlState, value: Optional[str]):
    value = value or ''
    colon = value.find(':')
    if colon > 0:
        state.headers.append(KeyValue(key=value[:colon].strip(), value=value[colon + 1:].strip()))


def _add_data(state: CurlState, value: Optional[str]):
    state.data.append(value or '')


def _add_urlencoded(state: CurlState, value: Optional[str]):
    if not isinstance(state.body, UrlEncodedBody):
        state.body = UrlEncodedBody()
    value = value or ''
    eq = value.find('=')
    if eq > 0:
        state.body.fields.append(KeyValue(key=value[:eq], value=decode_component(value[eq + 1:])))


def _add_form_field(state: CurlState, value: Optional[str]):
    if not isinstance(state.body, FormDataBody):
        state.body = FormDataBody()
    value = value or ''
    eq = value.find('=')
    if eq > 0:
        field_value = value[eq + 1:]
        # Files are never read, only referenced
        if field_value.startswith('@'):
            field_value = f"[File: {field_value[1:]}]"
        state.body.fields.append(KeyValue(key=value[:eq], value=field_value))


def _set_user(state: CurlState, value: Optional[str]):
    value = value or ''
    colon = value.find(':')
    if colon > 0:
        state.auth = BasicAuth(username=value[:colon], password=value[colon + 1:])
    else:
        state.auth = BasicAuth(username=value, password='')


def _add_cookie(state: CurlState, value: Optional[str]):
    # -b @file reads a cookie jar
    if value and not value.startswith('@'):
        state.headers.append(KeyValue(key='Cookie', value=value))


def _header_alias(name: str) -> Callable[[CurlState, Optional[str]], None]:
    def handler(state: CurlState, value: Optional[str]):
        state.headers.append(KeyValue(key=name, value=value or ''))
    return handler


def _compressed(state: CurlState, value: Optional[str]):
    if state.find_header('Accept-Encoding') is None:
        state.headers.append(KeyValue(key='Accept-Encoding', value='gzip, deflate, br'))


def _ignore(state: CurlState, value: Optional[str]):
    pass


CURL_FLAGS: Dict[str, FlagSpec] = {
    '-X': FlagSpec(_set_method, True),
    '--request': FlagSpec(_set_method, True),
    '--url': FlagSpec(_set_url, True),
    '-H': FlagSpec(_add_header, True),
    '--header': FlagSpec(_add_header, True),
    '-d': FlagSpec(_add_data, True),
    '--data': FlagSpec(_add_data, True),
    '--data-raw': FlagSpec(_add_data, True),
    '--data-binary': FlagSpec(_add_data, True),
    '--data-ascii': FlagSpec(_add_data, True),
    '--data-urlencode': FlagSpec(_add_urlencoded, True),
    '-F': FlagSpec(_add_form_field, True),
    '--form': FlagSpec(_add_form_field, True),
    '-u': FlagSpec(_set_user, True),
    '--user': FlagSpec(_set_user, True),
    '-b': FlagSpec(_add_cookie, True),
    '--cookie': FlagSpec(_add_cookie, True),
    '-A': FlagSpec(_header_alias('User-Agent'), True),
    '--user-agent': FlagSpec(_header_alias('User-Agent'), True),
    '-e': FlagSpec(_header_alias('Referer'), True),
    '--referer': FlagSpec(_header_alias('Referer'), True),
    '--compressed': FlagSpec(_compressed, False),
    '-L': FlagSpec(_ignore, False),
    '--location': FlagSpec(_ignore, False),
    '-k': FlagSpec(_ignore, False),
    '--insecure': FlagSpec(_ignore, False),
    '-v': FlagSpec(_ignore, False),
    '--verbose': FlagSpec(_ignore, False),
    '-s': FlagSpec(_ignore, False),
    '--silent': FlagSpec(_ignore, False),
    '-i': FlagSpec(_ignore, False),
    '--include': FlagSpec(_ignore, False),
}


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

def normalize_command(command: str) -> str:
    """Join line continuations and trim surrounding whitespace."""
    normalized = command.replace('\\\r\n', ' ').replace('\\\n', ' ').strip()
    # Leading shell prompt
    if normalized.startswith('$ '):
        normalized = normalized[2:].lstrip()
    return normalized


def tokenize(command: str) -> List[str]:
    """
    Split a command line into tokens.

    Whitespace separates tokens outside quotes. Quoted spans may sit anywhere
    inside a token and keep their whitespace. Inside quotes a backslash escapes
    the enclosing quote character (and, in double quotes, a backslash); any
    other backslash is kept as written so JSON escapes survive.
    """
    tokens = []
    current = []
    in_token = False
    i = 0
    length = len(command)

    while i < length:
        char = command[i]

        if char.isspace():
            if in_token:
                tokens.append(''.join(current))
                current = []
                in_token = False
            i += 1
            continue

        in_token = True

        if char in ('"', "'"):
            quote = char
            i += 1
            while i < length and command[i] != quote:
                if command[i] == '\\' and i + 1 < length:
                    following = command[i + 1]
                    if following == quote or (quote == '"' and following == '\\'):
                        current.append(following)
                        i += 2
                        continue
                current.append(command[i])
                i += 1
            # Skip the closing quote (an unterminated quote runs to the end)
            i += 1
            continue

        if char == '\\' and i + 1 < length:
            current.append(command[i + 1])
            i += 2
            continue

        current.append(char)
        i += 1

    if in_token:
        tokens.append(''.join(current))

    return tokens


def _normalize_url_token(token: str) -> str:
    if '://' in token:
        return token
    # Bare host such as example.com/path
    return f"https://{token}" if '.' in token else token


def _dispatch(tokens: List[str], state: CurlState):
    i = 0
    while i < len(tokens):
        token = tokens[i]
        spec = CURL_FLAGS.get(token)

        if spec is not None:
            value = None
            if spec.takes_value:
                i += 1
                if i < len(tokens):
                    value = tokens[i]
                else:
                    break
            spec.handler(state, value)
        elif token.startswith('-X') and len(token) > 2:
            # Joined form: -XPOST
            _set_method(state, token[2:])
        elif token.startswith('-') and len(token) > 1:
            # Unknown flag: assume it takes the next token unless that looks like a flag or URL
            if i + 1 < len(tokens) and not tokens[i + 1].startswith('-') and not tokens[i + 1].startswith('http'):
                logger.debug(f"Skipping unknown flag {token} {tokens[i + 1]!r}")
                i += 1
            else:
                logger.debug(f"Skipping unknown flag {token}")
        elif not state.url:
            state.url = _normalize_url_token(token)

        i += 1


# ---------------------------------------------------------------------------
# Body and auth inference
# ---------------------------------------------------------------------------

def _urlencoded_fields(data: str, keep_bare_keys: bool) -> List[KeyValue]:
    fields = []
    for pair in data.split('&'):
        eq = pair.find('=')
        if eq > 0:
            fields.append(KeyValue(key=decode_component(pair[:eq]), value=decode_component(pair[eq + 1:])))
        elif keep_bare_keys and pair.strip():
            fields.append(KeyValue(key=decode_component(pair), value=''))
    return fields


def _looks_like_form(data: str) -> bool:
    return '=' in data and '\n' not in data and '<' not in data


def infer_body(data: str, content_type: str) -> RequestBody:
    """
    Pick the body type for collected -d data.

    An explicit Content-Type decides when it names JSON, urlencoded, XML or
    plain text; otherwise the data is sniffed.
    """
    content_type = content_type.lower()

    if 'application/json' in content_type or 'text/json' in content_type:
        return JsonBody(raw=pretty_json(data))
    if 'application/x-www-form-urlencoded' in content_type:
        return UrlEncodedBody(fields=_urlencoded_fields(data, keep_bare_keys=True))
    if 'text/xml' in content_type or 'application/xml' in content_type or 'text/plain' in content_type:
        return RawBody(raw=data)

    trimmed = data.strip()
    if (trimmed.startswith('{') and trimmed.endswith('}')) or (trimmed.startswith('[') and trimmed.endswith(']')):
        parsed = safe_json_parse(trimmed, default=None)
        if parsed is not None:
            return JsonBody(raw=json.dumps(parsed, indent=2, ensure_ascii=False))
    if _looks_like_form(trimmed):
        return UrlEncodedBody(fields=_urlencoded_fields(trimmed, keep_bare_keys=False))
    return RawBody(raw=data)


def _extract_header_auth(state: CurlState, config: EngineConfig):
    auth_header = state.find_header('Authorization')
    if auth_header is not None:
        value = auth_header.value
        if value.lower().startswith('bearer '):
            state.auth = BearerAuth(token=value[7:].strip())
            state.headers.remove(auth_header)
            return
        if value.lower().startswith('basic '):
            try:
                decoded = base64.b64decode(value[6:].strip(), validate=True).decode('utf-8')
            except (binascii.Error, UnicodeDecodeError, ValueError):
                logger.debug("Keeping Authorization header: Basic credentials are not valid base64")
            else:
                colon = decoded.find(':')
                if colon > 0:
                    state.auth = BasicAuth(username=decoded[:colon], password=decoded[colon + 1:])
                else:
                    state.auth = BasicAuth(username=decoded, password='')
                state.headers.remove(auth_header)
                return

    api_key_names = [name.lower() for name in config.api_key_header_names]
    for header in state.headers:
        if header.key.lower() in api_key_names:
            state.auth = ApiKeyAuth(key=header.key, value=header.value, add_to=ApiKeyLocation.HEADER)
            state.headers.remove(header)
            return


def _extract_query_auth(params: List[KeyValue], config: EngineConfig) -> Optional[ApiKeyAuth]:
    api_key_names = [name.lower() for name in config.api_key_query_names]
    for param in params:
        if param.key.lower() in api_key_names:
            params.remove(param)
            return ApiKeyAuth(key=param.key, value=param.value, add_to=ApiKeyLocation.QUERY)
    return None


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def parse_curl_command(command: str, config: Optional[EngineConfig] = None) -> Optional[ApiRequest]:
    """
    Parse a cURL command into a request.

    Args:
        command: cURL command line, possibly spanning several lines
        config: Engine config supplying the API-key name lists

    Returns:
        ApiRequest, or None if the text is not a curl command or has no URL

    Example:
        request = parse_curl_command("curl -H 'Accept: application/json' https://api.example.com/users")
    """
    config = config or EngineConfig()

    tokens = tokenize(normalize_command(command or ''))
    if not tokens or tokens[0].lower() != 'curl':
        logger.warning("Not a valid cURL command")
        return None

    state = CurlState()
    _dispatch(tokens[1:], state)

    if not state.url:
        logger.warning("No URL found in cURL command")
        return None

    if state.data:
        content_type_header = state.find_header('Content-Type')
        content_type = content_type_header.value if content_type_header else ''
        state.body = infer_body('&'.join(state.data), content_type)
        if not state.method_explicit:
            state.method = 'POST'

    if not state.method_explicit and isinstance(state.body, (FormDataBody, UrlEncodedBody)):
        state.method = 'POST'

    if isinstance(state.auth, NoAuth):
        _extract_header_auth(state, config)

    parts = URLTools.parse_absolute(state.url)
    if parts is None:
        logger.warning(f"Could not parse URL in cURL command: {state.url}")
        return None
    scheme, netloc, path, query = parts

    params = [KeyValue(key=k, value=v) for k, v in URLTools.query_pairs(query)]

    if isinstance(state.auth, NoAuth):
        query_auth = _extract_query_auth(params, config)
        if query_auth is not None:
            state.auth = query_auth

    return ApiRequest(
        name=f"{state.method} {path}",
        method=state.method,
        url=URLTools.origin_and_path(scheme, netloc, path),
        headers=state.headers,
        params=params,
        body=state.body,
        auth=state.auth,
    )
