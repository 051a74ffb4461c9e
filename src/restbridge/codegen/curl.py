"""
cURL command generator.
"""

from typing import Iterable, Optional

from ..models import ApiRequest, FormDataBody, KeyValue, RequestAuth
from ..resolve.http_call import prepare_http_call


def shell_quote(value: str) -> str:
    """Single-quote a value for POSIX shells."""
    return "'" + value.replace("'", "'\\''") + "'"


def generate_curl(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """
    Generate a cURL command for a request.

    Args:
        request: Request to render
        variables: Variables used to resolve <<name>> placeholders
        inherited_auth: Auth to apply when the request inherits

    Returns:
        Multi-line cURL command
    """
    call = prepare_http_call(request, variables, None, inherited_auth)

    if call.method == 'HEAD':
        lines = [f"curl --head {shell_quote(call.url)}"]
    else:
        lines = [f"curl -X {call.method} {shell_quote(call.url)}"]

    for key, value in call.headers:
        lines.append(f"  -H {shell_quote(f'{key}: {value}')}")

    if call.body_kind == FormDataBody.kind:
        for key, value in call.form_fields:
            # -F treats leading @ and < as file references
            flag = '--form-string' if value.startswith(('@', '<')) else '-F'
            lines.append(f"  {flag} {shell_quote(f'{key}={value}')}")
    elif call.body_text is not None:
        lines.append(f"  --data-raw {shell_quote(call.body_text)}")

    return ' \\\n'.join(lines)
