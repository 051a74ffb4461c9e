"""
Python requests generator.
"""

from typing import Iterable, List, Optional, Tuple

from ..models import ApiRequest, FormDataBody, KeyValue, RequestAuth, UrlEncodedBody
from ..resolve.http_call import prepare_http_call


def _mapping(name: str, pairs: List[Tuple[str, str]]) -> List[str]:
    keys = [k for k, _ in pairs]
    # Repeated keys need the list-of-tuples form
    if len(set(keys)) != len(keys):
        lines = [f"{name} = ["]
        lines.extend(f"    ({k!r}, {v!r})," for k, v in pairs)
        lines.append("]")
    else:
        lines = [f"{name} = {{"]
        lines.extend(f"    {k!r}: {v!r}," for k, v in pairs)
        lines.append("}")
    return lines


def generate_python(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """Generate a requests script for a request."""
    call = prepare_http_call(request, variables, None, inherited_auth)

    lines = ["import requests", "", f"url = {call.url!r}"]
    arguments = ["url"]

    if call.headers:
        lines.extend(_mapping("headers", call.headers))
        arguments.append("headers=headers")

    if call.body_kind == FormDataBody.kind:
        lines.append("files = [")
        lines.extend(f"    ({k!r}, (None, {v!r}))," for k, v in call.form_fields)
        lines.append("]")
        arguments.append("files=files")
    elif call.body_kind == UrlEncodedBody.kind:
        lines.extend(_mapping("data", call.form_fields))
        arguments.append("data=data")
    elif call.body_text is not None:
        lines.append(f"payload = {call.body_text!r}")
        arguments.append("data=payload.encode('utf-8')")

    lines.append("")
    lines.append(f"response = requests.request({call.method!r}, {', '.join(arguments)})")
    lines.append("")
    lines.append("print(response.status_code)")
    lines.append("print(response.text)")

    return '\n'.join(lines)
