"""
JavaScript fetch() generator.
"""

import json
from typing import Iterable, Optional

from ..models import ApiRequest, FormDataBody, KeyValue, RequestAuth, UrlEncodedBody
from ..resolve.http_call import prepare_http_call


def _js(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def generate_javascript(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """Generate a fetch() call for a request."""
    call = prepare_http_call(request, variables, None, inherited_auth)
    lines = []

    body_ref = None
    if call.body_kind == FormDataBody.kind:
        lines.append("const formData = new FormData();")
        for key, value in call.form_fields:
            lines.append(f"formData.append({_js(key)}, {_js(value)});")
        lines.append("")
        body_ref = "formData"
    elif call.body_kind == UrlEncodedBody.kind:
        lines.append("const body = new URLSearchParams();")
        for key, value in call.form_fields:
            lines.append(f"body.append({_js(key)}, {_js(value)});")
        lines.append("")
        body_ref = "body"
    elif call.body_text is not None:
        lines.append(f"const body = {_js(call.body_text)};")
        lines.append("")
        body_ref = "body"

    lines.append("const options = {")
    lines.append(f"  method: {_js(call.method)},")
    if call.headers:
        lines.append("  headers: {")
        for key, value in call.headers:
            lines.append(f"    {_js(key)}: {_js(value)},")
        lines.append("  },")
    if body_ref:
        lines.append(f"  body: {body_ref},")
    lines.append("};")
    lines.append("")
    lines.append(f"fetch({_js(call.url)}, options)")
    lines.append("  .then(response => response.text())")
    lines.append("  .then(data => console.log(data))")
    lines.append("  .catch(error => console.error('Error:', error));")

    return '\n'.join(lines)
