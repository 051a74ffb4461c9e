"""
Java 11+ HttpClient generator.
"""

import json
from typing import Iterable, Optional

from ..models import ApiRequest, FormDataBody, KeyValue, RequestAuth
from ..resolve.http_call import prepare_http_call


MULTIPART_BOUNDARY = "RestBridgeFormBoundary7MA4YWxkTrZu0gW"


def _java(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def generate_java(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """Generate a Java HttpClient program for a request."""
    call = prepare_http_call(request, variables, None, inherited_auth)
    indent = " " * 8

    lines = [
        "import java.net.URI;",
        "import java.net.http.HttpClient;",
        "import java.net.http.HttpRequest;",
        "import java.net.http.HttpResponse;",
        "",
        "public class ApiRequest {",
        "    public static void main(String[] args) throws Exception {",
        f"{indent}HttpClient client = HttpClient.newHttpClient();",
        "",
    ]

    if call.body_kind == FormDataBody.kind:
        lines.append(f"{indent}String boundary = {_java(MULTIPART_BOUNDARY)};")
        lines.append(f"{indent}StringBuilder multipart = new StringBuilder();")
        for key, value in call.form_fields:
            disposition = f'Content-Disposition: form-data; name="{key}"\r\n\r\n'
            lines.append(f'{indent}multipart.append("--").append(boundary).append("\\r\\n");')
            lines.append(f"{indent}multipart.append({_java(disposition)});")
            lines.append(f'{indent}multipart.append({_java(value)}).append("\\r\\n");')
        lines.append(f'{indent}multipart.append("--").append(boundary).append("--\\r\\n");')
        lines.append("")
        publisher = "HttpRequest.BodyPublishers.ofString(multipart.toString())"
    elif call.body_text is not None:
        publisher = f"HttpRequest.BodyPublishers.ofString({_java(call.body_text)})"
    else:
        publisher = "HttpRequest.BodyPublishers.noBody()"

    lines.append(f"{indent}HttpRequest request = HttpRequest.newBuilder()")
    lines.append(f"{indent}    .uri(URI.create({_java(call.url)}))")
    lines.append(f"{indent}    .method({_java(call.method)}, {publisher})")
    for key, value in call.headers:
        lines.append(f"{indent}    .header({_java(key)}, {_java(value)})")
    if call.body_kind == FormDataBody.kind:
        lines.append(f'{indent}    .header("Content-Type", "multipart/form-data; boundary=" + boundary)')
    lines.append(f"{indent}    .build();")
    lines.append("")
    lines.append(f"{indent}HttpResponse<String> response = client.send(request, HttpResponse.BodyHandlers.ofString());")
    lines.append("")
    lines.append(f"{indent}System.out.println(response.statusCode());")
    lines.append(f"{indent}System.out.println(response.body());")
    lines.append("    }")
    lines.append("}")

    return '\n'.join(lines)
