"""
C# (.NET HttpClient) generator.
"""

import json
from typing import Iterable, Optional

from ..models import ApiRequest, FormDataBody, KeyValue, RequestAuth, UrlEncodedBody
from ..resolve.http_call import prepare_http_call


def _cs(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def generate_dotnet(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """
    Generate a C# program using HttpClient.

    Content-Type belongs to the request content in .NET, so it is attached
    to the content object rather than the request headers.
    """
    call = prepare_http_call(request, variables, None, inherited_auth)
    indent = " " * 8
    content_type = call.get_header('Content-Type')

    lines = [
        "using System;",
        "using System.Collections.Generic;",
        "using System.Net.Http;",
        "using System.Text;",
        "using System.Threading.Tasks;",
        "",
        "class Program",
        "{",
        "    static async Task Main(string[] args)",
        "    {",
        f"{indent}using var client = new HttpClient();",
        f"{indent}var request = new HttpRequestMessage(new HttpMethod({_cs(call.method)}), {_cs(call.url)});",
    ]

    for key, value in call.headers:
        if key.lower() == 'content-type':
            continue
        lines.append(f"{indent}request.Headers.TryAddWithoutValidation({_cs(key)}, {_cs(value)});")

    if call.body_kind == FormDataBody.kind:
        lines.append("")
        lines.append(f"{indent}var content = new MultipartFormDataContent();")
        for key, value in call.form_fields:
            lines.append(f"{indent}content.Add(new StringContent({_cs(value)}), {_cs(key)});")
        lines.append(f"{indent}request.Content = content;")
    elif call.body_kind == UrlEncodedBody.kind:
        lines.append("")
        lines.append(f"{indent}request.Content = new FormUrlEncodedContent(new KeyValuePair<string, string>[]")
        lines.append(f"{indent}{{")
        for key, value in call.form_fields:
            lines.append(f"{indent}    new KeyValuePair<string, string>({_cs(key)}, {_cs(value)}),")
        lines.append(f"{indent}}});")
    elif call.body_text is not None:
        lines.append("")
        lines.append(f"{indent}request.Content = new StringContent({_cs(call.body_text)}, Encoding.UTF8);")
        if content_type:
            lines.append(f"{indent}request.Content.Headers.Remove(\"Content-Type\");")
            lines.append(f"{indent}request.Content.Headers.TryAddWithoutValidation(\"Content-Type\", {_cs(content_type)});")

    lines.append("")
    lines.append(f"{indent}var response = await client.SendAsync(request);")
    lines.append(f"{indent}var responseBody = await response.Content.ReadAsStringAsync();")
    lines.append(f"{indent}Console.WriteLine((int)response.StatusCode);")
    lines.append(f"{indent}Console.WriteLine(responseBody);")
    lines.append("    }")
    lines.append("}")

    return '\n'.join(lines)
