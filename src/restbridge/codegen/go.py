"""
Go net/http generator.
"""

import json
from typing import Iterable, Optional

from ..models import ApiRequest, FormDataBody, KeyValue, RequestAuth, UrlEncodedBody
from ..resolve.http_call import prepare_http_call


def _go(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def generate_go(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """Generate a Go program for a request; the import list holds only what the body uses."""
    call = prepare_http_call(request, variables, None, inherited_auth)
    imports = {"fmt", "io", "net/http"}
    setup = []

    if call.body_kind == FormDataBody.kind:
        imports.update({"bytes", "mime/multipart"})
        setup.append("\tpayload := &bytes.Buffer{}")
        setup.append("\twriter := multipart.NewWriter(payload)")
        for key, value in call.form_fields:
            setup.append(f"\twriter.WriteField({_go(key)}, {_go(value)})")
        setup.append("\twriter.Close()")
        body_arg = "payload"
    elif call.body_kind == UrlEncodedBody.kind:
        imports.update({"net/url", "strings"})
        setup.append("\tform := url.Values{}")
        for key, value in call.form_fields:
            setup.append(f"\tform.Add({_go(key)}, {_go(value)})")
        setup.append("\tpayload := strings.NewReader(form.Encode())")
        body_arg = "payload"
    elif call.body_text is not None:
        imports.add("strings")
        setup.append(f"\tpayload := strings.NewReader({_go(call.body_text)})")
        body_arg = "payload"
    else:
        body_arg = "nil"

    lines = ["package main", "", "import ("]
    lines.extend(f'\t"{name}"' for name in sorted(imports))
    lines.extend([")", "", "func main() {"])

    if setup:
        lines.extend(setup)
        lines.append("")

    lines.append(f"\treq, err := http.NewRequest({_go(call.method)}, {_go(call.url)}, {body_arg})")
    lines.append("\tif err != nil {")
    lines.append("\t\tpanic(err)")
    lines.append("\t}")
    lines.append("")

    for key, value in call.headers:
        lines.append(f"\treq.Header.Add({_go(key)}, {_go(value)})")
    if call.body_kind == FormDataBody.kind:
        lines.append('\treq.Header.Set("Content-Type", writer.FormDataContentType())')
    if call.headers or call.body_kind == FormDataBody.kind:
        lines.append("")

    lines.extend([
        "\tresp, err := http.DefaultClient.Do(req)",
        "\tif err != nil {",
        "\t\tpanic(err)",
        "\t}",
        "\tdefer resp.Body.Close()",
        "",
        "\tbody, err := io.ReadAll(resp.Body)",
        "\tif err != nil {",
        "\t\tpanic(err)",
        "\t}",
        "",
        "\tfmt.Println(resp.Status)",
        "\tfmt.Println(string(body))",
        "}",
    ])

    return '\n'.join(lines)
