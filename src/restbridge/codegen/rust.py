"""
Rust reqwest (tokio) generator.
"""

from typing import Iterable, Optional

from ..models import HTTP_METHODS, ApiRequest, FormDataBody, KeyValue, RequestAuth
from ..resolve.http_call import prepare_http_call


_RUST_ESCAPES = {'"': '\\"', '\\': '\\\\', '\n': '\\n', '\r': '\\r', '\t': '\\t', '\0': '\\0'}


def rust_string(value: str) -> str:
    """Render a Rust string literal."""
    out = []
    for char in value:
        if char in _RUST_ESCAPES:
            out.append(_RUST_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7f:
            out.append(f"\\u{{{ord(char):x}}}")
        else:
            out.append(char)
    return '"' + ''.join(out) + '"'


def generate_rust(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """Generate a reqwest program for a request."""
    call = prepare_http_call(request, variables, None, inherited_auth)
    is_multipart = call.body_kind == FormDataBody.kind

    lines = []
    if is_multipart:
        lines.append('// Cargo.toml: reqwest = { version = "0.12", features = ["multipart"] }')
    lines.extend([
        "use std::error::Error;",
        "",
        "#[tokio::main]",
        "async fn main() -> Result<(), Box<dyn Error>> {",
        "    let client = reqwest::Client::new();",
        "",
    ])

    if is_multipart:
        lines.append("    let form = reqwest::multipart::Form::new()")
        for key, value in call.form_fields:
            lines.append(f"        .text({rust_string(key)}, {rust_string(value)})")
        lines[-1] += ";"
        if not call.form_fields:
            lines[-1] = "    let form = reqwest::multipart::Form::new();"
        lines.append("")

    if call.method in HTTP_METHODS:
        method = f"reqwest::Method::{call.method}"
    else:
        method = f"reqwest::Method::from_bytes(b{rust_string(call.method)})?"

    lines.append("    let response = client")
    lines.append(f"        .request({method}, {rust_string(call.url)})")
    for key, value in call.headers:
        lines.append(f"        .header({rust_string(key)}, {rust_string(value)})")
    if is_multipart:
        lines.append("        .multipart(form)")
    elif call.body_text is not None:
        lines.append(f"        .body({rust_string(call.body_text)})")
    lines.append("        .send()")
    lines.append("        .await?;")
    lines.append("")
    lines.append('    println!("{}", response.status());')
    lines.append('    println!("{}", response.text().await?);')
    lines.append("")
    lines.append("    Ok(())")
    lines.append("}")

    return '\n'.join(lines)
