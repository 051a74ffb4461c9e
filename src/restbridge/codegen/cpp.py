"""
C++ libcurl generator.
"""

from typing import Iterable, Optional

from ..models import ApiRequest, FormDataBody, KeyValue, RequestAuth
from ..resolve.http_call import prepare_http_call


_CPP_ESCAPES = {'"': '\\"', '\\': '\\\\', '\n': '\\n', '\r': '\\r', '\t': '\\t'}


def cpp_string(value: str) -> str:
    """Render a C++ string literal; control characters use three-digit octal escapes."""
    out = []
    for char in value:
        if char in _CPP_ESCAPES:
            out.append(_CPP_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7f:
            out.append(f"\\{ord(char):03o}")
        else:
            out.append(char)
    return '"' + ''.join(out) + '"'


def generate_cpp(
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """Generate a libcurl program for a request."""
    call = prepare_http_call(request, variables, None, inherited_auth)
    indent = " " * 8
    is_multipart = call.body_kind == FormDataBody.kind

    lines = [
        "#include <iostream>",
        "#include <string>",
        "#include <curl/curl.h>",
        "",
        "static size_t WriteCallback(void *contents, size_t size, size_t nmemb, void *userp) {",
        "    ((std::string*)userp)->append((char*)contents, size * nmemb);",
        "    return size * nmemb;",
        "}",
        "",
        "int main() {",
        "    std::string readBuffer;",
        "",
        "    CURL *curl = curl_easy_init();",
        "    if (curl) {",
        f"{indent}curl_easy_setopt(curl, CURLOPT_URL, {cpp_string(call.url)});",
    ]

    if call.method == 'HEAD':
        lines.append(f"{indent}curl_easy_setopt(curl, CURLOPT_NOBODY, 1L);")
    else:
        lines.append(f"{indent}curl_easy_setopt(curl, CURLOPT_CUSTOMREQUEST, {cpp_string(call.method)});")
    lines.append(f"{indent}curl_easy_setopt(curl, CURLOPT_WRITEFUNCTION, WriteCallback);")
    lines.append(f"{indent}curl_easy_setopt(curl, CURLOPT_WRITEDATA, &readBuffer);")
    lines.append("")

    if call.headers:
        lines.append(f"{indent}struct curl_slist *headers = NULL;")
        for key, value in call.headers:
            lines.append(f"{indent}headers = curl_slist_append(headers, {cpp_string(f'{key}: {value}')});")
        lines.append(f"{indent}curl_easy_setopt(curl, CURLOPT_HTTPHEADER, headers);")
        lines.append("")

    if is_multipart:
        lines.append(f"{indent}curl_mime *mime = curl_mime_init(curl);")
        lines.append(f"{indent}curl_mimepart *part;")
        for key, value in call.form_fields:
            lines.append(f"{indent}part = curl_mime_addpart(mime);")
            lines.append(f"{indent}curl_mime_name(part, {cpp_string(key)});")
            lines.append(f"{indent}curl_mime_data(part, {cpp_string(value)}, CURL_ZERO_TERMINATED);")
        lines.append(f"{indent}curl_easy_setopt(curl, CURLOPT_MIMEPOST, mime);")
        lines.append("")
    elif call.body_text is not None:
        lines.append(f"{indent}const char *postData = {cpp_string(call.body_text)};")
        lines.append(f"{indent}curl_easy_setopt(curl, CURLOPT_POSTFIELDS, postData);")
        lines.append("")

    lines.extend([
        f"{indent}CURLcode res = curl_easy_perform(curl);",
        f"{indent}if (res != CURLE_OK) {{",
        f'{indent}    std::cerr << "curl_easy_perform() failed: " << curl_easy_strerror(res) << std::endl;',
        f"{indent}}} else {{",
        f"{indent}    std::cout << readBuffer << std::endl;",
        f"{indent}}}",
        "",
    ])

    if is_multipart:
        lines.append(f"{indent}curl_mime_free(mime);")
    if call.headers:
        lines.append(f"{indent}curl_slist_free_all(headers);")
    lines.append(f"{indent}curl_easy_cleanup(curl);")
    lines.append("    }")
    lines.append("    return 0;")
    lines.append("}")

    return '\n'.join(lines)
