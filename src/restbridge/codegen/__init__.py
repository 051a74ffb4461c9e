"""
RestBridge Code Generators

Render a request as a runnable snippet in one of eight languages. Every
generator resolves the request through prepare_http_call, so snippets carry
the same URL, headers and body the executor would send.
"""

from typing import Callable, Dict, Iterable, Optional

from ..models import ApiRequest, KeyValue, RequestAuth
from .curl import generate_curl
from .javascript import generate_javascript
from .python import generate_python
from .java import generate_java
from .dotnet import generate_dotnet
from .go import generate_go
from .rust import generate_rust
from .cpp import generate_cpp


# Language id -> display name
LANGUAGES: Dict[str, str] = {
    'curl': 'cURL',
    'javascript': 'JavaScript (fetch)',
    'python': 'Python (requests)',
    'java': 'Java (HttpClient)',
    'dotnet': 'C# (.NET HttpClient)',
    'go': 'Go (net/http)',
    'rust': 'Rust (reqwest)',
    'cpp': 'C++ (libcurl)',
}

GENERATORS: Dict[str, Callable[..., str]] = {
    'curl': generate_curl,
    'javascript': generate_javascript,
    'python': generate_python,
    'java': generate_java,
    'dotnet': generate_dotnet,
    'go': generate_go,
    'rust': generate_rust,
    'cpp': generate_cpp,
}


def generate_code(
    language: str,
    request: ApiRequest,
    variables: Optional[Iterable[KeyValue]] = None,
    inherited_auth: Optional[RequestAuth] = None
) -> str:
    """
    Generate a snippet for a request in the given language.

    Args:
        language: One of the LANGUAGES ids
        request: Request to render
        variables: Variables used to resolve <<name>> placeholders
        inherited_auth: Auth to apply when the request inherits

    Raises:
        ValueError: If the language is not supported
    """
    generator = GENERATORS.get((language or '').lower())
    if generator is None:
        raise ValueError(f"Unsupported language: {language}. Choose from: {', '.join(LANGUAGES)}")
    return generator(request, variables, inherited_auth)


__all__ = [
    'LANGUAGES',
    'GENERATORS',
    'generate_code',
    'generate_curl',
    'generate_javascript',
    'generate_python',
    'generate_java',
    'generate_dotnet',
    'generate_go',
    'generate_rust',
    'generate_cpp',
]
