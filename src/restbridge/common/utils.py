"""
RestBridge Common Utilities

Shared helpers for IDs, JSON parsing and loading input documents.
"""

import json
import sys
import uuid
from pathlib import Path
from typing import Any, Optional


def new_id() -> str:
    """Return a fresh random identifier for a model entity."""
    return str(uuid.uuid4())


def safe_json_parse(json_string: Optional[str], default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling.

    Args:
        json_string: JSON string to parse
        default: Default value to return if parsing fails

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        body = safe_json_parse(request.body.raw, default={})
    """
    if not json_string:
        return default

    try:
        return json.loads(json_string)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default


def pretty_json(text: str) -> str:
    """Re-indent a JSON document, returning the input unchanged if it is not JSON."""
    parsed = safe_json_parse(text, default=_NOT_JSON)
    if parsed is _NOT_JSON:
        return text
    return json.dumps(parsed, indent=2, ensure_ascii=False)


_NOT_JSON = object()


class DocumentLoader:
    """
    Loader for the text documents the importers consume.

    Reads cURL commands, Postman collections, OpenAPI specs and environment
    files as UTF-8 text. The path ``-`` reads standard input.

    Example:
        text = DocumentLoader("petstore.yaml").load()
        collection = import_openapi_spec(text)
    """

    def __init__(self, file_path: str):
        """
        Initialize document loader.

        Args:
            file_path: Path to the document, or '-' for stdin
        """
        self.file_path = file_path

    def load(self) -> str:
        """
        Load the document text.

        Returns:
            File contents as a string

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        if self.file_path == '-':
            return sys.stdin.read()

        path = Path(self.file_path)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def load_json(self) -> Any:
        """
        Load the document and parse it as JSON.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the content is not valid JSON
        """
        text = self.load()
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {self.file_path}: {e}") from e

    @staticmethod
    def load_from_file(file_path: str) -> str:
        """Convenience method to load a document in one call."""
        return DocumentLoader(file_path).load()
