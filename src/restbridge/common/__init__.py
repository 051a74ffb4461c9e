"""
RestBridge Common Utilities

Shared utilities and helpers used across RestBridge modules.
"""

from .utils import new_id, safe_json_parse, pretty_json, DocumentLoader
from .url_utils import URLTools, encode_component, decode_component, encode_form
from .config import EngineConfig

__all__ = [
    'new_id',
    'safe_json_parse',
    'pretty_json',
    'DocumentLoader',
    'URLTools',
    'encode_component',
    'decode_component',
    'encode_form',
    'EngineConfig',
]
