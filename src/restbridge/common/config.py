"""
RestBridge Configuration

YAML-backed engine settings: API-key name heuristics for the cURL parser,
HTTP execution options and the log level.
"""

import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


CONFIG_ENV_VAR = 'RESTBRIDGE_CONFIG'

DEFAULT_API_KEY_HEADERS = ['x-api-key', 'api-key', 'apikey', 'x-auth-token', 'x-access-token']
DEFAULT_API_KEY_QUERY_PARAMS = ['api_key', 'apikey', 'key', 'access_token', 'token']


@dataclass
class EngineConfig:
    """Configuration for parsing heuristics and request execution."""

    # cURL auth extraction (names compared case-insensitively)
    api_key_header_names: List[str] = field(default_factory=lambda: list(DEFAULT_API_KEY_HEADERS))
    api_key_query_names: List[str] = field(default_factory=lambda: list(DEFAULT_API_KEY_QUERY_PARAMS))

    # HTTP execution
    timeout: float = 30.0
    verify_ssl: bool = True
    max_retries: int = 3
    follow_redirects: bool = True

    log_level: str = 'WARNING'

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'EngineConfig':
        """Create config from dictionary; unknown keys are ignored."""
        data = data or {}
        defaults = cls()

        return cls(
            api_key_header_names=[
                str(n).lower() for n in data.get('api_key_header_names', defaults.api_key_header_names)
            ],
            api_key_query_names=[
                str(n).lower() for n in data.get('api_key_query_names', defaults.api_key_query_names)
            ],
            timeout=float(data.get('timeout', defaults.timeout)),
            verify_ssl=bool(data.get('verify_ssl', defaults.verify_ssl)),
            max_retries=int(data.get('max_retries', defaults.max_retries)),
            follow_redirects=bool(data.get('follow_redirects', defaults.follow_redirects)),
            log_level=str(data.get('log_level', defaults.log_level)).upper(),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'EngineConfig':
        """
        Load config from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the document is not valid YAML or not a mapping
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config in {path}: expected a mapping, got {type(data).__name__}")

        return cls.from_dict(data)

    @classmethod
    def load(cls, yaml_path: Optional[str] = None) -> 'EngineConfig':
        """Load from the given path, else from $RESTBRIDGE_CONFIG, else defaults."""
        yaml_path = yaml_path or os.environ.get(CONFIG_ENV_VAR)
        if yaml_path:
            return cls.from_yaml(yaml_path)
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, yaml_path: str):
        """Write config to a YAML file."""
        with open(yaml_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
