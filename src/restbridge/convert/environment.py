"""
Environment file import and export.

Environment files are JSON documents of the form
``{"_type": "environment", "name": ..., "variables": [...]}``.
"""

import json
from typing import Any, Dict

from ..models import Environment, KeyValue


ENVIRONMENT_TYPE = 'environment'


def environment_to_dict(environment: Environment) -> Dict[str, Any]:
    variables = []
    for var in environment.variables:
        entry = {
            'key': var.key,
            'value': var.value,
            'enabled': var.enabled,
            'isSecret': var.is_secret,
        }
        if var.description:
            entry['description'] = var.description
        variables.append(entry)

    return {'_type': ENVIRONMENT_TYPE, 'name': environment.name, 'variables': variables}


def export_environment(environment: Environment) -> str:
    """Serialize an environment as an environment file (indent 2)."""
    return json.dumps(environment_to_dict(environment), indent=2, ensure_ascii=False)


def import_environment(text: str) -> Environment:
    """
    Parse an environment file.

    Every imported environment and variable gets a fresh id.

    Raises:
        ValueError: If the text is not JSON or not an environment file
    """
    try:
        data = json.loads(text or '')
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid environment file: {e}") from e

    if (not isinstance(data, dict) or data.get('_type') != ENVIRONMENT_TYPE
            or not data.get('name') or not isinstance(data.get('variables'), list)):
        raise ValueError("Invalid environment file format")

    variables = [
        KeyValue(
            key=str(v.get('key') or ''),
            value='' if v.get('value') is None else str(v.get('value')),
            enabled=v.get('enabled') is not False,
            is_secret=bool(v.get('isSecret', False)),
            description=v.get('description') or None,
        )
        for v in data['variables']
        if isinstance(v, dict)
    ]

    return Environment(name=str(data['name']), variables=variables)
