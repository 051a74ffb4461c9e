"""
RestBridge Variable Resolution

Substitutes <<name>> placeholders from collection and environment variables.

Variables are merged in order, so later lists override earlier ones; callers
pass environment variables after collection variables so the environment
wins. Placeholders without a definition are left in place.
"""

import copy
import re
from typing import Dict, Iterable, List, Optional

from ..models import (
    ApiKeyAuth,
    ApiRequest,
    BasicAuth,
    BearerAuth,
    FormDataBody,
    JsonBody,
    KeyValue,
    RawBody,
    UrlEncodedBody,
)


PLACEHOLDER_PATTERN = re.compile(r'<<(.+?)>>')


def merge_variables(*scopes: Optional[Iterable[KeyValue]]) -> Dict[str, KeyValue]:
    """
    Merge variable scopes into a name -> variable map.

    Disabled and unnamed variables are skipped; a later scope replaces an
    earlier definition of the same name.
    """
    merged: Dict[str, KeyValue] = {}
    for scope in scopes:
        for variable in scope or []:
            if variable.enabled and variable.key:
                merged[variable.key] = variable
    return merged


class VariableSubstitutor:
    """
    Substitute variables in strings and requests.

    Takes a name -> value mapping and performs a single pass over the text,
    so substituted values are never themselves expanded.
    """

    def __init__(self, variables: Dict[str, str]):
        """
        Initialize substitutor.

        Args:
            variables: Dict mapping variable names to values
        """
        self.variables = variables

    @classmethod
    def from_scopes(cls, *scopes: Optional[Iterable[KeyValue]]) -> 'VariableSubstitutor':
        """
        Build a substitutor from ordered variable scopes.

        Args:
            scopes: Variable lists, lowest precedence first
        """
        merged = merge_variables(*scopes)
        return cls({name: var.value for name, var in merged.items()})

    def substitute(self, text: Optional[str]) -> str:
        """Replace every known <<name>> in text."""
        if not text:
            return text or ''

        def replacer(match):
            name = match.group(1)
            if name in self.variables:
                return self.variables[name]
            return match.group(0)

        return PLACEHOLDER_PATTERN.sub(replacer, text)

    def substitute_key_values(self, items: List[KeyValue]) -> List[KeyValue]:
        """Copy key/value pairs with their values resolved."""
        resolved = []
        for item in items:
            item = copy.copy(item)
            item.value = self.substitute(item.value)
            resolved.append(item)
        return resolved

    def substitute_request(self, request: ApiRequest) -> ApiRequest:
        """
        Substitute variables in a request.

        Args:
            request: Request to resolve (not modified)

        Returns:
            Deep copy with url, header/param values, body and auth fields resolved
        """
        resolved = copy.deepcopy(request)

        resolved.url = self.substitute(resolved.url)
        resolved.headers = self.substitute_key_values(resolved.headers)
        resolved.params = self.substitute_key_values(resolved.params)

        body = resolved.body
        if isinstance(body, (JsonBody, RawBody)):
            body.raw = self.substitute(body.raw)
        elif isinstance(body, (UrlEncodedBody, FormDataBody)):
            body.fields = self.substitute_key_values(body.fields)

        auth = resolved.auth
        if isinstance(auth, BearerAuth):
            auth.token = self.substitute(auth.token)
        elif isinstance(auth, BasicAuth):
            auth.username = self.substitute(auth.username)
            auth.password = self.substitute(auth.password)
        elif isinstance(auth, ApiKeyAuth):
            auth.key = self.substitute(auth.key)
            auth.value = self.substitute(auth.value)

        return resolved


def replace_variables(
    text: Optional[str],
    variables: Optional[Iterable[KeyValue]] = None,
    env_variables: Optional[Iterable[KeyValue]] = None
) -> str:
    """
    Replace <<name>> placeholders in text.

    Args:
        text: Text that may contain placeholders
        variables: Collection variables
        env_variables: Environment variables (take precedence)

    Returns:
        Text with every defined placeholder replaced

    Example:
        replace_variables("<<x>>", [KeyValue("x", "1")], [KeyValue("x", "2")])  # "2"
    """
    return VariableSubstitutor.from_scopes(variables, env_variables).substitute(text)


def public_variables(variables: Optional[Iterable[KeyValue]]) -> List[KeyValue]:
    """Drop secret variables from a scope."""
    return [variable for variable in variables or [] if not variable.is_secret]


def resolve_request_variables(
    request: ApiRequest,
    collection_variables: Optional[Iterable[KeyValue]] = None,
    environment_variables: Optional[Iterable[KeyValue]] = None
) -> ApiRequest:
    """
    Resolve every variable in a request for storing in history.

    Secret variables are removed from both scopes before they are merged, so
    a secret never resolves and never shadows a public definition of the same
    name. Placeholders with only secret definitions stay as <<name>>.
    """
    substitutor = VariableSubstitutor.from_scopes(
        public_variables(collection_variables),
        public_variables(environment_variables)
    )
    return substitutor.substitute_request(request)
