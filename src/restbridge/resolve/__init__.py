"""
RestBridge Resolution Engine

Variable substitution, auth inheritance and HTTP call preparation.
"""

from .variables import (
    VariableSubstitutor,
    merge_variables,
    replace_variables,
    resolve_request_variables,
    public_variables,
)
from .auth import (
    apply_inherited_auth,
    find_folder_chain,
    find_inherited_auth,
    find_request_folder_id,
    resolve_effective_auth,
)
from .http_call import PreparedCall, basic_credentials, prepare_http_call

__all__ = [
    'VariableSubstitutor',
    'merge_variables',
    'replace_variables',
    'resolve_request_variables',
    'public_variables',
    'apply_inherited_auth',
    'find_folder_chain',
    'find_inherited_auth',
    'find_request_folder_id',
    'resolve_effective_auth',
    'PreparedCall',
    'basic_credentials',
    'prepare_http_call',
]
