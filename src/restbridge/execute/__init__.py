"""
RestBridge Execution

HTTP execution of resolved requests and history entries.
"""

from .executor import RequestExecutor, build_history_entry, error_response

__all__ = [
    'RequestExecutor',
    'build_history_entry',
    'error_response',
]
