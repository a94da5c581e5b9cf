"""
Operation ids of the current execution context.

Context variables keep the ids isolated per request, thread and asyncio
task. The web middleware sets them; the correlation filter and the JSON
formatter read them.
"""

from contextvars import ContextVar, Token
from typing import Optional, Tuple

operation_id_var: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)
parent_operation_id_var: ContextVar[Optional[str]] = ContextVar("parent_operation_id", default=None)

OperationTokens = Tuple[Token, Token]


def set_operation(operation_id: str, parent_operation_id: Optional[str] = None) -> OperationTokens:
    """
    Set the operation ids for the current context.

    Returns:
        Tokens to pass to reset_operation() when the operation ends
    """
    return (
        operation_id_var.set(operation_id),
        parent_operation_id_var.set(parent_operation_id),
    )


def reset_operation(tokens: OperationTokens) -> None:
    """Restore the ids that were current before set_operation()."""
    operation_token, parent_token = tokens
    operation_id_var.reset(operation_token)
    parent_operation_id_var.reset(parent_token)


def get_operation_id() -> Optional[str]:
    return operation_id_var.get()


def get_parent_operation_id() -> Optional[str]:
    return parent_operation_id_var.get()
