# projections/write_barrier.py
"""
Thread-local write contexts guarding the voucher and ledger tables.

Model managers consult the innermost context before inserting or deleting:

- "command": voucher headers/entries, sequences, master data (commands only)
- "ledger": LedgerTransaction inserts (materializer only)
- "bootstrap": seeding of default master data and permissions
- "admin_emergency": destructive ledger deletes; also needs
  settings.ALLOW_ADMIN_EMERGENCY_WRITES
"""

from contextlib import contextmanager
import threading

from django.conf import settings


_state = threading.local()


def _context_stack() -> list[str]:
    stack = getattr(_state, "write_context_stack", None)
    if stack is None:
        stack = []
        _state.write_context_stack = stack
    return stack


def current_write_context() -> str | None:
    stack = _context_stack()
    return stack[-1] if stack else None


def write_context_allowed(allowed_contexts: set[str]) -> bool:
    ctx = current_write_context()
    if ctx is None:
        return False
    if ctx == "admin_emergency":
        return ctx in allowed_contexts and getattr(settings, "ALLOW_ADMIN_EMERGENCY_WRITES", False)
    return ctx in allowed_contexts


def assert_write_context(allowed_contexts: set[str], model_name: str, action: str) -> None:
    """Raise RuntimeError unless the current context permits `action` on `model_name`."""
    if write_context_allowed(allowed_contexts):
        return
    names = ", ".join(f"{ctx}_writes_allowed()" for ctx in sorted(allowed_contexts))
    raise RuntimeError(
        f"{model_name}.{action} is only allowed within {names}."
    )


@contextmanager
def _push_write_context(name: str):
    stack = _context_stack()
    stack.append(name)
    try:
        yield
    finally:
        stack.pop()


@contextmanager
def command_writes_allowed():
    with _push_write_context("command"):
        yield


@contextmanager
def ledger_writes_allowed():
    with _push_write_context("ledger"):
        yield


@contextmanager
def bootstrap_writes_allowed():
    with _push_write_context("bootstrap"):
        yield


@contextmanager
def admin_emergency_writes_allowed():
    if not getattr(settings, "ALLOW_ADMIN_EMERGENCY_WRITES", False):
        raise RuntimeError("admin_emergency writes are disabled.")
    with _push_write_context("admin_emergency"):
        yield
