"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_session_id: ContextVar[str] = ContextVar("session_id", default="")
_namenode: ContextVar[str] = ContextVar("namenode", default="")
_worker_id: ContextVar[str] = ContextVar("worker_id", default="")


def set_log_context(
    session_id: Optional[str] = None,
    namenode: Optional[str] = None,
    worker_id: Optional[str] = None,
) -> None:
    if session_id is not None:
        _session_id.set(session_id)
    if namenode is not None:
        _namenode.set(namenode)
    if worker_id is not None:
        _worker_id.set(worker_id)


def get_log_context() -> Dict[str, str]:
    return {
        "session_id": _session_id.get(),
        "namenode": _namenode.get(),
        "worker_id": _worker_id.get(),
    }


def clear_log_context() -> None:
    _session_id.set("")
    _namenode.set("")
    _worker_id.set("")
