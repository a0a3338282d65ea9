"""
===============================================================================
CRC CARD - clubfunds/context.py (Request-scoped context)
===============================================================================

Responsibilities:
  - Hold request-scoped values in ContextVars (async-safe).
  - Let logs correlate by request without threading ids through every call.
  - Provide minimal helpers: set_request_context(), get_context_dict(),
    clear_context().

Collaborators:
  - crosscutting.middleware: sets request_id/method/path/actor per request.
  - crosscutting.logger: enriches every record from get_context_dict().

Constraints:
  - Only primitive strings.
  - Empty string means "not available".
  - Never used to resolve the acting identity for business operations; the
    actor is passed explicitly.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")
# Acting identity name, for log correlation only.
actor_var: ContextVar[str] = ContextVar("actor", default="")

_CTX_REQUEST_ID: Final[str] = "request_id"
_CTX_METHOD: Final[str] = "method"
_CTX_PATH: Final[str] = "path"
_CTX_ACTOR: Final[str] = "actor"


def set_request_context(
    *, request_id: str = "", method: str = "", path: str = ""
) -> None:
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")


def set_actor_context(actor_name: str) -> None:
    actor_var.set(actor_name or "")


def get_context_dict() -> dict[str, str]:
    """Current context as a dict, omitting empty keys."""
    ctx: dict[str, str] = {}

    if val := request_id_var.get():
        ctx[_CTX_REQUEST_ID] = val
    if val := http_method_var.get():
        ctx[_CTX_METHOD] = val
    if val := http_path_var.get():
        ctx[_CTX_PATH] = val
    if val := actor_var.get():
        ctx[_CTX_ACTOR] = val

    return ctx


def clear_context() -> None:
    """Reset at the end of the request so values never leak across requests."""
    request_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
    actor_var.set("")
