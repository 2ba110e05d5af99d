"""
ledger_vm.errors: typed failures raised inside a contract call.

Every failure that aborts a call is a `VmError`. The host converts any of them
into a rolled-back checkpoint and, at the CLI boundary, into a problem+json
style payload.

Hierarchy
---------
VmError (base)
 ├─ StorageError   : key/value type or size violation
 ├─ EventError     : malformed event name or arguments
 └─ Revert         : contract-triggered failure
     └─ Unauthorized : the authorization oracle refused a principal

Contract packages extend `Revert` with their own taxonomy. Subclasses that
declare a `code` class attribute are registered so `VmError.from_problem()`
can rebuild the right type from a serialized payload.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Mapping, Optional, Type

_PROBLEM_PREFIX = "ledger://vm/"


def _json_safe(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, Mapping):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


class VmError(Exception):
    """
    Structured error used inside the ledger runtime.

    Supported call patterns:

        VmError("simple message")
        VmError("message", code="SOME_CODE", context={...})

    Attributes:
        code: short machine-readable code string
        message: human-readable message
        context: extra fields for debugging / CLI output
    """

    code: ClassVar[str] = "VM_ERROR"
    default_message: ClassVar[str] = "vm error"

    _CODE_TO_SUBCLASS: ClassVar[Dict[str, Type["VmError"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        code = cls.__dict__.get("code")
        if code:
            VmError._CODE_TO_SUBCLASS.setdefault(code, cls)

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        # Instance attribute shadows the class-level default.
        self.code = code or type(self).code  # type: ignore[misc]
        self.context: Dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        if self.context:
            return f"{self.code}: {self.message} ({_json_safe(self.context)})"
        return f"{self.code}: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VmError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.code == other.code
            and self.message == other.message
            and self.context == other.context
        )

    __hash__ = Exception.__hash__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": _json_safe(self.context),
        }

    def to_problem(self) -> Dict[str, Any]:
        """Render as a problem+json style mapping (JSON-safe)."""
        return {
            "type": _PROBLEM_PREFIX + self.code.lower(),
            "title": self.code,
            "detail": self.message,
            "deterministic": True,
            "context": _json_safe(self.context),
        }

    @classmethod
    def from_problem(cls, problem: Mapping[str, Any]) -> "VmError":
        """
        Rebuild an error from `to_problem()` output. Unknown codes map to the
        base VmError so foreign payloads stay inspectable.
        """
        code = str(problem.get("title") or VmError.code)
        target = VmError._CODE_TO_SUBCLASS.get(code, VmError)
        return target(
            str(problem.get("detail") or ""),
            code=code,
            context=dict(problem.get("context") or {}),
        )


class StorageError(VmError):
    code = "STORAGE_INVALID"
    default_message = "invalid storage access"


class EventError(VmError):
    code = "EVENT_INVALID"
    default_message = "invalid event"


class Revert(VmError):
    """Contract-triggered failure. The whole call is rolled back."""

    code = "REVERT"
    default_message = "reverted"


class Unauthorized(Revert):
    code = "UNAUTHORIZED"
    default_message = "call not authorized by principal"


__all__ = ["VmError", "StorageError", "EventError", "Revert", "Unauthorized"]
