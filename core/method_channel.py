from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional


class MethodCallError(Exception):
    """Structured failure reported back to the caller of a method."""

    def __init__(self, code: str, message: Optional[str] = None, details: Any = None):
        super().__init__(message or code)
        self.code = code
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class MethodNotImplemented(Exception):
    pass


@dataclass
class MethodCall:
    method: str
    arguments: Any = None


MethodCallHandler = Callable[[MethodCall], Any]


class MethodChannel:
    """Named request/response channel between the host and the bridge."""

    def __init__(self, name: str):
        self.name = name
        self._handler: Optional[MethodCallHandler] = None

    def set_method_call_handler(self, handler: Optional[MethodCallHandler]) -> None:
        self._handler = handler

    def invoke(self, call: MethodCall) -> Any:
        if self._handler is None:
            raise MethodNotImplemented(call.method)
        return self._handler(call)
