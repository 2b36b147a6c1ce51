"""JSON-lines protocol messages for the game client bridge."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional


class ProtocolError(ValueError):
    """A line could not be decoded into a request."""


@dataclass
class Request:
    """Incoming request from the game client."""
    id: int
    method: str
    params: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> Request:
        if "method" not in data:
            raise ProtocolError("Request is missing 'method'")
        params = data.get("params") or {}
        if not isinstance(params, dict):
            raise ProtocolError("'params' must be an object")
        return cls(id=data.get("id", 0), method=data["method"], params=params)

    @classmethod
    def from_json_line(cls, line: str) -> Request:
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise ProtocolError(f"Invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ProtocolError("Request must be a JSON object")
        return cls.from_dict(data)


@dataclass
class Response:
    """Outgoing response to the game client."""
    id: int
    result: Optional[dict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_json_line(self) -> str:
        d: dict = {"id": self.id}
        if self.error is not None:
            d["error"] = self.error
        else:
            d["result"] = self.result
        return json.dumps(d) + "\n"


@dataclass
class Notification:
    """Server-initiated event (no id, no response expected)."""
    method: str
    params: dict = field(default_factory=dict)

    def to_json_line(self) -> str:
        return json.dumps({"method": self.method, "params": self.params}) + "\n"
