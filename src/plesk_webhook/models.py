"""Wire models for the cert-manager webhook solver API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

RECORD_NOT_CACHED = "Record ID not found in cache"
INVALID_ACTION = "Invalid action"
NOT_IMPLEMENTED = "Not implemented"

_FAILURE_CODE = 404


class ChallengeAction(StrEnum):
    """Actions cert-manager sends to a webhook solver."""

    PRESENT = "Present"
    CLEANUP = "CleanUp"


class InvalidChallengeRequest(ValueError):
    """Raised when a request body cannot be decoded into a ChallengeRequest."""


# (wire name, attribute name, expected type)
_REQUIRED_FIELDS: tuple[tuple[str, str, type], ...] = (
    ("action", "action", str),
    ("type", "type", str),
    ("dnsName", "dns_name", str),
    ("key", "key", str),
    ("resolvedFQDN", "resolved_fqdn", str),
    ("resolvedZone", "resolved_zone", str),
    ("resourceNamespace", "resource_namespace", str),
    ("allowAmbientCredentials", "allow_ambient_credentials", bool),
)


@dataclass(frozen=True)
class ChallengeRequest:
    """One DNS-01 challenge request from cert-manager."""

    action: str
    type: str
    dns_name: str
    key: str
    resolved_fqdn: str
    resolved_zone: str
    resource_namespace: str
    allow_ambient_credentials: bool
    uid: str | None = None
    config: Any = None

    @classmethod
    def from_envelope(cls, body: Any) -> ChallengeRequest:
        """Decode a ``{"request": {...}}`` envelope.

        Raises:
            InvalidChallengeRequest: If the envelope or any required field is
                missing or has the wrong JSON type.
        """
        if not isinstance(body, dict) or not isinstance(body.get("request"), dict):
            raise InvalidChallengeRequest("Body must be a JSON object with a 'request' object")
        data = body["request"]

        values: dict[str, Any] = {}
        for wire_name, attr, expected in _REQUIRED_FIELDS:
            if wire_name not in data:
                raise InvalidChallengeRequest(f"Missing field '{wire_name}'")
            value = data[wire_name]
            if not isinstance(value, expected):
                raise InvalidChallengeRequest(f"Field '{wire_name}' must be a {expected.__name__}")
            values[attr] = value

        uid = data.get("uid")
        if uid is not None and not isinstance(uid, str):
            raise InvalidChallengeRequest("Field 'uid' must be a str")

        return cls(uid=uid, config=data.get("config"), **values)


@dataclass(frozen=True)
class ChallengeStatus:
    """Error detail attached to a failed response."""

    message: str
    reason: str
    code: int

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "reason": self.reason,
            "code": self.code,
        }


@dataclass(frozen=True)
class ChallengeResponse:
    """Outcome of one challenge request."""

    uid: str
    success: bool
    status: ChallengeStatus | None = None

    @classmethod
    def ok(cls) -> ChallengeResponse:
        return cls(uid="", success=True)

    @classmethod
    def failure(cls, message: str, code: int = _FAILURE_CODE) -> ChallengeResponse:
        """Failed response whose message and reason are both ``message``."""
        return cls(
            uid="",
            success=False,
            status=ChallengeStatus(message=message, reason=message, code=code),
        )

    @classmethod
    def not_implemented(cls) -> ChallengeResponse:
        return cls(
            uid="1",
            success=False,
            status=ChallengeStatus(message=NOT_IMPLEMENTED, reason=NOT_IMPLEMENTED, code=501),
        )

    def to_envelope(self) -> dict:
        body: dict[str, Any] = {"uid": self.uid, "success": self.success}
        if self.status is not None:
            body["status"] = self.status.to_dict()
        return {"response": body}
