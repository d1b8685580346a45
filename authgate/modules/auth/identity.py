"""Identity snapshot captured when the primary credential is validated."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

ACTIVE_STATUS = "active"


@dataclass(frozen=True)
class Identity:
    """
    Validated user attributes.

    Immutable once captured: the verification step and the token mint use
    this snapshot, never a fresh directory lookup.
    """
    subject_id: str
    scope: Tuple[str, ...]
    status: str
    name: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    mobile: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STATUS

    @classmethod
    def from_directory_payload(cls, payload: Any) -> "Identity":
        """
        Build an identity from a user directory response.

        Args:
            payload: Decoded JSON body, e.g.
                {"userId": "1", "scope": ["admin"], "status": "active",
                 "mobile": "+345345343", "email": "a@b.org", "name": [...]}

        Raises:
            ValueError: If subject id, scope or status is missing or malformed
        """
        if not isinstance(payload, dict):
            raise ValueError("directory payload must be an object")

        subject_id = payload.get("userId", payload.get("id"))
        if subject_id is None or str(subject_id) == "":
            raise ValueError("directory payload has no userId")

        scope = payload.get("scope")
        if not isinstance(scope, list) or not all(isinstance(role, str) for role in scope):
            raise ValueError("directory payload scope must be a list of strings")

        status = payload.get("status")
        if not isinstance(status, str) or not status:
            raise ValueError("directory payload has no status")

        name = payload.get("name") or []
        if not isinstance(name, list):
            raise ValueError("directory payload name must be a list")

        return cls(
            subject_id=str(subject_id),
            # Ordered set: keep first occurrence of each role
            scope=tuple(dict.fromkeys(scope)),
            status=status,
            name=tuple(dict(part) for part in name if isinstance(part, dict)),
            mobile=payload.get("mobile") or None,
            email=payload.get("email") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in directory payload shape."""
        return {
            "userId": self.subject_id,
            "scope": list(self.scope),
            "status": self.status,
            "name": [dict(part) for part in self.name],
            "mobile": self.mobile,
            "email": self.email,
        }
