"""
Access credentials forwarded to the exam content store.

The service never decides who may write exam content. It forwards the
caller's credential to the store, whose access-control layer (row-level
security on PostgreSQL) allows or denies the inserts.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class AccessCredential:
    """
    An already-issued caller identity.

    Attributes:
        subject: Stable caller id (API key id, user id)
        role: Role claimed for the caller (e.g. "admin")
        token: Raw bearer token, when the credential came from one
    """

    subject: str
    role: str
    token: Optional[str] = field(default=None, repr=False)

    def claims(self) -> dict[str, Any]:
        """JWT-style claims handed to the store."""
        return {"sub": self.subject, "role": self.role}
