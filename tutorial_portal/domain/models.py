from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class User:
    """Represents an authenticated employee within the portal."""

    user_id: str
    email: str = ""
    roles: list[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles
