from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as supplied by the upstream auth layer."""

    user_id: int
    role: Role

    @property
    def is_employer(self) -> bool:
        return self.role == Role.EMPLOYER

    @property
    def is_worker(self) -> bool:
        return self.role == Role.WORKER

    def require_employer(self, message: str = "Only employers can perform this action") -> None:
        if not self.is_employer:
            raise AuthorizationError(message)
