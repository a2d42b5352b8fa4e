"""Principal registry: who may call the ledger, and in which role."""

import logging
from typing import Callable, Iterable, List, Optional, Union

from app.core.domain import PrincipalProfile, Role
from app.core.errors import AlreadyRegistered, InvalidInput, NotFound, Unauthorized
from app.core.validation import require_text
from app.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def parse_role(value: Union[Role, str]) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        raise InvalidInput(f"role must be one of: {allowed}") from None


class PrincipalRegistry:
    def __init__(
        self,
        store: LedgerStore,
        administrators: Iterable[str],
        clock: Callable[[], int],
    ):
        self.store = store
        self.administrators = frozenset(administrators)
        self.clock = clock

    # -----------------------------------------------------------------------
    # Guards
    # -----------------------------------------------------------------------

    def is_admin(self, principal_id: str) -> bool:
        return principal_id in self.administrators

    def require_admin(self, caller: str) -> None:
        if not self.is_admin(caller):
            raise Unauthorized("Administrator privilege required")

    def require_role(self, caller: str, expected: Role) -> PrincipalProfile:
        profile = self.store.get_principal(caller)
        # An unregistered caller has no role and never matches one.
        if profile is None or profile.role != expected:
            raise Unauthorized(f"{expected.value} role required")
        return profile

    # -----------------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------------

    def register(
        self,
        caller: str,
        principal_id: str,
        display_name: str,
        organization: str,
        role: Union[Role, str],
    ) -> PrincipalProfile:
        self.require_admin(caller)
        require_text(principal_id, "principal_id")
        require_text(display_name, "display_name")
        require_text(organization, "organization")
        role = parse_role(role)

        if self.store.get_principal(principal_id) is not None:
            raise AlreadyRegistered(f"Principal {principal_id} already registered")

        profile = PrincipalProfile(
            principal_id=principal_id,
            display_name=display_name,
            organization=organization,
            role=role,
            registered_by=caller,
            registered_at=self.clock(),
        )
        self.store.put_principal(profile)
        logger.info("Registered principal %s as %s", principal_id, role.value)
        return profile

    def lookup(self, principal_id: str) -> PrincipalProfile:
        profile = self.store.get_principal(principal_id)
        if profile is None:
            raise NotFound(f"Principal {principal_id} not found")
        return profile

    def list(self, role: Optional[Union[Role, str]] = None) -> List[PrincipalProfile]:
        if role is not None:
            role = parse_role(role)
        return self.store.list_principals(role)
