# commission_hub/sales_commission/access_control.py
"""
Role-based Access Control for Sales Commission

Handles data access permissions based on user role:
- admin: full access - sees every consultor, may reassign sales
- consultor: own sales only; new/edited sales are always bound to self

The commission core is identity-agnostic. This class is the boundary that
scopes filters and decides ownership before the core is called.
"""

import logging
from typing import Any, Mapping, Optional, Tuple

from .constants import FULL_ACCESS_ROLES
from .filters import FilterSpec

logger = logging.getLogger(__name__)


class AccessControl:
    """
    Manage data access based on user role.

    Usage:
        access = AccessControl(
            user_role=st.session_state.user_role,
            user_id=st.session_state.user_id,
            user_name=st.session_state.user_fullname
        )

        level = access.get_access_level()   # 'full' or 'self'
        spec = access.scope_filter(spec)    # consultor forced to ALL for non-admins
        if access.can_modify(sale): ...
    """

    def __init__(self, user_role: str, user_id: Any, user_name: str = ""):
        """
        Initialize access control.

        Args:
            user_role: User's role from session ('admin' or 'consultor')
            user_id: User's id from session
            user_name: Display name used as consultor_name
        """
        self.user_role = user_role.lower() if user_role else ''
        self.user_id = str(user_id) if user_id is not None else ''
        self.user_name = user_name or ''

        logger.info(f"AccessControl initialized: role={self.user_role}, user_id={self.user_id}")

    # =========================================================================
    # ACCESS LEVEL DETERMINATION
    # =========================================================================

    def get_access_level(self) -> str:
        """
        Returns:
            'full' - Can view/edit all consultors
            'self' - Can view/edit own data only
        """
        if self.user_role in [r.lower() for r in FULL_ACCESS_ROLES]:
            return 'full'
        return 'self'

    @property
    def is_admin(self) -> bool:
        return self.get_access_level() == 'full'

    def can_select_consultor(self) -> bool:
        """Whether the consultor filter / owner selector is shown."""
        return self.is_admin

    # =========================================================================
    # SCOPING
    # =========================================================================

    def scope_filter(self, spec: FilterSpec) -> FilterSpec:
        """Non-admins never filter by consultor (their data is already own-only)."""
        if self.is_admin or spec.consultor is None:
            return spec
        return spec.without_consultor()

    def can_modify(self, sale: Mapping[str, Any]) -> bool:
        """Admins modify anything; consultors only their own sales."""
        if self.is_admin:
            return True
        return str(sale.get('user_id')) == self.user_id

    def resolve_owner(
        self,
        raw_fields: Mapping[str, Any],
        current: Optional[Mapping[str, Any]] = None
    ) -> Tuple[str, str]:
        """
        Decide (user_id, consultor_name) for a created/updated sale.

        Admins may rebind both fields; blanks fall back to the current owner
        (update) or to the admin themselves (create). Consultors are always
        bound to themselves.
        """
        if not self.is_admin:
            return self.user_id, self.user_name

        fallback_id = str(current.get('user_id')) if current else self.user_id
        fallback_name = current.get('consultor_name') if current else self.user_name

        user_id = str(raw_fields.get('user_id') or '').strip() or fallback_id
        consultor_name = str(raw_fields.get('consultor_name') or '').strip() or fallback_name
        return user_id, consultor_name
