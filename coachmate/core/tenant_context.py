# coachmate/core/tenant_context.py
"""Caller context supplied by the upstream identity provider."""
from dataclasses import dataclass
from typing import Callable
from uuid import UUID
from fastapi import Depends, Header

from .exceptions import PermissionDenied

ADMIN_ROLES = ("SUPER_ADMIN", "ADMIN")


@dataclass(frozen=True)
class TenantContext:
    tenant_id: UUID
    role: str


async def get_tenant_context(
    x_tenant_id: UUID = Header(..., description="Institute the caller acts for"),
    x_user_role: str = Header("TEACHER", description="Caller role as asserted by the identity provider"),
) -> TenantContext:
    # Trusted as-is; identity is resolved upstream.
    return TenantContext(tenant_id=x_tenant_id, role=x_user_role.upper())


def require_roles(*roles: str) -> Callable[..., TenantContext]:
    allowed_roles = set(roles)

    async def role_checker(context: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if context.role not in allowed_roles:
            raise PermissionDenied()
        return context

    return role_checker


require_admin = require_roles(*ADMIN_ROLES)
