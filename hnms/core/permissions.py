"""
Core permissions utilities for role-based access control and tenant isolation.

Every decision is a pure function of an explicit ``Principal`` and the
requested ``Action``; nothing here reads request state.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..auth.models import UserRole
from ..auth.exceptions import (
    InvalidTokenException,
    NoTenantException,
    RoleDeniedException,
    TenantDeniedException,
)


@dataclass(frozen=True)
class Principal:
    """
    Authenticated actor as carried by a verified bearer token.

    Attributes:
        id: User id
        role: User role
        tenant_id: Hospital id, None for SUPER_ADMIN or unassigned users
        email: User email
    """
    id: int
    role: UserRole
    tenant_id: Optional[int] = None
    email: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Principal":
        """
        Build a principal from verified token claims.

        Raises:
            InvalidTokenException: If the id or role claim is missing or invalid
        """
        user_id = claims.get("id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidTokenException("Invalid token payload.")
        try:
            role = UserRole(claims.get("role"))
        except ValueError:
            raise InvalidTokenException("Invalid token payload.")
        tenant_id = claims.get("hospitalId")
        if tenant_id is not None and not isinstance(tenant_id, int):
            raise InvalidTokenException("Invalid token payload.")
        return cls(id=user_id, role=role, tenant_id=tenant_id, email=claims.get("email"))


class Action(str, Enum):
    """
    Actions that can be authorized.
    """
    # Patient actions
    LIST_PATIENTS = "list_patients"
    READ_PATIENT = "read_patient"
    CREATE_PATIENT = "create_patient"
    UPDATE_PATIENT = "update_patient"
    DELETE_PATIENT = "delete_patient"
    READ_MEDICAL_RECORDS = "read_medical_records"
    LIST_PATIENT_APPOINTMENTS = "list_patient_appointments"

    # Appointment actions
    LIST_APPOINTMENTS = "list_appointments"
    READ_APPOINTMENT = "read_appointment"
    CREATE_APPOINTMENT = "create_appointment"
    UPDATE_APPOINTMENT = "update_appointment"
    CANCEL_APPOINTMENT = "cancel_appointment"
    VIEW_DOCTOR_SCHEDULE = "view_doctor_schedule"


CLINICAL_ROLES: Tuple[UserRole, ...] = (
    UserRole.SUPER_ADMIN,
    UserRole.ADMIN,
    UserRole.DOCTOR,
    UserRole.NURSE,
)
ADMIN_ROLES: Tuple[UserRole, ...] = (UserRole.SUPER_ADMIN, UserRole.ADMIN)

# Action -> roles allowed to perform it
ACTION_ROLES: Dict[Action, Tuple[UserRole, ...]] = {
    Action.LIST_PATIENTS: CLINICAL_ROLES,
    Action.READ_PATIENT: CLINICAL_ROLES,
    Action.CREATE_PATIENT: CLINICAL_ROLES,
    Action.UPDATE_PATIENT: CLINICAL_ROLES,
    Action.DELETE_PATIENT: ADMIN_ROLES,
    Action.READ_MEDICAL_RECORDS: CLINICAL_ROLES,
    Action.LIST_PATIENT_APPOINTMENTS: CLINICAL_ROLES,
    Action.LIST_APPOINTMENTS: CLINICAL_ROLES,
    Action.READ_APPOINTMENT: CLINICAL_ROLES,
    Action.CREATE_APPOINTMENT: CLINICAL_ROLES,
    Action.UPDATE_APPOINTMENT: CLINICAL_ROLES,
    Action.CANCEL_APPOINTMENT: CLINICAL_ROLES,
    Action.VIEW_DOCTOR_SCHEDULE: CLINICAL_ROLES,
}

# Actions where a DOCTOR only sees their own appointments
DOCTOR_SCOPED_ACTIONS = frozenset({
    Action.LIST_APPOINTMENTS,
    Action.READ_APPOINTMENT,
    Action.VIEW_DOCTOR_SCHEDULE,
    Action.LIST_PATIENT_APPOINTMENTS,
})


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of a policy evaluation.

    Attributes:
        allowed: Whether the action may proceed
        tenant_filter: Hospital id every query must be restricted to, None for no restriction
        doctor_filter: Doctor id appointment queries must be restricted to, if any
        reason: Denial exception when not allowed
    """
    allowed: bool
    tenant_filter: Optional[int] = None
    doctor_filter: Optional[int] = None
    reason: Optional[Exception] = None


def get_roles_for_action(action: Action) -> Tuple[UserRole, ...]:
    return ACTION_ROLES.get(action, ())


def has_role_for(role: UserRole, action: Action) -> bool:
    """
    Check if a role may perform an action.

    Args:
        role: User role
        action: Requested action

    Returns:
        bool: True if the role is on the action's allow-list
    """
    return role in get_roles_for_action(action)


def evaluate(
    principal: Principal,
    action: Action,
    resource_tenant_id: Optional[int] = None
) -> AccessDecision:
    """
    Decide whether a principal may perform an action.

    The role allow-list is checked first, so a disallowed role is denied even
    inside its own hospital. SUPER_ADMIN is unrestricted. Everyone else needs a
    hospital, may only touch resources of that hospital and gets a tenant
    filter for every query.

    Args:
        principal: Authenticated actor
        action: Requested action
        resource_tenant_id: Hospital owning the target resource, None for list
            endpoints or when the owner is not known yet

    Returns:
        AccessDecision: Decision with the filters to apply
    """
    if not has_role_for(principal.role, action):
        return AccessDecision(allowed=False, reason=RoleDeniedException(list(get_roles_for_action(action))))

    if principal.is_super_admin:
        return AccessDecision(allowed=True)

    if principal.tenant_id is None:
        return AccessDecision(allowed=False, reason=NoTenantException())

    if resource_tenant_id is not None and resource_tenant_id != principal.tenant_id:
        return AccessDecision(allowed=False, reason=TenantDeniedException())

    doctor_filter = None
    if principal.role == UserRole.DOCTOR and action in DOCTOR_SCOPED_ACTIONS:
        doctor_filter = principal.id

    return AccessDecision(allowed=True, tenant_filter=principal.tenant_id, doctor_filter=doctor_filter)


def authorize(
    principal: Principal,
    action: Action,
    resource_tenant_id: Optional[int] = None
) -> AccessDecision:
    """
    Evaluate and raise on denial.

    Raises:
        ForbiddenException: If the role or tenant does not allow the action
    """
    decision = evaluate(principal, action, resource_tenant_id)
    if not decision.allowed:
        raise decision.reason
    return decision
