"""Membership issue, cancellation and session accounting.

A client holds at most one active membership. Every replaced or cancelled
membership is appended to ``past_memberships`` and never edited again.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import List
from uuid import uuid4

import structlog

from app.core.errors import NoActiveMembership, NotFoundError, ValidationError
from app.schemas.catalog_schema import MembershipPlanCreate, MembershipPlanUpdate
from app.schemas.shop_schema import Client, ClientMembership, ClientType, MembershipPlan, Shop

logger = structlog.get_logger(__name__)

CANCELLED_SUFFIX = " (Cancelada)"


def is_expired(membership: ClientMembership, today: date) -> bool:
    if membership.expiry_date.endswith(CANCELLED_SUFFIX):
        return True
    return date.fromisoformat(membership.expiry_date) < today


def issue(client: Client, plan: MembershipPlan, today: date) -> Client:
    """Give ``client`` a fresh membership of ``plan`` starting ``today``."""
    if client.type != ClientType.REGULAR:
        raise ValidationError("Solo los clientes REGULAR pueden tener membresía")
    if not plan.active:
        raise ValidationError("El plan está inactivo")

    membership = ClientMembership(
        plan_id=plan.id,
        plan_name=plan.name,
        sessions_total=plan.sessions,
        sessions_used=0,
        start_date=today.isoformat(),
        expiry_date=(today + timedelta(days=plan.validity_days)).isoformat(),
    )

    past = list(client.past_memberships)
    if client.active_membership is not None:
        past.append(client.active_membership)

    logger.info("membership_issued", client_id=client.id, plan_id=plan.id)
    return client.model_copy(update={"active_membership": membership, "past_memberships": past})


def cancel(client: Client, today: date) -> Client:
    """Archive the active membership as cancelled today; unused sessions are lost."""
    if client.active_membership is None:
        raise NoActiveMembership()

    archived = client.active_membership.model_copy(
        update={"expiry_date": f"{today.isoformat()}{CANCELLED_SUFFIX}"}
    )
    logger.info("membership_cancelled", client_id=client.id, plan_id=archived.plan_id)
    return client.model_copy(
        update={
            "active_membership": None,
            "past_memberships": [*client.past_memberships, archived],
        }
    )


def convert_to_regular(client: Client) -> Client:
    return client.model_copy(update={"type": ClientType.REGULAR})


def consume_session(client: Client, today: date) -> Client:
    """Use one session of the active membership."""
    membership = client.active_membership
    if membership is None:
        raise NoActiveMembership()
    if is_expired(membership, today):
        raise ValidationError("La membresía está vencida")
    if membership.sessions_used >= membership.sessions_total:
        raise ValidationError("La membresía no tiene sesiones disponibles")

    updated = membership.model_copy(update={"sessions_used": membership.sessions_used + 1})
    logger.info(
        "membership_session_consumed",
        client_id=client.id,
        sessions_used=updated.sessions_used,
        sessions_total=updated.sessions_total,
    )
    return client.model_copy(update={"active_membership": updated})


def sorted_plans(plans: List[MembershipPlan]) -> List[MembershipPlan]:
    """Active plans first, keeping creation order inside each group."""
    return sorted(plans, key=lambda plan: not plan.active)


def add_plan(shop: Shop, payload: MembershipPlanCreate) -> MembershipPlan:
    plan = MembershipPlan(id=uuid4().hex, **payload.model_dump())
    shop.membership_plans.append(plan)
    return plan


def update_plan(shop: Shop, plan_id: str, payload: MembershipPlanUpdate) -> MembershipPlan:
    """Edit a plan; memberships already issued keep their snapshot."""
    for index, plan in enumerate(shop.membership_plans):
        if plan.id == plan_id:
            updated = MembershipPlan.model_validate(
                {**plan.model_dump(), **payload.model_dump(exclude_unset=True, exclude_none=True)}
            )
            shop.membership_plans[index] = updated
            return updated
    raise NotFoundError("Plan no encontrado")
