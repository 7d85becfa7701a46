from __future__ import annotations

from typing import Optional

from app.schemas.shop_schema import Plan, ShopFeatures

_PLAN_FEATURES = {
    Plan.FREE: set(),
    Plan.BASIC: {"whatsapp", "memberships", "inventory", "receptions"},
    Plan.PRO: {"whatsapp", "memberships", "inventory", "receptions", "payment_gateway", "multi_branch"},
}

FEATURE_LABELS = {
    "payment_gateway": "Cobros online",
    "whatsapp": "WhatsApp",
    "multi_branch": "Sucursales",
    "memberships": "Membresías",
    "inventory": "Inventario",
    "receptions": "Recepción",
}


def features_for_plan(plan: str, current: Optional[ShopFeatures] = None) -> ShopFeatures:
    """Capabilities granted by ``plan``; the payment gateway token survives plan changes."""
    enabled = _PLAN_FEATURES[plan]
    return ShopFeatures(
        payment_gateway_token=current.payment_gateway_token if current else None,
        **{feature: feature in enabled for feature in FEATURE_LABELS},
    )
