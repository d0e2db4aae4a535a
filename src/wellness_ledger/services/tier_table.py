"""
Tier Table - static pricing lookups for specialist tiers and company plans

Loaded once from data/pricing.yaml. Unknown or missing tiers resolve to
'standard' so that bad tier data never blocks a session completion.
"""
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Union
import logging

import yaml

from ..db.models.specialist import SpecialistTier
from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)

PRICING_PATH = Path(__file__).parent.parent / "data" / "pricing.yaml"

DEFAULT_TIER = SpecialistTier.STANDARD

TierLike = Union[SpecialistTier, str, None]


@dataclass(frozen=True)
class TierRates:
    """Consumption multiplier and payout rate for one tier"""
    tier: SpecialistTier
    name: str
    minute_multiplier: Decimal
    payout_rate: Decimal  # per session-hour


@dataclass(frozen=True)
class Plan:
    """Company minutes plan"""
    plan_id: str
    name: str
    price: Decimal
    minutes: int


@lru_cache(maxsize=1)
def _load_pricing() -> Dict:
    with open(PRICING_PATH, "r") as f:
        pricing = yaml.safe_load(f)
    logger.debug(f"Loaded pricing configuration from {PRICING_PATH}")
    return pricing


@lru_cache(maxsize=1)
def get_tier_table() -> Dict[SpecialistTier, TierRates]:
    """Get the rates for every tier, keyed by tier"""
    raw = _load_pricing().get("specialist_tiers", {})
    table = {}
    for tier in SpecialistTier:
        entry = raw[tier.value]
        table[tier] = TierRates(
            tier=tier,
            name=entry["name"],
            minute_multiplier=Decimal(str(entry["minute_multiplier"])),
            payout_rate=Decimal(str(entry["payout_rate"])),
        )
    return table


def resolve_tier(tier: TierLike) -> SpecialistTier:
    """
    Resolve a stored tier value to a SpecialistTier

    None, empty and unrecognized values fall back to DEFAULT_TIER.
    """
    if isinstance(tier, SpecialistTier):
        return tier
    if tier:
        try:
            return SpecialistTier(str(tier).strip().lower())
        except ValueError:
            logger.warning(f"Unknown specialist tier {tier!r}, using {DEFAULT_TIER.value}")
    return DEFAULT_TIER


def rates_for(tier: TierLike) -> TierRates:
    return get_tier_table()[resolve_tier(tier)]


def multiplier_for(tier: TierLike) -> Decimal:
    """Consumption multiplier for a tier (1.0 for unknown tiers)"""
    return rates_for(tier).minute_multiplier


def payout_rate_for(tier: TierLike) -> Decimal:
    """Hourly payout rate for a tier (standard rate for unknown tiers)"""
    return rates_for(tier).payout_rate


@lru_cache(maxsize=1)
def get_plans() -> Dict[str, Plan]:
    """Get the company plan catalogue keyed by plan id"""
    raw = _load_pricing().get("plans", {})
    return {
        plan_id: Plan(
            plan_id=plan_id,
            name=entry["name"],
            price=Decimal(str(entry["price"])),
            minutes=int(entry["minutes"]),
        )
        for plan_id, entry in raw.items()
    }


def get_plan(plan_id: Optional[str]) -> Plan:
    plans = get_plans()
    if not plan_id or plan_id not in plans:
        raise NotFoundError(f"Plan {plan_id!r} not found", details={"plan_id": plan_id})
    return plans[plan_id]
