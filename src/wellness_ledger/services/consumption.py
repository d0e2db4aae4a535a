"""
Consumption Calculator

Converts a completed session's duration into plan minutes, scaled by the
specialist's tier multiplier. Always rounds up.
"""
from decimal import Decimal, ROUND_CEILING

from ..exceptions import ComputationGuardError
from .tier_table import TierLike, multiplier_for

DEFAULT_SESSION_MINUTES = 60

# Durations offered to specialists when they complete a session
SESSION_DURATION_OPTIONS = (15, 30, 45, 60, 75, 90, 105, 120)


def validate_session_minutes(session_minutes) -> int:
    if isinstance(session_minutes, bool) or not isinstance(session_minutes, int):
        raise ComputationGuardError(
            "Session minutes must be a whole number",
            details={"session_minutes": session_minutes},
        )
    if session_minutes <= 0:
        raise ComputationGuardError(
            "Session minutes must be positive",
            details={"session_minutes": session_minutes},
        )
    return session_minutes


def minutes_to_deduct(session_minutes: int, tier: TierLike) -> int:
    """
    Plan minutes consumed by a session

    Args:
        session_minutes: Nominal session length, positive
        tier: Specialist tier (None/unknown counts as standard)

    Returns:
        ceil(session_minutes * multiplier)
    """
    validate_session_minutes(session_minutes)
    scaled = Decimal(session_minutes) * multiplier_for(tier)
    return int(scaled.to_integral_value(rounding=ROUND_CEILING))
