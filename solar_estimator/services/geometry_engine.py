"""
Geometry engine — rod capacity and leg trigonometry for solar mounting structures.

A structure is one frame carrying a row of panels along two sloped GI rods,
standing on 2 front legs and 2 rear legs. The rear legs are taller than the
front legs by the rise of the sloped rod at the configured tilt angle.

Formula variants (selected explicitly by the caller, see ``LegVariant``):
  - FULL_SPAN:         rise = span × sin(tilt)
  - SUPPORT_FRACTION:  rise = span × 2/3 × sin(tilt)

where span = (panel_len + gap) × panels_per_structure, which is also used
directly as the sloped rod's cut length.
"""
import logging
import math
from dataclasses import dataclass
from typing import Tuple

from solar_estimator import config
from solar_estimator.exceptions import InfeasibleLayoutError, InvalidDimensionError
from solar_estimator.models.schemas import LegVariant, Orientation, PanelModel

logger = logging.getLogger("solar.geometry")

# Cut lengths are reported to 1/100 inch, as marked on the shop floor
LENGTH_DECIMALS: int = 2
LENGTH_RESOLUTION: float = 10.0 ** -LENGTH_DECIMALS


@dataclass(frozen=True)
class LegSet:
    front_leg_height: float
    rear_leg_height: float
    hypotenuse_rod_length: float
    panels_per_structure: int
    triangle_height: float = 0.0
    front_legs: int = config.FRONT_LEGS_PER_STRUCTURE
    rear_legs: int = config.REAR_LEGS_PER_STRUCTURE
    hypo_rods: int = config.HYPO_RODS_PER_STRUCTURE


def require_positive(field: str, value: float) -> float:
    """Return ``value`` as float or raise InvalidDimensionError."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidDimensionError(field, value)
    if not math.isfinite(number) or number <= 0:
        raise InvalidDimensionError(field, value)
    return number


def require_non_negative(field: str, value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidDimensionError(field, value)
    if not math.isfinite(number) or number < 0:
        raise InvalidDimensionError(field, value, f"{field} must be a non-negative finite number (got {value!r})")
    return number


def resolve_panel_axes(panel: PanelModel, orientation: Orientation) -> Tuple[float, float]:
    """
    Return ``(panel_len, panel_wid)``: the dimension along the rod and the
    dimension across the structure.

    Vertical puts the long side along the rod; horizontal puts the short side.
    """
    if Orientation(orientation) is Orientation.VERTICAL:
        return panel.long_side, panel.short_side
    return panel.short_side, panel.long_side


def structure_footprint_len(panels_in_structure: int, panel_len: float, gap: float = config.GAP) -> float:
    """Length a row of ``panels_in_structure`` panels occupies along the rod."""
    if panels_in_structure <= 0:
        return 0.0
    return panels_in_structure * panel_len + (panels_in_structure - 1) * gap


def max_panels_per_rod(
    panel_len: float,
    rod_length: float = config.ROD_LENGTH,
    gap: float = config.GAP,
) -> int:
    """
    Largest k with k·panel_len + (k−1)·gap ≤ rod_length.

    Closed form: k = floor((rod_length + gap) / (panel_len + gap)). The two
    guard loops correct a floor that lands one off due to float rounding;
    each runs at most once.

    Returns 0 when a single panel is longer than the rod; callers decide
    whether that is an error (see ``require_capacity``).
    """
    panel_len = require_positive("panel_len", panel_len)
    rod_length = require_positive("rod_length", rod_length)
    gap = require_non_negative("gap", gap)

    k = max(0, math.floor((rod_length + gap) / (panel_len + gap)))
    while k > 0 and structure_footprint_len(k, panel_len, gap) > rod_length:
        k -= 1
    while structure_footprint_len(k + 1, panel_len, gap) <= rod_length:
        k += 1
    return k


def require_capacity(
    panel_len: float,
    rod_length: float = config.ROD_LENGTH,
    gap: float = config.GAP,
) -> int:
    """``max_panels_per_rod`` that rejects a panel too long for the rod."""
    capacity = max_panels_per_rod(panel_len, rod_length, gap)
    if capacity == 0:
        logger.warning(
            "panel does not fit on rod: panel_len=%s rod_length=%s gap=%s", panel_len, rod_length, gap
        )
        raise InfeasibleLayoutError(
            f'Panel length {panel_len:g}" is too large to fit on a {rod_length:g}-inch rod with gap.'
        )
    return capacity


def require_measurable_pitch(panel_len: float, gap: float = config.GAP) -> float:
    """
    Reject a panel pitch (panel_len + gap) below the 1/100" cut resolution.

    The sloped rod of a one-panel structure is one pitch long; below the
    resolution it would be reported, and cut, as 0".
    """
    pitch = panel_len + gap
    if pitch < LENGTH_RESOLUTION:
        raise InvalidDimensionError(
            "panel",
            panel_len,
            f"panel length along the rod plus gap must be at least {LENGTH_RESOLUTION:g}\" (got {pitch:g}\")",
        )
    return pitch


def legs_for_structure(
    front_leg_height: float,
    panels_per_structure: int,
    panel_len: float,
    tilt_angle_deg: float = config.TILT_ANGLE,
    gap: float = config.GAP,
    variant: LegVariant = LegVariant.FULL_SPAN,
) -> LegSet:
    """
    Leg and sloped-rod lengths for one structure.

    Example (FULL_SPAN): front=24, 3 panels of 45" with 5" gap at 19°:
        span  = (45 + 5) × 3 = 150
        rise  = 150 × sin(19°) ≈ 48.84
        rear  = 24 + 48.84 = 72.84
    """
    total_hypotenuse = (panel_len + gap) * panels_per_structure
    fraction = config.SUPPORT_FRACTION if LegVariant(variant) is LegVariant.SUPPORT_FRACTION else 1.0
    triangle_height = total_hypotenuse * fraction * math.sin(math.radians(tilt_angle_deg))
    rear_leg_height = front_leg_height + triangle_height

    return LegSet(
        front_leg_height=front_leg_height,
        rear_leg_height=round(rear_leg_height, LENGTH_DECIMALS),
        hypotenuse_rod_length=round(total_hypotenuse, LENGTH_DECIMALS),
        panels_per_structure=panels_per_structure,
        triangle_height=round(triangle_height, LENGTH_DECIMALS),
    )
