"""Rod totals — sums leg and sloped-rod material across all structure groups."""
import logging
import math
from dataclasses import dataclass, field
from typing import List

from solar_estimator import config
from solar_estimator.models.schemas import LegVariant
from solar_estimator.services.distribution_engine import StructureGroup
from solar_estimator.services.geometry_engine import LegSet, legs_for_structure

logger = logging.getLogger("solar.rods")


@dataclass
class StructureBreakdown:
    panels_per_structure: int
    count: int
    legs: LegSet
    front_legs_count: int = 0
    rear_legs_count: int = 0
    hypo_rods_count: int = 0
    inches_front: float = 0.0
    inches_rear: float = 0.0
    inches_hypo: float = 0.0

    @property
    def inches_this_type(self) -> float:
        return self.inches_front + self.inches_rear + self.inches_hypo


@dataclass
class RodTotals:
    total_front_legs: int = 0
    total_rear_legs: int = 0
    total_hypo_rods: int = 0
    total_inches_required: float = 0.0
    # Lower bound from material length only; the cutting plan's rod count
    # accounts for kerf and packing and is usually higher.
    total_rods_needed: int = 0


@dataclass
class RodSummary:
    breakdown: List[StructureBreakdown] = field(default_factory=list)
    totals: RodTotals = field(default_factory=RodTotals)
    is_uniform: bool = False


def breakdown_for_group(group: StructureGroup, legs: LegSet) -> StructureBreakdown:
    front_count = legs.front_legs * group.count
    rear_count = legs.rear_legs * group.count
    hypo_count = legs.hypo_rods * group.count
    return StructureBreakdown(
        panels_per_structure=group.panels_per_structure,
        count=group.count,
        legs=legs,
        front_legs_count=front_count,
        rear_legs_count=rear_count,
        hypo_rods_count=hypo_count,
        inches_front=front_count * legs.front_leg_height,
        inches_rear=rear_count * legs.rear_leg_height,
        inches_hypo=hypo_count * legs.hypotenuse_rod_length,
    )


def aggregate_rods(breakdown: List[StructureBreakdown], rod_length: float = config.ROD_LENGTH) -> RodSummary:
    """Combine per-group breakdowns into project rod totals."""
    totals = RodTotals()
    for b in breakdown:
        totals.total_front_legs += b.front_legs_count
        totals.total_rear_legs += b.rear_legs_count
        totals.total_hypo_rods += b.hypo_rods_count
        totals.total_inches_required += b.inches_this_type

    totals.total_rods_needed = math.ceil(totals.total_inches_required / rod_length)
    return RodSummary(breakdown=list(breakdown), totals=totals, is_uniform=len(breakdown) == 1)


def calculate_rods_for_project(
    structures: List[StructureGroup],
    front_leg_height: float,
    panel_len: float,
    rod_length: float = config.ROD_LENGTH,
    tilt_angle_deg: float = config.TILT_ANGLE,
    gap: float = config.GAP,
    leg_variant: LegVariant = LegVariant.FULL_SPAN,
) -> RodSummary:
    """Compute legs for every structure group and total the rod material."""
    breakdown = [
        breakdown_for_group(
            s,
            legs_for_structure(front_leg_height, s.panels_per_structure, panel_len, tilt_angle_deg, gap, leg_variant),
        )
        for s in structures
    ]
    summary = aggregate_rods(breakdown, rod_length)
    logger.debug(
        "rod totals inches=%.2f rods=%d uniform=%s",
        summary.totals.total_inches_required, summary.totals.total_rods_needed, summary.is_uniform,
    )
    return summary
