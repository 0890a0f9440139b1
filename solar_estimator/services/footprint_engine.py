"""
Structure footprint for the structure slip, plus a plain roof-fit check.

Left-right runs along the rod, front-back is the panel width projected by
cos(tilt). The LEG_TO_LEG variant drops 1/6 of the panel on each side to
measure between leg centres; FULL reports the panel edge to edge.

The roof check compares footprints against the roof rectangle only. It does
not model roof azimuth, row spacing or shading.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from solar_estimator import config
from solar_estimator.models.schemas import FootprintVariant, RoofDimensions
from solar_estimator.services.distribution_engine import StructureGroup

logger = logging.getLogger("solar.footprint")


@dataclass(frozen=True)
class StructureFootprint:
    panels_per_structure: int
    count: int
    left_right: float
    front_back: float
    fits_roof: Optional[bool] = None


def _shrink(variant: FootprintVariant) -> float:
    return config.FOOTPRINT_SHRINK if FootprintVariant(variant) is FootprintVariant.LEG_TO_LEG else 1.0


def structure_footprint(
    panels_per_structure: int,
    panel_len: float,
    panel_wid: float,
    tilt_angle_deg: float = config.TILT_ANGLE,
    variant: FootprintVariant = FootprintVariant.LEG_TO_LEG,
) -> tuple:
    """Return ``(left_right, front_back)`` in inches for one structure."""
    shrink = _shrink(variant)
    left_right = panels_per_structure * panel_len * shrink
    front_back = panel_wid * shrink * math.cos(math.radians(tilt_angle_deg))
    return left_right, front_back


def footprints_for_structures(
    structures: List[StructureGroup],
    panel_len: float,
    panel_wid: float,
    tilt_angle_deg: float = config.TILT_ANGLE,
    variant: FootprintVariant = FootprintVariant.LEG_TO_LEG,
    roof: Optional[RoofDimensions] = None,
) -> List[StructureFootprint]:
    out = []
    for s in structures:
        left_right, front_back = structure_footprint(
            s.panels_per_structure, panel_len, panel_wid, tilt_angle_deg, variant
        )
        fits = None
        if roof is not None:
            fits = left_right <= roof.length + config.FLOAT_TOLERANCE and front_back <= roof.width + config.FLOAT_TOLERANCE
            if not fits:
                logger.info(
                    '%d-panel structure (%.1f" x %.1f") exceeds roof %.1f" x %.1f"',
                    s.panels_per_structure, left_right, front_back, roof.length, roof.width,
                )
        out.append(StructureFootprint(s.panels_per_structure, s.count, left_right, front_back, fits))
    return out
