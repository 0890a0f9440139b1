"""Estimator — runs one full calculation: distribute → legs → rods → cutting plan → cost."""
import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from solar_estimator.exceptions import InvalidDimensionError
from solar_estimator.models.schemas import EstimateRequest
from solar_estimator.services.costing_engine import CostBreakdown, CostingEngine
from solar_estimator.services.cutting_plan_engine import CuttingPlan, CuttingPlanEngine
from solar_estimator.services.distribution_engine import StructureGroup, distribute
from solar_estimator.services.footprint_engine import StructureFootprint, footprints_for_structures
from solar_estimator.services.geometry_engine import require_capacity, require_measurable_pitch, resolve_panel_axes
from solar_estimator.services.perf_monitor import timed
from solar_estimator.services.rod_engine import RodSummary, calculate_rods_for_project

logger = logging.getLogger("solar.estimator")


def _plain(items):
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in items}


@dataclass
class EstimateResult:
    calculation_id: str
    panel_len: float
    panel_wid: float
    max_panels_per_rod: int
    structures: List[StructureGroup] = field(default_factory=list)
    rods: RodSummary = field(default_factory=RodSummary)
    cutting_plan: CuttingPlan = field(default_factory=CuttingPlan)
    cost: Optional[CostBreakdown] = None
    footprints: List[StructureFootprint] = field(default_factory=list)

    @property
    def rods_to_order(self) -> int:
        """Rods the cutting plan actually consumes (≥ the inches-based lower bound)."""
        return self.cutting_plan.rods_count

    def to_dict(self) -> Dict[str, Any]:
        """Plain-record view for rendering and export collaborators."""
        data = dataclasses.asdict(self, dict_factory=_plain)
        data["cutting_plan"]["rods_count"] = self.cutting_plan.rods_count
        for entry, b in zip(data["rods"]["breakdown"], self.rods.breakdown):
            entry["inches_this_type"] = b.inches_this_type
        return data


class SolarStructureEstimator:
    """Stateless facade over the geometry, distribution, rod, cutting and costing engines."""

    @timed
    def estimate(self, request: Union[EstimateRequest, Dict[str, Any]]) -> EstimateResult:
        req = self._validate(request)
        calculation_id = uuid.uuid4().hex
        log_extra = {"calculation_id": calculation_id}

        panel_len, panel_wid = resolve_panel_axes(req.panel, req.inputs.orientation)
        require_measurable_pitch(panel_len, req.gap)
        capacity = require_capacity(panel_len, req.rod_length, req.gap)

        structures = distribute(
            req.inputs.number_of_panels,
            capacity,
            strategy=req.distribution,
            panel_len=panel_len,
            panel_wid=panel_wid,
            gap=req.gap,
        )
        rods = calculate_rods_for_project(
            structures,
            req.inputs.front_leg_height,
            panel_len,
            rod_length=req.rod_length,
            tilt_angle_deg=req.tilt_angle_deg,
            gap=req.gap,
            leg_variant=req.leg_variant,
        )
        plan = CuttingPlanEngine(req.rod_length, req.kerf, req.cutting).build_plan_for_breakdown(rods.breakdown)

        cost = None
        if req.prices is not None:
            cost = CostingEngine(req.prices, req.rod_length).compute_cost(rods.totals, structures)

        footprints = footprints_for_structures(
            structures, panel_len, panel_wid, req.tilt_angle_deg, req.footprint_variant, req.roof
        )

        logger.info(
            "estimate panels=%d structures=%s rods(min)=%d rods(plan)=%d",
            req.inputs.number_of_panels,
            " + ".join(f"{s.count}x{s.panels_per_structure}" for s in structures) or "none",
            rods.totals.total_rods_needed,
            plan.rods_count,
            extra=log_extra,
        )
        return EstimateResult(
            calculation_id=calculation_id,
            panel_len=panel_len,
            panel_wid=panel_wid,
            max_panels_per_rod=capacity,
            structures=structures,
            rods=rods,
            cutting_plan=plan,
            cost=cost,
            footprints=footprints,
        )

    @staticmethod
    def _validate(request: Union[EstimateRequest, Dict[str, Any]]) -> EstimateRequest:
        if isinstance(request, EstimateRequest):
            return request
        try:
            return EstimateRequest.model_validate(request)
        except ValidationError as exc:
            err = exc.errors()[0]
            field_name = ".".join(str(p) for p in err["loc"])
            logger.warning("rejected estimate request: %s: %s", field_name, err["msg"])
            raise InvalidDimensionError(field_name, err.get("input"), f"{field_name}: {err['msg']}") from exc


def estimate(request: Union[EstimateRequest, Dict[str, Any]]) -> EstimateResult:
    return SolarStructureEstimator().estimate(request)
