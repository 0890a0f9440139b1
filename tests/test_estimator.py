"""
test_estimator.py — End-to-end estimates through SolarStructureEstimator.

Reference request: six 540W panels (89" × 45") laid horizontally, 24" front
legs, greedy-uniform distribution:
    capacity     3 panels per 164" rod (45 + 5 + 45 + 5 + 45 = 145)
    structures   2 × 3-panel
    rod inches   987.36  → 7 rods lower bound, 7 rods in the FFD plan
"""

import json
import logging

import pytest

from solar_estimator.exceptions import InfeasibleLayoutError, InvalidDimensionError
from solar_estimator.models.schemas import CuttingStrategy, EstimateRequest
from solar_estimator.services.cutting_plan_engine import PIECE_FRONT, PIECE_REAR
from solar_estimator.services.distribution_engine import StructureGroup
from solar_estimator.services.estimator import estimate


def _with(base, **overrides):
    data = json.loads(json.dumps(base))
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key].update(value)
        else:
            data[key] = value
    return data


# ===========================================================================
# Class 1: Reference estimate
# ===========================================================================

class TestReferenceEstimate:

    def test_structures_and_capacity(self, estimator, request_540w_six):
        result = estimator.estimate(request_540w_six)
        assert (result.panel_len, result.panel_wid) == (45.0, 89.0)
        assert result.max_panels_per_rod == 3
        assert result.structures == [StructureGroup(3, 2)]

    def test_rod_totals(self, estimator, request_540w_six):
        totals = estimator.estimate(request_540w_six).rods.totals
        assert totals.total_front_legs == totals.total_rear_legs == totals.total_hypo_rods == 4
        assert totals.total_inches_required == pytest.approx(987.36, abs=0.01)
        assert totals.total_rods_needed == 7

    def test_cutting_plan(self, estimator, request_540w_six):
        result = estimator.estimate(request_540w_six)
        plan = result.cutting_plan
        assert result.rods_to_order == 7
        assert len(plan.pieces) == 12
        assert plan.oversize_pieces == []
        assert plan.strategy is CuttingStrategy.FFD
        assert [p.count for p in plan.patterns] == [4, 2, 1]

    def test_cost_present_with_defaults(self, estimator, request_540w_six):
        cost = estimator.estimate(request_540w_six).cost
        assert cost.quantities.structures == 2
        assert cost.quantities.u_clamps == 24
        assert cost.total == pytest.approx(cost.subtotal * 1.15 + 1500.0)

    def test_footprints(self, estimator, request_540w_six):
        (fp,) = estimator.estimate(request_540w_six).footprints
        assert fp.left_right == pytest.approx(90.0)
        assert fp.front_back == pytest.approx(56.10, abs=0.01)
        assert fp.fits_roof is None

    def test_identical_requests_identical_numbers(self, estimator, request_540w_six):
        first = estimator.estimate(request_540w_six)
        second = estimator.estimate(request_540w_six)
        assert first.calculation_id != second.calculation_id
        assert first.structures == second.structures
        assert first.rods == second.rods
        assert first.cutting_plan == second.cutting_plan
        assert first.cost == second.cost

    def test_model_request_accepted(self, estimator, request_540w_six):
        req = EstimateRequest.model_validate(request_540w_six)
        assert estimator.estimate(req).structures == [StructureGroup(3, 2)]

    def test_module_level_estimate(self, request_540w_six):
        assert estimate(request_540w_six).rods.totals.total_rods_needed == 7

    def test_logs_calculation_id(self, estimator, request_540w_six, caplog):
        caplog.set_level(logging.INFO, logger="solar.estimator")
        result = estimator.estimate(request_540w_six)
        records = [r for r in caplog.records if r.name == "solar.estimator"]
        assert records
        assert records[-1].calculation_id == result.calculation_id


# ===========================================================================
# Class 2: Request variants
# ===========================================================================

class TestRequestVariants:

    def test_balanced_is_default(self, estimator, request_540w_six):
        data = dict(request_540w_six)
        del data["distribution"]
        assert estimator.estimate(data).structures == [StructureGroup(2, 3)]

    def test_vertical_orientation_one_per_rod(self, estimator, request_540w_six):
        data = _with(request_540w_six, inputs={"orientation": "vertical"})
        result = estimator.estimate(data)
        assert result.max_panels_per_rod == 1
        assert result.structures == [StructureGroup(1, 6)]

    def test_zero_panels(self, estimator, request_540w_six):
        data = _with(request_540w_six, inputs={"number_of_panels": 0})
        result = estimator.estimate(data)
        assert result.structures == []
        assert result.rods.totals.total_rods_needed == 0
        assert result.cutting_plan.rods == []
        assert result.cost.subtotal == 0.0
        assert result.cost.total == 1500.0
        assert result.footprints == []

    def test_prices_none_skips_cost(self, estimator, request_540w_six):
        result = estimator.estimate(_with(request_540w_six, prices=None))
        assert result.cost is None
        assert result.rods.totals.total_rods_needed == 7

    def test_roof_check(self, estimator, request_540w_six):
        fits = estimator.estimate(_with(request_540w_six, roof={"length": 100, "width": 60}))
        assert fits.footprints[0].fits_roof is True
        too_small = estimator.estimate(
            _with(request_540w_six, roof={"length": 100, "width": 60}, footprint_variant="full")
        )
        assert too_small.footprints[0].fits_roof is False

    def test_tall_front_leg_reported_oversize(self, estimator, request_540w_six):
        """
        200" front legs exceed the 164" rod, and so do the 248.84" rear legs;
        only the four 150" sloped rods are packed.
        """
        result = estimator.estimate(_with(request_540w_six, inputs={"front_leg_height": 200}))
        plan = result.cutting_plan
        assert sorted({p.type for p in plan.oversize_pieces}) == [PIECE_FRONT, PIECE_REAR]
        assert len(plan.oversize_pieces) == 8
        assert plan.rods_count == 4

    def test_exact_cutting_requested(self, estimator, request_540w_six):
        result = estimator.estimate(_with(request_540w_six, cutting="exact"))
        assert result.rods_to_order == 7


# ===========================================================================
# Class 3: Rejected requests
# ===========================================================================

class TestRejectedRequests:

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"inputs": {"front_leg_height": -5}}, "inputs.front_leg_height"),
            ({"inputs": {"front_leg_height": 0}}, "inputs.front_leg_height"),
            ({"inputs": {"number_of_panels": -1}}, "inputs.number_of_panels"),
            ({"panel": {"width": 0}}, "panel.width"),
            ({"tilt_angle_deg": 95}, "tilt_angle_deg"),
            ({"rod_length": 0}, "rod_length"),
        ],
    )
    def test_invalid_dimension(self, estimator, request_540w_six, overrides, field):
        with pytest.raises(InvalidDimensionError) as exc_info:
            estimator.estimate(_with(request_540w_six, **overrides))
        assert exc_info.value.field == field

    def test_non_finite_rejected(self, estimator, request_540w_six):
        with pytest.raises(InvalidDimensionError):
            estimator.estimate(_with(request_540w_six, gap=float("inf")))

    def test_pitch_below_cut_resolution(self, estimator, request_540w_six):
        """0.001" panels with no gap: sloped rods would round to 0.00"."""
        data = _with(
            request_540w_six,
            panel={"width": 0.001, "height": 0.001},
            inputs={"number_of_panels": 2},
            gap=0,
        )
        with pytest.raises(InvalidDimensionError) as exc_info:
            estimator.estimate(data)
        assert exc_info.value.field == "panel"

    def test_pitch_at_cut_resolution(self, estimator, request_540w_six):
        data = _with(
            request_540w_six,
            panel={"width": 0.01, "height": 0.01},
            inputs={"number_of_panels": 2},
            gap=0,
        )
        result = estimator.estimate(data)
        assert result.structures == [StructureGroup(2, 1)]
        assert all(p.length > 0 for p in result.cutting_plan.pieces)

    def test_panel_longer_than_rod(self, estimator, request_540w_six):
        data = _with(request_540w_six, panel={"width": 200, "height": 180})
        with pytest.raises(InfeasibleLayoutError, match="164"):
            estimator.estimate(data)

    def test_errors_are_value_errors(self, estimator, request_540w_six):
        with pytest.raises(ValueError):
            estimator.estimate(_with(request_540w_six, inputs={"front_leg_height": -5}))


# ===========================================================================
# Class 4: Plain-record export
# ===========================================================================

class TestToDict:

    def test_plain_values(self, estimator, request_540w_six):
        data = estimator.estimate(request_540w_six).to_dict()
        assert data["structures"] == [{"panels_per_structure": 3, "count": 2}]
        assert data["cutting_plan"]["strategy"] == "ffd"
        assert data["cutting_plan"]["rods_count"] == 7
        assert data["rods"]["breakdown"][0]["inches_this_type"] == pytest.approx(987.36, abs=0.01)
        assert data["rods"]["totals"]["total_rods_needed"] == 7

    def test_json_serialisable(self, estimator, request_540w_six):
        text = json.dumps(estimator.estimate(request_540w_six).to_dict())
        assert '"calculation_id"' in text
