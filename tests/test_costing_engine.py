"""
test_costing_engine.py — Unit tests for CostingEngine.

Tests cover:
  - Hardware quantities: per-structure vs per-panel multipliers
  - Rod material priced per inch (rod price / 164)
  - Subtotal, wastage and fixed charges rollup
  - Not-yet-computed inputs return None
  - Determinism: identical inputs give identical breakdowns
"""

import pytest

from solar_estimator.models.schemas import PriceConfig
from solar_estimator.services.costing_engine import CostingEngine, hardware_quantities
from solar_estimator.services.distribution_engine import StructureGroup
from solar_estimator.services.rod_engine import RodTotals, calculate_rods_for_project

# Reference project: 2 × 3-panel structures, 987.36" of rod
_STRUCTURES = [StructureGroup(3, 2)]


@pytest.fixture
def reference_totals():
    return calculate_rods_for_project(_STRUCTURES, 24.0, 45.0).totals


# ===========================================================================
# Class 1: Hardware quantities
# ===========================================================================

class TestHardwareQuantities:

    def test_per_structure_hardware(self):
        """2 structures → 8 base plates, 32 anchor bolts, 8 angle fitters, 48 bolts."""
        q = hardware_quantities(_STRUCTURES)
        assert q.structures == 2
        assert (q.base_plates, q.anchor_bolts, q.angle_fitters, q.normal_bolts) == (8, 32, 8, 48)

    def test_u_clamps_are_per_panel(self):
        """6 panels × 4 = 24 U-clamps, independent of structure count."""
        assert hardware_quantities(_STRUCTURES).u_clamps == 24
        split = hardware_quantities([StructureGroup(1, 6)])
        assert split.u_clamps == 24
        assert split.base_plates == 24

    def test_custom_clamps_per_panel(self):
        assert hardware_quantities(_STRUCTURES, u_clamps_per_panel=2).u_clamps == 12

    def test_mixed_groups(self):
        q = hardware_quantities([StructureGroup(3, 1), StructureGroup(2, 1)])
        assert q.structures == 2
        assert q.panels == 5


# ===========================================================================
# Class 2: Cost rollup
# ===========================================================================

class TestCostRollup:

    def test_default_prices_rollup(self, default_costing_engine, reference_totals):
        """
        rods     = 987.36 × 1000/164
        hardware = 8×150 + 32×20 + 8×150 + 48×15 = 3760
        wastage  = 15 % of subtotal; total adds 1500 fabrication
        """
        cost = default_costing_engine.compute_cost(reference_totals, _STRUCTURES)
        rods = reference_totals.total_inches_required * 1000.0 / 164.0
        assert abs(cost.items.rods_by_inches - rods) < 1e-9
        assert cost.items.base_plates == 1200.0
        assert cost.items.anchor_bolts == 640.0
        assert cost.items.angle_fitters == 1200.0
        assert cost.items.normal_bolts == 720.0
        assert cost.items.u_clamps == 0.0
        assert abs(cost.subtotal - (rods + 3760.0)) < 1e-9
        assert abs(cost.wastage - cost.subtotal * 0.15) < 1e-9
        assert abs(cost.total - (cost.subtotal * 1.15 + 1500.0)) < 1e-6

    def test_custom_prices(self, custom_costing_engine, reference_totals):
        """
        rod per inch = 1640 / 164 = 10
        hardware     = 8×100 + 32×10 + 8×50 + 48×5 + 24×12 = 2048
        total        = subtotal × 1.10 + 2000 + 500
        """
        cost = custom_costing_engine.compute_cost(reference_totals, _STRUCTURES)
        assert cost.prices.rod_per_inch == 10.0
        assert cost.items.u_clamps == 288.0
        expected_subtotal = reference_totals.total_inches_required * 10.0 + 2048.0
        assert abs(cost.subtotal - expected_subtotal) < 1e-9
        assert abs(cost.total - (expected_subtotal * 1.10 + 2500.0)) < 1e-6

    def test_inches_used_reported(self, default_costing_engine, reference_totals):
        cost = default_costing_engine.compute_cost(reference_totals, _STRUCTURES)
        assert cost.inches_used == reference_totals.total_inches_required

    def test_zero_panels_zero_subtotal(self, default_costing_engine):
        """Empty distribution: no material, no hardware; fixed charges remain."""
        cost = default_costing_engine.compute_cost(RodTotals(), [])
        assert cost.subtotal == 0.0
        assert cost.wastage == 0.0
        assert cost.total == 1500.0

    def test_missing_totals_returns_none(self, default_costing_engine):
        assert default_costing_engine.compute_cost(None, _STRUCTURES) is None

    def test_missing_structures_returns_none(self, default_costing_engine, reference_totals):
        assert default_costing_engine.compute_cost(reference_totals, None) is None

    def test_identical_inputs_identical_output(self, default_costing_engine, reference_totals):
        first = default_costing_engine.compute_cost(reference_totals, _STRUCTURES)
        second = default_costing_engine.compute_cost(reference_totals, _STRUCTURES)
        assert first == second
        assert first.total == second.total

    def test_other_rod_length(self, reference_totals):
        engine = CostingEngine(PriceConfig(rod_price_per_rod=2400.0), rod_length=240.0)
        assert engine.unit_prices().rod_per_inch == 10.0

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            PriceConfig(base_plate_price=-1.0)
