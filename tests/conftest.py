"""
conftest.py — Shared pytest fixtures for the Solar Structure Estimator test suite.

No database or external service fixtures are defined here. All tests in this
suite are pure unit tests that exercise the engines in isolation.

Import-path bootstrapping:
    The repository root is inserted into sys.path so that all
    ``solar_estimator.*`` imports resolve without an editable install.
"""

import logging
import os
import sys

import pytest

# ---------------------------------------------------------------------------
# Ensure the repository root is on the import path before any package imports.
# ---------------------------------------------------------------------------
_ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)


# ---------------------------------------------------------------------------
# Panel fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def panel_540w():
    """Default 540W panel: 89" × 45"."""
    from solar_estimator.models.schemas import PanelModel
    return PanelModel(id="p1", name="540W", width=89.0, height=45.0, description="Default 540W panel")


@pytest.fixture
def request_540w_six():
    """
    Six 540W panels, horizontal (45" along the rod), 24" front legs,
    greedy-uniform distribution → 2 × 3-panel structures.
    """
    return {
        "panel": {"id": "p1", "name": "540W", "width": 89, "height": 45},
        "inputs": {"front_leg_height": 24, "number_of_panels": 6, "orientation": "horizontal"},
        "distribution": "greedy_uniform",
    }


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def default_costing_engine():
    """
    CostingEngine with the estimation form defaults:
      rod = 1000/rod, base plate = 150, anchor bolt = 20, angle fitter = 150,
      normal bolt = 15, U-clamp = 0, fabrication = 1500, installation = 0,
      wastage = 15 %.
    """
    from solar_estimator.services.costing_engine import CostingEngine
    return CostingEngine()


@pytest.fixture(scope="session")
def custom_costing_engine():
    """CostingEngine with U-clamps priced and an installation charge."""
    from solar_estimator.models.schemas import PriceConfig
    from solar_estimator.services.costing_engine import CostingEngine
    return CostingEngine(
        PriceConfig(
            rod_price_per_rod=1640.0,
            base_plate_price=100.0,
            anchor_bolt_price=10.0,
            angle_fitter_price=50.0,
            normal_bolt_price=5.0,
            u_clamp_price=12.0,
            u_clamps_per_panel=4,
            fabrication_charge=2000.0,
            installation_charge=500.0,
            wastage_percent=10.0,
        )
    )


@pytest.fixture(scope="session")
def ffd_engine():
    """CuttingPlanEngine: 164" rods, 1/8" kerf, first-fit-decreasing."""
    from solar_estimator.services.cutting_plan_engine import CuttingPlanEngine
    return CuttingPlanEngine()


@pytest.fixture(scope="session")
def estimator():
    from solar_estimator.services.estimator import SolarStructureEstimator
    return SolarStructureEstimator()


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------

@pytest.fixture
def restore_solar_logger():
    """Undo handler/level changes made by setup_logging during a test."""
    logger = logging.getLogger("solar")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)
