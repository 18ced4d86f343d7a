"""
Pytest configuration and fixtures for heatloss tests.

Provides reusable test fixtures for:
- Room geometry and fabric
- Climate reference tables
- Settings with short timeouts and no retries
"""

import pytest
from pathlib import Path
import tempfile
import shutil

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from heatloss.core.config import Settings
from heatloss.core.models import (
    Adjacent,
    CeilingElement,
    FloorElement,
    Opening,
    OpeningKind,
    RoomModel,
    VentDevice,
    Wall,
)
from heatloss.climate.reference_table import ClimateTable


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory for test files, cleaned up after test."""
    tmp = tempfile.mkdtemp(prefix="heatloss_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


# =============================================================================
# ROOM FIXTURES
# =============================================================================

@pytest.fixture
def window_1x1() -> Opening:
    """1 m × 1 m window with a declared U of 1.3."""
    return Opening(kind=OpeningKind.WINDOW, width=1, height=1, u_value=1.3)


@pytest.fixture
def exterior_wall(window_1x1) -> Wall:
    """3 m × 2.4 m external wall, U 0.3, one 1 m² window."""
    return Wall(width=3, height=2.4, u_value=0.3, adjacent=Adjacent.EXTERIOR, openings=[window_1x1])


@pytest.fixture
def heated_wall(window_1x1) -> Wall:
    """Same wall as exterior_wall but backing onto a heated room."""
    return Wall(width=3, height=2.4, u_value=0.3, adjacent=Adjacent.INTERIOR_HEATED, openings=[window_1x1])


@pytest.fixture
def simple_room(exterior_wall) -> RoomModel:
    """4 × 3 × 2.5 m room: one external wall, ground floor and loft ceiling."""
    return RoomModel(
        id="r1",
        name="Lounge",
        length=4,
        width=3,
        height=2.5,
        walls=[exterior_wall],
        floors=[FloorElement(width=4, height=3, u_value=0.25, adjacent=Adjacent.GROUND)],
        ceilings=[CeilingElement(width=4, height=3, u_value=0.16)],
    )


@pytest.fixture
def ventilated_room() -> RoomModel:
    """30 m³ room with two devices overriding 6 + 4 L/s."""
    return RoomModel(
        name="Bedroom 1",
        volume_override=30,
        ventilation=[
            VentDevice(type="trickle_vent", override_flow=6),
            VentDevice(type="passive_vent", override_flow=4),
            VentDevice(type="mvhr_extract"),
        ],
    )


@pytest.fixture
def room_json() -> dict:
    """Room in the editor's JSON shape (camelCase, loosely typed)."""
    return {
        "id": "r-json",
        "zoneId": "z1",
        "name": "Kitchen",
        "length": "4",
        "width": 3,
        "height": 2.4,
        "walls": [
            {
                "width": 4,
                "height": 2.4,
                "adjacent": "Exterior",
                "fabric": {
                    "category": "External",
                    "ageBand": "1967-1975",
                    "construction": "Cavity (Filled)",
                },
                "openings": [
                    {
                        "kind": "window",
                        "width": 1.2,
                        "height": 1.0,
                        "fabric": {"glazingType": "double", "frameType": "uPVC"},
                    },
                    {
                        "kind": "door",
                        "width": 0.9,
                        "height": 2.0,
                        "fabric": {"category": "known-u", "uValue": "1.8"},
                    },
                ],
            }
        ],
        "floors": [
            {"width": 4, "height": 3, "fabric": {"category": "ground-known", "construction": "solid", "insulThk": 50}}
        ],
        "ceilings": [
            {"width": 4, "height": 3, "adjacent": "Interior (Heated)", "uValue": 1.5}
        ],
        "ventilation": [{"type": "mechanical_extract", "overrideFlow": 20}],
    }


# =============================================================================
# CLIMATE FIXTURES
# =============================================================================

@pytest.fixture
def climate_records() -> list:
    """Reference records at several postcode granularities."""
    return [
        {"keys": ["SS89HB"], "designTemp": -1.8, "hdd": 1901},
        {"keys": ["SS8", "SS"], "designTemp": -2, "hdd": 1950},
        {"keys": ["CB4"], "hdd": 2100},
        {"keys": ["EH1", "EH"], "designTemp": -4},
        {"keys": [], "designTemp": 0, "hdd": 0},
    ]


@pytest.fixture
def climate_table(climate_records) -> ClimateTable:
    return ClimateTable.from_records(climate_records)


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with no retries and short timeouts, no table on disk."""
    return Settings(http_retries=0, http_timeout_s=1.0, step_timeout_s=0.5, climate_table_path=None)
