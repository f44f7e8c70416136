# tests/conftest.py
"""Pytest configuration and fixtures"""
import json
import pytest
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.bots.facility_bot.reference_data import ReferenceData, set_reference_loader
from app.core.engine.domain import LocationEntry, PathEntry
from app.infra.metrics import get_metrics_collector


@pytest.fixture(autouse=True)
def _isolate_globals():
    """Fresh metrics and reference loader for every test"""
    get_metrics_collector().reset()
    set_reference_loader(None)
    yield
    set_reference_loader(None)


@pytest.fixture
def reference():
    """Small campus: three destinations, three entry points, three paths"""
    return ReferenceData.from_entries(
        to_locations=[
            LocationEntry("Lobby"),
            LocationEntry("Library"),
            LocationEntry("Registrar"),
        ],
        from_locations=[
            LocationEntry("Lobby"),
            LocationEntry("Gate 1"),
            LocationEntry("Gate 2"),
        ],
        paths=[
            PathEntry("Gate 1", "Lobby", "Walk straight"),
            PathEntry("Lobby", "Registrar", "Take the elevator to the 2nd floor"),
            PathEntry("Gate 2", "Lobby", "Follow the main road uphill"),
        ],
    )


@pytest.fixture
def reference_files(tmp_path):
    """Write the three reference JSON files and return their paths"""
    to_path = tmp_path / "valid-to-location.json"
    from_path = tmp_path / "valid-from-location.json"
    paths_path = tmp_path / "from-to-location.json"

    to_path.write_text(json.dumps([{"location": "Lobby"}, {"location": "Library"}]), encoding="utf-8")
    from_path.write_text(json.dumps([{"location": "Gate 1"}]), encoding="utf-8")
    paths_path.write_text(
        json.dumps([{"fromLocation": "Gate 1", "toLocation": "Lobby", "path": "Walk straight"}]),
        encoding="utf-8",
    )
    return to_path, from_path, paths_path


@pytest.fixture
def conversation_id():
    """Default conversation ID for tests"""
    return "conv-0001"


@pytest.fixture
def user_id():
    """Default user ID for tests"""
    return "29:user-0001"
