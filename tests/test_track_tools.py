"""Tests for the track and georeferencing MCP tools."""
import json
import pytest
from unittest.mock import MagicMock

from gps_track.state import state, GeoreferencingSettings
from gps_track.core.track import Track


SAMPLE_GPX = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <wpt lat="52.5" lon="13.4"><name>Start</name></wpt>
  <trk>
    <trkseg>
      <trkpt lat="52.50" lon="13.40"/>
      <trkpt lat="52.51" lon="13.41"/>
    </trkseg>
    <trkseg>
      <trkpt lat="52.52" lon="13.42"/>
      <trkpt lat="52.53" lon="13.43"/>
      <trkpt lat="52.54" lon="13.44"/>
    </trkseg>
  </trk>
</gpx>
"""


def _get_tools():
    from gps_track.tools.track import register_track_tools
    from gps_track.tools.georeferencing import register_georeferencing_tools
    from gps_track.tools.status import register_status_tools
    tools = {}
    mock_mcp = MagicMock()
    def capture(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator
    mock_mcp.tool = capture
    register_track_tools(mock_mcp)
    register_georeferencing_tools(mock_mcp)
    register_status_tools(mock_mcp)
    return tools


@pytest.fixture(autouse=True)
def _reset_state():
    state.track = Track()
    state.track_path = None
    state.georeferencing = GeoreferencingSettings()
    yield


@pytest.fixture
def gpx_file(tmp_path):
    path = tmp_path / "ride.gpx"
    path.write_text(SAMPLE_GPX)
    return path


def test_load_track_reports_counts(gpx_file):
    tools = _get_tools()
    result = tools["load_track"](file_path=str(gpx_file))
    assert "2 segment(s)" in result
    assert "5 points" in result
    assert "1 waypoint(s)" in result
    assert state.track_path == str(gpx_file)


def test_load_track_missing_file(tmp_path):
    tools = _get_tools()
    result = tools["load_track"](file_path=str(tmp_path / "nope.gpx"))
    assert result.startswith("Error")


def test_load_track_invalid_file_keeps_current_track(gpx_file, tmp_path):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    bad = tmp_path / "bad.gpx"
    bad.write_text('<gpx><wpt lat="1"/></gpx>')
    result = tools["load_track"](file_path=str(bad))
    assert result.startswith("Error")
    assert state.track.get_num_segments() == 2
    assert state.track_path == str(gpx_file)


def test_load_track_skipping_unlocated_points(tmp_path):
    tools = _get_tools()
    path = tmp_path / "partial.gpx"
    path.write_text('<gpx><wpt lat="1"/><wpt lat="1" lon="2"/></gpx>')
    result = tools["load_track"](file_path=str(path), skip_unlocated_points=True)
    assert "1 waypoint(s)" in result


def test_save_track_requires_track(tmp_path):
    tools = _get_tools()
    result = tools["save_track"](file_path=str(tmp_path / "out.gpx"))
    assert "load a track" in result.lower()


def test_save_track_round_trip(gpx_file, tmp_path):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    out = tmp_path / "exports" / "out.gpx"
    result = tools["save_track"](file_path=str(out))
    assert "saved" in result.lower()
    assert out.exists()

    reloaded = Track()
    assert reloaded.load_from(out)
    assert reloaded == state.track


def test_save_track_defaults_to_loaded_path(gpx_file):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    result = tools["save_track"]()
    assert str(gpx_file) in result
    assert "<trkseg" in gpx_file.read_text()


def test_clear_track(gpx_file):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    tools["clear_track"]()
    assert state.track.is_empty
    assert state.track_path is None


def test_set_georeferencing_projects_points(gpx_file):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    result = tools["set_georeferencing"](lat=52.5, lon=13.4)
    assert "+proj=ortho" in result
    assert state.georeferencing.is_set
    local = state.track.get_segment_point(0, 0).local_coordinate
    assert local.x == pytest.approx(0.0, abs=1e-6)
    assert local.y == pytest.approx(0.0, abs=1e-6)


def test_set_georeferencing_rejects_bad_center():
    tools = _get_tools()
    result = tools["set_georeferencing"](lat=100.0, lon=0.0)
    assert result.startswith("Error")
    assert not state.georeferencing.is_set


def test_georeferencing_survives_reload(gpx_file):
    tools = _get_tools()
    tools["set_georeferencing"](lat=52.5, lon=13.4)
    tools["load_track"](file_path=str(gpx_file))
    assert state.track.get_waypoint(0).local_coordinate is not None


def test_center_georeferencing_on_track(gpx_file):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    result = tools["center_georeferencing_on_track"]()
    assert "centered" in result.lower()
    assert state.georeferencing.center_lat == pytest.approx(52.5166667, abs=1e-6)


def test_center_georeferencing_requires_track():
    tools = _get_tools()
    result = tools["center_georeferencing_on_track"]()
    assert result.startswith("Error")


def test_remove_georeferencing(gpx_file):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    tools["set_georeferencing"](lat=52.5, lon=13.4)
    result = tools["remove_georeferencing"]()
    assert "+proj=latlong" in result
    assert state.track.get_segment_point(1, 2).local_coordinate is None


def test_get_status(gpx_file):
    tools = _get_tools()
    tools["load_track"](file_path=str(gpx_file))
    status = json.loads(tools["get_status"]())
    assert status["track"]["segments"] == 2
    assert status["track"]["segment_points"] == [2, 3]
    assert status["track"]["waypoints"] == 1
    assert status["georeferencing"] == {"set": False}
    assert status["crs"] == "+proj=latlong +datum=WGS84"
