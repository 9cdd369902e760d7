"""Track file tools: load_track, save_track, clear_track."""

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ..core.models import GpxOptions
from ._prereqs import require_state

logger = logging.getLogger(__name__)


def register_track_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def load_track(
        file_path: str,
        project_points: bool = True,
        skip_unlocated_points: bool = False,
    ) -> str:
        """Load a GPX file, replacing the current track and waypoints.

        If the file cannot be read or decoded, the current track is kept.
        **Next:** Optionally set_georeferencing or center_georeferencing_on_track,
        then save_track.

        Args:
            file_path: Absolute path to a .gpx file.
            project_points: Compute local map coordinates while loading when a
                georeferencing is set (default True).
            skip_unlocated_points: Skip points without lat/lon instead of
                rejecting the whole file.
        """
        path = Path(file_path)
        if not path.exists():
            return f"Error: Track file not found at {path}"

        options = GpxOptions(
            project_points=project_points,
            skip_unlocated_points=skip_unlocated_points,
        )
        if not state.track.load_from(path, options):
            return f"Error: Could not load {path} as a GPX track (current track kept)."

        state.track_path = str(path)
        track = state.track
        total_points = sum(
            track.get_segment_point_count(i) for i in range(track.get_num_segments())
        )
        return (
            f"Track loaded: {track.get_num_segments()} segment(s), {total_points} points, "
            f"{track.get_num_waypoints()} waypoint(s)."
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def save_track(file_path: str | None = None) -> str:
        """Save the current track and waypoints as a GPX 1.1 file.

        **Requires:** load_track first.

        Args:
            file_path: Where to save. Default: the path the track was loaded from.
        """
        try:
            require_state(state, track=True)
        except ValueError as e:
            return f"Error: {e}"

        target = file_path or state.track_path
        if not target:
            return "Error: No file path given and the track was not loaded from a file."

        save_path = Path(target)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        if not state.track.save_to(save_path):
            return f"Error: Could not save track to {save_path}"

        state.track_path = str(save_path)
        return f"Track saved to {save_path}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def clear_track() -> str:
        """Delete all track points and waypoints. The georeferencing is kept."""
        state.track.clear()
        state.track_path = None
        logger.debug("Track cleared")
        return "Track cleared."
