"""Prerequisite checking helpers for MCP tools."""


def require_state(state, *, track: bool = False, georeferencing: bool = False) -> None:
    """Raise ValueError with a descriptive message if required state is not set.

    Usage in a tool:
        try:
            require_state(state, track=True)
        except ValueError as e:
            return f"Error: {e}"
    """
    if track and state.track.is_empty:
        raise ValueError(
            "Load a track first with load_track."
        )
    if georeferencing and not state.georeferencing.is_set:
        raise ValueError(
            "Set the map georeferencing first with set_georeferencing "
            "or center_georeferencing_on_track."
        )
