"""Pydantic configuration models for the GPX codec."""

from pydantic import BaseModel, ConfigDict


class GpxOptions(BaseModel):
    """Options for decoding and encoding GPX documents."""
    model_config = ConfigDict(frozen=True)

    # Derive local coordinates while decoding when the track is georeferenced
    project_points: bool = True
    # Skip points without usable lat/lon instead of rejecting the document
    skip_unlocated_points: bool = False
    creator: str = "gps-track"
