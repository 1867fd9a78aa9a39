"""TrackRecord worked-hours reporting backend."""
