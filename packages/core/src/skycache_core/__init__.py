"""SkyCache shared schemas."""
