"""SkyCache local cache persistence."""
