"""SkyCache search service and HTTP surface."""
