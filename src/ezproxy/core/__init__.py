"""Marker-block patching, privileged gateway, orchestration and settings."""
