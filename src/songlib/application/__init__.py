"""Application layer: catalog orchestration."""
