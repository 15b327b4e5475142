"""Docker Registry HTTP API v2 pruning."""
