"""Host disk usage discovery and deletion."""
