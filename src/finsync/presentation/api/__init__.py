"""finsync HTTP API."""
