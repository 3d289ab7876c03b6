"""Document Database Service (v3 API)."""
