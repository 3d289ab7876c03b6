"""Document Database Service."""
