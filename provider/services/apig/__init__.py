"""API Gateway (dedicated)."""
