"""Dedicated API Gateway (v2 API)."""
