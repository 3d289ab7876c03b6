"""Image Management Service."""
