"""Image service (IMS, Glance compatible v2 API)."""
