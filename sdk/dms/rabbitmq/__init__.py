"""Distributed Message Service for RabbitMQ (v2 API)."""
