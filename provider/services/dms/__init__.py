"""Distributed Message Service."""
