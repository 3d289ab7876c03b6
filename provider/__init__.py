"""Huawei Cloud provider: resource schemas and their lifecycle operations."""
