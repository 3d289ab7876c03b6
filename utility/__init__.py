"""Shared helpers of the acceptance runner: logging, retries, results."""
