"""Vendored HTTP client SDK for the Huawei Cloud services used by the provider."""
