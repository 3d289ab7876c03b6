"""Resource and data source definitions, one package per cloud service."""
