"""Connect session issuance for multi-tenant integration platforms."""
