"""Multi-tenant utility bill tracking service."""
