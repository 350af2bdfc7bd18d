from .resolver import ResolvedTenant, TenantResolver, extract_tenant_slug

__all__ = ["ResolvedTenant", "TenantResolver", "extract_tenant_slug"]
