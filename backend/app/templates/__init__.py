from .definitions import TEMPLATES, PageTemplate, PageTypeTemplate, TemplateDefinition, get_template
from .seeding import populate_tenant_pages, replace_placeholders

__all__ = [
    "TEMPLATES",
    "PageTemplate",
    "PageTypeTemplate",
    "TemplateDefinition",
    "get_template",
    "populate_tenant_pages",
    "replace_placeholders",
]
