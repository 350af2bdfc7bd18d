from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import ValidationError


@dataclass(frozen=True)
class PageTypeTemplate:
    name: str
    slug: str
    description: str | None = None
    fields: list[dict[str, Any]] = field(default_factory=list)
    is_default: bool = False


@dataclass(frozen=True)
class PageTemplate:
    title: str
    slug: str
    page_type: str
    status: str = "published"
    summary: dict[str, Any] | None = None
    content: dict[str, Any] | None = None


@dataclass(frozen=True)
class TemplateDefinition:
    """Starter content created for a new tenant.

    Strings may contain ``{{tenant-name}}`` and ``{{tenant-slug}}``.
    """

    name: str
    label: str
    page_types: tuple[PageTypeTemplate, ...] = ()
    pages: tuple[PageTemplate, ...] = ()


def _text_block(text: str) -> dict[str, Any]:
    return {"blocks": [{"type": "paragraph", "text": text}]}


BASIC_TEMPLATE = TemplateDefinition(
    name="basic",
    label="Basic website",
    page_types=(
        PageTypeTemplate(
            name="Standard page",
            slug="standard",
            description="Title and free content",
            fields=[
                {"name": "hero_title", "type": "text"},
                {"name": "body", "type": "richText"},
            ],
            is_default=True,
        ),
        PageTypeTemplate(
            name="Contact page",
            slug="contact",
            description="Contact details and form",
            fields=[
                {"name": "email", "type": "email"},
                {"name": "phone", "type": "text"},
                {"name": "address", "type": "textarea"},
            ],
        ),
    ),
    pages=(
        PageTemplate(
            title="Home",
            slug="home",
            page_type="standard",
            summary={"hero_title": "Welcome to {{tenant-name}}"},
            content=_text_block("This is the home page of {{tenant-name}}."),
        ),
        PageTemplate(
            title="About",
            slug="about",
            page_type="standard",
            content=_text_block("About {{tenant-name}}."),
        ),
        PageTemplate(
            title="Contact",
            slug="contact",
            page_type="contact",
            summary={"email": "info@{{tenant-slug}}.example"},
        ),
    ),
)

TEMPLATES: dict[str, TemplateDefinition] = {
    BASIC_TEMPLATE.name: BASIC_TEMPLATE,
}


def get_template(name: str) -> TemplateDefinition:
    template = TEMPLATES.get(name)
    if template is None:
        raise ValidationError(
            f"Unknown template '{name}'. Must be one of: {', '.join(sorted(TEMPLATES))}",
            path="template",
        )
    return template
