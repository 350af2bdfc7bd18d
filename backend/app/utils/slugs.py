import re

_slug_re = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumerics to '-', trim leading/trailing dashes."""
    return _slug_re.sub("-", value.lower().strip()).strip("-")
