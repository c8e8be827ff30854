# portal/services/slugs.py
from __future__ import annotations

import re
import unicodedata
from typing import Collection, Optional

from sqlalchemy.orm import Session

from portal.core.exceptions import InvalidBusinessName
from portal.models.organization import Organization

_strip_regex = re.compile(r"[^\w\s-]", re.ASCII)
_space_regex = re.compile(r"\s+", re.ASCII)
_dash_regex = re.compile(r"-{2,}")


def slugify(value: str) -> str:
    """
    "Bob's Gym" -> "bobs-gym": accents folded to ASCII, other non-ASCII
    dropped, lowercase, drop non-word characters, whitespace
    runs become one hyphen, hyphen runs collapse, edges trimmed.
    """
    ascii_value = (
        unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    )
    base = _strip_regex.sub("", ascii_value.lower())
    base = _space_regex.sub("-", base.strip())
    return _dash_regex.sub("-", base).strip("-")


def require_slug(name: Optional[str]) -> str:
    slug = slugify(name or "")
    if not slug:
        raise InvalidBusinessName()
    return slug


def _slug_taken(db: Session, slug: str) -> bool:
    return (
        db.query(Organization.id).filter(Organization.slug == slug).first() is not None
    )


def allocate_slug(
    db: Session, base_name: str, *, exclude: Collection[str] = ()
) -> str:
    """
    First free slug among base, base-1, base-2, ...

    ``exclude`` holds candidates that already lost an insert race; the unique
    index on organizations.slug stays the real guard.
    """
    base = require_slug(base_name)
    slug = base
    counter = 1
    while slug in exclude or _slug_taken(db, slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug
