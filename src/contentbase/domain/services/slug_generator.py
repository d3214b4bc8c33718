"""Slug generator service.

Generates URL-safe slugs for ``slug`` fields from the value of their
source field, and validates slugs typed in by hand.
"""

import re
import unicodedata
from dataclasses import dataclass


@dataclass(frozen=True)
class SlugValidationError:
    """Represents a slug validation error.

    Attributes:
        field: The slug field name.
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str


class SlugGenerator:
    """Generate and validate URL-safe slugs.

    Slug rules:
    - Lowercase ASCII letters, digits and single hyphens
    - No leading or trailing hyphen
    """

    VALID_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

    @classmethod
    def generate(cls, text: object) -> str:
        """Generate a slug from text.

        Args:
            text: Source value; non-strings are converted with ``str``.

        Returns:
            URL-safe slug, possibly empty.

        Examples:
            >>> SlugGenerator.generate("Hello World!")
            'hello-world'
            >>> SlugGenerator.generate("Fish & Chips")
            'fish-and-chips'
            >>> SlugGenerator.generate("  snake_case  title ")
            'snake-case-title'
        """
        if text is None:
            return ""

        # Normalize unicode characters and drop what has no ASCII form
        normalized = unicodedata.normalize("NFKD", str(text))
        slug = normalized.encode("ascii", "ignore").decode("ascii")

        slug = slug.lower().strip()
        slug = re.sub(r"\s+", "-", slug)
        slug = slug.replace("&", "-and-")
        slug = slug.replace("_", "-")
        slug = re.sub(r"[^a-z0-9-]", "", slug)
        slug = re.sub(r"-{2,}", "-", slug)
        return slug.strip("-")

    @classmethod
    def validate(cls, slug: str, field_name: str = "slug") -> list[SlugValidationError]:
        """Validate a slug against the rules.

        Args:
            slug: The slug to validate. Empty slugs are left to ``required``.
            field_name: Field name reported in errors.

        Returns:
            List of validation errors. Empty list if slug is valid.
        """
        if not slug:
            return []
        if cls.VALID_SLUG_PATTERN.match(slug):
            return []
        return [
            SlugValidationError(
                field=field_name,
                message="Slug must contain only lowercase letters, numbers, and single hyphens",
                code="slug_invalid_chars",
            )
        ]

    @classmethod
    def is_valid(cls, slug: str) -> bool:
        return len(cls.validate(slug)) == 0
