"""ContentBase - headless CMS content engine.

Schema-driven content entries with localized translations, relations,
a searchable content list and a REST API.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
