"""
Example plugin: slug rules.

Dropped into a configured plugin directory, these rules become available to
content type authors alongside the built-in ones.
"""

import re
from typing import Any

from headless_cms.domain.rules import TransformationRule, ValidationRule

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class Slugify(TransformationRule):
    type = "Slugify"
    required_capability = "text"
    description = "Lower-cases text and joins words with hyphens."

    def apply(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        words = re.findall(r"[a-z0-9]+", value.lower())
        return "-".join(words)


class IsSlugRule(ValidationRule):
    type = "IsSlugRule"
    required_capability = "text"
    description = "Requires lower-case words joined by single hyphens."

    def validate(self, value: Any) -> list[str]:
        if not isinstance(value, str):
            return ["Value must be string."]
        if not _SLUG_PATTERN.match(value):
            return [f"'{value}' is not a valid slug."]
        return []
