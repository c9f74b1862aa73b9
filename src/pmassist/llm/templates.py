# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Versioned prompt templates with ``{{name}}`` placeholders."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from pmassist.llm.exceptions import TemplateRenderError

_PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+)\}\}")


@dataclass(frozen=True)
class PromptTemplate:
    """Immutable prompt skeleton.

    Rendering substitutes every ``{{key}}`` for which a value is supplied in a
    single pass, so values are inserted literally and never re-scanned.
    Placeholders without a value are left untouched unless ``strict`` is set.
    """

    body: str
    version: str

    @property
    def placeholders(self) -> frozenset[str]:
        """Names of all placeholders appearing in the body."""
        return frozenset(_PLACEHOLDER_RE.findall(self.body))

    def render(self, variables: Mapping[str, str], *, strict: bool = False) -> str:
        """Render the template.

        Args:
            variables: Placeholder values keyed by placeholder name
            strict: Raise instead of leaving unresolved placeholders verbatim

        Returns:
            Rendered prompt text

        Raises:
            TemplateRenderError: If strict and a placeholder has no value
        """
        if strict:
            missing = self.placeholders - variables.keys()
            if missing:
                raise TemplateRenderError(missing)

        def _substitute(match: re.Match[str]) -> str:
            key = match.group(1)
            if key in variables:
                return variables[key]
            return match.group(0)

        return _PLACEHOLDER_RE.sub(_substitute, self.body)
