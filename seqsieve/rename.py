"""
Identifier rename rules.

Rules form a closed set resolved when the run is configured: a fixed
old -> new map, a counter template and a regex substitution. None of them
evaluates user-supplied code; templates may only reference the fields
listed in CounterRename.FIELDS.
"""

import re
from string import Formatter
from typing import Dict, List

from .errors import ConfigurationError, RewriteEvaluationError


class RenameRule:
    """Base class for rename rules."""

    def __init__(self, text: str):
        self.text = text

    def rename(self, record_id: str) -> str:
        raise NotImplementedError

    def apply(self, record_id: str) -> str:
        """Rename ``record_id``, wrapping any failure in RewriteEvaluationError."""
        try:
            return self.rename(record_id)
        except (re.error, KeyError, IndexError, ValueError) as e:
            raise RewriteEvaluationError(self.text, record_id, e) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text!r})"


class MapRename(RenameRule):
    """Replace ids found in a fixed mapping; others pass through."""

    def __init__(self, mapping: Dict[str, str], text: str = 'map'):
        super().__init__(text)
        self.mapping = mapping

    def rename(self, record_id: str) -> str:
        return self.mapping.get(record_id, record_id)


class CounterRename(RenameRule):
    """
    Number records with a format template.

    The template may reference ``{n}`` (a counter starting at ``start``)
    and ``{id}`` (the current identifier), with format specs such as
    ``{n:06d}``. Attribute and index lookups are rejected.
    """

    FIELDS = ('n', 'id')

    def __init__(self, template: str, start: int = 1):
        super().__init__(template)
        self._check_template(template)
        self.template = template
        self.counter = start

    @classmethod
    def _check_template(cls, template: str):
        try:
            fields = [name for _, name, _, _ in Formatter().parse(template) if name is not None]
        except ValueError as e:
            raise ConfigurationError(f"Invalid rename template {template!r}: {e}") from e
        for name in fields:
            if name not in cls.FIELDS:
                raise ConfigurationError(
                    f"Rename template {template!r} references {{{name}}}; "
                    f"allowed fields are {', '.join(cls.FIELDS)}"
                )

    def rename(self, record_id: str) -> str:
        new_id = self.template.format(n=self.counter, id=record_id)
        self.counter += 1
        return new_id


class RegexRename(RenameRule):
    """Substitute the first match of a regex with a fixed template (\\1, \\g<name>)."""

    def __init__(self, pattern: str, template: str):
        super().__init__(f"s/{pattern}/{template}/")
        try:
            self.pattern = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid rename pattern {pattern!r}: {e}") from e
        self.template = template

    def rename(self, record_id: str) -> str:
        return self.pattern.sub(self.template, record_id, count=1)


def apply_rename_rules(rules: List[RenameRule], record_id: str) -> str:
    """Run ``record_id`` through every rule in order."""
    for rule in rules:
        record_id = rule.apply(record_id)
    return record_id
