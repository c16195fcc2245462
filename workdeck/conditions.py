"""Condition expressions evaluated against a work record's status.

An expression is a set of terms joined by AND / OR, with AND binding
tighter than OR, the way ``kubectl wait --for`` users expect to write them:

    Available
    Job:Complete
    Job:Complete OR Job:Failed
    Applied AND Deployment:Available

A bare term names a work-level condition. ``Kind:Type`` names a condition on
any resource of that kind in the record's per-resource status.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .exceptions import ValidationError
from .models import WorkDetail


_OR_RE = re.compile(r"\s+OR\s+", re.IGNORECASE)
_AND_RE = re.compile(r"\s+AND\s+", re.IGNORECASE)


@dataclass(frozen=True)
class Term:
    """A single condition reference, optionally scoped to a resource kind."""

    condition: str
    kind: str | None = None

    @classmethod
    def from_string(cls, text: str) -> "Term":
        text = text.strip()
        if not text:
            raise ValidationError("empty condition term")
        if ":" in text:
            kind, _, condition = text.partition(":")
            kind, condition = kind.strip(), condition.strip()
            if not kind or not condition:
                raise ValidationError(f"invalid condition term: {text!r}")
            return cls(condition=condition, kind=kind)
        return cls(condition=text)

    def matches(self, detail: WorkDetail) -> bool:
        if self.kind is None:
            return any(c.type == self.condition and c.is_true for c in detail.conditions)
        kind = self.kind.lower()
        return any(
            c.type == self.condition and c.is_true
            for rs in detail.resource_status
            if rs.kind.lower() == kind
            for c in rs.conditions
        )

    def __str__(self) -> str:
        return f"{self.kind}:{self.condition}" if self.kind else self.condition


@dataclass(frozen=True)
class Expression:
    """Disjunction of conjunctions: ``any(all(term ...) ...)``."""

    clauses: tuple[tuple[Term, ...], ...]

    def evaluate(self, detail: WorkDetail) -> bool:
        return any(all(term.matches(detail) for term in clause) for clause in self.clauses)

    def __str__(self) -> str:
        return " OR ".join(" AND ".join(str(t) for t in clause) for clause in self.clauses)


def parse_expression(text: str) -> Expression:
    """Parse a condition expression.

    Raises:
        ValidationError: If the expression or any of its terms is empty.
    """
    if not text or not text.strip():
        raise ValidationError("condition expression must not be empty")

    clauses = []
    for disjunct in _OR_RE.split(text.strip()):
        terms = tuple(Term.from_string(part) for part in _AND_RE.split(disjunct.strip()))
        clauses.append(terms)
    return Expression(clauses=tuple(clauses))


def evaluate(expression: str | Expression, detail: WorkDetail) -> bool:
    """Evaluate an expression (string or parsed) against a work detail."""
    if isinstance(expression, str):
        expression = parse_expression(expression)
    return expression.evaluate(detail)
