"""
Composable filter predicates.

Predicates are plain values describing *what* rows match, independent of
SQLAlchemy. ``render`` turns a predicate into a parameterized SQLAlchemy
clause using a field map that says *how* each symbolic field is matched
for a given entity (see ``app.auth.fields``).

    Equals("team_id", 3)
    And((Equals("created_by", 7), AtLeast("created_at", start)))
    Or((Equals("assigned_to", 5), Equals("assignee", 5)))

``And(())`` matches every row and ``Or(())`` matches none.
"""
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Tuple, Union

from sqlalchemy import and_, or_, true, false
from sqlalchemy.sql.elements import ColumnElement


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class AtLeast:
    field: str
    value: Any


@dataclass(frozen=True)
class Before:
    field: str
    value: Any


@dataclass(frozen=True)
class And:
    terms: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    terms: Tuple["Predicate", ...]


Predicate = Union[Equals, AtLeast, Before, And, Or]

MATCH_ALL = And(())
MATCH_NONE = Or(())


def all_of(*terms: Predicate) -> Predicate:
    """
    Conjunction that flattens nested And terms and drops MATCH_ALL.
    """
    flat = []
    for term in terms:
        if isinstance(term, And):
            flat.extend(term.terms)
        else:
            flat.append(term)
    if any(term == MATCH_NONE for term in flat):
        return MATCH_NONE
    if len(flat) == 1:
        return flat[0]
    return And(tuple(flat))


def any_of(*terms: Predicate) -> Predicate:
    """
    Disjunction that flattens nested Or terms and drops MATCH_NONE.
    """
    flat = []
    for term in terms:
        if isinstance(term, Or):
            flat.extend(term.terms)
        else:
            flat.append(term)
    if any(term == MATCH_ALL for term in flat):
        return MATCH_ALL
    if len(flat) == 1:
        return flat[0]
    return Or(tuple(flat))


class Field:
    """
    How one symbolic field is matched against an entity.

    A plain column supports every comparison. A ``matcher`` handles
    equality for relationship-backed fields (membership, team ownership)
    and only supports Equals.
    """

    def __init__(self, column=None, matcher: Callable[[Any], ColumnElement] = None):
        if column is None and matcher is None:
            raise ValueError("Field needs a column or a matcher")
        self.column = column
        self.matcher = matcher

    def equals(self, value):
        if self.matcher is not None:
            return self.matcher(value)
        return self.column == value

    def at_least(self, value):
        return self._require_column() >= value

    def before(self, value):
        return self._require_column() < value

    def _require_column(self):
        if self.column is None:
            raise ValueError("Range comparison needs a column-backed field")
        return self.column


def render(predicate: Predicate, fields: Mapping[str, Field]) -> ColumnElement:
    if isinstance(predicate, And):
        if not predicate.terms:
            return true()
        return and_(*(render(term, fields) for term in predicate.terms))

    if isinstance(predicate, Or):
        if not predicate.terms:
            return false()
        return or_(*(render(term, fields) for term in predicate.terms))

    field = fields.get(predicate.field)
    if field is None:
        raise ValueError(f"Unknown field '{predicate.field}'")

    if isinstance(predicate, Equals):
        return field.equals(predicate.value)
    if isinstance(predicate, AtLeast):
        return field.at_least(predicate.value)
    if isinstance(predicate, Before):
        return field.before(predicate.value)

    raise ValueError(f"Unsupported predicate {predicate!r}")


def matches(predicate: Predicate, row: Mapping[str, Any]) -> bool:
    """
    Evaluates a predicate against a plain mapping of field values.
    Relationship fields are looked up as collections: Equals matches when
    the value is contained in them.
    """
    if isinstance(predicate, And):
        return all(matches(term, row) for term in predicate.terms)
    if isinstance(predicate, Or):
        return any(matches(term, row) for term in predicate.terms)

    actual = row.get(predicate.field)
    if isinstance(predicate, Equals):
        if isinstance(actual, (set, frozenset, list, tuple)):
            return predicate.value in actual
        return actual == predicate.value
    if actual is None:
        return False
    if isinstance(predicate, AtLeast):
        return actual >= predicate.value
    if isinstance(predicate, Before):
        return actual < predicate.value

    raise ValueError(f"Unsupported predicate {predicate!r}")
