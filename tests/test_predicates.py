from datetime import datetime

import pytest
from sqlalchemy.sql.elements import False_, True_

from app.auth.fields import TASK_FIELDS
from app.auth.predicates import (
    MATCH_ALL,
    MATCH_NONE,
    And,
    AtLeast,
    Before,
    Equals,
    Field,
    Or,
    all_of,
    any_of,
    matches,
    render,
)


def test_all_of_flattens_and_drops_match_all():
    predicate = all_of(MATCH_ALL, Equals("a", 1), And((Equals("b", 2), Equals("c", 3))))
    assert predicate == And((Equals("a", 1), Equals("b", 2), Equals("c", 3)))


def test_all_of_with_match_none_matches_nothing():
    assert all_of(Equals("a", 1), MATCH_NONE) == MATCH_NONE


def test_any_of_single_term_is_unwrapped():
    assert any_of(MATCH_NONE, Equals("a", 1)) == Equals("a", 1)


def test_any_of_with_match_all_matches_everything():
    assert any_of(Equals("a", 1), MATCH_ALL) == MATCH_ALL


def test_render_empty_terms():
    assert isinstance(render(MATCH_ALL, TASK_FIELDS), True_)
    assert isinstance(render(MATCH_NONE, TASK_FIELDS), False_)


def test_render_unknown_field_raises():
    with pytest.raises(ValueError):
        render(Equals("nope", 1), TASK_FIELDS)


def test_render_range_on_relationship_field_raises():
    with pytest.raises(ValueError):
        render(AtLeast("assignee", 1), TASK_FIELDS)


def test_render_binds_values_as_parameters():
    clause = render(
        all_of(Equals("team_id", 3), AtLeast("created_at", datetime(2024, 1, 1))),
        TASK_FIELDS,
    )
    compiled = clause.compile()
    assert "tasks.team_id" in str(compiled)
    assert 3 in compiled.params.values()
    assert datetime(2024, 1, 1) in compiled.params.values()


def test_render_relationship_field_uses_exists():
    sql = str(render(Equals("assignee", 5), TASK_FIELDS).compile())
    assert "EXISTS" in sql
    assert "task_assignees" in sql


def test_field_requires_column_or_matcher():
    with pytest.raises(ValueError):
        Field()


def test_matches_membership_and_ranges():
    row = {"assigned_to": 4, "assignee": {4, 9}, "created_at": datetime(2024, 5, 2)}

    assert matches(Equals("assignee", 9), row)
    assert not matches(Equals("assigned_to", 9), row)
    assert matches(Or((Equals("assigned_to", 9), Equals("assignee", 9))), row)
    assert matches(AtLeast("created_at", datetime(2024, 5, 1)), row)
    assert not matches(Before("created_at", datetime(2024, 5, 1)), row)
    assert not matches(AtLeast("missing", 1), row)


def test_matches_constants():
    assert matches(MATCH_ALL, {})
    assert not matches(MATCH_NONE, {})
