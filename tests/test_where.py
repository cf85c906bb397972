"""Unit tests for WHERE / HAVING / ON predicate rendering."""
from __future__ import annotations

import pytest

from fluentql import QueryBuilder, Raw
from fluentql.errors import QueryBuilderInvalidArgumentError


def _select(qb: QueryBuilder) -> str:
    return qb.select("id").from_("post").generate_select_query()


# ---------------------------------------------------------------------------
# Comparison / shorthand
# ---------------------------------------------------------------------------


def test_empty_where_renders_one(qb):
    assert _select(qb) == "SELECT id FROM post WHERE 1"


def test_where_shorthand_binds_value(qb):
    qb.where("status", 1)
    assert _select(qb) == "SELECT id FROM post WHERE status = :status"
    assert qb.get_parameter().all() == {":status": 1}


def test_where_explicit_operator(qb):
    qb.where("views", ">=", 10).where("views", "<", 100)
    assert _select(qb) == "SELECT id FROM post WHERE views >= :views AND views < :views_1"
    assert qb.get_parameter().all() == {":views": 10, ":views_1": 100}


def test_where_unknown_operator_with_value_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.where("views", "~~", 10)


def test_where_equal_none_is_null(qb):
    qb.where("deleted_at", "=", None).where("content", "!=", None)
    assert _select(qb) == (
        "SELECT id FROM post WHERE deleted_at IS NULL AND content IS NOT NULL"
    )
    assert qb.get_parameter().all() == {}


def test_where_ordering_against_none_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.where("views", ">", None)


def test_where_trusted_values_are_inlined(qb):
    qb.where("created_at", "<", "NOW()")
    qb.where("author_id", "=", "author.id")
    qb.where("slug", "=", ":slug")
    qb.where("id", "=", "?")
    assert _select(qb) == (
        "SELECT id FROM post WHERE created_at < NOW() AND author_id = author.id "
        "AND slug = :slug AND id = ?"
    )
    assert qb.get_parameter().all() == {}


def test_where_raw_predicate(qb):
    qb.where(Raw("views > likes * 2"))
    assert _select(qb) == "SELECT id FROM post WHERE views > likes * 2"


def test_where_function_expression_uppercases_name(qb):
    qb.where("isActive(status, 1)")
    assert _select(qb) == "SELECT id FROM post WHERE ISACTIVE(status, 1)"


def test_where_column_without_value_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.where("status")


def test_where_dotted_column_placeholder(qb):
    qb.where("post.status", 1)
    assert _select(qb) == "SELECT id FROM post WHERE post.status = :poststatus"


def test_invalid_logical_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.where("status", "=", 1, "XOR")


# ---------------------------------------------------------------------------
# AND / OR precedence and groups
# ---------------------------------------------------------------------------


def test_or_only(qb):
    qb.or_where("type", 1).or_where("type", 2)
    assert _select(qb) == "SELECT id FROM post WHERE type = :type OR type = :type_1"


def test_and_with_single_or_is_not_parenthesized(qb):
    qb.where("status", 1).or_where("type", 2)
    assert _select(qb) == "SELECT id FROM post WHERE status = :status AND type = :type"


def test_and_with_several_or_is_parenthesized(qb):
    qb.where("status", 1).or_where("type", 2).or_where("type", 3)
    assert _select(qb) == (
        "SELECT id FROM post WHERE status = :status AND (type = :type OR type = :type_1)"
    )


def test_logical_symbol_aliases(qb):
    qb.where("status", "=", 1, "&&").where("type", "=", 2, "||")
    assert _select(qb) == "SELECT id FROM post WHERE status = :status AND type = :type"


def test_group_parenthesizes_nested_predicates(qb):
    qb.where("status", 1).group(lambda g: g.where("type", 3).where("type", 4))
    assert _select(qb) == (
        "SELECT id FROM post WHERE status = :status AND (type = :type AND type = :type_1)"
    )
    assert qb.get_parameter().all() == {":status": 1, ":type": 3, ":type_1": 4}


def test_group_with_or_connective(qb):
    qb.where("status", 1)
    qb.group(lambda g: g.where("type", 3).where("views", ">", 5), "OR")
    assert _select(qb) == (
        "SELECT id FROM post WHERE status = :status AND (type = :type AND views > :views)"
    )


def test_nested_groups(qb):
    qb.group(
        lambda g: g.where("a", 1).group(
            lambda h: h.or_where("b", 2).or_where("c", 3)
        )
    )
    assert _select(qb) == "SELECT id FROM post WHERE (a = :a AND (b = :b OR c = :c))"


# ---------------------------------------------------------------------------
# Operator-specific rendering
# ---------------------------------------------------------------------------


def test_between(qb):
    qb.between("views", [10, 20])
    assert _select(qb) == "SELECT id FROM post WHERE views BETWEEN :views_start AND :views_end"
    assert qb.get_parameter().all() == {":views_start": 10, ":views_end": 20}


def test_not_between_or(qb):
    qb.where("status", 1).or_not_between("views", (1, 5))
    assert _select(qb) == (
        "SELECT id FROM post WHERE status = :status "
        "AND views NOT BETWEEN :views_start AND :views_end"
    )


@pytest.mark.parametrize("value", [[1], [1, 2, 3], 5, [None, 2]])
def test_between_rejects_bad_bounds(qb, value):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.between("views", value)


def test_where_in_inlines_numbers_and_dedups(qb):
    qb.where_in("id", [1, 2, 2, 3])
    assert _select(qb) == "SELECT id FROM post WHERE id IN (1, 2, 3)"
    assert qb.get_parameter().all() == {}


def test_where_in_binds_strings(qb):
    qb.where_not_in("status", ["draft", "archived", "draft"])
    assert _select(qb) == "SELECT id FROM post WHERE status NOT IN (:status, :status_1)"
    assert qb.get_parameter().all() == {":status": "draft", ":status_1": "archived"}


def test_where_in_binds_non_finite_floats(qb):
    qb.where_in("score", [1.5, float("inf")])
    assert _select(qb) == "SELECT id FROM post WHERE score IN (1.5, :score)"
    assert qb.get_parameter().all() == {":score": float("inf")}


def test_where_in_empty_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.where_in("id", [])


def test_where_in_sub_query(qb):
    qb.where_in(
        "author_id",
        qb.sub_query(lambda s: s.select("id").from_("author").where("status", 1)),
    )
    assert _select(qb) == (
        "SELECT id FROM post WHERE author_id IN "
        "(SELECT id FROM author WHERE status = :status)"
    )


def test_where_in_raw_without_parentheses(qb):
    qb.where_in("id", Raw("SELECT post_id FROM comment"))
    assert _select(qb) == "SELECT id FROM post WHERE id IN (SELECT post_id FROM comment)"


def test_like_types(qb):
    qb.like("title", "sql").like("title", "intro", "after").or_like("title", "go", "before")
    assert _select(qb) == (
        "SELECT id FROM post WHERE title LIKE :title AND title LIKE :title_1 "
        "AND title LIKE :title_2"
    )
    assert qb.get_parameter().all() == {
        ":title": "%sql%",
        ":title_1": "intro%",
        ":title_2": "%go",
    }


def test_like_type_none_and_negated(qb):
    qb.not_like("title", "Draft", "none")
    assert _select(qb) == "SELECT id FROM post WHERE title NOT LIKE :title"
    assert qb.get_parameter().get("title") == "Draft"


def test_like_unknown_type_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.like("title", "x", "middle")


def test_start_and_end_like(qb):
    qb.start_like("title", "Intro").end_not_like("title", "SQL")
    assert _select(qb) == "SELECT id FROM post WHERE title LIKE :title AND title NOT LIKE :title_1"
    assert qb.get_parameter().all() == {":title": "Intro%", ":title_1": "%SQL"}


def test_like_operator_spelling(qb):
    qb.where("title", "startlike", "Go")
    assert qb.get_parameter().get("title") == "Go%"


def test_find_in_set_single_and_list(qb):
    qb.find_in_set("tags", "python").not_find_in_set("tags", ["go", "rust"])
    assert _select(qb) == (
        "SELECT id FROM post WHERE FIND_IN_SET(:tags, tags) "
        "AND NOT (FIND_IN_SET(:tags_1, tags) OR FIND_IN_SET(:tags_2, tags))"
    )
    assert qb.get_parameter().all() == {":tags": "python", ":tags_1": "go", ":tags_2": "rust"}


def test_regexp(qb):
    qb.regexp("title", "^SQL")
    assert _select(qb) == "SELECT id FROM post WHERE title REGEXP :title"


def test_soundex(qb):
    qb.soundex("name", "Robert")
    assert _select(qb) == (
        "SELECT id FROM post WHERE SOUNDEX(name) LIKE "
        "CONCAT('%', TRIM(TRAILING '0' FROM SOUNDEX(:name)), '%')"
    )
    assert qb.get_parameter().get("name") == "Robert"


def test_soundex_rejects_numbers(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.soundex("name", 5)


def test_is_null_helpers(qb):
    qb.where_is_null("deleted_at").or_where_is_not_null("content")
    assert _select(qb) == "SELECT id FROM post WHERE deleted_at IS NULL AND content IS NOT NULL"


# ---------------------------------------------------------------------------
# HAVING / ON
# ---------------------------------------------------------------------------


def test_having_rendered_after_group_by(qb):
    qb.select_count("*", "total").group_by("author_id").having(Raw("COUNT(*) > 1"))
    qb.and_having("author_id", "!=", 3)
    assert _select(qb) == (
        "SELECT COUNT(*) AS total, id FROM post WHERE 1 GROUP BY author_id "
        "HAVING COUNT(*) > 1 AND author_id != :author_id"
    )


def test_placeholders_unique_across_clauses(qb):
    qb.where("status", 1).having("status", 2).or_where("status", 3)
    qb.group_by("status")
    sql = _select(qb)
    assert sql == (
        "SELECT id FROM post WHERE status = :status AND status = :status_2 "
        "GROUP BY status HAVING status = :status_1"
    )
    assert qb.get_parameter().all() == {":status": 1, ":status_1": 2, ":status_2": 3}
