"""Unit tests for SELECT generation: columns, FROM, JOIN, GROUP/ORDER, LIMIT."""
from __future__ import annotations

import pytest

from fluentql import QueryBuilder, Raw
from fluentql.errors import QueryBuilderInvalidArgumentError, QueryGenerationError


def test_literal_select_scenario(qb):
    assert qb.select("id", "name").table("user").generate_select_query() == (
        "SELECT id, name FROM user WHERE 1"
    )


def test_select_star_when_no_columns(qb):
    assert qb.from_("post").generate_select_query() == "SELECT * FROM post WHERE 1"


def test_select_flattens_lists_and_keeps_duplicates(qb):
    qb.select(["id", "title"], "id").from_("post")
    assert qb.generate_select_query() == "SELECT id, title, id FROM post WHERE 1"


def test_select_without_table_raises(qb):
    with pytest.raises(QueryGenerationError):
        qb.select("id").generate_select_query()


def test_select_helpers(qb):
    (
        qb.select_count()
        .select_count_distinct("author_id", "authors")
        .select_max("views", "top")
        .select_min("views")
        .select_avg("views", "mean")
        .select_sum("views")
        .select_upper("title")
        .select_lower("title", "lc")
        .select_length("title")
        .select_distinct("type_id")
        .from_("post")
    )
    assert qb.generate_select_query() == (
        "SELECT COUNT(*), COUNT(DISTINCT author_id) AS authors, MAX(views) AS top, "
        "MIN(views), AVG(views) AS mean, SUM(views), UPPER(title), LOWER(title) AS lc, "
        "LENGTH(title), DISTINCT(type_id) FROM post WHERE 1"
    )


def test_select_coalesce_inlines_defaults(qb):
    qb.select_coalesce("views").select_coalesce("content", "n/a", "body")
    qb.select_coalesce("title", "it's").select_coalesce("author_id", "author.id")
    qb.select_coalesce("deleted_at", None).from_("post")
    assert qb.generate_select_query() == (
        "SELECT COALESCE(views, 0), COALESCE(content, 'n/a') AS body, "
        "COALESCE(title, 'it''s'), COALESCE(author_id, author.id), "
        "COALESCE(deleted_at, NULL) FROM post WHERE 1"
    )
    assert qb.get_parameter().all() == {}


def test_select_substring_and_concat(qb):
    qb.select_mid("title", 1, 3, "head").select_left("title", 2).select_right("title", 4)
    qb.select_concat(["title", Raw("' - '"), "content"], "summary").from_("post")
    assert qb.generate_select_query() == (
        "SELECT MID(title, 1, 3) AS head, LEFT(title, 2), RIGHT(title, 4), "
        "CONCAT(title, ' - ', content) AS summary FROM post WHERE 1"
    )


def test_select_substring_rejects_non_int(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.select_left("title", "2")


def test_select_as_and_clear(qb):
    qb.select("id").clear_select().select_as("title", "heading").from_("post")
    assert qb.generate_select_query() == "SELECT title AS heading FROM post WHERE 1"


# ---------------------------------------------------------------------------
# FROM
# ---------------------------------------------------------------------------


def test_from_replaces_and_add_from_appends(qb):
    qb.from_("author").from_("post", "p").add_from("comment c")
    assert qb.generate_select_query() == "SELECT * FROM post AS p, comment AS c WHERE 1"


def test_from_splits_table_list(qb):
    qb.from_("post, author a")
    assert qb.generate_select_query() == "SELECT * FROM post, author AS a WHERE 1"


def test_add_from_table_list_skips_listed_tables(qb):
    qb.from_("post").add_from("author, post")
    assert qb.structure.tables == ["post", "author"]


@pytest.mark.parametrize(
    "build",
    [
        lambda q: q.from_("post, author", "p"),
        lambda q: q.from_("post, "),
        lambda q: q.from_("post").join("author, comment", "author.id = post.author_id"),
    ],
)
def test_table_list_misuse_raises(qb, build):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        build(qb)


def test_add_from_is_idempotent(qb):
    qb.add_from("post").add_from("post").add_from("post AS p").add_from("post p")
    assert qb.structure.tables == ["post", "post AS p"]


def test_from_sub_query(qb):
    qb.select("t.id").from_(
        qb.sub_query(lambda s: s.select("id").from_("post").where("status", 1), "t")
    )
    assert qb.generate_select_query() == (
        "SELECT t.id FROM (SELECT id FROM post WHERE status = :status) AS t WHERE 1"
    )


def test_sub_query_without_parentheses(qb):
    raw = qb.sub_query(lambda s: s.select("id").from_("post"), is_interval=False)
    assert raw.get() == "SELECT id FROM post WHERE 1"


# ---------------------------------------------------------------------------
# JOIN
# ---------------------------------------------------------------------------


def test_join_types(qb):
    qb.select("post.id").from_("post")
    qb.inner_join("author", "author.id = post.author_id")
    qb.left_join("comment", "comment.post_id=post.id")
    qb.right_outer_join("tag", "tag.post_id = post.id")
    qb.natural_join("stats")
    assert qb.generate_select_query() == (
        "SELECT post.id FROM post "
        "INNER JOIN author ON author.id = post.author_id "
        "LEFT JOIN comment ON comment.post_id = post.id "
        "RIGHT OUTER JOIN tag ON tag.post_id = post.id "
        "NATURAL JOIN stats WHERE 1"
    )


def test_join_type_spellings(qb):
    qb.from_("post").join("author", "author.id = post.author_id", "left outer join")
    qb.join("comment", "comment.post_id = post.id", "right_outer")
    assert qb.generate_select_query() == (
        "SELECT * FROM post LEFT OUTER JOIN author ON author.id = post.author_id "
        "RIGHT OUTER JOIN comment ON comment.post_id = post.id WHERE 1"
    )


def test_join_same_table_twice_is_ignored(qb):
    qb.from_("post").join("author", "author.id = post.author_id")
    qb.left_join("author", "author.id = post.editor_id")
    assert list(qb.structure.joins.values()) == [
        "INNER JOIN author ON author.id = post.author_id"
    ]


def test_join_with_alias(qb):
    qb.from_("post p").join("author a", "a.id = p.author_id")
    assert qb.generate_select_query() == (
        "SELECT * FROM post AS p INNER JOIN author AS a ON a.id = p.author_id WHERE 1"
    )


def test_join_raw_condition(qb):
    qb.from_("post").join("author", Raw("author.id = post.author_id AND author.active = 1"))
    assert qb.generate_select_query() == (
        "SELECT * FROM post INNER JOIN author "
        "ON author.id = post.author_id AND author.active = 1 WHERE 1"
    )


@pytest.mark.parametrize("on", [None, "author.id", "id = author_id", "author.id = 5"])
def test_join_bad_condition_raises(qb, on):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.from_("post").join("author", on)


def test_join_unknown_type_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.from_("post").join("author", "author.id = post.author_id", "CROSS")


def test_join_callback_collects_on_and_where(qb):
    qb.from_("post").where("post.status", 1)
    qb.left_join(
        "comment",
        lambda j: j.on("comment.post_id", "=", "post.id")
        .and_on("comment.approved", 1)
        .where("comment.spam", 0),
    )
    assert qb.generate_select_query() == (
        "SELECT * FROM post LEFT JOIN comment "
        "ON comment.post_id = post.id AND comment.approved = :commentapproved "
        "WHERE post.status = :poststatus AND comment.spam = :commentspam"
    )
    assert qb.get_parameter().all() == {
        ":poststatus": 1,
        ":commentapproved": 1,
        ":commentspam": 0,
    }


def test_join_callback_without_on_raises(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.from_("post").join("author", lambda j: j.where("author.id", 1))


def test_self_join_goes_to_from_and_where(qb):
    qb.from_("author a").self_join("author b", "a.id = b.referrer_id")
    assert qb.generate_select_query() == (
        "SELECT * FROM author AS a, author AS b WHERE a.id = b.referrer_id"
    )


# ---------------------------------------------------------------------------
# GROUP BY / ORDER BY / LIMIT
# ---------------------------------------------------------------------------


def test_group_by_and_order_by_dedup(qb):
    qb.from_("post").group_by("author_id", ["type_id", "author_id"])
    qb.order_by("views", "desc").order_by("views", "DESC").order_by("id")
    assert qb.generate_select_query() == (
        "SELECT * FROM post WHERE 1 GROUP BY author_id, type_id ORDER BY views DESC, id ASC"
    )


def test_order_by_invalid_direction(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.order_by("id", "SIDEWAYS")


def test_limit_and_offset_mysql(qb):
    qb.from_("post").limit(10).offset(20)
    assert qb.generate_select_query() == "SELECT * FROM post WHERE 1 LIMIT 20, 10"


def test_limit_negative_is_absolute(qb):
    qb.from_("post").limit(-5)
    assert qb.generate_select_query() == "SELECT * FROM post WHERE 1 LIMIT 5"


@pytest.mark.parametrize("value", [0, "10", 2.5, True])
def test_limit_rejects_invalid(qb, value):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.limit(value)


def test_offset_rejects_non_int(qb):
    with pytest.raises(QueryBuilderInvalidArgumentError):
        qb.offset("3")


def test_limit_sqlite_dialect():
    qb = QueryBuilder("sqlite").from_("post").limit(10).offset(20)
    assert qb.generate_select_query() == "SELECT * FROM post WHERE 1 LIMIT 10 OFFSET 20"


def test_full_clause_order(qb):
    sql = (
        qb.select("author_id", Raw("COUNT(*) AS total"))
        .from_("post")
        .join("author", "author.id = post.author_id")
        .where("status", 1)
        .group_by("author_id")
        .having(Raw("COUNT(*) > 1"))
        .order_by("total", "DESC")
        .limit(5)
        .generate_select_query()
    )
    assert sql == (
        "SELECT author_id, COUNT(*) AS total FROM post "
        "INNER JOIN author ON author.id = post.author_id "
        "WHERE status = :status GROUP BY author_id HAVING COUNT(*) > 1 "
        "ORDER BY total DESC LIMIT 5"
    )


# ---------------------------------------------------------------------------
# Ad hoc selector / conditions
# ---------------------------------------------------------------------------


def test_generate_select_with_selector_and_mapping_conditions(qb):
    qb.select("id").from_("post")
    sql = qb.generate_select_query("title", {"status": 1, "type_id": [1, 2]})
    assert sql == (
        "SELECT id, title FROM post WHERE status = :status AND type_id IN (1, 2)"
    )
    # Recorded state is untouched.
    assert qb.structure.select == ["id"]
    assert qb.structure.where.is_empty()


def test_generate_select_with_sequence_conditions(qb):
    qb.from_("post")
    sql = qb.generate_select_query(conditions=["views > 5", Raw("status = 1")])
    assert sql == "SELECT * FROM post WHERE views > 5 AND status = 1"


def test_str_renders_select(qb):
    qb.from_("post")
    assert str(qb) == "SELECT * FROM post WHERE 1"
