"""fluentQL schema layer: query state models, vocabularies and raw fragments."""
from fluentql.schema.expressions import JoinType, LogicalOp, Operator, SortDirection
from fluentql.schema.raw import Raw
from fluentql.schema.structure import PredicateBuckets, QueryStructure

__all__ = [
    "JoinType",
    "LogicalOp",
    "Operator",
    "PredicateBuckets",
    "QueryStructure",
    "Raw",
    "SortDirection",
]
