"""Client record and extraction data model."""

from __future__ import annotations

from .enums import (
    BatchItemStatus,
    DataSourceType,
    DecisionKind,
    MatchType,
    OverwritePolicy,
    SubEntityKind,
)
from .extraction import (
    ArrayNode,
    ConfidenceValue,
    ExtractionTree,
    Leaf,
    LeafRef,
    Node,
    build_extraction_tree,
    iter_leaves,
    tree_to_payload,
)
from .record import (
    ClientRecord,
    SubEntity,
    client_display_name,
    new_client_record,
    new_id,
    sub_entity_factory,
    timestamp,
)

__all__ = [
    "ArrayNode",
    "BatchItemStatus",
    "ClientRecord",
    "ConfidenceValue",
    "DataSourceType",
    "DecisionKind",
    "ExtractionTree",
    "Leaf",
    "LeafRef",
    "MatchType",
    "Node",
    "OverwritePolicy",
    "SubEntity",
    "SubEntityKind",
    "build_extraction_tree",
    "client_display_name",
    "iter_leaves",
    "new_client_record",
    "new_id",
    "sub_entity_factory",
    "timestamp",
    "tree_to_payload",
]
