import pytest
from cqldialect import InvalidArgumentError
from cqldialect.schema.column import ClusteringOrder, ColumnKind, KeyDeclaration
from cqldialect.schema.processor import (
    IndexInfo,
    TableInfo,
    process_columns,
    process_indexes,
    process_keys,
    process_tables,
    process_views,
)
from cqldialect.serialize.column_type import Map, Native, NativeType

COLUMN_ROWS = [
    {"column_name": "name", "type": "text", "kind": "regular", "position": -1, "clustering_order": "none"},
    {"column_name": "seq", "type": "int", "kind": "clustering", "position": 1, "clustering_order": "asc"},
    {"column_name": "ts", "type": "timestamp", "kind": "clustering", "position": 0, "clustering_order": "desc"},
    {"column_name": "region", "type": "text", "kind": "partition_key", "position": 1, "clustering_order": "none"},
    {"column_name": "tenant", "type": "text", "kind": "partition_key", "position": 0, "clustering_order": "none"},
    {"column_name": "meta", "type": "map<text, int>", "kind": "regular", "position": -1},
    {"column_name": "label", "type": "text", "kind": "static", "position": -1},
]


def test_columns_ordered_by_key_role():
    columns = process_columns(COLUMN_ROWS)

    assert [c.name for c in columns] == ["tenant", "region", "ts", "seq", "label", "meta", "name"]
    assert columns[0].kind == ColumnKind.PARTITION_KEY
    assert columns[2].clustering_order == ClusteringOrder.DESC
    assert columns[3].clustering_order == ClusteringOrder.ASC
    assert columns[0].clustering_order is None
    assert columns[5].type == Map(Native(NativeType.TEXT), Native(NativeType.INT))
    assert columns[5].type_name == "map<text, int>"


def test_keys_from_columns():
    keys = process_keys(process_columns(COLUMN_ROWS))

    assert keys == [
        KeyDeclaration("partition", ("tenant", "region")),
        KeyDeclaration("clustering", ("ts",), order=ClusteringOrder.DESC),
        KeyDeclaration("clustering", ("seq",), order=ClusteringOrder.ASC),
    ]


def test_indexes():
    rows = [
        {"index_name": "users_name_index", "kind": "COMPOSITES", "options": {"target": "name"}},
        {"index_name": "users_email_index", "kind": "COMPOSITES", "options": {"target": "email"}},
    ]

    assert process_indexes(rows) == [
        IndexInfo("users_email_index", ("email",), "composites"),
        IndexInfo("users_name_index", ("name",), "composites"),
    ]


def test_tables_and_views():
    tables = process_tables(
        [
            {"table_name": "b", "keyspace_name": "ks", "comment": "second"},
            {"table_name": "a", "keyspace_name": "ks"},
        ]
    )
    assert tables == [TableInfo("a", "ks"), TableInfo("b", "ks", "second")]

    views = process_views([{"view_name": "by_email", "keyspace_name": "ks", "base_table_name": "users"}])
    assert views[0].base_table == "users"
    assert views[0].where_clause == ""


def test_missing_catalog_column():
    with pytest.raises(InvalidArgumentError) as exc_info:
        process_tables([{"keyspace_name": "ks"}])
    assert "table_name" in str(exc_info.value)
