import pytest
from cqldialect import DialectConfig, InvalidArgumentError, InvalidStateError, UnsupportedOperationError
from cqldialect.schema.blueprint import Blueprint, Command
from cqldialect.schema.grammar import SchemaGrammar


def create(config: DialectConfig, table: str, define) -> list[str]:
    blueprint = Blueprint(table, prefix=config.table_prefix)
    blueprint.create()
    define(blueprint)
    return blueprint.to_cql(SchemaGrammar(config))


@pytest.mark.parametrize(
    "method, keyword",
    [
        ("ascii", "ascii"),
        ("bigint", "bigint"),
        ("big_integer", "bigint"),
        ("blob", "blob"),
        ("binary", "blob"),
        ("boolean", "boolean"),
        ("counter", "counter"),
        ("date", "date"),
        ("date_time", "timestamp"),
        ("date_time_tz", "timestamp"),
        ("decimal", "decimal"),
        ("double", "double"),
        ("duration", "duration"),
        ("float", "float"),
        ("inet", "inet"),
        ("ip_address", "inet"),
        ("int", "int"),
        ("integer", "int"),
        ("smallint", "smallint"),
        ("small_integer", "smallint"),
        ("string", "varchar"),
        ("text", "varchar"),
        ("time", "time"),
        ("timestamp", "timestamp"),
        ("timeuuid", "timeuuid"),
        ("tinyint", "tinyint"),
        ("tiny_integer", "tinyint"),
        ("uuid", "uuid"),
        ("varchar", "varchar"),
        ("varint", "varint"),
        ("year", "date"),
    ],
)
def test_scalar_column_definitions(config, method, keyword):
    def define(table: Blueprint):
        table.uuid("id").partition()
        getattr(table, method)("c")

    assert create(config, "t", define) == [f"create table ks.t (id uuid, c {keyword}, primary key (id))"]


def test_create_with_collections(config):
    def define(table: Blueprint):
        table.uuid("id").primary()
        table.text("name")
        table.set_collection("tags", "text")
        table.map_collection("meta", "text", "text")

    assert create(config, "users", define) == [
        "create table ks.users (id uuid, name varchar, tags set<text>, meta map<text, text>, primary key (id))"
    ]


def test_create_with_composite_partition_and_clustering(config):
    def define(table: Blueprint):
        table.text("tenant")
        table.text("region")
        table.timestamp("ts")
        table.int("n")
        table.partition(["tenant", "region"])
        table.clustering("ts", "desc")

    assert create(config, "events", define) == [
        "create table ks.events (tenant varchar, region varchar, ts timestamp, n int, "
        "primary key ((tenant, region), ts)) with clustering order by (ts desc)"
    ]


def test_create_if_not_exists_with_static_column():
    blueprint = Blueprint("accounts")
    blueprint.create_if_not_exists()
    blueprint.uuid("id").partition()
    blueprint.int("seq").clustering()
    blueprint.text("owner").static()

    assert blueprint.to_cql(SchemaGrammar()) == [
        "create table if not exists accounts (id uuid, seq int, owner varchar static, primary key (id, seq)) "
        "with clustering order by (seq asc)"
    ]


def test_create_with_index(config):
    def define(table: Blueprint):
        table.uuid("id").partition()
        table.text("email").index()

    assert create(config, "users", define) == [
        "create table ks.users (id uuid, email varchar, primary key (id))",
        "create index users_email_index on ks.users (email)",
    ]


def test_table_prefix():
    config = DialectConfig(keyspace="ks", table_prefix="app_")

    def define(table: Blueprint):
        table.uuid("id").partition()
        table.text("email").index()

    assert create(config, "users", define) == [
        "create table ks.app_users (id uuid, email varchar, primary key (id))",
        "create index app_users_email_index on ks.app_users (email)",
    ]


def test_quoted_identifiers(config):
    def define(table: Blueprint):
        table.uuid("id").partition()
        table.text("Name")
        table.text("select")

    assert create(config, "users", define) == [
        'create table ks.users (id uuid, "Name" varchar, "select" varchar, primary key (id))'
    ]


def test_missing_partition_key(config):
    with pytest.raises(InvalidArgumentError) as exc_info:
        create(config, "users", lambda table: table.text("name"))
    assert "needs at least one partition key" in str(exc_info.value)


def test_undefined_key_column(config):
    def define(table: Blueprint):
        table.text("name")
        table.partition("id")

    with pytest.raises(InvalidArgumentError) as exc_info:
        create(config, "users", define)
    assert "is not defined" in str(exc_info.value)


def test_collection_key_column(config):
    with pytest.raises(InvalidArgumentError) as exc_info:
        create(config, "users", lambda table: table.set_collection("tags", "text").partition())
    assert "non-frozen collection" in str(exc_info.value)


def test_frozen_collection_key_column(config):
    statements = create(config, "users", lambda table: table.frozen("tags", "set", "text").partition())
    assert statements == ["create table ks.users (tags frozen<set<text>>, primary key (tags))"]


def test_static_needs_clustering(config):
    def define(table: Blueprint):
        table.uuid("id").partition()
        table.text("owner").static()

    with pytest.raises(InvalidArgumentError) as exc_info:
        create(config, "users", define)
    assert "Static columns need a clustering key" in str(exc_info.value)


def test_static_counter_rejected(config):
    def define(table: Blueprint):
        table.uuid("id").partition()
        table.int("seq").clustering()
        table.counter("hits").static()

    with pytest.raises(InvalidArgumentError) as exc_info:
        create(config, "events", define)
    assert "cannot be static" in str(exc_info.value)


def test_counter_table_rules(config):
    def define(table: Blueprint):
        table.uuid("id").partition()
        table.counter("hits")
        table.text("name")

    with pytest.raises(InvalidArgumentError) as exc_info:
        create(config, "stats", define)
    assert "Counter tables" in str(exc_info.value)


def test_alter_statements(config):
    blueprint = Blueprint("users")
    blueprint.text("nickname")
    blueprint.int("age")
    blueprint.drop_column("a", "b")
    blueprint.rename_column("ts", "created_at")

    assert blueprint.to_cql(SchemaGrammar(config)) == [
        "alter table ks.users add nickname varchar",
        "alter table ks.users add age int",
        "alter table ks.users drop (a, b)",
        "alter table ks.users rename ts to created_at",
    ]


def test_alter_drops_index_of_changed_column(config):
    blueprint = Blueprint("users")
    blueprint.text("email").change().index(False)

    assert blueprint.to_cql(SchemaGrammar(config)) == ["drop index ks.users_email_index"]


def test_alter_cannot_change_keys(config):
    blueprint = Blueprint("users")
    blueprint.partition("id")

    with pytest.raises(UnsupportedOperationError) as exc_info:
        blueprint.to_cql(SchemaGrammar(config))
    assert "primary key of an existing table" in str(exc_info.value)


def test_drop_and_truncate(config):
    grammar = SchemaGrammar(config)
    blueprint = Blueprint("users")
    blueprint.drop_if_exists()
    blueprint.truncate()

    assert blueprint.to_cql(grammar) == ["drop table if exists ks.users", "truncate table ks.users"]
    assert grammar.compile_drop_table_if_exists("other", "app_users") == "drop table if exists other.app_users"


def test_unknown_command(config):
    with pytest.raises(InvalidStateError):
        SchemaGrammar(config).compile_command(Blueprint("users"), Command("vacuum"))


def test_keyspace_statements():
    grammar = SchemaGrammar()

    assert grammar.compile_create_keyspace("ks") == (
        "create keyspace ks with replication = {'class': 'SimpleStrategy', 'replication_factor': 1}"
    )
    assert grammar.compile_create_keyspace(
        "ks",
        {"class": "NetworkTopologyStrategy", "dc1": 3},
        if_not_exists=True,
        durable_writes=False,
    ) == (
        "create keyspace if not exists ks with replication = "
        "{'class': 'NetworkTopologyStrategy', 'dc1': 3} and durable_writes = false"
    )
    assert grammar.compile_drop_keyspace("ks") == "drop keyspace ks"
    assert grammar.compile_drop_keyspace_if_exists("ks") == "drop keyspace if exists ks"


def test_keyspace_uses_configured_replication():
    grammar = SchemaGrammar(DialectConfig(replication={"class": "SimpleStrategy", "replication_factor": 3}))
    assert grammar.compile_create_keyspace("ks").endswith("{'class': 'SimpleStrategy', 'replication_factor': 3}")


def test_keyspace_replication_needs_class():
    with pytest.raises(InvalidArgumentError):
        SchemaGrammar().compile_create_keyspace("ks", {"replication_factor": 1})


def test_catalog_lookups():
    grammar = SchemaGrammar()
    assert grammar.compile_tables("ks") == "select * from system_schema.tables where keyspace_name = 'ks'"
    assert grammar.compile_views("ks") == "select * from system_schema.views where keyspace_name = 'ks'"
    assert grammar.compile_columns("ks", "users") == (
        "select * from system_schema.columns where keyspace_name = 'ks' and table_name = 'users'"
    )
    assert grammar.compile_indexes("ks", "users") == (
        "select * from system_schema.indexes where keyspace_name = 'ks' and table_name = 'users'"
    )


def test_wrapping():
    grammar = SchemaGrammar(DialectConfig(keyspace="ks"))
    assert grammar.wrap_table("users") == "ks.users"
    assert grammar.wrap_table("other.users") == "other.users"
    assert SchemaGrammar().wrap_table("users") == "users"
    assert grammar.wrap_value('we"ird') == '"we""ird"'
    assert grammar.wrap("u.name as n") == "u.name as n"
    assert grammar.wrap("*") == "*"
