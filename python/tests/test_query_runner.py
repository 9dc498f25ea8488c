import pytest
from conftest import FakeExecutor
from cqldialect import Consistency, DialectConfig, InvalidStateError, QueryRunner, table


@pytest.mark.asyncio
async def test_insert_dispatches_placeholders(executor, config):
    runner = QueryRunner(executor, config)
    await runner.insert(table("users").insert_collection("set", "tags", ["x"]), {"id": "u1", "name": "O'Brien"})

    assert executor.calls == [
        (
            "insert into ks.users (id, name, tags) values (?, ?, {'x'})",
            ("u1", "O'Brien"),
            Consistency.LocalOne,
            False,
        )
    ]


@pytest.mark.asyncio
async def test_intent_consistency_wins(executor, config):
    runner = QueryRunner(executor, config).set_consistency(Consistency.All)

    await runner.delete(table("users").where("id", "u1").with_consistency("LOCAL_QUORUM"))
    await runner.delete(table("users").where("id", "u2"))

    assert [call[2] for call in executor.calls] == [Consistency.LocalQuorum, Consistency.All]


@pytest.mark.asyncio
async def test_ignore_warnings(config):
    executor = FakeExecutor()
    runner = QueryRunner(executor, config.with_ignore_warnings())
    await runner.truncate(table("users"))
    runner.ignore_warnings(False)
    await runner.truncate(table("users"))

    assert [call[3] for call in executor.calls] == [True, False]
    assert executor.statements == ["truncate table ks.users", "truncate table ks.users"]


@pytest.mark.asyncio
async def test_select_returns_rows(config):
    rows = [{"id": "u1", "name": "Ann"}, {"id": "u2", "name": "Bob"}]
    executor = FakeExecutor(responses={"select id, name from ks.users": rows})
    runner = QueryRunner(executor, config)

    result = await runner.select(table("users").select("id", "name").where_in("id", ["u1", "u2"]))

    assert result == rows
    assert executor.calls[0][1] == ("u1", "u2")


@pytest.mark.asyncio
async def test_count(config):
    executor = FakeExecutor(responses={"select count(*) as aggregate": [{"aggregate": 3}]})
    runner = QueryRunner(executor, config)

    assert await runner.count(table("users")) == 3
    assert executor.statements == ["select count(*) as aggregate from ks.users"]


@pytest.mark.asyncio
async def test_aggregate_without_rows(executor, config):
    runner = QueryRunner(executor, config)
    assert await runner.aggregate(table("users"), "max", "age") is None
    assert executor.statements == ["select max(age) as aggregate from ks.users"]


@pytest.mark.asyncio
async def test_update(executor, config):
    runner = QueryRunner(executor, config)
    intent = table("users").where("id", "u1").update_collection("map", "meta", "put", {"k": "v"})
    await runner.update(intent, {"name": "N"})

    assert executor.calls[0][:2] == ("update ks.users set name = ?, meta = meta + {'k':'v'} where id = ?", ("N", "u1"))


@pytest.mark.asyncio
async def test_executor_errors_propagate_without_retry(config):
    executor = FakeExecutor(error=RuntimeError("Unavailable"))
    runner = QueryRunner(executor, config)

    with pytest.raises(RuntimeError) as exc_info:
        await runner.select(table("users"))
    assert "Unavailable" in str(exc_info.value)
    assert len(executor.calls) == 1


def test_incompatible_executor():
    with pytest.raises(InvalidStateError):
        QueryRunner(object(), DialectConfig())  # pyright: ignore[reportArgumentType]
