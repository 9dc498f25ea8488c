import pytest
from cqldialect import Consistency, DialectConfig, InvalidArgumentError
from cqldialect.config import DEFAULT_REPLICATION


def test_consistency_from_cql_spelling():
    assert Consistency.from_value("LOCAL_QUORUM") == Consistency.LocalQuorum
    assert Consistency.from_value("local_quorum") == Consistency.LocalQuorum
    assert Consistency.from_value("LocalQuorum") == Consistency.LocalQuorum
    assert Consistency.from_value(Consistency.Two) == Consistency.Two


def test_consistency_unknown_level():
    with pytest.raises(InvalidArgumentError) as exc_info:
        Consistency.from_value("MOSTLY")
    assert "Unknown consistency level" in str(exc_info.value)


def test_consistency_serial_levels():
    assert Consistency.Serial.is_serial
    assert Consistency.LocalSerial.is_serial
    assert not Consistency.Quorum.is_serial


def test_config_defaults():
    config = DialectConfig()
    assert config.keyspace is None
    assert config.default_consistency == Consistency.LocalOne
    assert config.ignore_warnings is False
    assert config.table_prefix == ""
    assert config.keyspace_replication == DEFAULT_REPLICATION


def test_config_invalid_keyspace():
    with pytest.raises(InvalidArgumentError) as exc_info:
        DialectConfig(keyspace="not-a-keyspace")
    assert "keyspace must be 1-48 alphanumeric" in str(exc_info.value)


def test_config_keyspace_too_long():
    with pytest.raises(InvalidArgumentError):
        DialectConfig(keyspace="k" * 49)


def test_config_rejects_serial_default():
    with pytest.raises(InvalidArgumentError) as exc_info:
        DialectConfig(default_consistency=Consistency.Serial)
    assert "serial" in str(exc_info.value)


def test_config_rejects_string_consistency():
    with pytest.raises(InvalidArgumentError):
        DialectConfig(default_consistency="QUORUM")  # pyright: ignore[reportArgumentType]


def test_config_replication_needs_class():
    with pytest.raises(InvalidArgumentError) as exc_info:
        DialectConfig(replication={"replication_factor": 3})
    assert "replication strategy class" in str(exc_info.value)


def test_config_copies():
    config = DialectConfig(keyspace="ks")
    other = config.with_keyspace("other").with_consistency("quorum").with_ignore_warnings()

    assert config.keyspace == "ks"
    assert config.default_consistency == Consistency.LocalOne
    assert other.keyspace == "other"
    assert other.default_consistency == Consistency.Quorum
    assert other.ignore_warnings is True


def test_config_from_mapping():
    config = DialectConfig.from_mapping(
        {
            "driver": "cassandra",
            "database": "ks",
            "consistency": "EACH_QUORUM",
            "prefix": "app_",
            "ignore_warnings": True,
        }
    )
    assert config.keyspace == "ks"
    assert config.default_consistency == Consistency.EachQuorum
    assert config.table_prefix == "app_"
    assert config.ignore_warnings is True


def test_config_from_mapping_prefers_keyspace():
    config = DialectConfig.from_mapping({"keyspace": "a", "database": "b"})
    assert config.keyspace == "a"
