import mysql.connector
import pytest

from src.pickup_system.pickup_system.database.connection import DBConfig, DatabaseConnection

SETTINGS = {"host": "db.local", "user": "pickup", "password": "s3cret", "database": "pickup_system"}


def test_config_from_settings_dict_uses_defaults():
    config = DBConfig.from_dict(SETTINGS)

    assert config.port == 3306
    assert config.connect_timeout == 5
    assert config.describe() == "pickup@db.local:3306/pickup_system"
    assert "s3cret" not in config.describe()


def test_config_requires_credentials():
    with pytest.raises(KeyError):
        DBConfig.from_dict({"host": "db.local"})


def test_each_factory_keeps_its_own_config(monkeypatch):
    calls = []
    monkeypatch.setattr(mysql.connector, "connect", lambda **kwargs: calls.append(kwargs) or object())

    DatabaseConnection(DBConfig.from_dict(SETTINGS)).connect()
    DatabaseConnection(DBConfig.from_dict(dict(SETTINGS, host="replica.local", port="3307"))).connect()

    assert [(c["host"], c["port"]) for c in calls] == [("db.local", 3306), ("replica.local", 3307)]
    assert calls[0]["connection_timeout"] == 5
