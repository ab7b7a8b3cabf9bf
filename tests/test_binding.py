from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest
from pydantic import BaseModel, Field

from configloader.binding import bind, match_keys
from configloader.errors import BindError


class Database(BaseModel):
    host: str
    port: int = 5432


class Upstream(BaseModel):
    url: str
    weight: int = 1


class AppConfig(BaseModel):
    ProcessName: str
    database: Database
    upstreams: List[Upstream] = []
    pools: Dict[str, Database] = {}
    cache: Optional[Database] = None
    log_level: str = Field(default="info", alias="LogLevel")


@dataclass
class Worker:
    Name: str
    Tags: List[str] = field(default_factory=list)


def test_bind_matches_field_names_case_insensitively():
    tree = {
        "processname": "svc",
        "database": {"host": "db.local", "port": "6543"},
        "upstreams": [{"url": "http://a"}, {"url": "http://b", "weight": 3}],
        "pools": {"read": {"host": "replica"}},
        "cache": {"host": "redis"},
        "loglevel": "debug",
    }

    cfg = bind(tree, AppConfig)

    assert cfg.ProcessName == "svc"
    assert cfg.database == Database(host="db.local", port=6543)
    assert [u.weight for u in cfg.upstreams] == [1, 3]
    assert cfg.pools["read"].host == "replica"
    assert cfg.cache.host == "redis"
    assert cfg.log_level == "debug"


def test_bind_dataclass():
    assert bind({"name": "w1", "tags": ["a", "b"]}, Worker) == Worker(Name="w1", Tags=["a", "b"])


def test_bind_ignores_unknown_keys():
    assert bind({"host": "h", "extra": 1}, Database) == Database(host="h")


def test_bind_plain_mapping_type():
    assert bind({"a": "1", "b": "2"}, Dict[str, int]) == {"a": 1, "b": 2}


def test_bind_error_carries_nested_locations():
    tree = {"processname": "svc", "database": {"host": "h", "port": "not-a-port"}}
    with pytest.raises(BindError) as exc_info:
        bind(tree, AppConfig)
    assert exc_info.value.fields == ["database.port"]


def test_bind_error_for_missing_field():
    with pytest.raises(BindError) as exc_info:
        bind({}, Database)
    assert exc_info.value.fields == ["host"]


def test_match_keys_leaves_scalars_alone():
    assert match_keys("x", Database) == "x"
    assert match_keys([1, 2], List[int]) == [1, 2]
