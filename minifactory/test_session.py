import sqlite3
from dataclasses import dataclass
from typing import Annotated, Optional

import pytest

from minifactory.database import DatabaseEngine
from minifactory.define import after_build, field, new_factory, sequence_field
from minifactory.errors import DefinitionError, TargetShapeError
from minifactory.orm_types import Column
from minifactory.session import Session, build, build_list, with_field


@dataclass
class Team:
    id: Annotated[Optional[int], Column(pk=True)] = None
    name: Annotated[str, Column()] = ""


@dataclass
class Player:
    id: int = 0


def test_build_into_matching_type():
    team = build(new_factory(Team, "teams", field("name", "Reds")), into=Team)
    assert team == Team(name="Reds")


def test_build_into_wrong_type_builds_nothing():
    calls = []
    factory = new_factory(Team, "teams", after_build(calls.append))
    with pytest.raises(TargetShapeError, match="cannot use target \\(type Player\\) as type Team"):
        build(factory, into=Player)
    assert calls == []


def test_build_list_into():
    factory = new_factory(Team, "teams", sequence_field("name", 1, lambda n: f"team {n}"))
    teams = build_list(factory, 2, into=list[Team])
    assert [t.name for t in teams] == ["team 1", "team 2"]
    assert build_list(factory, 1, into=Team)[0].name == "team 3"


def test_build_list_into_wrong_element_type():
    factory = new_factory(Team, "teams", sequence_field("name", 1, lambda n: f"team {n}"))
    with pytest.raises(TargetShapeError, match="list\\[Team\\]"):
        build_list(factory, 2, into=list[Player])
    assert factory.sequence_field_values["name"].sequence.peek() == 1
    assert build(factory).name == "team 1"


def test_negative_count():
    with pytest.raises(DefinitionError):
        build_list(new_factory(Team, "teams"), -1)


def test_create_into_wrong_type_touches_no_database():
    class FailingConnection:
        def cursor(self):
            raise AssertionError("no SQL expected")

    session = Session(DatabaseEngine(connection=FailingConnection()))
    with pytest.raises(TargetShapeError):
        session.create(new_factory(Team, "teams"), into=Player)
    with pytest.raises(TargetShapeError):
        session.create_list(new_factory(Team, "teams"), 3, into=list[Player])


def test_session_rolls_back_on_error():
    rolled_back = []

    class Connection:
        def cursor(self):
            raise AssertionError("no SQL expected")

        def commit(self):
            raise AssertionError("commit not expected")

        def rollback(self):
            rolled_back.append(True)

    with pytest.raises(KeyError):
        with Session(DatabaseEngine(connection=Connection())):
            raise KeyError("boom")
    assert rolled_back == [True]


def test_session_rolls_back_owned_sqlite_file(tmp_path):
    db_path = str(tmp_path / "teams.sqlite")
    with Session(db_path=db_path) as session:
        session.engine.execute("CREATE TABLE teams (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")

    factory = new_factory(Team, "teams", field("name", "Reds"))
    with pytest.raises(KeyError):
        with Session(db_path=db_path) as session:
            assert session.create(factory).id == 1
            raise KeyError("boom")

    with Session(db_path=db_path) as session:
        assert session.engine.execute("SELECT COUNT(*) FROM teams") == [(0,)]
        session.create(factory, with_field("name", "Blues"))

    connection = sqlite3.connect(db_path)
    try:
        assert connection.execute("SELECT name FROM teams").fetchall() == [("Blues",)]
    finally:
        connection.close()
