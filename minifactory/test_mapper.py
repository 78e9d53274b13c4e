from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Optional

from minifactory.factory import Factory
from minifactory.mapper import ColumnMapping, Table, snake_case
from minifactory.orm_types import Column


@dataclass
class TestUser:
    __test__ = False

    id: Annotated[int, Column("id", pk=True)] = 0
    name: Annotated[str, Column("name")] = ""
    nick_name: Annotated[str, Column("nick")] = ""
    age: Annotated[int, Column()] = 0
    FromCountry: Annotated[str, Column()] = ""
    birth_time: Annotated[Optional[datetime], Column(" ")] = None
    not_saved: str = ""


@dataclass
class Membership:
    user_id: Annotated[int, Column(pk=True)] = 0
    group_id: Annotated[int, Column(pk=True)] = 0
    role: Annotated[str, Column()] = ""

    class Meta:
        table_name = "memberships_table"


@dataclass
class BlogPost:
    title: str = ""


def test_snake_case():
    assert snake_case("NickName") == "nick_name"
    assert snake_case("ID") == "id"
    assert snake_case("HTTPServer") == "http_server"
    assert snake_case("already_snake") == "already_snake"


def test_table_from_factory():
    table = Table.from_factory(Factory(TestUser, "user_table"))

    assert table.name == "user_table"
    assert table.columns == [
        ColumnMapping(0, "id", "id", primary=True),
        ColumnMapping(1, "name", "name"),
        ColumnMapping(2, "nick_name", "nick"),
        ColumnMapping(3, "age", "age"),
        ColumnMapping(4, "FromCountry", "from_country"),
        ColumnMapping(5, "birth_time", "birth_time"),
    ]
    assert table.primary_keys() == ["id"]


def test_composite_primary_key():
    table = Table.from_factory(Factory(Membership))
    assert table.primary_keys() == ["user_id", "group_id"]
    assert [c.field_index for c in table.primary_columns()] == [0, 1]


def test_table_name_defaults():
    assert Table.from_factory(Factory(Membership)).name == "memberships_table"
    assert Table.from_factory(Factory(BlogPost)).name == "blog_posts"


def test_table_without_columns_has_no_primary_key():
    table = Table.from_factory(Factory(BlogPost))
    assert table.columns == []
    assert table.primary_keys() == []


def test_table_mapping_is_cached_on_factory():
    f = Factory(TestUser, "user_table")
    assert f.table_mapping is f.table_mapping


def test_values_of():
    table = Table.from_factory(Factory(Membership))
    membership = Membership(user_id=1, group_id=2, role="owner")
    assert table.values_of(membership) == [1, 2, "owner"]
    assert table.values_of(membership, table.primary_columns()) == [1, 2]
