"""Models shared by the search client and the dataset server."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, computed_field


class OrderBy(IntEnum):
    DESC = 1
    AS_IS = 0
    ASC = -1


class OrderField:
    ID = "Id"
    NAME = "Name"
    AGE = "Age"

    ALL = frozenset({ID, NAME, AGE})


class User(BaseModel):
    """A user as it travels over the wire."""

    id: int
    name: str
    age: int
    about: str
    gender: str


class Record(BaseModel):
    """A dataset row. ``name`` is derived from first and last name at load time."""

    model_config = ConfigDict(frozen=True)

    id: int
    first_name: str
    last_name: str
    age: int
    about: str
    gender: str

    @computed_field
    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_user(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            age=self.age,
            about=self.about,
            gender=self.gender,
        )


@dataclass(slots=True)
class SearchRequest:
    limit: int = 0
    offset: int = 0
    query: str = ""
    order_field: str = ""
    order_by: OrderBy = OrderBy.AS_IS


@dataclass(slots=True)
class SearchResponse:
    users: list[User] = field(default_factory=list)
    next_page: bool = False


class SearchErrorResponse(BaseModel):
    """Envelope the server sends with every ``400`` response."""

    error: str


__all__ = [
    "OrderBy",
    "OrderField",
    "Record",
    "SearchErrorResponse",
    "SearchRequest",
    "SearchResponse",
    "User",
]
