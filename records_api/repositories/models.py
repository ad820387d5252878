"""Record schemas for the users and posts collections."""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

RecordId = Union[str, int]


class Record(BaseModel):
    """A single entry of a collection, identified by ``id``.

    Stored with camelCase keys. Unknown keys are kept so rewriting a
    collection never drops data this service does not understand.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    id: RecordId


class UserRecord(Record):
    email: str
    password: str
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PostRecord(Record):
    title: str
    description: str
    date: str
    user_id: RecordId
