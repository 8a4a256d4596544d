from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel

from payload_collection.supply import endpoint, field


@endpoint('method = "POST", path = "/users"')
class CreateUser(BaseModel):
    """Create a new user account.

    The body is sent as JSON.
    """

    name: Annotated[str, field('description = "Full name", example = "\\"Jane\\""')]
    nickname: str | None = None
    tags: Annotated[list[str], field('description = "Labels", example = "[\\"admin\\"]"')] = []


@endpoint('method = "DELETE", path = "/users/:id"')
@dataclass
class DeleteUser:
    id: Annotated[int, field('description = "User id", example = "42"')]


class Unannotated(BaseModel):
    name: str
