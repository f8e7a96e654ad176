from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel
from typing import Annotated, Generic, Optional, TypeVar

T = TypeVar("T")

# Credentials are measured and hashed exactly as typed
Password = Optional[Annotated[str, StringConstraints(strip_whitespace=False)]]


class APIResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class RequestModel(BaseModel):
    """Base for request bodies: accepts camelCase or snake_case keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)
