from typing import Any, Mapping, Type, TypeVar, Union
from urllib.parse import quote

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


def segment(value: str) -> str:
    """URL-encode one path segment."""
    return quote(str(value), safe="")


def dump_input(model_cls: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> dict:
    """Validate caller input and drop unset fields."""
    model = data if isinstance(data, model_cls) else model_cls.model_validate(data)
    return model.model_dump(exclude_none=True)
