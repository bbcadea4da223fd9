"""
Shared schema helpers.
"""
from typing import Annotated, Any, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from shopledger.error_handlers import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class InputModel(BaseModel):
    """Base for inbound payloads. Accepts snake_case and the camelCase the frontend sends."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


def split_serials(value: Any) -> Any:
    """Serials may arrive as a list or as one string separated by commas/newlines."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.replace("\n", ",").split(",")
    if isinstance(value, (list, tuple)):
        return [str(s).strip() for s in value if str(s).strip()]
    return value


SerialList = Annotated[list[str], BeforeValidator(split_serials)]


def parse_input(
    model: Type[ModelT],
    data: Union[ModelT, dict],
    error_cls: Type[ValidationError] = ValidationError,
) -> ModelT:
    """
    Validate a raw payload into ``model``.

    Pydantic errors are re-raised as ``error_cls`` so callers only ever see
    the application's error taxonomy.
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        errors = [
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        raise error_cls(f"Invalid {model.__name__}", errors=errors) from exc
