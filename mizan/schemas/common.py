from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON uses camelCase keys; snake_case is accepted on input too."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def clean_number(value):
    # "1,250.00" -> "1250.00"; "" -> None
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        return value or None
    return value
