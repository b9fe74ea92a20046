"""Base classes imported by generated Python modules.

Example of a generated module using them:

    class Tag(OpenEnum):
        RED = "RED"

    class MyQueryUser(ResponseModel):
        id: str
        tag: Optional[Tag] = None

    MyQueryUser.model_validate({"id": "1", "tag": "BLUE"}).tag.is_known  # False
"""

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator


class OpenEnum(str, Enum):
    """A string enum that accepts values it does not declare.

    Unknown values become pseudo-members named ``Other`` that keep the raw
    string, so serializing them yields exactly what the server sent.
    """

    @classmethod
    def _missing_(cls, value: object):
        if not isinstance(value, str):
            return None
        member = str.__new__(cls, value)
        member._name_ = "Other"
        member._value_ = value
        return member

    @property
    def is_known(self) -> bool:
        return type(self).__members__.get(self._name_) is self

    def __str__(self) -> str:
        return self._value_


class ResponseModel(BaseModel):
    """Base class of generated response types.

    Fields listed in ``flattened_fields`` are read from, and written back to,
    the JSON object of the model itself rather than a nested key. Fragment
    spreads and the ``on`` variant of polymorphic selections use this.
    """

    model_config = ConfigDict(populate_by_name=True)

    flattened_fields: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _expand_flattened(cls, data: Any) -> Any:
        if not cls.flattened_fields or not isinstance(data, dict):
            return data
        expanded = dict(data)
        for name in cls.flattened_fields:
            if name not in data:
                expanded[name] = data
        return expanded

    @model_serializer(mode="wrap")
    def _merge_flattened(self, handler) -> Any:
        data = handler(self)
        if not isinstance(data, dict):
            return data
        for name in self.flattened_fields:
            nested = data.pop(name, None)
            if isinstance(nested, dict):
                for key, value in nested.items():
                    data.setdefault(key, value)
        return data


class InputModel(BaseModel):
    """Base class of generated input objects and operation variables."""

    model_config = ConfigDict(populate_by_name=True)

    def to_variables(self) -> dict[str, Any]:
        """Serialize to the JSON variables of a request.

        Fields that were never set are left out, which GraphQL treats
        differently from an explicit ``null``.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
