from __future__ import annotations

from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """
    One stored key/value pair. Mirrors the collection document shape:
      { "_id": <str | number>, "value": <JSON> }
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Union[str, int, float] = Field(alias="_id")
    value: Any = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Record":
        return cls.model_validate(doc)

    def to_document(self) -> dict[str, Any]:
        return {"_id": self.id, "value": self.value}
