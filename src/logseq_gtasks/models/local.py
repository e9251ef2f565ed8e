"""Typed records for the local Logseq store."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

PropertyValue = str | list[str]


def _stringify(value: Any) -> PropertyValue:
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value]
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Page(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(frozen=True)


class LocalBlock(BaseModel):
    """A block as the store reports it.

    ``deadline`` is Logseq's compact ``yyyymmdd`` integer; ``marker`` is the
    task keyword Logseq parsed from the first content token, if any.
    """

    id: str
    content: str = ""
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    children: list[LocalBlock] = Field(default_factory=list)
    deadline: int | None = None
    marker: str | None = None

    @field_validator("properties", mode="before")
    @classmethod
    def _normalize_properties(cls, value: Any) -> dict[str, PropertyValue]:
        if not value:
            return {}
        return {str(k): _stringify(v) for k, v in dict(value).items()}

    def prop(self, key: str) -> str | None:
        """Scalar view of a property; list values collapse to their first element."""
        value = self.properties.get(key)
        if isinstance(value, list):
            return value[0] if value else None
        return value


class BlockDraft(BaseModel):
    """Content, properties and children to write for one block."""

    content: str
    properties: dict[str, PropertyValue] = Field(default_factory=dict)
    children: list[BlockDraft] = Field(default_factory=list)

    def to_batch(self) -> dict[str, Any]:
        """Shape expected by ``insertBatchBlock``."""
        payload: dict[str, Any] = {"content": self.content, "properties": dict(self.properties)}
        if self.children:
            payload["children"] = [child.to_batch() for child in self.children]
        return payload


class UserConfig(BaseModel):
    """The subset of the Logseq user configuration the codec needs."""

    preferred_date_format: str = "MMM do, yyyy"
    preferred_todo: str = "LATER"
