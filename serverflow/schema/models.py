"""Declarative screen schema returned by ``GET /screens/{id}``."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..actions.models import UiAction
from ..actions.parser import ActionParser

logger = logging.getLogger(__name__)

FALLBACK_NODE_TYPE = "fallback"

JsonScalar = Union[str, int, float, bool, None]


class _SchemaModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Position(_SchemaModel):
    x: Optional[int] = None
    y: Optional[int] = None


def fallback_node(raw: Any, error: Exception | str) -> "SchemaNode":
    """Build the placeholder rendered in place of a node that failed to parse."""
    properties: Dict[str, Any] = {"error": str(error)}
    node_id = None
    if isinstance(raw, dict):
        if isinstance(raw.get("type"), str):
            properties["originalType"] = raw["type"]
        if isinstance(raw.get("id"), str):
            node_id = raw["id"]
    return SchemaNode(id=node_id, type=FALLBACK_NODE_TYPE, properties=properties)


def _lenient_node(raw: Any) -> "SchemaNode":
    if isinstance(raw, SchemaNode):
        return raw
    try:
        return SchemaNode.model_validate(raw)
    except PydanticValidationError as exc:
        logger.warning(f"Replacing malformed schema node with fallback: {exc.error_count()} error(s)")
        return fallback_node(raw, exc)


class SchemaNode(_SchemaModel):
    """One element of the screen tree.

    ``type`` selects a renderer; ``children`` order is rendering order.
    A child that fails validation is replaced by a ``fallback`` node so one
    bad node never fails the whole tree.
    """

    id: Optional[str] = None
    type: str
    name: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)
    style: Dict[str, Any] = Field(default_factory=dict)
    children: List["SchemaNode"] = Field(default_factory=list)
    position: Optional[Position] = None
    data: JsonScalar = None
    data_source: Optional[str] = Field(default=None, alias="dataSource")
    content: JsonScalar = None
    items: Optional[List[Any]] = None
    action: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _sanitize_children(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("children"), list):
            data = dict(data)
            data["children"] = [_lenient_node(child) for child in data["children"]]
        return data

    def parsed_action(self) -> Optional[UiAction]:
        """Parse the embedded action definition, ``None`` if absent or invalid."""
        return ActionParser.parse(self.action) if self.action is not None else None

    def walk(self) -> Iterator["SchemaNode"]:
        """Yield this node and its descendants depth-first in rendering order."""
        yield self
        for child in self.children:
            yield from child.walk()

    @property
    def is_fallback(self) -> bool:
        return self.type == FALLBACK_NODE_TYPE


class ScreenSections(_SchemaModel):
    top_bar: Optional[SchemaNode] = Field(default=None, alias="topBar")
    body: Optional[SchemaNode] = None
    bottom_bar: Optional[SchemaNode] = Field(default=None, alias="bottomBar")

    @model_validator(mode="before")
    @classmethod
    def _sanitize_sections(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("topBar", "top_bar", "body", "bottomBar", "bottom_bar"):
            if data.get(key) is not None:
                data[key] = _lenient_node(data[key])
        return data

    def nodes(self) -> List[SchemaNode]:
        return [node for node in (self.top_bar, self.body, self.bottom_bar) if node is not None]


class DocumentMeta(_SchemaModel):
    document_id: str = Field(alias="documentId")
    name: str
    exported_at: str = Field(alias="exportedAt")


class ScreenDefinition(_SchemaModel):
    id: str
    type: str
    name: Optional[str] = None
    style: Dict[str, Any] = Field(default_factory=dict)
    sections: ScreenSections = Field(default_factory=ScreenSections)
    references: Dict[str, Any] = Field(default_factory=dict)


class ScreenSchema(_SchemaModel):
    """Document metadata plus the screen definition. Replaced wholesale on fetch."""

    document: DocumentMeta
    screen: ScreenDefinition

    def walk(self) -> Iterator[SchemaNode]:
        for section in self.screen.sections.nodes():
            yield from section.walk()

    def find_node(self, node_id: str) -> Optional[SchemaNode]:
        return next((node for node in self.walk() if node.id == node_id), None)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> "ScreenSchema":
        return cls.model_validate_json(data)
