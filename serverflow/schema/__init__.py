"""Screen schema object model."""

from .models import (
    FALLBACK_NODE_TYPE,
    DocumentMeta,
    Position,
    SchemaNode,
    ScreenDefinition,
    ScreenSchema,
    ScreenSections,
    fallback_node,
)

__all__ = [
    "FALLBACK_NODE_TYPE",
    "DocumentMeta",
    "Position",
    "SchemaNode",
    "ScreenDefinition",
    "ScreenSchema",
    "ScreenSections",
    "fallback_node",
]
