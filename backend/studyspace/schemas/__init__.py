"""
API Schema
"""
from studyspace.schemas.content import (
    FinalizeRequest,
    FinalizeResponse,
    EmbeddedMediaInfo,
    DiagramRenderRequest,
    DiagramRenderResponse,
)

__all__ = [
    "FinalizeRequest",
    "FinalizeResponse",
    "EmbeddedMediaInfo",
    "DiagramRenderRequest",
    "DiagramRenderResponse",
]
