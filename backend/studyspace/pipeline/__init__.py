"""
内容后处理流水线

提取占位 -> 图表 / 图片解析 -> 整合
"""
from studyspace.pipeline.assembler import assemble
from studyspace.pipeline.diagram import (
    DIAGRAM_ENGINES,
    available_engines,
    decode_diagram_source,
    diagram_url,
    encode_diagram_source,
    resolve_diagram,
)
from studyspace.pipeline.directives import extract_directives
from studyspace.pipeline.finalize import finalize, resolve_directive
from studyspace.pipeline.image import generate_image, search_image
from studyspace.pipeline.mermaid_guard import sanitize_mermaid_source
from studyspace.pipeline.models import (
    Directive,
    DirectiveKind,
    EmbeddedMedia,
    FinalizedContent,
    Resolution,
)

__all__ = [
    "assemble",
    "DIAGRAM_ENGINES",
    "available_engines",
    "decode_diagram_source",
    "diagram_url",
    "encode_diagram_source",
    "resolve_diagram",
    "extract_directives",
    "finalize",
    "resolve_directive",
    "generate_image",
    "search_image",
    "sanitize_mermaid_source",
    "Directive",
    "DirectiveKind",
    "EmbeddedMedia",
    "FinalizedContent",
    "Resolution",
]
