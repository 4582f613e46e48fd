"""
占位标记提取（Directive Extractor）

识别三类标记：
- 图片搜索：{{IMAGE: 描述}}（标签区分大小写）
- 图片生成：{{GENERATE: 描述}} / {{DIAGRAM: 描述}} / {{ILLUSTRATION: 描述}}（标签不区分大小写）
- 图表：```mermaid ... ``` 等代码块，或 {{DIAGRAM:引擎\n源码\n}}

提取从不失败：格式不对的标记不匹配，原样保留为正文。
"""
import re
from typing import List

from studyspace.exceptions import ContentValidationError
from studyspace.pipeline.models import Directive, DirectiveKind

DIAGRAM_LANGUAGES = (
    "mermaid", "plantuml", "graphviz", "dot", "d2", "blockdiag", "seqdiag",
    "actdiag", "nwdiag", "ditaa", "erd", "nomnoml", "pikchr", "svgbob",
    "vega", "vegalite", "wavedrom",
)

IMAGE_PATTERN = re.compile(r"\{\{IMAGE:\s*([^}]*)\}\}")
GENERATE_PATTERN = re.compile(r"\{\{(GENERATE|DIAGRAM|ILLUSTRATION):\s*([^}]*)\}\}", re.IGNORECASE)
DIAGRAM_BLOCK_PATTERN = re.compile(
    r"```(" + "|".join(DIAGRAM_LANGUAGES) + r")\n([\s\S]*?)```",
    re.IGNORECASE,
)
INLINE_DIAGRAM_PATTERN = re.compile(r"\{\{DIAGRAM:(\w+)\n([\s\S]*?)\}\}", re.IGNORECASE)


def _ensure_text(content) -> str:
    if not isinstance(content, str):
        raise ContentValidationError(
            f"Markdown content must be a string, got {type(content).__name__}"
        )
    return content


def extract_diagram_blocks(content: str) -> List[Directive]:
    """提取图表代码块（围栏形式 + 内联形式）"""
    content = _ensure_text(content)
    diagrams = []
    for pattern in (DIAGRAM_BLOCK_PATTERN, INLINE_DIAGRAM_PATTERN):
        for m in pattern.finditer(content):
            diagrams.append(Directive(
                kind=DirectiveKind.DIAGRAM,
                raw_span=m.group(0),
                position=m.start(),
                engine=m.group(1).lower(),
                source=m.group(2).strip(),
            ))
    return diagrams


def extract_image_placeholders(content: str) -> List[Directive]:
    """提取 {{IMAGE: ...}} 图片搜索占位"""
    content = _ensure_text(content)
    return [
        Directive(
            kind=DirectiveKind.IMAGE_SEARCH,
            raw_span=m.group(0),
            position=m.start(),
            description=m.group(1).strip(),
        )
        for m in IMAGE_PATTERN.finditer(content)
    ]


def extract_generation_requests(content: str) -> List[Directive]:
    """提取 {{GENERATE|DIAGRAM|ILLUSTRATION: ...}} 图片生成占位"""
    content = _ensure_text(content)
    return [
        Directive(
            kind=DirectiveKind.IMAGE_GENERATE,
            raw_span=m.group(0),
            position=m.start(),
            description=m.group(2).strip(),
        )
        for m in GENERATE_PATTERN.finditer(content)
    ]


def extract_directives(content: str) -> List[Directive]:
    """
    提取全部占位，返回互不重叠的列表（按出现位置升序）

    重叠时按优先级保留：图表 > 图片搜索 > 图片生成。
    例如 {{DIAGRAM:mermaid\\n...}} 同时符合生成占位的写法，按图表处理；
    图表代码块里出现的 {{IMAGE: ...}} 属于图表源码，不单独处理。
    """
    content = _ensure_text(content)

    accepted: List[Directive] = []
    for group in (
        extract_diagram_blocks(content),
        extract_image_placeholders(content),
        extract_generation_requests(content),
    ):
        for directive in group:
            if any(directive.overlaps(other) for other in accepted):
                continue
            accepted.append(directive)

    accepted.sort(key=lambda d: d.position)
    return accepted
