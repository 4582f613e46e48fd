"""
全文整合（Content Rewriter）

职责：
- 把每个占位替换为 Markdown 图片，或保留原文并追加失败说明
- 按位置从后往前替换；按偏移切片拼接，不做字符串查找替换，
  因此两个文本完全相同的占位也不会互相错位
- 不抛出：单个占位失败只会变成文档里的一条标注
"""
from typing import Iterable, List, Tuple

from studyspace.pipeline.models import (
    MEDIA_KINDS,
    Directive,
    DirectiveKind,
    EmbeddedMedia,
    FinalizedContent,
    Resolution,
)

FAILURE_NOTES = {
    DirectiveKind.DIAGRAM: "Diagram rendering failed",
    DirectiveKind.IMAGE_SEARCH: "Image not found",
    DirectiveKind.IMAGE_GENERATE: "Image generation failed",
}


def image_markdown(label: str, url: str) -> str:
    return f"![{label}]({url})"


def failure_annotation(directive: Directive, reason: str) -> str:
    """保留原始占位，后面追加一条可见的失败说明"""
    note = FAILURE_NOTES[directive.kind]
    return f"{directive.raw_span}\n\n*⚠️ {note}: {reason}*"


def render_replacement(directive: Directive, resolution: Resolution) -> str:
    if resolution.ok:
        return image_markdown(directive.label, resolution.url)
    return failure_annotation(directive, resolution.reason)


def assemble(content: str, pairs: Iterable[Tuple[Directive, Resolution]]) -> FinalizedContent:
    """
    整合文档

    Args:
        content: 原始 Markdown
        pairs: (占位, 解析结果) 列表，占位之间互不重叠

    Returns:
        FinalizedContent：替换后的正文 + 成功嵌入的媒体清单（按文档顺序）
    """
    ordered = sorted(pairs, key=lambda pair: pair[0].position, reverse=True)

    pieces: List[str] = []
    media: List[EmbeddedMedia] = []
    cursor = len(content)

    for directive, resolution in ordered:
        pieces.append(content[directive.end:cursor])
        pieces.append(render_replacement(directive, resolution))
        cursor = directive.position

        if resolution.ok:
            media.append(EmbeddedMedia(
                description=directive.label,
                url=resolution.url,
                kind=MEDIA_KINDS[directive.kind],
            ))

    pieces.append(content[:cursor])
    pieces.reverse()
    media.reverse()

    return FinalizedContent(content="".join(pieces), embedded_media=media)
