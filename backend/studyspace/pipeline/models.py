"""
流水线数据结构
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class DirectiveKind(str, Enum):
    IMAGE_SEARCH = "ImageSearch"
    IMAGE_GENERATE = "ImageGenerate"
    DIAGRAM = "Diagram"


# 清单中的 kind 取值（与已落库的 images 字段保持一致）
MEDIA_KINDS = {
    DirectiveKind.IMAGE_SEARCH: "search",
    DirectiveKind.IMAGE_GENERATE: "generated",
    DirectiveKind.DIAGRAM: "diagram",
}


@dataclass(frozen=True)
class Directive:
    """Markdown 中的一个占位标记或图表代码块"""
    kind: DirectiveKind
    raw_span: str
    position: int
    description: str = ""
    engine: Optional[str] = None
    source: Optional[str] = None

    @property
    def end(self) -> int:
        return self.position + len(self.raw_span)

    @property
    def label(self) -> str:
        if self.kind is DirectiveKind.DIAGRAM:
            return f"{self.engine} diagram"
        return self.description

    def overlaps(self, other: "Directive") -> bool:
        return self.position < other.end and other.position < self.end


@dataclass(frozen=True)
class Resolution:
    """单个占位的解析结果：Resolved(url) 或 Failed(reason)"""
    url: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def resolved(cls, url: str) -> "Resolution":
        return cls(url=url)

    @classmethod
    def failed(cls, reason: str) -> "Resolution":
        return cls(reason=reason or "unknown error")

    @property
    def ok(self) -> bool:
        return self.url is not None

    @property
    def status(self) -> str:
        return "resolved" if self.ok else "failed"


@dataclass(frozen=True)
class EmbeddedMedia:
    description: str
    url: str
    kind: str

    def to_dict(self) -> dict:
        return {"description": self.description, "url": self.url, "kind": self.kind}


@dataclass
class FinalizedContent:
    content: str
    embedded_media: List[EmbeddedMedia] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "embedded_media": [m.to_dict() for m in self.embedded_media],
        }
