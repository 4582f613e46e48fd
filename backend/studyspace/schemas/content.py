"""
内容后处理相关 Schema
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal


class FinalizeRequest(BaseModel):
    """生成笔记后处理请求"""
    markdown: str = Field(..., min_length=1)


class EmbeddedMediaInfo(BaseModel):
    """嵌入的图片/图表"""
    description: str
    url: str
    kind: Literal["search", "generated", "diagram"]


class FinalizeResponse(BaseModel):
    """后处理结果"""
    title: str
    content: str
    embedded_media: List[EmbeddedMediaInfo] = []


class DiagramRenderRequest(BaseModel):
    """单图渲染请求"""
    engine: str = Field(..., min_length=1, max_length=50)
    source: str
    format: Optional[Literal["png", "svg"]] = None


class DiagramRenderResponse(BaseModel):
    """单图渲染结果"""
    status: Literal["resolved", "failed"]
    url: Optional[str] = None
    error: Optional[str] = None
