"""
流水线异常

- ContentValidationError：输入本身无效，直接抛给调用方
- ResolutionError 及其子类：单个占位解析失败，在流水线内部转为文档内标注
"""
from typing import Optional


class PipelineError(Exception):
    """内容后处理流水线异常基类"""


class ContentValidationError(PipelineError):
    """输入文档缺失或类型错误"""


class ResolutionError(PipelineError):
    """单个占位（图片/图表）解析失败"""


class DiagramSyntaxError(ResolutionError):
    """渲染服务以 4xx 拒绝图表源码，不重试"""

    def __str__(self) -> str:
        return f"Diagram syntax error: {self.args[0] if self.args else ''}"


class TransientServiceError(ResolutionError):
    """上游过载 / 限流 / 网络错误 / 超时"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        # 只有 502（上游过载）值得重试
        return self.status_code == 502


class MediaNotFoundError(ResolutionError):
    """图片搜索无结果"""


class ServiceNotConfiguredError(ResolutionError):
    """外部服务缺少凭据"""
