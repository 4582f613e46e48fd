"""
图表解析（Diagram Resolver）

职责：
- 引擎名 -> Kroki 引擎 ID（不可变映射）
- Mermaid 先经过语法守护清洗
- 小图：deflate + base64url 编码进 GET URL，HEAD 检查可达后直接返回
- 其余：POST 给 Kroki 渲染；SVG 内嵌为 data URL，PNG 按内容寻址落存储（同源码复用）
- 4xx 视为语法错误，不重试；所有失败都返回 Failed，不抛出
"""
import base64
import hashlib
import logging
import zlib
from types import MappingProxyType
from typing import List, Optional

from studyspace.config import settings
from studyspace.exceptions import DiagramSyntaxError, ResolutionError, TransientServiceError
from studyspace.pipeline.mermaid_guard import sanitize_mermaid_source
from studyspace.pipeline.models import Resolution
from studyspace.services.kroki_client import KrokiClient, kroki_client
from studyspace.utils.storage import save_object

logger = logging.getLogger(__name__)

DIAGRAM_ENGINES = MappingProxyType({
    # 常用
    "mermaid": "mermaid",
    "plantuml": "plantuml",
    "graphviz": "graphviz",
    "dot": "graphviz",
    "d2": "d2",
    "excalidraw": "excalidraw",
    # 其他
    "blockdiag": "blockdiag",
    "seqdiag": "seqdiag",
    "actdiag": "actdiag",
    "nwdiag": "nwdiag",
    "packetdiag": "packetdiag",
    "rackdiag": "rackdiag",
    "c4plantuml": "c4plantuml",
    "ditaa": "ditaa",
    "erd": "erd",
    "nomnoml": "nomnoml",
    "pikchr": "pikchr",
    "structurizr": "structurizr",
    "svgbob": "svgbob",
    "vega": "vega",
    "vegalite": "vegalite",
    "wavedrom": "wavedrom",
    "wireviz": "wireviz",
})

OUTPUT_FORMATS = ("png", "svg")


def resolve_engine(name: str) -> str:
    """引擎名（不区分大小写）-> Kroki 引擎 ID；未知引擎原样透传"""
    key = (name or "").strip().lower()
    return DIAGRAM_ENGINES.get(key, key)


def available_engines() -> List[str]:
    return list(DIAGRAM_ENGINES.keys())


def encode_diagram_source(source: str) -> str:
    """deflate 压缩 + base64url（+ -> -，/ -> _，去掉 = 填充）"""
    compressed = zlib.compress(source.encode("utf-8"), 9)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decode_diagram_source(encoded: str) -> str:
    padded = encoded + "=" * (-len(encoded) % 4)
    return zlib.decompress(base64.urlsafe_b64decode(padded)).decode("utf-8")


def prepare_source(engine: str, source: str) -> str:
    cleaned = (source or "").strip()
    if engine == "mermaid":
        cleaned = sanitize_mermaid_source(cleaned)
    return cleaned


def diagram_url(name: str, source: str, output_format: str = "png", client: Optional[KrokiClient] = None) -> str:
    """生成 GET 形式的 Kroki 图表 URL（不发请求）"""
    engine = resolve_engine(name)
    renderer = client or kroki_client
    return renderer.get_url(engine, output_format, encode_diagram_source(prepare_source(engine, source)))


def content_id(engine: str, source: str) -> str:
    """内容寻址 ID：相同引擎 + 相同（清洗后）源码 -> 相同 ID"""
    digest = hashlib.md5(source.encode("utf-8")).hexdigest()[:12]
    return f"diagram_{engine}_{digest}"


def _data_url(content: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


async def _resolve_by_url(renderer: KrokiClient, engine: str, source: str, output_format: str) -> Optional[Resolution]:
    """
    GET URL 路径；URL 过长或检查结果不确定时返回 None，由调用方改走 POST
    """
    url = renderer.get_url(engine, output_format, encode_diagram_source(source))
    if len(url) > settings.diagram_url_max_length:
        return None

    try:
        status_code = await renderer.check(url)
    except TransientServiceError as e:
        logger.info("Diagram URL check inconclusive (%s), falling back to POST", e)
        return None

    if status_code < 400:
        return Resolution.resolved(url)
    if status_code < 500:
        return Resolution.failed(str(DiagramSyntaxError(f"HTTP {status_code}")))
    logger.info("Diagram URL check returned HTTP %s, falling back to POST", status_code)
    return None


async def _resolve_by_render(renderer: KrokiClient, engine: str, source: str, output_format: str) -> Resolution:
    content = await renderer.render(engine, source, output_format)

    if output_format == "svg" and settings.diagram_inline_svg:
        return Resolution.resolved(_data_url(content, "image/svg+xml"))

    url = await save_object(
        content,
        folder="diagrams",
        object_id=content_id(engine, source),
        ext=f".{output_format}",
    )
    logger.info("Diagram stored: %s (%d bytes)", url, len(content))
    return Resolution.resolved(url)


async def resolve_diagram(
    name: str,
    source: str,
    output_format: Optional[str] = None,
    prefer_url: Optional[bool] = None,
    client: Optional[KrokiClient] = None,
) -> Resolution:
    """
    解析单个图表

    Args:
        name: 引擎名（mermaid / dot / plantuml ...）
        source: 图表源码
        output_format: png|svg，默认取配置
        prefer_url: 小图是否优先用 GET URL，默认取配置
        client: Kroki 客户端

    Returns:
        Resolution（失败不抛出）
    """
    engine = resolve_engine(name)
    output_format = (output_format or settings.diagram_output_format).lower()
    if output_format not in OUTPUT_FORMATS:
        return Resolution.failed(f"Unsupported diagram format: {output_format}")
    prefer_url = settings.diagram_url_mode if prefer_url is None else prefer_url
    renderer = client or kroki_client

    cleaned = prepare_source(engine, source)
    if not cleaned:
        return Resolution.failed("Empty diagram source")

    logger.info("Rendering %s diagram as %s (%d chars)", engine, output_format.upper(), len(cleaned))
    try:
        if prefer_url:
            resolution = await _resolve_by_url(renderer, engine, cleaned, output_format)
            if resolution is not None:
                return resolution
        return await _resolve_by_render(renderer, engine, cleaned, output_format)
    except ResolutionError as e:
        logger.warning("Diagram rendering failed (%s): %s", engine, e)
        return Resolution.failed(str(e))
    except OSError as e:
        logger.error("Diagram storage failed (%s): %s", engine, e)
        return Resolution.failed(f"Diagram storage failed: {e}")
