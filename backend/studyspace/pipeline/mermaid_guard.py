"""
Mermaid 语法守护

目标：
- 修复模型常见的 Mermaid 输出问题，避免渲染服务报语法错误
- 纯启发式规则（不是解析器），规则需与已生成的历史内容保持兼容，不要随意"改进"
- 幂等：对已清洗的源码再次清洗结果不变
"""
import re

DECLARATION_PREFIXES = (
    "graph ",
    "flowchart ",
    "sequenceDiagram",
    "classDiagram",
    "stateDiagram",
    "erDiagram",
    "gantt",
    "pie",
    "subgraph ",
)

# 闭合括号后跟 2 个以上空白，再跟一个新节点定义（标识符 + [ { (）
MISSING_BREAK_RE = re.compile(r"([}\])])(\s{2,})([A-Za-z_][A-Za-z0-9_]*(?:\[|\{|\())")

# 连线：--> / --- / --| / -.-> / |> / <|
CONNECTOR_RE = re.compile(r"-->|---|--\||-.->|\|>|<\|")


def _strip_quotes(source: str) -> str:
    return (
        source
        .replace("\u2018", "").replace("\u2019", "")
        .replace("\u201c", '"').replace("\u201d", '"')
        .replace("'", "")
        .replace("`", "")
    )


def _needs_semicolon(line: str) -> bool:
    trimmed = line.strip()
    if not trimmed:
        return False
    if trimmed.startswith(DECLARATION_PREFIXES) or trimmed == "end":
        return False
    if trimmed.endswith((";", "{", ":")):
        return False
    return bool(CONNECTOR_RE.search(trimmed))


def sanitize_mermaid_source(source: str) -> str:
    """
    清洗 Mermaid 源码

    1) 去掉会破坏节点标签的引号：弯单引号、直单引号、反引号删除，弯双引号转直双引号
    2) 一行里挤了多条语句时（`]   C[`），在新节点前补换行 + 4 空格缩进
    3) 含连线的语句行末尾补分号（声明行、end、已以 ; { : 结尾的行除外）
    """
    cleaned = _strip_quotes(source.strip())
    cleaned = MISSING_BREAK_RE.sub(lambda m: f"{m.group(1)}\n    {m.group(3)}", cleaned)

    lines = [
        f"{line};" if _needs_semicolon(line) else line
        for line in cleaned.split("\n")
    ]
    return "\n".join(lines)
