"""
生成笔记的结构解析：拒答检测 + 标题/正文拆分
"""
import re
from typing import Tuple

DEFAULT_TITLE = "Study Notes"

# "# 标题\n> 摘要...\n---\n正文"
TITLE_SUMMARY_RE = re.compile(r"^#\s+(.+?)[\r\n]+>[\s\S]*?[\r\n]+---[\r\n]+([\s\S]+)")
# "# 标题\n---\n正文"
TITLE_SEPARATOR_RE = re.compile(r"^#\s+(.+?)[\r\n]+---[\r\n]+([\s\S]+)")
# "# 标题\n正文"
TITLE_ONLY_RE = re.compile(r"^#\s+(.+?)[\r\n]+([\s\S]+)")


def is_refusal(text: str) -> bool:
    """模型拒绝处理不合适的内容时只输出 REFUSE"""
    return text.strip().startswith("REFUSE")


def split_generated_notes(text: str) -> Tuple[str, str]:
    """拆出标题和正文；不符合任何格式时整段作为正文"""
    for pattern in (TITLE_SUMMARY_RE, TITLE_SEPARATOR_RE, TITLE_ONLY_RE):
        m = pattern.match(text)
        if m:
            return m.group(1).strip(), m.group(2).strip()
    return DEFAULT_TITLE, text
