"""评论命令解析 -- 从评论正文中提取 @TARS 之后的命令文本"""

import re

from .config import COMMAND_MARKER

# 标记后允许紧跟冒号/逗号等分隔符，命令文本可跨行
_COMMAND_PATTERN = re.compile(
    rf"(?<![\w@]){re.escape(COMMAND_MARKER)}\b[\s:,\-]*(?P<command>.+)",
    re.IGNORECASE | re.DOTALL,
)


def extract_command(body: str) -> str | None:
    """提取评论中的命令

    Args:
        body: 评论正文

    Returns:
        标记之后去除首尾空白的命令文本；没有标记或标记后为空时返回 None
    """
    match = _COMMAND_PATTERN.search(body or "")
    if match is None:
        return None
    command = match.group("command").strip()
    return command or None
