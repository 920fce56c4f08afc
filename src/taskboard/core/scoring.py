"""RICE 评分函数

score = reach * impact * confidence / max(1, effort)，保留两位小数。

舍入采用「最短 repr 十进制表示 + 四舍五入（half-up）」。
SQLite 内置 ROUND(x, 2) 先按 15 位有效数字格式化，与该规则不一致，
因此 SQL 排序不使用 ROUND，而是把 compute_score 注册为连接上的函数 rice_score，
两条路径执行的是同一段代码。
"""

import math
from decimal import ROUND_HALF_UP, Context, Decimal

# 缺失或非数值输入的默认值
DEFAULT_RICE_VALUE: float = 1.0

# effort 下限（避免除以 0 或负数）
MIN_EFFORT: float = 1.0

_TWO_PLACES = Decimal("0.01")

# double 最大约 309 位整数部分，保证 quantize 不溢出精度
_ROUND_CONTEXT = Context(prec=400)

# 注册到 SQLite 连接上的函数名（见 store.sqlite_init.register_score_function）
SCORE_FUNCTION_NAME = "rice_score"

# tasks 表上的分数表达式，列名对应 tasks 表
SCORE_SQL = f"{SCORE_FUNCTION_NAME}(reach, impact, confidence, effort)"


def coerce_rice_value(value: object) -> float:
    """将 RICE 参数规整为非负浮点数

    None、布尔值、无法解析的字符串、NaN/Inf 一律视为 1；负数截断为 0。
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_RICE_VALUE
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_RICE_VALUE
    if math.isnan(number) or math.isinf(number):
        return DEFAULT_RICE_VALUE
    return max(0.0, number)


def round_score(raw: float) -> float:
    """按 half-up 规则保留两位小数"""
    quantized = Decimal(repr(float(raw))).quantize(
        _TWO_PLACES,
        rounding=ROUND_HALF_UP,
        context=_ROUND_CONTEXT,
    )
    return float(quantized)


def compute_score(
    reach: object = None,
    impact: object = None,
    confidence: object = None,
    effort: object = None,
) -> float:
    """计算 RICE 分数

    Args:
        reach: 覆盖面
        impact: 影响力
        confidence: 置信度
        effort: 工作量（下限为 1）

    Returns:
        两位小数的非负分数
    """
    r = coerce_rice_value(reach)
    i = coerce_rice_value(impact)
    c = coerce_rice_value(confidence)
    e = max(MIN_EFFORT, coerce_rice_value(effort))
    return round_score((r * i * c) / e)
