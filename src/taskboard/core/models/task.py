"""Task 领域模型

score 是 framework 的派生属性，每次读取时重新计算，不作为独立数据存储。
任务文件中的未知字段原样保留（extra="allow"）。
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from ..scoring import DEFAULT_RICE_VALUE, coerce_rice_value, compute_score
from .enums import TaskStatus


class RiceFramework(BaseModel):
    """RICE 参数（缺失或非数值时取 1）"""

    reach: float = Field(default=DEFAULT_RICE_VALUE, description="覆盖面")
    impact: float = Field(default=DEFAULT_RICE_VALUE, description="影响力")
    confidence: float = Field(default=DEFAULT_RICE_VALUE, description="置信度")
    effort: float = Field(default=DEFAULT_RICE_VALUE, description="工作量")

    @field_validator("reach", "impact", "confidence", "effort", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> float:
        return coerce_rice_value(value)


class Task(BaseModel):
    """Task 数据模型"""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="任务标识")
    title: str = Field(default="", description="任务标题")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="当前状态")
    owner: str = Field(default="", description="负责人")
    due: str | None = Field(default=None, description="截止时间（ISO 格式）")
    framework: RiceFramework = Field(default_factory=RiceFramework, description="RICE 参数")
    position: int = Field(default=0, exclude=True, description="在任务文件中的顺序，用于同分排序")

    @model_validator(mode="before")
    @classmethod
    def _drop_derived(cls, data: Any) -> Any:
        # score 只能派生，忽略外部传入的值
        if isinstance(data, dict) and "score" in data:
            data = {k: v for k, v in data.items() if k != "score"}
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> str:
        return str(value)

    @field_validator("title", "owner", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("due", mode="before")
    @classmethod
    def _due_to_iso(cls, value: Any) -> str | None:
        # YAML 会把 2024-05-01 解析成 date
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return None if value is None else str(value)

    @field_validator("framework", mode="before")
    @classmethod
    def _framework_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> float:
        """RICE 分数（派生）"""
        f = self.framework
        return compute_score(f.reach, f.impact, f.confidence, f.effort)


class TaskSummary(BaseModel):
    """任务看板汇总"""

    total: int = 0
    todo: int = 0
    in_progress: int = 0
    blocked: int = 0
    done: int = 0
    # 对外 JSON 键名沿用 topScore，已有前端按此读取
    top_score: float = Field(default=0.0, serialization_alias="topScore")


class TaskBoard(BaseModel):
    """「加载任务」的统一返回结构，与后端无关"""

    updated_at: str | None = Field(default=None, description="数据更新时间")
    tasks: list[Task] = Field(default_factory=list, description="按分数倒序的任务列表")
    summary: TaskSummary = Field(default_factory=TaskSummary)
    source: str = Field(description="应答的存储后端：database / file")
    warnings: list[str] = Field(default_factory=list, description="后端分歧提示")
