"""Taskboard 异常体系"""


class TaskboardError(Exception):
    """Taskboard 基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过降级到文件存储恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class StorageError(TaskboardError):
    """关系型存储失败（连接、查询、提交等）

    此异常触发 StorageClient 的降级逻辑。
    """

    def __init__(self, operation: str, original_error: Exception) -> None:
        super().__init__(
            f"数据库操作失败: {operation} -- {original_error}",
            recoverable=True,
        )
        self.operation = operation
        self.original_error = original_error


class TaskFileError(TaskboardError):
    """任务文件缺失或无法解析

    文件是最后一级存储，此异常不可降级，直接暴露给调用方。
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"任务文件不可用: {path} -- {reason}", recoverable=False)
        self.path = path
        self.reason = reason


class InvalidTaskUpdateError(TaskboardError):
    """任务更新字段非法"""

    def __init__(self, message: str) -> None:
        super().__init__(message, recoverable=False)


class InvalidActionStatusError(TaskboardError):
    """完成 action 时给出的状态不是终态"""

    def __init__(self, status: str) -> None:
        super().__init__(
            f"Action status must be 'done' or 'failed', got '{status}'",
            recoverable=False,
        )
        self.status = status


class InvalidCommentError(TaskboardError):
    """评论正文为空"""

    def __init__(self, message: str = "Comment body required") -> None:
        super().__init__(message, recoverable=False)
