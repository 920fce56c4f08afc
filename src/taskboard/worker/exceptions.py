"""Worker 客户端异常体系"""


class WorkerError(Exception):
    """Worker 客户端基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过下一轮轮询恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class WorkerAuthError(WorkerError):
    """worker token 缺失或与服务端不一致（HTTP 401）

    重试无法恢复，需要修正配置。
    """

    def __init__(self, message: str = "Worker token rejected by gateway") -> None:
        super().__init__(message, recoverable=False)


class GatewayUnreachableError(WorkerError):
    """Gateway 不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, base_url: str, original_error: Exception) -> None:
        """
        Args:
            base_url: 尝试连接的 Gateway 地址
            original_error: 原始异常
        """
        super().__init__(
            f"Gateway 不可达: {base_url} -- {original_error}",
            recoverable=True,
        )
        self.base_url = base_url
        self.original_error = original_error
