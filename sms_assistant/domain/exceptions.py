"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在编排层或 Webhook 层做统一捕获与用户提示。

每个异常都带有 retryable 标记：编排层据此区分瞬时错误
（可由外层 supervisor 重试）与永久错误（换输入才可能成功）。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_UNAVAILABLE"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 trace_id、provider 等）。
    """

    retryable: bool = False

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


# ---- Provider HTTP 层 ----


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""

    retryable = True


class ApiError(BusinessError):
    """第三方 API 返回非 2xx/429 错误时抛出。"""


class RateLimitError(BusinessError):
    """Provider 限流错误，由上层负责重试/退避策略。"""

    retryable = True


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


# ---- 编排核心 ----


class StoreUnavailable(BusinessError):
    """会话存储读写失败，调用方可以重试整个入站事件。"""

    retryable = True

    def __init__(self, code: str = "STORE_UNAVAILABLE", message: str = "conversation store unavailable", **extra):
        super().__init__(code, message, http_status=503, **extra)


class BackendError(BusinessError):
    """ChatBackend 调用失败的公共基类。"""


class BackendUnavailable(BackendError):
    """瞬时失败：超时、限流、服务端 5xx。"""

    retryable = True

    def __init__(self, code: str = "BACKEND_UNAVAILABLE", message: str = "chat backend unavailable", **extra):
        super().__init__(code, message, http_status=503, **extra)


class BackendRejected(BackendError):
    """永久失败：请求非法或内容策略拒绝，重试无意义。"""

    def __init__(self, code: str = "BACKEND_REJECTED", message: str = "chat backend rejected the request", **extra):
        super().__init__(code, message, http_status=422, **extra)


class TransportFailure(BusinessError):
    """出站短信投递失败。核心层不自动重试。"""

    def __init__(self, code: str = "TRANSPORT_FAILURE", message: str = "outbound delivery failed", retryable: bool = False, **extra):
        super().__init__(code, message, http_status=502, **extra)
        self.retryable = retryable
