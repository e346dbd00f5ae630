"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 REPL 循环或 CLI 入口做统一捕获与用户提示。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "KNOWLEDGE_PARSE_ERROR"）。
        message: 用户可读错误信息。
        http_status: 远端调用失败时对应的 HTTP 状态码，默认 400。
        extra: 其他补充字段（例如 path、provider 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ConfigError(BusinessError):
    """启动配置缺失或非法，进入循环前即终止进程。"""


class KnowledgeLoadError(BusinessError):
    """知识文件不可读、JSON 格式错误或结构不符合预期。"""


class InputError(BusinessError):
    """读取终端输入失败。code 为 INPUT_EOF 时视为退出。"""


class RemoteCallError(BusinessError):
    """远端 LLM 调用失败的基类，REPL 对所有子类一视同仁。"""


class NetworkError(RemoteCallError):
    """网络层错误，例如连接失败、超时等。"""


class AuthError(RemoteCallError):
    """凭据被拒绝（401/403）。"""


class RateLimitError(RemoteCallError):
    """Provider 限流错误（429）。"""


class ApiError(RemoteCallError):
    """第三方 API 返回其他非 2xx 错误时抛出。"""


class MalformedResponseError(RemoteCallError):
    """响应不是合法 JSON，或缺少 choices/content。"""
