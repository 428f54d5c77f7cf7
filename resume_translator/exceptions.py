# resume_translator/exceptions.py
"""
本模块定义了 resume-translator 中所有自定义的、语义化的异常类型。

每个异常都携带一个稳定的错误码 (`code`) 和一个与 HTTP 语义等价的状态码
(`status`)，上层 HTTP 层据此把异常映射为面向用户的响应。
异常中永远不包含 API 密钥等凭据。
"""

from typing import Any


class TranslatorError(Exception):
    """
    所有 resume-translator 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """

    code: str = "translate_failed"
    status: int = 500

    def __init__(self, message: str | None = None, *, status: int | None = None):
        super().__init__(message or self.code)
        if status is not None:
            self.status = status

    def to_dict(self) -> dict[str, Any]:
        """返回可安全暴露给调用方的错误描述。"""
        return {"error": self.code, "status": self.status, "message": str(self)}


class ConfigurationError(TranslatorError):
    """表示在加载或校验配置时发生的错误。"""

    code = "configuration_error"


class BackendNotConfiguredError(ConfigurationError):
    """
    表示翻译后端缺少凭据。
    协调器把它当作“软回退”信号处理，而不是致命错误。
    """

    code = "backend_not_configured"
    status = 503


class BackendNotFoundError(TranslatorError, KeyError):
    """
    表示请求了一个未注册的翻译后端。
    继承自 KeyError 是为了保持与字典查找行为的一致性。
    """

    code = "backend_not_found"

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else self.code


class TargetLanguageError(TranslatorError, ValueError):
    """目标语言缺失或无法识别。"""

    code = "target_invalid"
    status = 400


class TextTooLongError(TranslatorError, ValueError):
    """输入文本超过了配置的最大字符数。"""

    code = "text_too_long"
    status = 413

    def __init__(self, limit: int, length: int):
        super().__init__(f"输入长度 {length} 超过上限 {limit}。")
        self.limit = limit
        self.length = length

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["max"] = self.limit
        return data


class RemoteError(TranslatorError):
    """与远程补全服务交互时发生的错误的基类。"""

    code = "remote_error"
    status = 502

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        detail: str = "",
    ):
        super().__init__(message, status=status)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.detail:
            data["detail"] = self.detail
        return data


class RemoteHTTPError(RemoteError):
    """远程服务返回了不可重试的 4xx，或在 429/5xx 上耗尽了重试预算。"""

    code = "remote_http_error"


class RemoteBadResponseError(RemoteError):
    """远程服务返回了无法解析或内容为空的响应体。"""

    code = "remote_bad_response"
    status = 502


class RemoteTimeoutError(RemoteError):
    """单次远程调用超过了其截止时间。"""

    code = "timeout"
    status = 504


class RemoteNetworkError(RemoteError):
    """连接失败、连接被重置等传输层错误（不含超时）。"""

    code = "remote_network_error"
    status = 502
