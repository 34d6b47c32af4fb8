"""Base domain exceptions.

所有领域异常都应继承自 DomainException，并可以通过定义 error_code 类属性
来区分错误类型，供渲染层展示或重试判断使用。
"""


class DomainException(Exception):
    """Base exception for all domain errors.

    子类可以通过定义以下类属性来自定义错误信息：
    - error_code: 错误代码字符串（默认 "DOMAIN_ERROR"）
    - retryable: 是否可以用相同参数重试（默认 False）
    """

    error_code: str = "DOMAIN_ERROR"
    retryable: bool = False

    def __init__(self, message: str = "A domain error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainException):
    """Raised when validation fails."""

    error_code = "VALIDATION_ERROR"


class ExternalServiceError(DomainException):
    """Raised when a call to the intranet backend fails."""

    error_code = "EXTERNAL_SERVICE_ERROR"
    retryable = True

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
