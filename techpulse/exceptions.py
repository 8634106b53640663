class TechPulseException(Exception):
    """TechPulse 基础异常类"""
    def __init__(self, message, code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['code'] = self.code
        rv['success'] = False
        return rv


class ValidationError(TechPulseException):
    """输入校验错误 (表单字段、游标等)"""
    def __init__(self, message="Invalid data", payload=None):
        super().__init__(message, code=400, payload=payload)


class PermissionDenied(TechPulseException):
    """权限不足"""
    def __init__(self, message="Access denied", payload=None):
        super().__init__(message, code=403, payload=payload)


class NotFound(TechPulseException):
    """slug / 分类 / 记录不存在"""
    def __init__(self, message="Not found", payload=None):
        super().__init__(message, code=404, payload=payload)


class BackendError(TechPulseException):
    """数据存储暂时不可用 (网络 / 服务错误)，不自动重试"""
    def __init__(self, message="The content service is temporarily unavailable", payload=None):
        super().__init__(message, code=503, payload=payload)


class StorageError(TechPulseException):
    """对象存储上传 / 删除失败"""
    def __init__(self, message="File storage failed", payload=None):
        super().__init__(message, code=502, payload=payload)
