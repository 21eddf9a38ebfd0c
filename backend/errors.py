import functools
import logging

from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class TimeLedgerError(Exception):
    """业务异常基类，status_code 供HTTP层映射"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TimeLedgerError):
    status_code = 400


class NotFoundError(TimeLedgerError):
    status_code = 404


class ConflictError(TimeLedgerError):
    status_code = 409


class InternalError(TimeLedgerError):
    status_code = 500

    def __init__(self, message: str = "服务器内部错误"):
        super().__init__(message)


def storage_errors(func):
    """把数据库异常记录日志后转换为不透明的 InternalError"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError:
            logger.exception("storage failure in %s", func.__qualname__)
            raise InternalError()
    return wrapper
