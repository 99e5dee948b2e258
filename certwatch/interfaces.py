"""
服务接口定义
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from .models import CertificateValidity, CertificateCheck, WarningDecision


class CertificateLoaderInterface(ABC):
    """证书加载器接口"""

    @abstractmethod
    def load(self, file_path: str) -> CertificateValidity:
        """读取证书文件并提取有效期"""
        pass


class ExpiryEvaluatorInterface(ABC):
    """过期判定器接口"""

    @abstractmethod
    def evaluate(self, validity: CertificateValidity, now: datetime,
                 warn_period_days: Optional[int] = None) -> WarningDecision:
        """判定证书是否需要告警"""
        pass


class WarningFormatterInterface(ABC):
    """告警内容格式化接口"""

    @abstractmethod
    def format_warning(self, file_path: str, validity: CertificateValidity,
                       decision: WarningDecision) -> str:
        """格式化告警邮件内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, file_path: str):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_certificate_info(self, check: CertificateCheck):
        """记录证书信息"""
        pass

    @abstractmethod
    def log_error(self, file_path: str, error: Exception, error_info: Optional[dict] = None):
        """记录错误信息"""
        pass
