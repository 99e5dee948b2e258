"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List


class WarningKind(Enum):
    """证书告警类型"""
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"
    EXPIRES_TODAY = "expires_today"
    EXPIRES_TOMORROW = "expires_tomorrow"
    EXPIRES_SOON = "expires_soon"
    NO_WARNING = "no_warning"


@dataclass(frozen=True)
class CertificateValidity:
    """证书有效期信息（UTC时间）"""
    not_before: datetime
    not_after: datetime
    subject_common_name: str


@dataclass(frozen=True)
class WarningDecision:
    """过期告警判定结果"""
    kind: WarningKind
    days_to_expiry: int
    message: Optional[str] = None

    @property
    def should_warn(self) -> bool:
        """是否需要告警"""
        return self.kind is not WarningKind.NO_WARNING

    @property
    def condition(self) -> str:
        """告警条件描述（用于邮件主题）"""
        if self.kind is WarningKind.NOT_YET_VALID:
            return "is not yet valid"
        if self.kind is WarningKind.EXPIRED:
            return "has expired"
        if self.kind is WarningKind.EXPIRES_TODAY:
            return "will expire today"
        if self.kind is WarningKind.EXPIRES_TOMORROW:
            return "will expire tomorrow"
        if self.kind is WarningKind.EXPIRES_SOON:
            return f"will expire in {self.days_to_expiry} days"
        return ""


@dataclass
class CertificateCheck:
    """单个证书文件的检查结果"""
    path: str
    validity: Optional[CertificateValidity]
    decision: Optional[WarningDecision]
    error_message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """证书是否成功加载并完成判定"""
        return self.decision is not None

    @property
    def should_warn(self) -> bool:
        return self.decision is not None and self.decision.should_warn


@dataclass
class CheckResult:
    """批量检查结果统计"""
    total_certificates: int
    warned: List[CertificateCheck] = field(default_factory=list)
    healthy: List[CertificateCheck] = field(default_factory=list)
    failed: List[CertificateCheck] = field(default_factory=list)
    execution_time: float = 0.0

    @property
    def errors(self) -> List[str]:
        return [check.error_message for check in self.failed if check.error_message]
