"""
证书过期计算服务
"""
from datetime import datetime
from typing import List, Optional
from ..interfaces import ExpiryEvaluatorInterface
from ..models import CertificateCheck, CertificateValidity, WarningDecision, WarningKind

SECONDS_PER_DAY = 86400


class ExpiryCalculator(ExpiryEvaluatorInterface):
    """证书过期计算器"""

    def __init__(self, warning_days: int = 30):
        """
        初始化过期计算器

        Args:
            warning_days: 提前警告天数，默认30天
        """
        self.warning_days = warning_days

    def calculate_days_until_expiry(self, expiry_date: datetime, now: datetime) -> int:
        """
        计算距离过期的天数

        秒数差按整数向零截断后再除以一天的秒数，同样向零截断：
        过期不足一天时结果为0，而不是-1。

        Args:
            expiry_date: 过期时间（带时区）
            now: 当前时间（带时区）

        Returns:
            int: 剩余天数（负数表示已过期超过一天）
        """
        seconds = int((expiry_date - now).total_seconds())
        days = abs(seconds) // SECONDS_PER_DAY
        return days if seconds >= 0 else -days

    def classify(self, validity: CertificateValidity, now: datetime,
                 warn_period_days: Optional[int] = None) -> WarningKind:
        """
        判定告警类型，按优先级依次匹配

        Args:
            validity: 证书有效期
            now: 当前时间
            warn_period_days: 告警天数，为None时使用初始化时的warning_days

        Returns:
            WarningKind: 告警类型
        """
        days = self.calculate_days_until_expiry(validity.not_after, now)
        period = self.warning_days if warn_period_days is None else warn_period_days

        if now < validity.not_before:
            return WarningKind.NOT_YET_VALID
        if days < 0:
            return WarningKind.EXPIRED
        if days == 0:
            return WarningKind.EXPIRES_TODAY
        if days == 1:
            return WarningKind.EXPIRES_TOMORROW
        if days < period:
            return WarningKind.EXPIRES_SOON
        return WarningKind.NO_WARNING

    def evaluate(self, validity: CertificateValidity, now: datetime,
                 warn_period_days: Optional[int] = None) -> WarningDecision:
        """
        判定证书是否需要告警（不生成告警内容）

        Args:
            validity: 证书有效期
            now: 当前时间（调用方只取样一次）
            warn_period_days: 告警天数，为None时使用初始化时的warning_days

        Returns:
            WarningDecision: 判定结果
        """
        return WarningDecision(
            kind=self.classify(validity, now, warn_period_days),
            days_to_expiry=self.calculate_days_until_expiry(validity.not_after, now)
        )

    def filter_warnings(self, checks: List[CertificateCheck]) -> List[CertificateCheck]:
        """
        筛选需要告警的证书

        Args:
            checks: 检查结果列表

        Returns:
            List[CertificateCheck]: 需要告警的检查结果
        """
        return [check for check in checks if check.should_warn]

    def categorize_checks(self, checks: List[CertificateCheck]) -> dict:
        """
        对检查结果进行分类

        Args:
            checks: 检查结果列表

        Returns:
            dict: 分类结果
        """
        valid_checks = [check for check in checks if check.is_valid]

        return {
            'total': len(checks),
            'valid': len(valid_checks),
            'invalid': len(checks) - len(valid_checks),
            'warned': self.filter_warnings(valid_checks),
            'healthy': [check for check in valid_checks if not check.should_warn],
            'failed': [check for check in checks if not check.is_valid]
        }

    def get_expiry_summary(self, checks: List[CertificateCheck]) -> str:
        """
        获取过期状态摘要

        Args:
            checks: 检查结果列表

        Returns:
            str: 摘要信息
        """
        categorized = self.categorize_checks(checks)

        summary_parts = [
            f"总计: {categorized['total']} 个证书",
            f"有效: {categorized['valid']} 个",
            f"无效: {categorized['invalid']} 个"
        ]

        if categorized['warned']:
            summary_parts.append(f"需告警({self.warning_days}天内): {len(categorized['warned'])} 个")

        if categorized['healthy']:
            summary_parts.append(f"健康: {len(categorized['healthy'])} 个")

        return ", ".join(summary_parts)
