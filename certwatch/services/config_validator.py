"""
配置验证服务
"""
import os
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional
import logging

DEFAULT_WARN_PERIOD = 30
DEFAULT_ADDRESS = "root"
DEFAULT_LOG_LEVEL = "WARNING"

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class CertwatchConfig:
    """运行配置，启动时构造一次，之后只读"""
    warn_period_days: int = DEFAULT_WARN_PERIOD
    address: str = DEFAULT_ADDRESS
    quiet: bool = False
    log_level: str = DEFAULT_LOG_LEVEL


class ConfigValidator:
    """配置验证器"""

    def __init__(self):
        """初始化配置验证器"""
        self.logger = logging.getLogger(__name__)

        # 收件人地址中不允许出现空白字符（避免注入额外邮件头）
        self.address_pattern = re.compile(r"\S+")

    def validate(self, config: CertwatchConfig) -> Dict[str, Any]:
        """
        验证配置

        Args:
            config: 运行配置

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'warnings': []
        }

        period = config.warn_period_days
        if not isinstance(period, int) or isinstance(period, bool):
            result['errors'].append(f"告警天数必须是整数: {period!r}")
        elif period < 0:
            result['errors'].append(f"告警天数不能为负数: {period}")
        elif period <= 1:
            result['warnings'].append(f"告警天数为 {period}，只会对已过期、今天或明天过期的证书告警")

        if not config.address:
            result['errors'].append("收件人地址为空")
        elif not self.address_pattern.fullmatch(config.address):
            result['errors'].append(f"收件人地址格式无效: {config.address!r}")

        if config.log_level.upper() not in VALID_LOG_LEVELS:
            result['warnings'].append(f"未知的日志级别: {config.log_level}，使用 {DEFAULT_LOG_LEVEL}")

        result['is_valid'] = not result['errors']
        return result

    def build_config(self, warn_period_days: int = DEFAULT_WARN_PERIOD,
                     address: str = DEFAULT_ADDRESS, quiet: bool = False,
                     log_level: Optional[str] = None) -> CertwatchConfig:
        """
        构造并验证运行配置

        Args:
            warn_period_days: 提前警告天数
            address: 收件人地址
            quiet: 是否只返回判定结果
            log_level: 日志级别，如果为None则从环境变量 LOG_LEVEL 读取

        Returns:
            CertwatchConfig: 验证通过的配置

        Raises:
            ValueError: 配置无效
        """
        config = CertwatchConfig(
            warn_period_days=warn_period_days,
            address=address,
            quiet=quiet,
            log_level=log_level or os.getenv('LOG_LEVEL', DEFAULT_LOG_LEVEL)
        )

        result = self.validate(config)
        for warning in result['warnings']:
            self.logger.warning(warning)

        if not result['is_valid']:
            raise ValueError("; ".join(result['errors']))

        if config.log_level.upper() not in VALID_LOG_LEVELS:
            config = replace(config, log_level=DEFAULT_LOG_LEVEL)

        return config
