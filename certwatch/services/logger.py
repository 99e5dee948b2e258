"""
日志服务
"""
import os
import logging
import traceback
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from ..interfaces import LoggerServiceInterface
from ..models import CertificateCheck


class LoggerService(LoggerServiceInterface):
    """日志服务实现，输出到stderr，stdout只留给告警邮件"""

    def __init__(self, logger_name: str = "certwatch", log_level: Optional[str] = None):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'WARNING')

        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

        self.execution_stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            'start_time': None,
            'end_time': None,
            'checked': 0,
            'warned': 0,
            'failed': 0,
            'errors': []
        }

    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.WARNING)
        self.logger.setLevel(level)

        # 避免重复添加处理器
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(level)

            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)

            self.logger.addHandler(handler)
        else:
            for handler in self.logger.handlers:
                handler.setLevel(level)

        # 防止日志传播到根日志器
        self.logger.propagate = False

    def log_check_start(self, file_path: str):
        """
        记录检查开始

        Args:
            file_path: 证书文件路径
        """
        if self.execution_stats['start_time'] is None:
            self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['checked'] += 1

        self.logger.debug(f"开始检查证书: {file_path}")

    def log_certificate_info(self, check: CertificateCheck):
        """
        记录证书信息

        Args:
            check: 检查结果
        """
        if not check.is_valid:
            self.execution_stats['failed'] += 1
            self.logger.debug(f"证书检查失败 - 文件: {check.path}, 错误: {check.error_message}")
            return

        validity = check.validity
        decision = check.decision
        details = (
            f"文件: {check.path}, "
            f"主机名: {validity.subject_common_name}, "
            f"有效期: {validity.not_before.isoformat()} ~ {validity.not_after.isoformat()}, "
            f"剩余天数: {decision.days_to_expiry} 天"
        )

        if decision.should_warn:
            self.execution_stats['warned'] += 1
            self.logger.warning(f"证书告警({decision.condition}) - {details}")
        else:
            self.logger.info(f"证书正常 - {details}")

    def log_error(self, file_path: str, error: Exception, error_info: Optional[dict] = None):
        """
        记录错误信息

        Args:
            file_path: 证书文件路径
            error: 异常对象
            error_info: 错误处理器给出的详细信息
        """
        info = dict(error_info) if error_info else {
            'path': file_path,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'timestamp': datetime.now(timezone.utc).isoformat()
        }
        self.execution_stats['errors'].append(info)

        self.logger.info(f"证书 {file_path} 被忽略: {info['error_type']}: {info['error_message']}")

        if info.get('suggested_action'):
            self.logger.debug(f"建议: {info['suggested_action']}")

        self.logger.debug(f"证书 {file_path} 错误堆栈跟踪:\n{''.join(traceback.format_exception(error))}")

    def log_check_end(self):
        """记录检查结束"""
        self.execution_stats['end_time'] = datetime.now(timezone.utc)

        self.logger.info(
            f"证书检查完成: 共 {self.execution_stats['checked']} 个, "
            f"需告警 {self.execution_stats['warned']} 个, "
            f"失败 {self.execution_stats['failed']} 个"
        )

    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息

        Args:
            config: 配置信息字典
        """
        safe_config = self._sanitize_config(config)

        self.logger.debug("运行配置:")
        for key, value in safe_config.items():
            self.logger.debug(f"  {key}: {value}")

    def _sanitize_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        隐藏配置中的收件人地址

        Args:
            config: 原始配置

        Returns:
            Dict[str, Any]: 清理后的配置
        """
        safe_config = {}
        for key, value in config.items():
            if key == 'address' and isinstance(value, str) and '@' in value:
                local, _, domain = value.partition('@')
                safe_config[key] = f"{local[:1]}***@{domain}"
            else:
                safe_config[key] = value
        return safe_config

    def get_execution_summary(self) -> Dict[str, Any]:
        """
        获取执行摘要

        Returns:
            Dict[str, Any]: 执行摘要信息
        """
        stats = self.execution_stats
        duration = 0
        if stats['start_time'] and stats['end_time']:
            duration = (stats['end_time'] - stats['start_time']).total_seconds()

        return {
            'start_time': stats['start_time'].isoformat() if stats['start_time'] else None,
            'end_time': stats['end_time'].isoformat() if stats['end_time'] else None,
            'duration_seconds': duration,
            'checked': stats['checked'],
            'warned': stats['warned'],
            'failed': stats['failed'],
            'error_count': len(stats['errors']),
            'errors': stats['errors']
        }

    def reset_stats(self):
        """重置执行统计"""
        self.execution_stats = self._empty_stats()
