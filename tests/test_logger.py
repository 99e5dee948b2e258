"""
日志服务测试
"""
import pytest
import os
import logging
from unittest.mock import patch
from datetime import datetime, timezone, timedelta
from io import StringIO

from certwatch.services.logger import LoggerService
from certwatch.services.error_handler import CertificateFileNotFound
from certwatch.models import CertificateCheck, CertificateValidity, WarningDecision, WarningKind

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def make_check(kind, days):
    validity = CertificateValidity(
        not_before=NOW - timedelta(days=300),
        not_after=NOW + timedelta(days=days),
        subject_common_name="www.example.com"
    )
    return CertificateCheck("cert.pem", validity, WarningDecision(kind=kind, days_to_expiry=days))


class TestLoggerService:
    """日志服务测试类"""

    def setup_method(self):
        """测试前准备"""
        self.logger_service = LoggerService(logger_name="test_logger")

        # 创建一个字符串流来捕获日志输出
        self.log_stream = StringIO()
        handler = logging.StreamHandler(self.log_stream)
        handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))

        self.logger_service.logger.handlers.clear()
        self.logger_service.logger.addHandler(handler)
        self.logger_service.logger.setLevel(logging.DEBUG)

    def teardown_method(self):
        """测试后清理"""
        self.logger_service.logger.handlers.clear()

    def get_log_output(self) -> str:
        """获取日志输出"""
        return self.log_stream.getvalue()

    @patch.dict(os.environ, {}, clear=True)
    def test_init_default_config(self):
        """测试默认配置初始化"""
        service = LoggerService()

        assert service.logger_name == "certwatch"
        assert service.log_level == "WARNING"
        assert service.logger.propagate is False
        assert len(service.logger.handlers) == 1

    @patch.dict(os.environ, {'LOG_LEVEL': 'DEBUG'})
    def test_init_with_env_log_level(self):
        """测试从环境变量读取日志级别"""
        service = LoggerService(logger_name="env_logger")

        assert service.log_level == "DEBUG"
        assert service.logger.level == logging.DEBUG
        service.logger.handlers.clear()

    def test_handler_not_duplicated(self):
        """测试重复初始化不会重复添加处理器"""
        LoggerService(logger_name="dup_logger", log_level="INFO")
        service = LoggerService(logger_name="dup_logger", log_level="DEBUG")

        assert len(service.logger.handlers) == 1
        assert service.logger.handlers[0].level == logging.DEBUG
        service.logger.handlers.clear()

    def test_handler_writes_to_stderr(self):
        """测试日志输出到stderr而不是stdout"""
        service = LoggerService(logger_name="stderr_logger", log_level="INFO")

        import sys
        assert service.logger.handlers[0].stream is sys.stderr
        service.logger.handlers.clear()

    def test_log_check_start(self):
        """测试记录检查开始"""
        self.logger_service.log_check_start("/etc/pki/tls/certs/www.crt")

        assert "开始检查证书: /etc/pki/tls/certs/www.crt" in self.get_log_output()
        assert self.logger_service.execution_stats['checked'] == 1
        assert self.logger_service.execution_stats['start_time'] is not None

    def test_log_certificate_info_warning(self):
        """测试记录需要告警的证书"""
        self.logger_service.log_certificate_info(make_check(WarningKind.EXPIRES_SOON, 5))

        log_output = self.get_log_output()
        assert "WARNING - 证书告警(will expire in 5 days)" in log_output
        assert "主机名: www.example.com" in log_output
        assert self.logger_service.execution_stats['warned'] == 1

    def test_log_certificate_info_healthy(self):
        """测试记录正常证书"""
        self.logger_service.log_certificate_info(make_check(WarningKind.NO_WARNING, 100))

        assert "INFO - 证书正常" in self.get_log_output()
        assert self.logger_service.execution_stats['warned'] == 0

    def test_log_certificate_info_failed(self):
        """测试记录加载失败的证书"""
        check = CertificateCheck("missing.pem", None, None, error_message="CertificateFileNotFound: 证书文件不存在")

        self.logger_service.log_certificate_info(check)

        assert self.logger_service.execution_stats['failed'] == 1
        assert "missing.pem" in self.get_log_output()

    def test_log_error(self):
        """测试记录错误信息"""
        error = CertificateFileNotFound("missing.pem")

        self.logger_service.log_error("missing.pem", error)

        log_output = self.get_log_output()
        assert "证书 missing.pem 被忽略: CertificateFileNotFound" in log_output
        assert "错误堆栈跟踪" in log_output
        assert len(self.logger_service.execution_stats['errors']) == 1

    def test_log_error_with_error_info(self):
        """测试记录错误处理器给出的信息"""
        error = CertificateFileNotFound("missing.pem")
        error_info = {
            'path': 'missing.pem',
            'error_type': 'CertificateFileNotFound',
            'error_message': '证书文件不存在',
            'suggested_action': '检查证书路径'
        }

        self.logger_service.log_error("missing.pem", error, error_info)

        assert "建议: 检查证书路径" in self.get_log_output()
        assert self.logger_service.execution_stats['errors'][0]['error_message'] == '证书文件不存在'

    def test_log_configuration_info_masks_address(self):
        """测试记录配置时隐藏收件人地址"""
        self.logger_service.log_configuration_info({'address': 'admin@example.com', 'warn_period_days': 30})

        log_output = self.get_log_output()
        assert "admin@example.com" not in log_output
        assert "a***@example.com" in log_output
        assert "warn_period_days: 30" in log_output

    def test_sanitize_config_keeps_local_address(self):
        """测试本地用户名不需要隐藏"""
        assert self.logger_service._sanitize_config({'address': 'root'}) == {'address': 'root'}

    def test_execution_summary(self):
        """测试执行摘要"""
        self.logger_service.log_check_start("a.pem")
        self.logger_service.log_certificate_info(make_check(WarningKind.EXPIRED, -3))
        self.logger_service.log_check_start("b.pem")
        self.logger_service.log_error("b.pem", CertificateFileNotFound("b.pem"))
        self.logger_service.log_certificate_info(CertificateCheck("b.pem", None, None, error_message="x"))
        self.logger_service.log_check_end()

        summary = self.logger_service.get_execution_summary()

        assert summary['checked'] == 2
        assert summary['warned'] == 1
        assert summary['failed'] == 1
        assert summary['error_count'] == 1
        assert summary['duration_seconds'] >= 0
        assert "证书检查完成: 共 2 个, 需告警 1 个, 失败 1 个" in self.get_log_output()

    def test_reset_stats(self):
        """测试重置统计"""
        self.logger_service.log_check_start("a.pem")
        self.logger_service.reset_stats()

        assert self.logger_service.execution_stats['checked'] == 0
        assert self.logger_service.execution_stats['start_time'] is None
