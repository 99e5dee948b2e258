"""
命令行入口

退出码与常规约定相反：0 表示需要告警，1 表示无需告警或证书被忽略。
"""
import argparse
import sys
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, TextIO

from .services.certificate_loader import CertificateLoader
from .services.config_validator import CertwatchConfig, ConfigValidator, DEFAULT_ADDRESS, DEFAULT_WARN_PERIOD
from .services.error_handler import LoadError, LoadErrorHandler
from .services.expiry_calculator import ExpiryCalculator
from .services.logger import LoggerService
from .services.mail_formatter import MailFormatter
from .models import CertificateCheck, CheckResult

EXIT_WARNING = 0
EXIT_NO_WARNING = 1


class CertwatchMonitor:
    """证书过期检查主类"""

    def __init__(self, config: CertwatchConfig, out: Optional[TextIO] = None):
        """
        初始化检查器

        Args:
            config: 运行配置
            out: 告警邮件输出流，默认为stdout
        """
        self.config = config
        self.out = out

        self.logger_service = LoggerService(log_level=config.log_level)
        self.loader = CertificateLoader()
        self.expiry_calculator = ExpiryCalculator(warning_days=config.warn_period_days)
        self.formatter = MailFormatter(address=config.address)
        self.error_handler = LoadErrorHandler()

        self.logger_service.log_configuration_info({
            'warn_period_days': config.warn_period_days,
            'address': config.address,
            'quiet': config.quiet,
            'log_level': config.log_level
        })

    def check_certificate(self, file_path: str, now: Optional[datetime] = None) -> CertificateCheck:
        """
        检查单个证书文件，加载失败不会抛出异常

        Args:
            file_path: 证书文件路径
            now: 当前时间，如果为None则取当前UTC时间

        Returns:
            CertificateCheck: 检查结果
        """
        now = now or datetime.now(timezone.utc)
        self.logger_service.log_check_start(file_path)

        try:
            validity = self.loader.load(file_path)
        except LoadError as e:
            error_info = self.error_handler.handle_load_error(file_path, e)
            self.logger_service.log_error(file_path, e, error_info)

            check = CertificateCheck(
                path=file_path,
                validity=None,
                decision=None,
                error_message=f"{error_info['error_type']}: {error_info['error_message']}"
            )
            self.logger_service.log_certificate_info(check)
            return check

        decision = self.expiry_calculator.evaluate(validity, now)
        if decision.should_warn and not self.config.quiet:
            decision = replace(decision, message=self.formatter.format_warning(file_path, validity, decision))

        check = CertificateCheck(path=file_path, validity=validity, decision=decision)
        self.logger_service.log_certificate_info(check)
        return check

    def emit(self, check: CertificateCheck):
        """输出告警邮件（安静模式或无需告警时不输出）"""
        if check.decision is None or not check.decision.message:
            return

        out = self.out or sys.stdout
        out.write(check.decision.message)
        out.flush()

    def run(self, file_path: str, now: Optional[datetime] = None) -> int:
        """
        检查单个证书并输出告警

        Args:
            file_path: 证书文件路径
            now: 当前时间

        Returns:
            int: 退出码（0 需要告警，1 其他情况）
        """
        check = self.check_certificate(file_path, now)
        self.emit(check)
        return EXIT_WARNING if check.should_warn else EXIT_NO_WARNING

    def execute(self, file_paths: List[str], now: Optional[datetime] = None) -> CheckResult:
        """
        批量检查证书，重复路径只检查一次

        Args:
            file_paths: 证书文件路径列表
            now: 当前时间，整批共用

        Returns:
            CheckResult: 检查结果
        """
        start_time = time.monotonic()
        now = now or datetime.now(timezone.utc)

        unique_paths = list(dict.fromkeys(file_paths))
        checks = []
        for file_path in unique_paths:
            check = self.check_certificate(file_path, now)
            self.emit(check)
            checks.append(check)

        categorized = self.expiry_calculator.categorize_checks(checks)
        self.logger_service.log_check_end()
        self.logger_service.logger.info(self.expiry_calculator.get_expiry_summary(checks))

        if categorized['failed']:
            statistics = self.error_handler.get_error_statistics(self.logger_service.execution_stats['errors'])
            self.logger_service.logger.info(
                f"加载失败 {statistics['total_errors']} 个，最常见错误: {statistics['most_common_error']}"
            )

        return CheckResult(
            total_certificates=len(unique_paths),
            warned=categorized['warned'],
            healthy=categorized['healthy'],
            failed=categorized['failed'],
            execution_time=time.monotonic() - start_time
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="certwatch",
        description="Generate SSL/TLS certificate expiry warnings.",
        epilog="Exit status is 0 if a warning applies to the certificate, 1 otherwise."
    )
    parser.add_argument("certificate", help="Path to a PEM-encoded X.509 certificate")
    parser.add_argument(
        "-a", "--address",
        default=DEFAULT_ADDRESS,
        metavar="ADDR",
        help=f"Recipient address [{DEFAULT_ADDRESS}]"
    )
    parser.add_argument(
        "-p", "--period",
        type=int,
        default=DEFAULT_WARN_PERIOD,
        metavar="DAYS",
        help=f"Number of days before expiry [{DEFAULT_WARN_PERIOD}]"
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Enable quiet mode")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    命令行入口

    Args:
        argv: 命令行参数，如果为None则使用sys.argv

    Returns:
        int: 退出码
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = ConfigValidator().build_config(
            warn_period_days=args.period,
            address=args.address,
            quiet=args.quiet
        )
    except ValueError as e:
        parser.error(str(e))

    monitor = CertwatchMonitor(config)
    return monitor.run(args.certificate)


if __name__ == "__main__":
    sys.exit(main())
