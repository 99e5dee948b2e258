"""
告警邮件格式化服务
"""
from ..interfaces import WarningFormatterInterface
from ..models import CertificateValidity, WarningDecision, WarningKind

BANNER = " ################# SSL/TLS Certificate Warning ################"
FOOTER = " ##############################################################"
SIGNATURE = "                                      Generated by certwatch(1)"
UNKNOWN_DATE = "(unknown date)"


class MailFormatter(WarningFormatterInterface):
    """邮件格式告警内容（To/Subject/空行/正文），交由外部邮件程序发送"""

    def __init__(self, address: str = "root"):
        """
        初始化邮件格式化器

        Args:
            address: 收件人地址，默认为"root"
        """
        self.address = address

    def format_warning(self, file_path: str, validity: CertificateValidity,
                       decision: WarningDecision) -> str:
        """
        格式化告警邮件内容

        Args:
            file_path: 证书文件路径
            validity: 证书有效期
            decision: 判定结果

        Returns:
            str: 邮件文本
        """
        hostname = self._header_safe(validity.subject_common_name)

        lines = [
            f"To: {self.address}",
            f"Subject: {self.format_subject(hostname, decision)}",
            "",
            BANNER,
            "",
            f"  Certificate for hostname '{hostname}', in file:",
            "",
            f"     {file_path}",
            "",
        ]

        if decision.kind is WarningKind.NOT_YET_VALID:
            lines.extend(self._not_yet_valid_body(validity))
        else:
            lines.extend([
                "  The certificate needs to be renewed.  Web browsers and",
                "  other clients will not be able to correctly connect to this",
                "  web site using SSL/TLS until the certificate is renewed.",
            ])

        lines.extend([
            "",
            FOOTER,
            SIGNATURE,
            "",
        ])

        return "\n".join(lines) + "\n"

    def format_subject(self, hostname: str, decision: WarningDecision) -> str:
        """邮件主题"""
        return f"The certificate for {hostname} {decision.condition}"

    def _not_yet_valid_body(self, validity: CertificateValidity) -> list:
        # 本地时区的 ctime 格式，例如 'Mon Jan  2 15:04:05 2006'
        try:
            until = validity.not_before.astimezone().ctime()
        except (OverflowError, ValueError):
            # 换算到本地时区后超出 datetime 可表示范围
            until = UNKNOWN_DATE
        return [
            f"  The certificate is not valid until {until}.",
            "",
            "  Web browsers and other clients will not be able to correctly",
            "  connect to this web site using SSL/TLS until the certificate",
            "  becomes valid.",
        ]

    @staticmethod
    def _header_safe(value: str) -> str:
        """通用名称来自证书内容，去掉换行避免伪造邮件头"""
        return " ".join(value.splitlines())
