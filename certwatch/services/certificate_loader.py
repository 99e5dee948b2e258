"""
证书加载服务
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from pyasn1.codec.der import decoder
from pyasn1.error import PyAsn1Error
from pyasn1_modules import pem, rfc5280

from ..interfaces import CertificateLoaderInterface
from ..models import CertificateValidity
from .asn1_time import decode_time
from .error_handler import (
    CertificateFileNotFound,
    CertificateParseError,
    CertificateUnreadable,
    MalformedTime,
    MissingField,
    NameTooLong,
    UnevaluableSubject,
)

# 通用名称最大字节数（UTF-8）
MAX_COMMON_NAME_BYTES = 127

# 系统自动生成的自签名证书，不参与检查
SUPPRESSED_COMMON_NAMES = ("localhost", "localhost.localdomain")


class CertificateLoader(CertificateLoaderInterface):
    """PEM/X.509证书加载器实现"""

    def __init__(self, max_common_name_bytes: int = MAX_COMMON_NAME_BYTES,
                 suppressed_common_names: Iterable[str] = SUPPRESSED_COMMON_NAMES):
        """
        初始化证书加载器

        Args:
            max_common_name_bytes: 通用名称最大字节数
            suppressed_common_names: 需要忽略的通用名称（大小写敏感）
        """
        self.max_common_name_bytes = max_common_name_bytes
        self.suppressed_common_names = frozenset(suppressed_common_names)
        self.logger = logging.getLogger(__name__)

    def load(self, file_path: str) -> CertificateValidity:
        """
        读取证书文件并提取有效期与通用名称

        Args:
            file_path: 证书文件路径

        Returns:
            CertificateValidity: 证书有效期信息

        Raises:
            LoadError: 任何加载失败（具体子类见 error_handler）
        """
        cert = self._read_certificate(file_path)
        tbs = cert['tbsCertificate']

        validity = tbs['validity']
        not_before = self._decode_validity_time(file_path, validity, 'notBefore')
        not_after = self._decode_validity_time(file_path, validity, 'notAfter')

        common_name = self._extract_common_name(file_path, tbs['subject'])

        if common_name in self.suppressed_common_names:
            raise UnevaluableSubject(file_path, common_name)

        self.logger.debug(
            f"已加载证书 {file_path}: CN={common_name}, "
            f"notBefore={not_before.isoformat()}, notAfter={not_after.isoformat()}"
        )

        return CertificateValidity(
            not_before=not_before,
            not_after=not_after,
            subject_common_name=common_name
        )

    def _read_certificate(self, file_path: str) -> rfc5280.Certificate:
        """
        读取PEM文件并按RFC 5280结构解码

        Args:
            file_path: 证书文件路径

        Returns:
            rfc5280.Certificate: 解码后的证书
        """
        try:
            # 非文本内容替换后不会匹配PEM标记，按解析失败处理
            with open(file_path, 'r', encoding='utf-8', errors='replace') as fp:
                substrate = pem.readPemFromFile(fp)
        except FileNotFoundError as e:
            raise CertificateFileNotFound(file_path) from e
        except ValueError as e:
            # base64内容损坏
            raise CertificateParseError(file_path, f"PEM内容无效: {e}") from e
        except OSError as e:
            raise CertificateUnreadable(file_path, f"证书文件无法读取: {e.strerror or e}") from e

        if not substrate:
            raise CertificateParseError(file_path, "未找到PEM证书块")

        try:
            cert, _ = decoder.decode(substrate, asn1Spec=rfc5280.Certificate())
        except PyAsn1Error as e:
            raise CertificateParseError(file_path, f"DER解码失败: {e}") from e

        return cert

    def _decode_validity_time(self, file_path: str, validity, field_name: str) -> datetime:
        """
        解码有效期字段

        Args:
            file_path: 证书文件路径
            validity: rfc5280.Validity
            field_name: 'notBefore' 或 'notAfter'

        Returns:
            datetime: UTC时间
        """
        time_choice = validity[field_name]
        if not time_choice.isValue:
            raise MissingField(file_path, field_name)

        tag = time_choice.getName()
        value = str(time_choice.getComponent())

        try:
            return decode_time(tag, value)
        except ValueError as e:
            raise MalformedTime(file_path, value, str(e)) from e

    def _extract_common_name(self, file_path: str, subject) -> str:
        """
        提取主题中第一个通用名称

        Args:
            file_path: 证书文件路径
            subject: rfc5280.Name

        Returns:
            str: 通用名称
        """
        common_name = self._find_common_name(file_path, subject)
        if not common_name:
            raise MissingField(file_path, 'commonName')

        length = len(common_name.encode('utf-8'))
        if length > self.max_common_name_bytes:
            raise NameTooLong(file_path, length, self.max_common_name_bytes)

        return common_name

    def _find_common_name(self, file_path: str, subject) -> Optional[str]:
        if not subject.isValue:
            return None

        for rdn in subject.getComponent():
            for attribute in rdn:
                if attribute['type'] != rfc5280.id_at_commonName:
                    continue
                try:
                    # DirectoryString 各分支都是通用标签的字符串类型，无需指定 asn1Spec
                    value, _ = decoder.decode(attribute['value'].asOctets())
                except PyAsn1Error as e:
                    raise CertificateParseError(file_path, f"通用名称解码失败: {e}") from e
                return str(value)

        return None
