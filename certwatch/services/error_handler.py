"""
错误处理服务
"""
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging


class LoadError(Exception):
    """证书加载失败的基类，任何子类都表示“忽略该证书”"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class CertificateFileNotFound(LoadError):
    """证书文件不存在"""

    def __init__(self, path: str):
        super().__init__(path, "证书文件不存在")


class CertificateUnreadable(LoadError):
    """证书文件无法读取"""

    def __init__(self, path: str, reason: str = "证书文件无法读取"):
        super().__init__(path, reason)


class CertificateParseError(LoadError):
    """不是有效的PEM/X.509证书"""

    def __init__(self, path: str, reason: str = "不是有效的PEM/X.509证书"):
        super().__init__(path, reason)


class MissingField(LoadError):
    """证书缺少有效期或主题通用名称"""

    def __init__(self, path: str, field_name: str):
        super().__init__(path, f"证书缺少字段: {field_name}")
        self.field_name = field_name


class MalformedTime(LoadError):
    """ASN.1时间格式无效"""

    def __init__(self, path: str, value: str, reason: str = "ASN.1时间格式无效"):
        super().__init__(path, f"{reason}: {value!r}")
        self.value = value


class NameTooLong(LoadError):
    """主题通用名称超出长度限制"""

    def __init__(self, path: str, length: int, limit: int):
        super().__init__(path, f"通用名称长度 {length} 字节超出限制 {limit} 字节")
        self.length = length
        self.limit = limit


class UnevaluableSubject(LoadError):
    """自动生成的默认证书（如localhost），不参与检查"""

    def __init__(self, path: str, common_name: str):
        super().__init__(path, f"忽略自动生成的证书: {common_name}")
        self.common_name = common_name


class LoadErrorHandler:
    """证书加载错误处理器"""

    def __init__(self):
        """初始化错误处理器"""
        self.logger = logging.getLogger(__name__)

    def handle_load_error(self, path: str, error: Exception) -> Dict[str, Any]:
        """
        处理证书加载错误

        Args:
            path: 证书文件路径
            error: 异常对象

        Returns:
            Dict[str, Any]: 错误处理结果
        """
        error_info = {
            'path': path,
            'error_type': type(error).__name__,
            'error_message': getattr(error, 'reason', str(error)),
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'suggested_action': self._get_suggested_action(error)
        }

        if isinstance(error, UnevaluableSubject):
            self.logger.debug(f"证书 {path} 已跳过: {error_info['error_message']}")
        else:
            self.logger.debug(f"证书 {path} 加载失败: {error_info['error_message']}")

        return error_info

    def _get_suggested_action(self, error: Exception) -> str:
        """
        获取错误的建议处理方案

        Args:
            error: 异常对象

        Returns:
            str: 建议的处理方案
        """
        if isinstance(error, CertificateFileNotFound):
            return "检查证书路径是否正确，Web服务器配置是否引用了已删除的文件"
        elif isinstance(error, CertificateUnreadable):
            return "检查文件权限"
        elif isinstance(error, CertificateParseError):
            return "确认文件包含PEM格式的X.509证书"
        elif isinstance(error, MissingField):
            return f"证书缺少 {error.field_name}，重新签发证书"
        elif isinstance(error, MalformedTime):
            return "证书有效期编码无效，重新签发证书"
        elif isinstance(error, NameTooLong):
            return "通用名称过长，确认证书主题是否正确"
        elif isinstance(error, UnevaluableSubject):
            return "自动生成的自签名证书，无需处理"
        else:
            return "检查证书文件"

    def get_error_statistics(self, error_list: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        获取错误统计信息

        Args:
            error_list: 错误信息列表

        Returns:
            Dict[str, Any]: 错误统计
        """
        error_types: Dict[str, int] = {}
        for error_info in error_list:
            error_type = error_info.get('error_type', 'Unknown')
            error_types[error_type] = error_types.get(error_type, 0) + 1

        most_common: Optional[tuple] = max(error_types.items(), key=lambda x: x[1]) if error_types else None

        return {
            'total_errors': len(error_list),
            'error_types': error_types,
            'most_common_error': most_common[0] if most_common else None,
            'most_common_error_count': most_common[1] if most_common else 0
        }
