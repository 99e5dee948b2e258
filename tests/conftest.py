"""
测试公共fixture
"""
import logging
from datetime import datetime, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


@pytest.fixture(scope="session")
def signing_key():
    """测试证书签名密钥"""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def now():
    """固定的当前时间（整秒，证书编码不保留微秒）"""
    return datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_cert_pem(tmp_path, signing_key):
    """生成PEM证书文件，返回文件路径"""

    def _make(not_before, not_after, common_name="www.example.com", filename="cert.pem"):
        attributes = [x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example Org")]
        if common_name is not None:
            attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
        name = x509.Name(attributes)

        cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(signing_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .sign(signing_key, hashes.SHA256())
        )

        path = tmp_path / filename
        path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
        return str(path)

    return _make


@pytest.fixture(autouse=True)
def reset_certwatch_logger():
    """每个测试后移除日志处理器，避免绑定到已关闭的捕获流"""
    yield
    logger = logging.getLogger("certwatch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
