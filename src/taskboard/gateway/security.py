"""鉴权工具 -- 口令 / worker token / webhook 签名校验

所有比较均使用 hmac.compare_digest，避免时序侧信道。
未配置密钥时一律校验失败。
"""

import hashlib
import hmac

from pydantic import SecretStr


def secret_matches(provided: str | None, expected: SecretStr) -> bool:
    """校验共享密钥（口令、worker token）"""
    expected_value = expected.get_secret_value()
    if not expected_value or not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected_value.encode("utf-8"))


def compute_signature(raw_body: bytes, secret: str) -> str:
    """计算 HMAC-SHA256 十六进制签名"""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature: str | None, secret: SecretStr) -> bool:
    """校验 webhook 签名（对原始请求体计算）"""
    secret_value = secret.get_secret_value()
    if not secret_value or not signature:
        return False
    expected = compute_signature(raw_body, secret_value)
    return hmac.compare_digest(
        expected.encode("ascii"),
        signature.strip().lower().encode("utf-8"),
    )
