"""
认证工具函数

身份由外部身份提供方签发 Bearer Token，这里只做校验；
create_access_token 供本地开发与测试签发 Token。
"""
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from studyspace.config import settings


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    创建 JWT Access Token

    Args:
        data: payload（至少包含 sub）
        expires_delta: 自定义过期时间
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.jwt_expire_hours))
    to_encode = {**data, "exp": expire, "iat": now}
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """解码 JWT Token，返回 payload（失败返回 None）"""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None


def decode_token(token: str) -> Optional[str]:
    """解码 JWT Token，返回 user_id"""
    payload = decode_access_token(token)
    if not payload:
        return None
    return payload.get("sub")
