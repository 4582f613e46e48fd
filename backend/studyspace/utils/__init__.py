"""
工具函数
"""
from studyspace.utils.auth import create_access_token, decode_access_token, decode_token
from studyspace.utils.storage import save_file, save_object, get_file_url, ensure_dir

__all__ = [
    "create_access_token",
    "decode_access_token",
    "decode_token",
    "save_file",
    "save_object",
    "get_file_url",
    "ensure_dir",
]
