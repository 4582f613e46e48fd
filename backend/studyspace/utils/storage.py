"""
文件存储工具

- save_file：原始文件名 -> 唯一文件名
- save_object：按内容寻址保存（同一 object_id 只写一次，之后直接复用）
"""
import logging
import os
import uuid
from typing import Optional

import aiofiles

from studyspace.config import settings

logger = logging.getLogger(__name__)


async def save_file(
    content: bytes,
    filename: str,
    subdir: str = "uploads"
) -> str:
    """
    保存文件到存储目录

    Args:
        content: 文件内容
        filename: 原始文件名
        subdir: 子目录（uploads/generated/diagrams）

    Returns:
        保存的文件路径
    """
    ext = os.path.splitext(filename)[1]
    unique_name = f"{uuid.uuid4()}{ext}"

    dir_path = os.path.join(settings.storage_path, subdir)
    ensure_dir(dir_path)

    filepath = os.path.join(dir_path, unique_name)
    async with aiofiles.open(filepath, 'wb') as f:
        await f.write(content)

    return filepath


async def save_object(
    content: bytes,
    folder: str,
    object_id: Optional[str] = None,
    ext: str = ".png",
) -> str:
    """
    保存对象并返回可访问 URL

    指定 object_id 时按内容寻址：文件已存在则直接复用，不重复写入。
    先完整写入同目录的临时文件，再 os.link 到目标名；目标名只会指向完整内容，
    并发写同一 object_id 时只有一方链接成功，另一方复用。

    Args:
        content: 对象内容
        folder: 存储子目录
        object_id: 内容寻址 ID（不含扩展名）
        ext: 扩展名

    Returns:
        可访问的 URL
    """
    if not object_id:
        filepath = await save_file(content, f"object{ext}", folder)
        return get_file_url(filepath)

    dir_path = os.path.join(settings.storage_path, folder)
    ensure_dir(dir_path)
    filepath = os.path.join(dir_path, f"{object_id}{ext}")

    if os.path.exists(filepath):
        logger.info("Reusing stored object %s", filepath)
        return get_file_url(filepath)

    tmp_path = f"{filepath}.{uuid.uuid4().hex}.tmp"
    try:
        async with aiofiles.open(tmp_path, 'wb') as f:
            await f.write(content)
        try:
            os.link(tmp_path, filepath)
        except FileExistsError:
            logger.info("Reusing stored object %s", filepath)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    return get_file_url(filepath)


def get_file_url(filepath: str) -> str:
    """
    获取文件的访问 URL

    Args:
        filepath: 文件路径

    Returns:
        可访问的 URL
    """
    # 转换为相对于 storage 的路径
    if filepath.startswith(settings.storage_path):
        relative = filepath[len(settings.storage_path):].lstrip(os.sep)
        prefix = settings.storage_public_url.rstrip("/")
        return f"{prefix}/{relative.replace(os.sep, '/')}"
    return filepath


def ensure_dir(path: str):
    """确保目录存在"""
    os.makedirs(path, exist_ok=True)
