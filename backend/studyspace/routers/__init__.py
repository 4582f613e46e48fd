"""
API 路由
"""
from studyspace.routers import materials, diagrams

__all__ = [
    "materials",
    "diagrams",
]
