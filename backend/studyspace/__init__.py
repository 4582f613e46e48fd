"""
Study Space 后端 - 学习资料内容后处理
"""
__version__ = "1.0.0"
