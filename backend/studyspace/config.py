"""
配置管理 - 从环境变量加载所有配置
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置"""

    # ===== Kroki（图表渲染） =====
    kroki_base_url: str = "https://kroki.io"
    diagram_output_format: str = "png"          # png|svg
    diagram_inline_svg: bool = True             # SVG 直接内嵌为 data URL，不走存储
    diagram_url_mode: bool = True               # 小图优先使用 GET 编码 URL
    diagram_url_max_length: int = 2048
    diagram_render_timeout_seconds: float = 30.0
    diagram_check_timeout_seconds: float = 5.0

    # ===== 图片搜索（Google Custom Search） =====
    google_api_key: str = ""
    google_search_engine_id: str = ""
    image_search_base_url: str = "https://www.googleapis.com/customsearch/v1"
    image_search_num_results: int = 1
    image_search_timeout_seconds: float = 10.0

    # ===== 图片生成 =====
    image_generation_base_url: str = "https://image.pollinations.ai"
    image_generation_timeout_seconds: float = 30.0
    image_generation_max_retries: int = 3
    image_generation_retry_delay_seconds: float = 2.0
    image_generation_enhance: bool = True

    # ===== 存储 =====
    storage_path: str = "./storage"
    storage_public_url: str = "/storage"
    use_object_storage: bool = True             # False 时生成图回退为 base64 data URL

    # ===== 流水线 =====
    max_concurrent_resolutions: int = 3
    finalize_timeout_seconds: float = 300.0
    http_max_connections: int = 20

    # ===== JWT =====
    jwt_secret: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # ===== 服务配置 =====
    backend_host: str = "0.0.0.0"
    backend_port: int = 8001
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# 全局配置实例
settings = Settings()
