from typing import List, Literal
import os
import pathlib

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


# 项目根目录（config.py 在 app/core/）
BASE_DIR = pathlib.Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    # 应用基础配置
    APP_NAME: str = Field(default='Media Catalog API', description='应用名称')
    APP_VERSION: str = Field(default='1.0.0', description='应用版本')
    ENVIRONMENT: Literal['development', 'staging', 'production', 'testing'] = Field(default='development', description='运行环境')
    DEBUG: bool = Field(default=False, description='调试模式')

    # 服务器配置
    HOST: str = Field(default='0.0.0.0', description='服务器主机')
    PORT: int = Field(default=8090, description='服务器端口')

    # 数据库配置
    DATABASE_URL: str = Field(default='sqlite:///./media_catalog.db', description='数据库连接URL')
    DATABASE_POOL_SIZE: int = Field(default=20, description='数据库连接池大小')
    DATABASE_MAX_OVERFLOW: int = Field(default=10, description='数据库最大溢出连接')
    DATABASE_ECHO: bool = Field(default=False, description='打印SQL')
    AUTO_CREATE_TABLES: bool = Field(default=True, description='启动时自动建表 (生产环境请使用 alembic)')

    # url前缀设置, 默认直接挂在根路径: /assets, /categories
    API_PREFIX: str = Field("", description="API 路径前缀")
    CORS_ORIGINS: List[str] = Field(default=["*"], description="允许的跨域来源")

    # 上传与列表
    UPLOAD_DIR: str = Field(default='uploads', description='上传文件根目录')
    MAX_UPLOAD_SIZE: int = Field(default=50 * 1024 * 1024, description='单个上传文件最大字节数')
    LIST_LIMIT: int = Field(default=100, description='列表最多返回条数')

    # 演示账号 (种子数据)
    DEMO_USER_ID: str = Field(default='demo-user', description='演示用户ID')
    DEMO_USER_EMAIL: str = Field(default='demo@mediadb.local', description='演示用户邮箱')
    DEMO_WORKSPACE_ID: str = Field(default='demo-workspace', description='演示工作区ID')

    # 日志配置
    LOG_LEVEL: str = Field(default='INFO', description='日志级别')
    LOG_DIR: str = Field(default='logs', description='日志目录')
    LOG_TO_FILE: bool = Field(default=False, description='是否写入日志文件')
    LOG_JSON_FORMAT: bool = Field(default=False, description='JSON 格式日志')
    LOG_MAX_BYTES: int = Field(default=10 * 1024 * 1024, description='单个日志文件大小')
    LOG_BACKUP_COUNT: int = Field(default=5, description='日志文件保留个数')

    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', case_sensitive=True, extra='ignore')

    @property
    def BASE_DIR(self) -> pathlib.Path:
        return BASE_DIR

    @property
    def is_development(self) -> bool:
        """是否为开发环境"""
        return self.ENVIRONMENT == 'development'

    @property
    def is_production(self) -> bool:
        """是否为生产环境"""
        return self.ENVIRONMENT == 'production'

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith('sqlite')

    @property
    def upload_path(self) -> pathlib.Path:
        """上传目录的绝对路径 (相对路径以项目根目录为基准)"""
        path = pathlib.Path(self.UPLOAD_DIR)
        if not path.is_absolute():
            path = BASE_DIR / path
        return path


# 根据环境加载不同配置文件
@lru_cache()
def get_settings() -> Settings:
    env = os.getenv('ENVIRONMENT', 'development')

    env_file_map = {
        'development': BASE_DIR / '.env.dev',
        'staging': BASE_DIR / '.env.staging',
        'production': BASE_DIR / '.env.prod',
    }
    env_file = env_file_map.get(env, BASE_DIR / '.env')

    return Settings(_env_file=env_file)
