"""
配置文件的 Pydantic 数据模型定义
"""
from pydantic import BaseModel, Field


class PinyinGeneralConfig(BaseModel):
    """二进制文件存放配置"""
    binary_dir: str = Field(default="node-rs/pinyin", description="pinyin 二进制文件存放目录")
    base_dir: str = Field(default="", description="相对路径的基准目录（为空时使用当前工作目录）")

    class Config:
        extra = "allow"


class RegistryConfig(BaseModel):
    """包仓库配置"""
    base_url: str = Field(default="https://registry.npmjs.com", description="仓库基础 URL")
    namespace: str = Field(default="@napi-rs", description="包命名空间")
    timeout: int = Field(default=60, description="请求超时时间（秒）")

    class Config:
        extra = "allow"


class PinyinCommandConfig(BaseModel):
    """/pinyin 命令默认选项"""
    heteronym: bool = Field(default=False, description="是否处理多音字")
    segment: bool = Field(default=True, description="是否开启分词")
    style: int = Field(default=1, ge=0, le=4, description="注音风格 0-4，默认带声调")

    class Config:
        extra = "allow"


class PinyinConfig(BaseModel):
    """拼音插件完整配置"""
    general: PinyinGeneralConfig = Field(default_factory=PinyinGeneralConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    command: PinyinCommandConfig = Field(default_factory=PinyinCommandConfig)

    class Config:
        extra = "allow"
