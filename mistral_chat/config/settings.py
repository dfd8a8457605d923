"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。

与旧版不同，这里不再暴露进程级的全局 settings 实例：
调用方通过 load_settings() 构造一个 Settings 值，再显式传给
ChatController / MistralClient / StreamingSession 的构造函数。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mistral_chat.chat.history import validate_retention


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("MISTRAL_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(Path.cwd() / "config.yaml")

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """Mistral 聊天客户端配置。"""

    # ---- API ----
    api_key: Optional[str] = Field(default=None, description="Mistral API 密钥")
    base_url: str = Field(
        default="https://api.mistral.ai/v1",
        description="Mistral API 基础URL",
    )
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 请求默认参数 ----
    default_model: str = Field(
        default="mistral-small",
        description="逻辑模型名，由 registry 映射为具体模型 ID",
    )
    streaming: bool = Field(default=True, description="send() 未指定时是否使用流式模式")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    safe_prompt: bool = Field(default=False, description="是否开启服务端安全提示")
    system_prompt: Optional[str] = Field(
        default=None,
        description="每次请求前置的 system 消息，不写入历史",
    )

    # ---- 历史裁剪 ----
    max_history_messages: int = Field(default=50, description="历史最大消息数（0 表示不限）")
    history_trim_count: int = Field(default=30, ge=0, description="超限后裁剪保留的消息数")

    # ---- 日志 ----
    log_dir: Optional[str] = Field(default=None, description="日志目录，为空则不写文件")
    log_level: str = Field(default="INFO")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_prefix="MISTRAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @model_validator(mode="after")
    def check_retention(self) -> "Settings":
        if not validate_retention(self.max_history_messages, self.history_trim_count):
            raise ValueError(
                "history_trim_count must be within [0, max_history_messages] "
                f"(got {self.history_trim_count} > {self.max_history_messages})"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


def load_settings(**overrides: Any) -> Settings:
    """构造一份配置；关键字参数优先级最高。"""

    return Settings(**overrides)
