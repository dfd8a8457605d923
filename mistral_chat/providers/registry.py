"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体模型 ID”解耦：

- 逻辑名（logical_name）：在代码和配置里使用的统一名称，例如 "mistral-small"。
- provider_model：Mistral 实际提供的模型 ID，例如 "mistral-small-latest"。

未登记的名字按原样作为模型 ID 透传，便于直接使用新发布的模型。"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str


@dataclass
class ProviderConfig:
    """Provider 的整体配置。"""

    name: str
    base_url: str
    models: Dict[str, ModelConfig]


def _models(*pairs: tuple) -> Dict[str, ModelConfig]:
    return {name: ModelConfig(logical_name=name, provider_model=model) for name, model in pairs}


MISTRAL_CONFIG = ProviderConfig(
    name="mistral",
    base_url="https://api.mistral.ai/v1",
    models=_models(
        ("mistral-large", "mistral-large-latest"),
        ("mistral-medium", "mistral-medium-latest"),
        ("mistral-small", "mistral-small-latest"),
        ("codestral", "codestral-latest"),
        ("ministral-8b", "ministral-8b-latest"),
        ("ministral-3b", "ministral-3b-latest"),
        ("open-mistral-nemo", "open-mistral-nemo"),
        ("pixtral-large", "pixtral-large-latest"),
    ),
)


def resolve_model(name: str) -> str:
    """把逻辑模型名解析为模型 ID，名称不区分大小写。"""

    key = (name or "").strip().lower()
    cfg = MISTRAL_CONFIG.models.get(key)
    if cfg is not None:
        return cfg.provider_model
    return name.strip()
