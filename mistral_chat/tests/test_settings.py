import pytest
from pydantic import ValidationError

from mistral_chat.config.settings import Settings, load_settings


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MISTRAL_CONFIG_FILE", raising=False)
    s = Settings(_env_file=None)
    assert s.base_url == "https://api.mistral.ai/v1"
    assert s.max_history_messages == 50
    assert s.history_trim_count == 30
    assert s.temperature == 0.7
    assert s.max_tokens == 1000
    assert s.top_p == 1.0
    assert s.streaming is True
    assert s.log_dir is None


def test_env_overrides_yaml(monkeypatch, tmp_path):
    cfg = tmp_path / "chat.yaml"
    cfg.write_text("default_model: codestral\nmax_tokens: 256\napi_key: from-yaml\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MISTRAL_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("MISTRAL_API_KEY", "from-env")

    s = load_settings(_env_file=None)

    assert s.api_key == "from-env"
    assert s.default_model == "codestral"
    assert s.max_tokens == 256


def test_init_overrides_everything(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MISTRAL_TEMPERATURE", "1.5")
    s = load_settings(temperature=0.2, _env_file=None)
    assert s.temperature == 0.2


def test_invalid_retention_is_rejected(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValidationError):
        Settings(max_history_messages=10, history_trim_count=20, _env_file=None)
    # 不限制历史时 trim 数量不受约束
    assert Settings(max_history_messages=0, history_trim_count=20, _env_file=None).history_trim_count == 20


def test_out_of_range_sampling_rejected(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValidationError):
        Settings(temperature=3.0, _env_file=None)
    with pytest.raises(ValidationError):
        Settings(top_p=1.5, _env_file=None)
