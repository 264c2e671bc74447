import json
import os
from pathlib import Path
from unittest.mock import patch

from counsellor.config import Config, configure_logging, load_config
from counsellor.config.loader import save_config
from counsellor.config.schema import ProviderConfig, ResilienceConfig, _resolve_env, vendor_for_model


class TestResolveEnv:
    def test_dollar_var(self):
        with patch.dict(os.environ, {"MY_KEY": "resolved_value"}):
            assert _resolve_env("$MY_KEY") == "resolved_value"

    def test_dollar_brace_var(self):
        with patch.dict(os.environ, {"MY_KEY": "resolved_value"}):
            assert _resolve_env("${MY_KEY}") == "resolved_value"

    def test_unset_var_returns_original(self):
        env = os.environ.copy()
        env.pop("NONEXISTENT_VAR_XYZ", None)
        with patch.dict(os.environ, env, clear=True):
            assert _resolve_env("$NONEXISTENT_VAR_XYZ") == "$NONEXISTENT_VAR_XYZ"

    def test_plain_string_unchanged(self):
        assert _resolve_env("sk-plainkey123") == "sk-plainkey123"

    def test_empty_string(self):
        assert _resolve_env("") == ""


class TestProviderConfig:
    def test_resolved_api_key(self):
        with patch.dict(os.environ, {"ANTHROPIC_KEY": "sk-from-env"}):
            assert ProviderConfig(api_key="$ANTHROPIC_KEY").resolved_api_key == "sk-from-env"

    def test_has_resilience_defaults(self):
        pc = ProviderConfig()
        assert isinstance(pc.resilience, ResilienceConfig)
        assert pc.resilience.timeout == 120
        assert pc.resilience.max_retries == 3


def test_config_defaults() -> None:
    config = Config()
    assert config.default_model == "gpt-4.5-preview"
    assert config.truncation.default_token_limit == 12_000
    assert config.truncation.system_prompt_overhead == 2_000
    assert config.truncation.response_buffer == 2_000
    assert config.merge.sensitive_fields == ["password", "ssn", "credit_card", "bank_account"]


def test_config_accepts_camel_case_keys() -> None:
    config = Config.model_validate(
        {
            "defaultModel": "claude-4-opus",
            "truncation": {"responseBuffer": 500, "modelTokenLimits": {"local-model": 4000}},
            "providers": {"anthropic": {"apiKey": "sk-ant-test"}},
        }
    )
    assert config.default_model == "claude-4-opus"
    assert config.truncation.response_buffer == 500
    assert config.truncation.model_token_limits == {"local-model": 4000}
    assert config.get_provider().api_key == "sk-ant-test"


def test_vendor_for_model() -> None:
    assert vendor_for_model("claude-3-opus-20240229") == "anthropic"
    assert vendor_for_model("gemini-2.5-flash") == "gemini"
    assert vendor_for_model("gpt-4") == "openai"
    assert vendor_for_model("anthropic/claude-4-sonnet") == "anthropic"


def test_load_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / "missing.json") == Config()


def test_load_config_invalid_file_returns_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf-8")
    assert load_config(path) == Config()


def test_load_config_invalid_file_logs_single_event(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf-8")
    with patch("counsellor.config.loader.logger") as mocked:
        load_config(path)
    mocked.warning.assert_called_once()
    event, fields = mocked.warning.call_args.args[0], mocked.warning.call_args.kwargs
    assert event == "config_load_failed"
    assert fields["path"] == str(path)
    assert fields["fallback"] == "defaults"


def test_save_then_load_config(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"
    save_config(Config(default_model="gemini-2.5-pro", log_json=False), path)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["defaultModel"] == "gemini-2.5-pro"

    loaded = load_config(path)
    assert loaded.default_model == "gemini-2.5-pro"
    assert loaded.log_json is False


def test_configure_logging_applies_config_settings() -> None:
    config = Config.model_validate({"logLevel": "DEBUG", "logJson": False})
    with patch("counsellor.config.loader.setup_logging") as mocked:
        configure_logging(config)
    mocked.assert_called_once_with(json_output=False, level="DEBUG")
