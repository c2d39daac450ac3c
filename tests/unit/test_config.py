"""
Config document parsing, environment overrides and validation.
"""

import json
import logging

import pytest
import yaml

from webfuzz.base.config import (
    CONFIG_TEMPLATE,
    AuthConfig,
    ChecksConfig,
    FormTarget,
    FuzzConfig,
    load_config,
    setup_logging,
)
from webfuzz.base.exceptions import ConfigurationError
from webfuzz.contracts.enums import AuthType, DriverType, ReporterType
from webfuzz.errors import ErrorCode

DOCUMENT = {
    "baseUrl": "https://shop.test",
    "numRuns": 10,
    "timeout": 2500,
    "headless": False,
    "driver": "http",
    "maxShrinkAttempts": 50,
    "seed": 99,
    "paths": {"include": ["/", "/products/**"], "exclude": ["/logout"]},
    "forms": [{"path": "/signup", "selector": "#signup", "submit": "button[type=submit]"}],
    "buttons": [{"path": "/cart", "selector": "#checkout"}],
    "checks": {"formFuzzing": True, "historyNavigation": False},
    "checkOptions": {"rapidClick": {"maxClicks": 4}, "queryParamFuzzing": {"params": ["q"]}},
    "customChecks": ["checks/extra.py"],
    "reporter": "json",
    "auth": {"type": "form", "loginUrl": "/login", "credentials": {"email": "a@b.test", "password": "x"}},
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BASE_URL", "NUM_RUNS", "TIMEOUT", "SEED", "HEADLESS", "DRIVER", "LOG_LEVEL"):
        monkeypatch.delenv(f"WEBFUZZ_{name}", raising=False)


def test_from_dict_reads_camel_case_document(tmp_path):
    config = FuzzConfig.from_dict(DOCUMENT, config_dir=tmp_path)

    assert config.base_url == "https://shop.test"
    assert config.num_runs == 10
    assert config.timeout_ms == 2500
    assert config.timeout_seconds == 2.5
    assert config.headless is False
    assert config.driver == DriverType.HTTP
    assert config.max_shrink_attempts == 50
    assert config.seed == 99
    assert config.paths.include == ("/", "/products/**")
    assert config.paths.exclude == ("/logout",)
    assert config.forms == (FormTarget("/signup", "#signup", "button[type=submit]"),)
    assert config.buttons[0].selector == "#checkout"
    assert config.check_options.rapid_click.max_clicks == 4
    assert config.check_options.query_param_fuzzing.params == ("q",)
    assert config.custom_checks == ("checks/extra.py",)
    assert config.config_dir == tmp_path
    assert config.reporter == ReporterType.JSON
    assert config.auth == AuthConfig(type=AuthType.FORM, login_url="/login", email="a@b.test", password="x")
    assert config.validate() == []


def test_checks_merge_over_defaults():
    checks = FuzzConfig.from_dict(DOCUMENT).checks
    assert checks.enabled_names() == ["noServerError", "formFuzzing", "queryParamFuzzing", "rapidClick"]
    assert checks.is_enabled("formFuzzing")
    assert not checks.is_enabled("historyNavigation")


def test_unknown_check_in_document_is_a_parse_error():
    with pytest.raises(ConfigurationError) as excinfo:
        FuzzConfig.from_dict({"checks": {"noSuchCheck": True}})
    assert excinfo.value.code == ErrorCode.CONFIG_PARSE_ERROR
    assert "noSuchCheck" in excinfo.value.message


def test_malformed_form_entry_is_a_parse_error():
    with pytest.raises(ConfigurationError):
        FuzzConfig.from_dict({"forms": [{"path": "/x"}]})


@pytest.mark.parametrize("overrides, message", [
    ({"base_url": "ftp://x"}, "Invalid baseUrl: ftp://x"),
    ({"base_url": ""}, "baseUrl is required"),
    ({"num_runs": 0}, "numRuns must be at least 1"),
    ({"timeout_ms": -1}, "timeout must be non-negative"),
    ({"checks": ChecksConfig(form_fuzzing=True)}, "formFuzzing is enabled but no forms are configured"),
    ({"forms": (FormTarget("/x", "", "#go"),)}, "Form selector is required"),
    ({"auth": AuthConfig(type=AuthType.BEARER)}, "Bearer auth requires token"),
    ({"auth": AuthConfig(type=AuthType.COOKIE)}, "Cookie auth requires cookies"),
])
def test_validate_reports_each_problem(overrides, message):
    assert message in FuzzConfig(**overrides).validate()


def test_with_overrides_ignores_none():
    config = FuzzConfig(num_runs=5).with_overrides(num_runs=None, seed=3)
    assert config.num_runs == 5
    assert config.seed == 3


def test_url_for_joins_paths():
    config = FuzzConfig(base_url="http://app.test/")
    assert config.url_for("/a") == "http://app.test/a"
    assert config.url_for("b") == "http://app.test/b"


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "webfuzz.config.yaml"
    path.write_text(yaml.safe_dump(DOCUMENT))
    monkeypatch.setenv("WEBFUZZ_NUM_RUNS", "7")
    monkeypatch.setenv("WEBFUZZ_HEADLESS", "true")
    monkeypatch.setenv("WEBFUZZ_DRIVER", "playwright")
    monkeypatch.setenv("WEBFUZZ_LOG_LEVEL", "debug")

    config = load_config(path)

    assert config.num_runs == 7
    assert config.headless is True
    assert config.driver == DriverType.PLAYWRIGHT
    assert config.log.level == "DEBUG"
    assert config.base_url == "https://shop.test"


def test_yaml_document_with_comments(tmp_path):
    path = tmp_path / "webfuzz.config.yaml"
    path.write_text(
        "baseUrl: http://localhost:8080\n"
        "numRuns: 20              # trials per check\n"
        "paths:\n"
        "  include:\n"
        "    - /\n"
        "  exclude:\n"
        "    - /admin/**\n"
        "forms:\n"
        "  - path: /contact\n"
        "    selector: form\n"
        '    submit: button[type="submit"]\n'
        "checks:\n"
        "  formFuzzing: true\n"
        "reporter: html\n"
    )

    config = load_config(path)

    assert config.base_url == "http://localhost:8080"
    assert config.num_runs == 20
    assert config.paths.exclude == ("/admin/**",)
    assert config.forms == (FormTarget("/contact", "form", 'button[type="submit"]'),)
    assert config.reporter == ReporterType.HTML
    assert config.validate() == []


def test_json_document_still_loads(tmp_path):
    path = tmp_path / "webfuzz.config.json"
    path.write_text(json.dumps(DOCUMENT, indent=2))
    assert load_config(path).seed == 99


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "webfuzz.config.yaml"
    path.write_text("# nothing configured yet\n")
    config = load_config(path)
    assert config.base_url == "http://localhost:3000"
    assert config.config_dir == tmp_path.resolve()


def test_missing_file_uses_defaults(tmp_path, caplog):
    config = load_config(tmp_path / "absent.yaml")
    assert config.num_runs == 50
    assert config.config_dir == tmp_path.resolve()
    assert "Config file not found" in caplog.text


def test_invalid_yaml_is_a_parse_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("baseUrl: [unclosed\n")
    with pytest.raises(ConfigurationError) as excinfo:
        load_config(path)
    assert excinfo.value.code == ErrorCode.CONFIG_PARSE_ERROR


def test_non_object_document_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- /\n- /home\n")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_template_parses_and_validates():
    config = FuzzConfig.from_dict(yaml.safe_load(CONFIG_TEMPLATE))
    assert config.validate() == []
    assert config.paths.exclude == ("/admin/**", "/api/**")


def test_setup_logging_writes_log_file(tmp_path):
    config = FuzzConfig.from_dict({"log": {"level": "warning", "file": str(tmp_path / "logs" / "run.log")}})
    setup_logging(config)
    try:
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
        logging.getLogger("executor.runner").warning("shrinking")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "shrinking" in (tmp_path / "logs" / "run.log").read_text()
    finally:
        for handler in list(logging.getLogger().handlers):
            handler.close()
            logging.getLogger().removeHandler(handler)
        logging.getLogger().setLevel(logging.WARNING)
