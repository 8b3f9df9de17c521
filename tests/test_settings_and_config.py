from pathlib import Path

import pytest

from cube_reporter.config.settings import ReporterSettings
from cube_reporter.errors import ConfigError
from cube_reporter.hydra_utils import compose_config, format_config, resolve_config


def _config_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "configs"


def test_hydra_compose_default() -> None:
    cfg = compose_config(config_path=_config_dir(), config_name="default")
    resolved = resolve_config(cfg)

    assert resolved["reporter"]["root_dir"] == "target"
    assert resolved["reporter"]["log_file"] == "reports/cube_reporter.log"
    assert resolved["docker"]["executor"] == "docker"
    assert resolved["composition"]["path"] is None
    assert "reporter:" in format_config(cfg)


def test_hydra_overrides_reach_settings() -> None:
    cfg = compose_config(
        config_path=_config_dir(),
        config_name="default.yaml",
        overrides=["docker.executor=dummy", "--reporter.decimal=true", "docker.containers=[web,db]"],
    )
    settings = ReporterSettings.from_mapping(resolve_config(cfg))

    assert settings.executor == "dummy"
    assert settings.decimal is True
    assert settings.containers == ("web", "db")


def test_missing_config_dir_raises_config_error(tmp_path) -> None:
    missing = tmp_path / "nowhere"

    with pytest.raises(ConfigError) as exc:
        compose_config(config_path=missing)

    assert "Config directory not found" in str(exc.value)


def test_unknown_override_raises_config_error() -> None:
    with pytest.raises(ConfigError) as exc:
        compose_config(config_path=_config_dir(), overrides=["reporter.nope=1"])

    assert "Failed to compose config" in str(exc.value)


def test_settings_paths_follow_report_layout(tmp_path) -> None:
    settings = ReporterSettings.from_mapping(
        {"reporter": {"root_dir": str(tmp_path), "log_file": "reports/run.log"}}
    )

    assert settings.reports_dir == tmp_path / "reports"
    assert settings.schemas_dir == tmp_path / "reports" / "schemas"
    assert settings.networks_dir == tmp_path / "reports" / "networks"
    assert settings.logs_dir == tmp_path / "reports" / "logs"
    assert settings.report_json_path.name == "report.json"
    assert settings.log_file_path == tmp_path / "reports" / "run.log"


def test_settings_defaults_without_sections() -> None:
    settings = ReporterSettings.from_mapping({})

    assert settings.root_dir == Path("target")
    assert settings.executor == "docker"
    assert settings.containers == ()
    assert settings.composition_path is None
    assert settings.log_file_path is None


@pytest.mark.parametrize(
    "cfg, fragment",
    [
        ({"reporter": "target"}, "reporter config must be a mapping"),
        ({"reporter": {"decimal": "maybe"}}, "reporter.decimal must be a boolean"),
        ({"docker": {"timeout": 0}}, "docker.timeout must be a positive integer"),
        ({"docker": {"executor": " "}}, "docker.executor must be a non-empty string"),
        ({"docker": {"containers": 3}}, "docker.containers must be a string or list"),
    ],
)
def test_invalid_settings_raise_config_error(cfg, fragment) -> None:
    with pytest.raises(ConfigError) as exc:
        ReporterSettings.from_mapping(cfg)

    assert fragment in str(exc.value)

