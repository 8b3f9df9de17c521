import logging

import pytest

from cube_reporter.composition import load_compositions
from cube_reporter.errors import CompositionError, ConfigError, DockerError
from cube_reporter.logging_utils import log_exception, run_with_error_handling
from cube_reporter.registry import Registry, resolve_executor
from cube_reporter.session import create_executor
from cube_reporter.config.settings import ReporterSettings


def test_missing_composition_raises_composition_error(tmp_path) -> None:
    missing = tmp_path / "cube.yaml"

    with pytest.raises(CompositionError) as exc:
        load_compositions(missing)

    message = str(exc.value)
    assert "Composition file not found" in message
    assert str(missing) in message


def test_missing_executor_raises_docker_error() -> None:
    registry = Registry()

    with pytest.raises(DockerError) as exc:
        resolve_executor("missing-executor", registry=registry)

    message = str(exc.value)
    assert "Executor" in message
    assert "missing-executor" in message


def test_invalid_dummy_config_raises_config_error() -> None:
    settings = ReporterSettings(executor="dummy", dummy={"unknown": 1})

    with pytest.raises(ConfigError) as exc:
        create_executor(settings)

    assert "Invalid dummy executor config" in str(exc.value)


def test_error_context_is_part_of_log_message() -> None:
    exc = DockerError("Container 'web' not found.", context={"container": "web"})

    assert exc.user_message == "Container 'web' not found."
    assert exc.log_message() == "Container 'web' not found.: {'container': 'web'}"


def test_run_with_error_handling_logs_and_reraises(caplog) -> None:
    logger = logging.getLogger("cube_reporter.test")
    logger.setLevel(logging.INFO)
    logger.propagate = True
    logger.handlers.clear()

    def _raise_config_error() -> None:
        raise ConfigError("Config directory not found: configs")

    with caplog.at_level(logging.INFO, logger=logger.name):
        with pytest.raises(ConfigError):
            run_with_error_handling(_raise_config_error, logger=logger)

    assert any(
        "Config directory not found" in record.getMessage() for record in caplog.records
    )


def test_log_exception_emits_traceback_at_debug_level(caplog) -> None:
    logger = logging.getLogger("cube_reporter.test.debug")
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    logger.handlers.clear()

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        log_exception(logger, ConfigError("Config directory not found: configs"))

    assert any(record.exc_info for record in caplog.records)


def test_unexpected_errors_get_generic_user_message(caplog) -> None:
    logger = logging.getLogger("cube_reporter.test.unexpected")
    logger.propagate = True

    with caplog.at_level(logging.INFO, logger=logger.name):
        message = log_exception(logger, RuntimeError("boom"))

    assert message == "Unexpected error: boom"
