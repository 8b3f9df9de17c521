import json

import pytest

from cube_reporter.pytest_plugin import PLUGIN_NAME

PLUGIN_ARGS = ("-p", "cube_reporter.pytest_plugin")


@pytest.fixture
def report_dir(pytester):
    return pytester.path / "out"


def test_plugin_options_are_listed_in_help(pytester) -> None:
    result = pytester.runpytest(*PLUGIN_ARGS, "--help")

    result.stdout.fnmatch_lines(["*--docker-report *", "*--docker-container*"])


def test_reporter_fixture_skips_when_disabled(pytester) -> None:
    pytester.makepyfile(
        """
        def test_needs_report(docker_report):
            assert docker_report is not None
        """
    )

    result = pytester.runpytest(*PLUGIN_ARGS)

    result.assert_outcomes(skipped=1)


def test_session_report_covers_environment_tests_and_logs(pytester, report_dir) -> None:
    pytester.makepyfile(
        test_app="""
        def test_first():
            assert True

        def test_uses_reporter(docker_report):
            assert docker_report.containers.ids() == ["web"]
        """
    )

    result = pytester.runpytest(
        *PLUGIN_ARGS,
        "--docker-report",
        "--docker-executor",
        "dummy",
        "--docker-container",
        "web",
        f"--docker-report-dir={report_dir}",
    )

    result.assert_outcomes(passed=2)
    result.stdout.fnmatch_lines(["*docker report*"])
    payload = json.loads((report_dir / "reports" / "report.json").read_text(encoding="utf-8"))
    sections = [(section["kind"], section["id"]) for section in payload["sections"]]
    assert sections[0] == ("container", "docker-environment")
    assert ("test", "test_app.py::test_first") in sections
    assert ("test", "test_app.py::test_uses_reporter") in sections
    assert sections[-1] == ("container", "web")
    assert (report_dir / "reports" / "logs" / "web.log").is_file()
    assert (report_dir / "reports" / "report.html").is_file()


def test_ini_options_enable_the_report(pytester, report_dir) -> None:
    pytester.makeini(
        f"""
        [pytest]
        docker_report = true
        docker_report_decimal = true
        docker_executor = dummy
        docker_report_dir = {report_dir}
        docker_containers =
            web
            db
        """
    )
    pytester.makepyfile("def test_ok():\n    pass\n")

    result = pytester.runpytest(*PLUGIN_ARGS)

    result.assert_outcomes(passed=1)
    payload = json.loads((report_dir / "reports" / "report.json").read_text(encoding="utf-8"))
    test_section = next(s for s in payload["sections"] if s["kind"] == "test")
    names = [report["name"] for report in test_section["reports"]]
    assert names == ["web Statistics", "db Statistics"]
    memory = test_section["reports"][0]["entries"][0]
    assert memory["title"] == "Memory statistics"
    assert memory["items"][0]["display"].endswith("GB")


def test_unreachable_engine_does_not_fail_the_run(pytester, report_dir) -> None:
    pytester.makepyfile("def test_ok():\n    pass\n")

    result = pytester.runpytest(
        *PLUGIN_ARGS,
        "--docker-report",
        "--docker-executor",
        "missing-executor",
        f"--docker-report-dir={report_dir}",
    )

    result.assert_outcomes(passed=1)
    assert result.ret == 0


def test_plugin_is_registered_when_enabled(pytester, report_dir) -> None:
    config = pytester.parseconfigure(
        *PLUGIN_ARGS,
        "--docker-report",
        "--docker-executor",
        "dummy",
        "--docker-container",
        "web",
        f"--docker-report-dir={report_dir}",
    )

    plugin = config.pluginmanager.get_plugin(PLUGIN_NAME)
    assert plugin is not None
    assert plugin.session.settings.executor == "dummy"
    assert plugin.session.settings.containers == ("web",)
    assert plugin.session.settings.root_dir == report_dir


def test_plugin_stays_inactive_without_the_option(pytester) -> None:
    config = pytester.parseconfigure(*PLUGIN_ARGS)

    assert config.pluginmanager.get_plugin(PLUGIN_NAME) is None


def test_unexpected_executor_error_does_not_fail_tests(pytester, report_dir) -> None:
    pytester.makeconftest(
        """
        import pytest

        from cube_reporter.docker.dummy import DummyExecutor


        def _socket_closed(self, container_id):
            raise OSError("socket closed")


        @pytest.fixture(autouse=True)
        def broken_stats(monkeypatch):
            monkeypatch.setattr(DummyExecutor, "stats_container", _socket_closed)
        """
    )
    pytester.makepyfile("def test_ok():\n    pass\n")

    result = pytester.runpytest(
        *PLUGIN_ARGS,
        "--docker-report",
        "--docker-executor",
        "dummy",
        "--docker-container",
        "web",
        f"--docker-report-dir={report_dir}",
    )

    result.assert_outcomes(passed=1)
    assert result.ret == 0
    assert (report_dir / "reports" / "report.json").is_file()


def test_unwritable_report_root_does_not_fail_the_run(pytester, report_dir) -> None:
    report_dir.mkdir()
    (report_dir / "reports").write_text("not a directory", encoding="utf-8")
    pytester.makepyfile("def test_ok():\n    pass\n")

    result = pytester.runpytest(
        *PLUGIN_ARGS,
        "--docker-report",
        "--docker-executor",
        "dummy",
        "--docker-container",
        "web",
        f"--docker-report-dir={report_dir}",
    )

    result.assert_outcomes(passed=1)
    assert result.ret == 0


def test_blocked_schema_directory_does_not_fail_the_run(pytester, report_dir) -> None:
    (report_dir / "reports").mkdir(parents=True)
    (report_dir / "reports" / "schemas").write_text("not a directory", encoding="utf-8")
    pytester.makepyfile("def test_ok():\n    pass\n")

    result = pytester.runpytest(
        *PLUGIN_ARGS,
        "--docker-report",
        "--docker-executor",
        "dummy",
        "--docker-container",
        "web",
        f"--docker-report-dir={report_dir}",
    )

    result.assert_outcomes(passed=1)
    payload = json.loads((report_dir / "reports" / "report.json").read_text(encoding="utf-8"))
    sections = [(section["kind"], section["id"]) for section in payload["sections"]]
    assert ("container", "docker-environment") not in sections
    assert ("test", "test_blocked_schema_directory_does_not_fail_the_run.py::test_ok") in sections
