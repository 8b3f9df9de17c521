import io

import pytest
import requests
from docker.errors import APIError, NotFound

from cube_reporter.docker import client as client_module
from cube_reporter.docker.client import DockerClientExecutor
from cube_reporter.errors import DockerError


class FakeApi:
    def __init__(self, *, error=None, logs=b"line\n", chunks=()):
        self.error = error
        self.log_payload = logs
        self.chunks = list(chunks)
        self.calls = []

    def _maybe_raise(self):
        if self.error is not None:
            raise self.error

    def stats(self, container_id, stream):
        self.calls.append(("stats", container_id, stream))
        self._maybe_raise()
        return {"memory_stats": {"usage": 1}}

    def inspect_container(self, container_id):
        self.calls.append(("inspect", container_id))
        self._maybe_raise()
        return {"HostConfig": {"NetworkMode": "bridge"}}

    def logs(self, container_id, **kwargs):
        self.calls.append(("logs", container_id, kwargs))
        self._maybe_raise()
        if kwargs.get("stream"):
            return self._stream()
        return self.log_payload

    def _stream(self):
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class FakeClient:
    def __init__(self, api=None, *, version_error=None, close_error=None):
        self.api = api or FakeApi()
        self.version_error = version_error
        self.close_error = close_error
        self.closed = False

    def version(self):
        if self.version_error is not None:
            raise self.version_error
        return {
            "Version": "24.0.7",
            "Os": "linux",
            "KernelVersion": "6.5.0",
            "ApiVersion": "1.43",
            "Arch": "amd64",
        }

    def close(self):
        if self.close_error is not None:
            raise self.close_error
        self.closed = True


def test_version_is_read_from_the_engine() -> None:
    executor = DockerClientExecutor(client=FakeClient())

    version = executor.docker_host_version()

    assert version.version == "24.0.7"
    assert version.kernel_version == "6.5.0"
    assert version.api_version == "1.43"


def test_stats_are_requested_as_a_single_sample() -> None:
    api = FakeApi()
    executor = DockerClientExecutor(client=FakeClient(api))

    assert executor.stats_container("web") == {"memory_stats": {"usage": 1}}
    assert api.calls == [("stats", "web", False)]


@pytest.mark.parametrize(
    "error",
    [
        NotFound("no such container"),
        APIError("server error"),
        requests.exceptions.ConnectionError("connection refused"),
        requests.exceptions.ReadTimeout("read timed out"),
    ],
)
def test_engine_errors_become_docker_errors(error) -> None:
    executor = DockerClientExecutor(client=FakeClient(FakeApi(error=error)))

    with pytest.raises(DockerError) as exc:
        executor.stats_container("web")

    assert "web" in str(exc.value)
    assert exc.value.context == {"container": "web"}
    with pytest.raises(DockerError):
        executor.inspect_container("web")
    with pytest.raises(DockerError):
        executor.copy_log("web", io.BytesIO())


def test_version_transport_error_becomes_docker_error() -> None:
    client = FakeClient(version_error=requests.exceptions.ConnectionError("refused"))
    executor = DockerClientExecutor(client=client)

    with pytest.raises(DockerError) as exc:
        executor.docker_host_version()

    assert "Failed to read docker version" in str(exc.value)


def test_copy_log_maps_negative_tail_to_all() -> None:
    api = FakeApi(logs=b"a\nb\n")
    executor = DockerClientExecutor(client=FakeClient(api))
    buffer = io.BytesIO()

    executor.copy_log("web", buffer, timestamps=False)

    assert buffer.getvalue() == b"a\nb\n"
    _, container_id, kwargs = api.calls[0]
    assert container_id == "web"
    assert kwargs["tail"] == "all"
    assert kwargs["stream"] is False
    assert kwargs["timestamps"] is False


def test_copy_log_passes_positive_tail() -> None:
    api = FakeApi()
    executor = DockerClientExecutor(client=FakeClient(api))

    executor.copy_log("web", io.BytesIO(), tail=10)

    assert api.calls[0][2]["tail"] == 10


def test_copy_log_follow_streams_chunks() -> None:
    api = FakeApi(chunks=[b"one\n", b"two\n"])
    executor = DockerClientExecutor(client=FakeClient(api))
    buffer = io.BytesIO()

    executor.copy_log("web", buffer, follow=True)

    assert buffer.getvalue() == b"one\ntwo\n"
    kwargs = api.calls[0][2]
    assert kwargs["stream"] is True
    assert kwargs["follow"] is True


def test_copy_log_follow_wraps_errors_raised_while_streaming() -> None:
    api = FakeApi(chunks=[b"one\n", requests.exceptions.ChunkedEncodingError("broken")])
    executor = DockerClientExecutor(client=FakeClient(api))
    buffer = io.BytesIO()

    with pytest.raises(DockerError):
        executor.copy_log("web", buffer, follow=True)

    assert buffer.getvalue() == b"one\n"


def test_base_url_builds_an_explicit_client(monkeypatch) -> None:
    created = {}

    def fake_client(**kwargs):
        created.update(kwargs)
        return FakeClient()

    monkeypatch.setattr(client_module.docker, "DockerClient", fake_client)
    monkeypatch.setattr(
        client_module.docker, "from_env", lambda **kwargs: pytest.fail("from_env used")
    )

    DockerClientExecutor(base_url="tcp://engine:2375", timeout=5)

    assert created == {"base_url": "tcp://engine:2375", "timeout": 5}


def test_environment_client_is_used_without_base_url(monkeypatch) -> None:
    created = {}

    def fake_from_env(**kwargs):
        created.update(kwargs)
        return FakeClient()

    monkeypatch.setattr(client_module.docker, "from_env", fake_from_env)

    executor = DockerClientExecutor(timeout=7)

    assert created == {"timeout": 7}
    assert isinstance(executor.client, FakeClient)


def test_unavailable_engine_raises_docker_error(monkeypatch) -> None:
    from docker.errors import DockerException

    def broken_from_env(**kwargs):
        raise DockerException("Error while fetching server API version")

    monkeypatch.setattr(client_module.docker, "from_env", broken_from_env)

    with pytest.raises(DockerError) as exc:
        DockerClientExecutor()

    assert "Docker is not available" in str(exc.value)


def test_close_closes_the_client_and_tolerates_errors() -> None:
    client = FakeClient()
    DockerClientExecutor(client=client).close()
    assert client.closed

    failing = FakeClient(close_error=requests.exceptions.ConnectionError("gone"))
    DockerClientExecutor(client=failing).close()
    assert not failing.closed
