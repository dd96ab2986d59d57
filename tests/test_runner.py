import io
import os

import pytest

from treehouse.colors import SERVICE_COLORS
from treehouse.config import ConfigError
from treehouse.contexts import Context
from treehouse.runner import Options, Runner


class FakeClient:
    def __init__(self, code=200, error=None):
        self.code = code
        self.error = error
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.code


def write_config(directory, text):
    (directory / "treehouse.yaml").write_text(text)


def test_defaults_are_filled():
    runner = Runner(Options())
    assert tuple(runner.options.colors) == SERVICE_COLORS
    assert runner.options.default_health_interval == 2
    assert runner.options.default_health_timeout == 30


def test_explicit_options_are_kept():
    client = FakeClient()
    runner = Runner(Options(colors=["#000000"], default_health_interval=7,
                            default_health_timeout=9, http_client=client))
    assert tuple(runner.options.colors) == ("#000000",)
    assert runner.options.default_health_interval == 7
    assert runner.options.default_health_timeout == 9
    assert runner.options.http_client is client


def test_run_success_sets_environment(tmp_path, monkeypatch):
    write_config(tmp_path, """core_services:
  svc:
    command: "true"
    env:
      FOO: "bar"
      BAZ: "qux"
    health_check:
      url: "http://localhost:8080"
      codes: [200]
      interval_seconds: 1
      timeout_seconds: 1
""")
    monkeypatch.setenv("FOO", "unset")
    monkeypatch.setenv("BAZ", "unset")
    out = io.StringIO()
    client = FakeClient(200)
    Runner(Options(config_dir=str(tmp_path), mode="test", http_client=client, output=out)).run()
    assert os.environ["FOO"] == "bar"
    assert os.environ["BAZ"] == "qux"
    assert client.urls == ["http://localhost:8080"]
    text = out.getvalue()
    assert "[health][svc]" in text
    assert "success (200)" in text


def test_global_env_is_set(tmp_path, monkeypatch):
    write_config(tmp_path, """core_services:
  svc:
    command: "echo $TREEHOUSE_GLOBAL_TEST"
global_env:
  TREEHOUSE_GLOBAL_TEST: "yes"
""")
    monkeypatch.setenv("TREEHOUSE_GLOBAL_TEST", "unset")
    out = io.StringIO()
    Runner(Options(config_dir=str(tmp_path), output=out)).run()
    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith(" yes")
    assert os.environ["TREEHOUSE_GLOBAL_TEST"] == "yes"


def test_run_missing_config(tmp_path):
    runner = Runner(Options(config_dir=str(tmp_path), mode="test"))
    with pytest.raises(ConfigError) as info:
        runner.run()
    assert "loading config" in str(info.value)
    assert isinstance(info.value.__cause__.__cause__, FileNotFoundError)


def test_run_invalid_config(tmp_path):
    write_config(tmp_path, "invalid: [yaml")
    runner = Runner(Options(config_dir=str(tmp_path), mode="test"))
    with pytest.raises(ConfigError):
        runner.run()


def test_run_mode_override(tmp_path, capsys):
    write_config(tmp_path, """core_services:
  svc:
    command: "false"
    modes:
      test: "true"
""")
    Runner(Options(config_dir=str(tmp_path), mode="test", output=io.StringIO())).run()
    assert "Error for svc" not in capsys.readouterr().err


def test_run_without_mode_reports_failing_command(tmp_path, capsys):
    write_config(tmp_path, """core_services:
  svc:
    command: "false"
    modes:
      test: "true"
""")
    Runner(Options(config_dir=str(tmp_path), output=io.StringIO())).run()
    assert "Error for svc" in capsys.readouterr().err


def test_service_output_is_prefixed(tmp_path):
    write_config(tmp_path, """core_services:
  svc:
    command: "echo hello"
""")
    out = io.StringIO()
    Runner(Options(config_dir=str(tmp_path), output=out)).run()
    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    assert "[svc]" in lines[0]
    assert lines[0].endswith(" hello")


def test_muted_service_prints_nothing(tmp_path):
    write_config(tmp_path, """core_services:
  svc:
    command: "echo hello"
""")
    out = io.StringIO()
    Runner(Options(config_dir=str(tmp_path), mute="svc", output=out)).run()
    assert out.getvalue() == ""


def test_spm_mode_checks_only_focused_service(tmp_path):
    write_config(tmp_path, """core_services:
  svc1:
    command: "true"
    health_check:
      url: "http://localhost:8080"
      codes: [200]
  svc2:
    command: "true"
    health_check:
      url: "http://localhost:8081"
      codes: [200]
""")
    client = FakeClient(200)
    Runner(Options(config_dir=str(tmp_path), mode="test", spm_mode=True, focus="svc1",
                   http_client=client, output=io.StringIO())).run()
    assert client.urls == ["http://localhost:8080"]


def test_health_check_times_out(tmp_path):
    write_config(tmp_path, """core_services:
  svc:
    command: "true"
    health_check:
      url: "http://localhost:8080"
      codes: [200]
      interval_seconds: 1
      timeout_seconds: 1
""")
    out = io.StringIO()
    client = FakeClient(error=OSError("connection refused"))
    Runner(Options(config_dir=str(tmp_path), http_client=client, output=out)).run()
    assert "failure (timeout)" in out.getvalue()
    assert len(client.urls) >= 2


def test_cancelled_context_aborts(tmp_path, capsys):
    write_config(tmp_path, """core_services:
  svc:
    command: "true"
    health_check:
      url: "http://localhost:8080"
      codes: [200]
""")
    ctx = Context()
    ctx.cancel()
    out = io.StringIO()
    client = FakeClient(200)
    Runner(Options(config_dir=str(tmp_path), http_client=client, output=out)).run(ctx)
    assert "aborted" in out.getvalue()
    assert client.urls == []
    assert "Error for svc" in capsys.readouterr().err