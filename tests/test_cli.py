"""Tests for futureself CLI helpers."""
import logging
import os

import pytest

from futureself.cli import (
    CLIError,
    ENV_BUCKET,
    ENV_ISSUER_URL,
    ENV_RESULT_URL,
    _build_config,
    _load_env_file,
    _setup_logging,
    _strip_optional_quotes,
    run_cli,
)


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    logging.disable(logging.NOTSET)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (ENV_ISSUER_URL, ENV_BUCKET, ENV_RESULT_URL):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_strip_optional_quotes():
    assert _strip_optional_quotes("'abc'") == "abc"
    assert _strip_optional_quotes('"abc"') == "abc"
    assert _strip_optional_quotes("'abc\"") == "'abc\""
    assert _strip_optional_quotes("'") == "'"


def test_load_env_file(tmp_path, clean_env):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# endpoints",
                f"{ENV_ISSUER_URL}=https://issuer.test/default",
                f"{ENV_BUCKET}='selfies'",
                f"export {ENV_RESULT_URL}=\"https://results.test/status\"",
                "not a pair",
            ]
        ),
        encoding="utf-8",
    )

    _load_env_file(env_path)

    assert os.environ[ENV_ISSUER_URL] == "https://issuer.test/default"
    assert os.environ[ENV_BUCKET] == "selfies"
    assert os.environ[ENV_RESULT_URL] == "https://results.test/status"


def test_load_env_file_keeps_existing_values(tmp_path, clean_env):
    env_path = tmp_path / ".env"
    env_path.write_text(f"{ENV_BUCKET}=from-file\n", encoding="utf-8")
    clean_env.setenv(ENV_BUCKET, "from-shell")

    _load_env_file(env_path)
    assert os.environ[ENV_BUCKET] == "from-shell"

    _load_env_file(env_path, override=True)
    assert os.environ[ENV_BUCKET] == "from-file"


def test_load_env_file_missing(tmp_path):
    with pytest.raises(CLIError, match="not found"):
        _load_env_file(tmp_path / "absent.env")


def test_build_config_reports_missing_variables(clean_env):
    clean_env.setenv(ENV_ISSUER_URL, "https://issuer.test/default")

    with pytest.raises(CLIError) as exc_info:
        _build_config()

    assert ENV_BUCKET in str(exc_info.value)
    assert ENV_RESULT_URL in str(exc_info.value)
    assert ENV_ISSUER_URL not in str(exc_info.value)


def test_build_config_from_environment(clean_env):
    clean_env.setenv(ENV_ISSUER_URL, "https://issuer.test/default")
    clean_env.setenv(ENV_BUCKET, "selfies")
    clean_env.setenv(ENV_RESULT_URL, "https://results.test/status")

    config = _build_config(transfer_progress=True)

    assert config.issuer_url == "https://issuer.test/default"
    assert config.bucket_name == "selfies"
    assert config.result_url == "https://results.test/status"
    assert config.progress_mode == "transfer"
    assert _build_config().progress_mode == "simulated"


def test_setup_logging_silent_by_default():
    assert _setup_logging(debug=False, silent=False, log_level=None) == "silent"
    assert logging.getLogger().level > logging.CRITICAL


def test_setup_logging_debug_installs_rich_handler():
    from rich.logging import RichHandler

    assert _setup_logging(debug=True, silent=False, log_level=None) == "DEBUG"
    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert any(isinstance(h, RichHandler) for h in root_logger.handlers)


def test_setup_logging_explicit_level():
    assert _setup_logging(debug=False, silent=False, log_level="warning") == "WARNING"


def test_categories_command(capsys):
    assert run_cli(["categories"]) == 0
    assert "Arts & Creative" in capsys.readouterr().out


def test_jobs_for_category(capsys):
    assert run_cli(["categories", "Academic & Exploration"]) == 0
    assert "Alchemist" in capsys.readouterr().out


def test_unknown_category(capsys):
    assert run_cli(["categories", "Astronauts"]) == 1
    assert "unknown category" in capsys.readouterr().err


def test_run_requires_image(capsys):
    assert run_cli(["run", "--profession", "Writer"]) == 1
    assert "image is required" in capsys.readouterr().err


def test_run_missing_image_file(tmp_path, capsys):
    assert run_cli(["run", str(tmp_path / "nope.png"), "-p", "Writer"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_run_missing_environment(tmp_path, clean_env, capsys):
    image = tmp_path / "selfie.png"
    image.write_bytes(b"\x89PNG")

    assert run_cli(["run", str(image), "-p", "Writer"]) == 1
    assert "missing environment variables" in capsys.readouterr().err


def test_console_panel_follows_task_events():
    import io

    from rich.console import Console

    from futureself.cli_progress import ConsolePanel
    from futureself.models import PollResult, TaskState, UploadTask

    class FakeOrchestrator:
        def __init__(self):
            self.listeners = {}

        def on(self, event_name, callback):
            self.listeners[event_name] = callback

    buffer = io.StringIO()
    orchestrator = FakeOrchestrator()
    panel = ConsolePanel(Console(file=buffer, force_terminal=False, width=100)).attach(orchestrator)
    assert set(orchestrator.listeners) == {"state", "progress", "alert", "notice", "succeeded"}

    task = UploadTask(source=None, profession="Writer", object_name="previous-writer-1-a.jpg")
    task.state = TaskState.UPLOADING
    orchestrator.listeners["state"](task)
    task.progress = 40
    orchestrator.listeners["progress"](task)
    orchestrator.listeners["alert"]("Got an Error. Please try again.")
    orchestrator.listeners["notice"]("The operation has been canceled.")
    task.result = PollResult.available("https://cdn.test/r.jpg", "image/jpeg")
    task.state = TaskState.SUCCEEDED
    orchestrator.listeners["state"](task)
    orchestrator.listeners["succeeded"](task)
    panel.stop()

    output = buffer.getvalue()
    assert panel.alerts == ["Got an Error. Please try again."]
    assert "The operation has been canceled." in output
    assert "https://cdn.test/r.jpg" in output
