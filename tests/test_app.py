# tests/test_app.py
"""Tests for the app.py command line entry point"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

import app
from perevod.models.types import RunStatus, TranslationResult

# Captured before the autouse fixture patches it
_setup_logging = app.setup_logging


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch.object(app, "setup_logging"):
        yield


@pytest.fixture
def service_cls():
    with patch("perevod.services.translation_service.TranslationService") as cls:
        yield cls


@pytest.mark.unit
def test_translate_prints_output_path(service_cls, tmp_path, capsys):
    out_path = tmp_path / "in на русском.xlsx"
    service_cls.return_value.translate_file.return_value = TranslationResult(
        status=RunStatus.SUCCESS, message="Файл успешно переведен и сохранен!", output_path=out_path,
    )

    code = app.main(["translate", str(tmp_path / "in.xlsx"), "--api-key", "key-1234567890"])

    assert code == 0
    service_cls.return_value.translate_file.assert_called_once_with(
        tmp_path / "in.xlsx", "key-1234567890", output_dir=tmp_path,
    )
    service_cls.return_value.shutdown.assert_called_once()
    assert str(out_path) in capsys.readouterr().out


@pytest.mark.unit
def test_translate_reads_key_from_environment(service_cls, tmp_path, monkeypatch):
    monkeypatch.setenv(app.API_KEY_ENV, "env-key-1234567890")
    service_cls.return_value.translate_file.return_value = TranslationResult(status=RunStatus.SUCCESS)

    app.main(["translate", str(tmp_path / "in.xlsx"), "--output-dir", str(tmp_path / "out")])

    service_cls.return_value.translate_file.assert_called_once_with(
        tmp_path / "in.xlsx", "env-key-1234567890", output_dir=tmp_path / "out",
    )


@pytest.mark.unit
def test_translate_failure_exit_code(service_cls, tmp_path, capsys):
    service_cls.return_value.translate_file.return_value = TranslationResult(
        status=RunStatus.ERROR, message="Ошибка: Файл не найден: in.xlsx",
    )

    code = app.main(["translate", str(tmp_path / "in.xlsx"), "--api-key", "k"])

    assert code == 1
    assert "Файл не найден" in capsys.readouterr().out


@pytest.mark.unit
def test_relay_runs_uvicorn_with_settings_defaults():
    with patch("uvicorn.run") as run:
        code = app.main(["relay", "--port", "3100"])

    assert code == 0
    assert run.call_args.kwargs["host"] == "127.0.0.1"
    assert run.call_args.kwargs["port"] == 3100


@pytest.mark.unit
def test_command_is_required():
    with pytest.raises(SystemExit):
        app.main([])


@pytest.mark.unit
def test_setup_logging_writes_log_file(tmp_path: Path):
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level
    try:
        console_handler, file_handler = _setup_logging(tmp_path)

        assert root_logger.handlers == [console_handler, file_handler]
        assert (tmp_path / "perevod.log").exists()
        assert logging.getLogger("uvicorn").level == logging.WARNING
        file_handler.close()
    finally:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        for handler in saved_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(saved_level)
