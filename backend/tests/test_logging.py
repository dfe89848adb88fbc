"""Tests for the structlog setup and the stdout/file tee."""

from app import logging as app_logging


class TestTeeWriter:
    def test_writes_to_stdout_and_file(self, tmp_path, capsys):
        """Each line lands in both sinks."""
        path = tmp_path / "api.log"
        writer = app_logging._TeeWriter(str(path))
        writer.write('{"event": "project_created"}\n')
        writer.flush()

        assert "project_created" in capsys.readouterr().out
        assert "project_created" in path.read_text()

    def test_unopenable_file_falls_back_to_stdout(self, tmp_path, capsys):
        """A missing directory disables file output without raising."""
        writer = app_logging._TeeWriter(str(tmp_path / "missing" / "api.log"))
        assert writer.file_enabled is False
        writer.write("still logged\n")
        captured = capsys.readouterr()
        assert "still logged" in captured.out
        assert "cannot open log file" in captured.err

    def test_write_failure_disables_file(self, tmp_path, capsys):
        """A closed file is dropped on the next write."""
        writer = app_logging._TeeWriter(str(tmp_path / "api.log"))
        writer._file.close()
        writer.write("after close\n")
        assert writer.file_enabled is False
        assert "file logging disabled" in capsys.readouterr().err


class TestLevel:
    def test_known_level(self, monkeypatch):
        """Level names map case-insensitively."""
        monkeypatch.setattr(app_logging.settings, "log_level", "debug")
        assert app_logging._level() == 10

    def test_unknown_level_defaults_to_info(self, monkeypatch):
        """Typos fall back to INFO."""
        monkeypatch.setattr(app_logging.settings, "log_level", "chatty")
        assert app_logging._level() == 20
