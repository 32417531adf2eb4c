"""Integration tests for the pitchroll command line."""

import logging
import sys
from pathlib import Path

import pytest

from pitchroll import main as cli


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(temp_data_dir):
    path = Path(temp_data_dir) / "pitchroll.yaml"
    path.write_text("logging:\n  file_path: logs/pitchroll.log\n  console_output: false\n")
    return str(path)


@pytest.mark.integration
class TestCli:
    """Test cases for main()."""

    def test_analyse_file(self, monkeypatch, capsys, restore_logging, config_file,
                          sample_wav_file, temp_data_dir):
        monkeypatch.setattr(sys, "argv", ["pitchroll", "--config", config_file,
                                          "--file", sample_wav_file])

        cli.main()

        output = capsys.readouterr().out
        assert "Detected phrases (2)" in output
        assert "A4" in output and "E5" in output
        assert (Path(temp_data_dir) / "logs" / "pitchroll.log").exists()

    def test_missing_config_exits(self, monkeypatch, capsys, restore_logging, temp_data_dir):
        monkeypatch.setattr(sys, "argv", ["pitchroll", "--config",
                                          f"{temp_data_dir}/missing.yaml"])

        with pytest.raises(SystemExit) as excinfo:
            cli.main()

        assert excinfo.value.code == 1
        assert "Configuration file not found" in capsys.readouterr().out

    def test_missing_audio_file_exits(self, monkeypatch, capsys, restore_logging, config_file,
                                      temp_data_dir):
        monkeypatch.setattr(sys, "argv", ["pitchroll", "--config", config_file,
                                          "--file", f"{temp_data_dir}/missing.wav"])

        with pytest.raises(SystemExit) as excinfo:
            cli.main()

        assert excinfo.value.code == 1
        assert "Audio file not found" in capsys.readouterr().out

    def test_file_and_duration_are_exclusive(self, monkeypatch, sample_wav_file):
        monkeypatch.setattr(sys, "argv", ["pitchroll", "--file", sample_wav_file,
                                          "--duration", "3"])

        with pytest.raises(SystemExit) as excinfo:
            cli.main()

        assert excinfo.value.code == 2
