import json

import numpy as np
import pytest
from click.testing import CliRunner

from stegano_pipeline.cli import cli
from stegano_pipeline.image_utils import load_pixels, save_pixels


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cover_path(runner, tmp_path):
    path = str(tmp_path / "cover.png")
    result = runner.invoke(cli, ["cover", "--out", path, "--width", "40", "--height", "30"])
    assert result.exit_code == 0, result.output
    return path


class TestCli:

    def test_cover_command(self, cover_path):
        assert load_pixels(cover_path).shape == (30, 40, 4)

    def test_hide_and_extract_with_report(self, runner, cover_path, tmp_path):
        stego = str(tmp_path / "stego.png")
        report = str(tmp_path / "report.json")
        result = runner.invoke(cli, [
            "hide", "--in", cover_path, "--out", stego,
            "--message", "Meet me at noon", "--report", report,
        ])
        assert result.exit_code == 0, result.output
        assert "Stego image saved to" in result.output

        with open(report) as f:
            data = json.load(f)
        assert data["original_length"] == 12
        assert data["key"] == "1010000010"

        result = runner.invoke(cli, ["extract", "--in", stego, "--report", report])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "MEETMEATNOON"

    def test_explicit_keys(self, runner, cover_path, tmp_path):
        stego = str(tmp_path / "stego.png")
        keys = ["--key-matrix", "5,8,17,3", "--key", "1100110011"]
        result = runner.invoke(cli, ["hide", "--in", cover_path, "--out", stego, "--message", "abc"] + keys)
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["extract", "--in", stego, "--length", "3"] + keys)
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "ABC"

    def test_keys_from_environment(self, runner, cover_path, tmp_path):
        stego = str(tmp_path / "stego.png")
        env = {"STEGANO_SDES_KEY": "0000011111"}
        result = runner.invoke(cli, ["hide", "--in", cover_path, "--out", stego, "--message", "hi"], env=env)
        assert result.exit_code == 0, result.output
        result = runner.invoke(cli, ["extract", "--in", stego, "--length", "2"], env=env)
        assert result.output.strip() == "HI"

    def test_bad_key_reported(self, runner, cover_path, tmp_path):
        result = runner.invoke(cli, [
            "hide", "--in", cover_path, "--out", str(tmp_path / "s.png"),
            "--message", "hi", "--key", "123",
        ])
        assert result.exit_code == 1
        assert "10 binary digits" in result.output

    def test_malformed_matrix_option(self, runner, cover_path, tmp_path):
        result = runner.invoke(cli, [
            "hide", "--in", cover_path, "--out", str(tmp_path / "s.png"),
            "--message", "hi", "--key-matrix", "1,2,3",
        ])
        assert result.exit_code == 2

    def test_extract_without_message(self, runner, tmp_path):
        path = str(tmp_path / "blank.png")
        save_pixels(path, np.zeros((8, 8, 4), dtype=np.uint8))
        result = runner.invoke(cli, ["extract", "--in", path])
        assert result.exit_code == 1
        assert "No end-of-payload marker" in result.output

    def test_unreadable_cover(self, runner, tmp_path):
        bogus = tmp_path / "bogus.png"
        bogus.write_bytes(b"not a png")
        result = runner.invoke(cli, ["hide", "--in", str(bogus), "--out", str(tmp_path / "s.png"), "--message", "hi"])
        assert result.exit_code == 1
        assert "Cannot decode carrier image" in result.output

    def test_missing_report_file(self, runner, cover_path, tmp_path):
        result = runner.invoke(cli, ["extract", "--in", cover_path, "--report", str(tmp_path / "absent.json")])
        assert result.exit_code == 2
        assert "absent.json" in result.output
        assert not isinstance(result.exception, FileNotFoundError)

    @pytest.mark.parametrize("content, message", [
        ("{not json", "Report is not valid JSON"),
        ("[1, 2, 3]", "Report must be a JSON object"),
    ])
    def test_malformed_report_file(self, runner, cover_path, tmp_path, content, message):
        report = tmp_path / "report.json"
        report.write_text(content)
        result = runner.invoke(cli, ["extract", "--in", cover_path, "--report", str(report)])
        assert result.exit_code == 1
        assert message in result.output

    def test_message_colliding_with_marker(self, runner, cover_path, tmp_path):
        result = runner.invoke(cli, [
            "hide", "--in", cover_path, "--out", str(tmp_path / "s.png"),
            "--message", "WVOQ", "--key", "0000001011",
        ])
        assert result.exit_code == 1
        assert "end-of-payload marker" in result.output
