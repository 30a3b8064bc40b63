"""
Tests for the docscan command line entry point.
"""

import argparse

import cv2
import pytest
import yaml

from src.scanner.cli import main, parse_corners, positive_int


class TestParseCorners:
    """Tests for parse_corners."""

    def test_valid(self):
        """Test parsing of four x,y pairs."""
        corners = parse_corners("50,40; 350,60; 340,270; 60,260")

        assert corners == [[50, 40], [350, 60], [340, 270], [60, 260]]

    def test_wrong_count(self):
        """Test that three corners are rejected."""
        with pytest.raises(argparse.ArgumentTypeError, match="Expected 4 corners"):
            parse_corners("0,0;1,0;1,1")

    def test_not_numeric(self):
        """Test that non-numeric coordinates are rejected."""
        with pytest.raises(argparse.ArgumentTypeError, match="Invalid corner"):
            parse_corners("a,b;1,0;1,1;0,1")


class TestPositiveInt:
    """Tests for positive_int."""

    def test_valid(self):
        """Test that positive counts are accepted."""
        assert positive_int("3") == 3

    def test_rejected(self):
        """Test that zero, negative and non-numeric counts are refused."""
        for text in ["0", "-2", "two"]:
            with pytest.raises(argparse.ArgumentTypeError):
                positive_int(text)


class TestMain:
    """Tests for main."""

    def test_scan_writes_output(self, tmp_path, synthetic_document):
        """Test a full detection run from file to file."""
        image, _ = synthetic_document
        src = tmp_path / "photo.png"
        dst = tmp_path / "out" / "flat.jpg"
        overlay = tmp_path / "overlay.png"
        cv2.imwrite(str(src), image)

        code = main(
            ["--input", str(src), "--output", str(dst), "--overlay", str(overlay)]
        )

        assert code == 0
        assert dst.exists()
        assert overlay.exists()
        flat = cv2.imread(str(dst))
        assert abs(flat.shape[1] - 301) <= 4
        assert abs(flat.shape[0] - 220) <= 4

    def test_manual_corners(self, tmp_path, synthetic_document):
        """Test that --corners skips detection."""
        image, _ = synthetic_document
        src = tmp_path / "photo.png"
        dst = tmp_path / "flat.png"
        cv2.imwrite(str(src), image)

        code = main(
            [
                "--input", str(src),
                "--output", str(dst),
                "--corners", "60,260;50,40;350,60;340,270",
                "--workers", "2",
            ]
        )

        assert code == 0
        assert cv2.imread(str(dst)).shape[:2] == (220, 301)

    def test_missing_input(self, tmp_path, capsys):
        """Test that a missing input file returns a failure code."""
        code = main(["--input", str(tmp_path / "nope.jpg"), "--output", str(tmp_path / "o.jpg")])

        assert code == 1
        assert "Scan failed" in capsys.readouterr().out

    def test_degenerate_corners(self, tmp_path, synthetic_document):
        """Test that collinear manual corners return a failure code."""
        image, _ = synthetic_document
        src = tmp_path / "photo.png"
        cv2.imwrite(str(src), image)

        code = main(
            [
                "--input", str(src),
                "--output", str(tmp_path / "o.jpg"),
                "--corners", "0,0;100,0;200,0;300,0",
            ]
        )

        assert code == 1

    def test_zero_workers_rejected(self, tmp_path, capsys):
        """Test that --workers 0 is a usage error, not silently clamped."""
        with pytest.raises(SystemExit) as exc_info:
            main(
                [
                    "--input", str(tmp_path / "photo.png"),
                    "--output", str(tmp_path / "o.jpg"),
                    "--workers", "0",
                ]
            )

        assert exc_info.value.code == 2
        assert "--workers" in capsys.readouterr().err

    def test_invalid_config_file(self, tmp_path, capsys, synthetic_document):
        """Test that a config failing validation returns a failure code."""
        image, _ = synthetic_document
        src = tmp_path / "photo.png"
        cv2.imwrite(str(src), image)
        config_path = tmp_path / "bad.yaml"
        config_path.write_text(yaml.dump({"preprocessing": {"blur_kernel_size": 4}}))

        code = main(
            [
                "--input", str(src),
                "--output", str(tmp_path / "o.jpg"),
                "--config", str(config_path),
            ]
        )

        assert code == 1
        assert "blur_kernel_size" in capsys.readouterr().out
