import pytest

from src.shared.output_scanner import StartupOutputScanner


class TestStartupOutputScanner:
    """Test cases for scanning Jupyter server startup output."""

    def test_ready_line_with_version(self):
        scanner = StartupOutputScanner()

        result = scanner.feed(b"Jupyter Server 6.4.0 is running at http://localhost:8888/lab?token=abc\n")

        assert result.ready is True
        assert result.version == "6.4.0"
        assert result.url == "http://localhost:8888/lab?token=abc"

    def test_unrelated_output_is_not_ready(self):
        scanner = StartupOutputScanner()

        result = scanner.feed(b"[I ServerApp] jupyterlab | extension was successfully loaded.\n")

        assert result.ready is False
        assert result.version is None

    def test_partial_line_waits_for_newline(self):
        scanner = StartupOutputScanner()

        assert scanner.feed(b"[I ServerApp] http://localhost:8888/lab").ready is False
        assert scanner.feed(b"?token=abc\n").ready is True
        assert scanner.url == "http://localhost:8888/lab?token=abc"

    def test_version_is_kept_across_chunks(self):
        scanner = StartupOutputScanner()

        scanner.feed(b"[I ServerApp] Jupyter Server 1.13.5 is running at:\n")
        result = scanner.feed(b"[I ServerApp] http://localhost:8888/?token=abc\n")

        assert result.ready is True
        assert result.version == "1.13.5"

    def test_https_url(self):
        scanner = StartupOutputScanner()

        assert scanner.feed("https://localhost:9443/\n").ready is True

    @pytest.mark.parametrize("line", [
        "http://127.0.0.1:8888/lab\n",
        "http://localhost/lab\n",
        "http://localhost:8888\n",
    ])
    def test_non_matching_urls(self, line):
        assert StartupOutputScanner().feed(line).ready is False

    def test_multibyte_character_split_across_chunks(self):
        scanner = StartupOutputScanner()
        data = "Ünïcode log line\nhttp://localhost:8888/\n".encode("utf-8")

        scanner.feed(data[:1])
        result = scanner.feed(data[1:])

        assert result.ready is True

    def test_flush_scans_trailing_partial_line(self):
        scanner = StartupOutputScanner()
        scanner.feed(b"Jupyter Server 6.4.0 is running at http://localhost:8888/lab")

        result = scanner.flush()

        assert result.ready is True
        assert result.version == "6.4.0"

    def test_feed_after_ready_is_ignored(self):
        scanner = StartupOutputScanner()
        scanner.feed(b"Jupyter Server 6.4.0 is running at http://localhost:8888/\n")

        result = scanner.feed(b"Jupyter Server 7.0.0 is running at http://localhost:9999/\n")

        assert result.version == "6.4.0"
        assert result.url == "http://localhost:8888/"
