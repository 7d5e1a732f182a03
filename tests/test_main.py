import gzip
import json
import os
import tempfile
import unittest

from click.testing import CliRunner

from glog2json.__main__ import main

_INPUT = (b"I1024 09:30:46.947024 400004 file.go:10] hello\n"
          b"\n"
          b"goroutine 1 [running]:\n"
          b"E1024 09:30:48.250000   17 db.go:54] connection refused\n")


def _events(output):
    # stderr can be mixed into output
    return [json.loads(line) for line in output.splitlines()
            if line.startswith(b"{")]


class TestMain(unittest.TestCase):

    def test_stdin(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--host", "web01", "-f", "shard=3", "-f", "team=pay"],
                               input=_INPUT)
        assert result.exit_code == 0, result.output
        events = _events(result.stdout_bytes)
        assert len(events) == 3
        assert events[0]["@source_host"] == "web01"
        assert events[0]["@fields"] == {"level": "INFO", "threadid": "400004",
                                        "file": "file.go", "line": 10,
                                        "shard": 3, "team": "pay"}
        assert events[0]["message"] == "hello"
        assert events[1]["message"] == "goroutine 1 [running]:\n"
        assert events[2]["@fields"]["level"] == "ERROR"
        assert events[2]["@fields"]["threadid"] == "17"

    def test_host_envvar(self):
        runner = CliRunner()
        result = runner.invoke(main, [], input=_INPUT,
                               env={"GLOG2JSON_HOST": "env-host"})
        assert result.exit_code == 0, result.output
        assert _events(result.stdout_bytes)[0]["@source_host"] == "env-host"

    def test_files(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("app.log", "wb") as f:
                f.write(_INPUT)
            with gzip.open("old.log.gz", "wb") as f:
                f.write(b"W1023 23:59:59.999999 1 old.go:1] rotated\n")
            with open("sample.conf", "w") as f:
                f.write("[general]\nhost = conf-host\n[fields]\nenv = prod\n")

            result = runner.invoke(main, ["-c", "sample.conf", "-o", "out.json",
                                          "app.log", "old.log.gz"])
            assert result.exit_code == 0, result.output
            with open("out.json", "rb") as f:
                events = _events(f.read())

        assert len(events) == 4
        assert all(e["@source_host"] == "conf-host" for e in events)
        assert all(e["@fields"]["env"] == "prod" for e in events)
        assert events[3]["@fields"]["level"] == "WARNING"
        assert events[3]["message"] == "rotated"

    def test_abort_on_error(self):
        runner = CliRunner()
        data = _INPUT + b"I1024 09:30:46.947024 1 bad.go:x] oops\n"
        result = runner.invoke(main, ["--host", "h"], input=data)
        assert result.exit_code == 1
        assert "line 5" in result.output

    def test_skip_errors(self):
        runner = CliRunner()
        data = b"I1024 09:30\n" + _INPUT
        result = runner.invoke(main, ["--host", "h", "--skip-errors"], input=data)
        assert result.exit_code == 0
        assert len(_events(result.stdout_bytes)) == 3

    def test_invalid_field_option(self):
        runner = CliRunner()
        result = runner.invoke(main, ["-f", "novalue"], input=_INPUT)
        assert result.exit_code == 2

    def test_unknown_encoding(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--encoding", "bogus", "--skip-errors"],
                               input=_INPUT)
        assert result.exit_code == 2
        assert "unknown encoding" in result.output

    def test_invalid_config(self):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            fp = os.path.join(tmpdir, "broken.conf")
            with open(fp, "w") as f:
                f.write("no section\n")
            result = runner.invoke(main, ["-c", fp], input=_INPUT)
        assert result.exit_code == 1
