#!/usr/bin/env python
# coding: utf-8

import os
import os.path
import tempfile
import unittest

import glog2json
from glog2json import ConverterDefinitionError

_EXAMPLE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "example")


class TestConfig(unittest.TestCase):

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self._tmpdir.cleanup()

    def _write(self, name, text):
        fp = os.path.join(self._tmpdir.name, name)
        with open(fp, "w") as f:
            f.write(text)
        return fp

    def test_sample_conf(self):
        place = os.path.join(_EXAMPLE_DIR, "sample.conf")
        host, extra_fields = glog2json.load_from_config(place)
        assert host == "test.here.com"
        assert extra_fields == {"service": "billing",
                                "environment": "production",
                                "shard": 3,
                                "tags": ["glog", "go"]}

        conv = glog2json.init_converter(host=host, extra_fields=extra_fields)
        event = conv.process_line(b"I1024 09:30:46.947024 400004 file.go:10] hello\n")
        assert event.source_host == "test.here.com"
        assert event.fields["shard"] == 3

    def test_conf_without_sections(self):
        fp = self._write("empty.conf", "[general]\n")
        host, extra_fields = glog2json.load_from_config(fp)
        assert host is None
        assert extra_fields == {}

    def test_conf_values(self):
        fp = self._write("values.conf",
                         "[fields]\nflag = true\nratio = 0.5\n"
                         "percent = 10%\nquoted = \"42\"\n")
        host, extra_fields = glog2json.load_from_config(fp)
        assert extra_fields == {"flag": True, "ratio": 0.5,
                                "percent": "10%", "quoted": "42"}

    def test_invalid_conf(self):
        fp = self._write("broken.conf", "host = nowhere\n")
        with self.assertRaises(ConverterDefinitionError):
            glog2json.load_from_config(fp)

    def test_sample_script(self):
        place = os.path.join(_EXAMPLE_DIR, "settings.py")
        host, extra_fields = glog2json.load_from_script(place)
        assert host == os.environ.get("GLOG2JSON_HOST", "test.here.com")
        assert extra_fields["shard"] == 3

    def test_script_without_settings(self):
        fp = self._write("nothing.py", "x = 1\n")
        host, extra_fields = glog2json.load_from_script(fp)
        assert host is None
        assert extra_fields == {}

    def test_invalid_script(self):
        fp = self._write("bad.py", "extra_fields = ['a']\n")
        with self.assertRaises(ConverterDefinitionError):
            glog2json.load_from_script(fp)
