#!/usr/bin/env python
# coding: utf-8

from . import _common


def parse_field_value(string):
    """Read a field value given in text.
    JSON literals (e.g., numbers, true/false, or lists) are decoded,
    and other strings are used as is."""
    import json
    try:
        return json.loads(string)
    except ValueError:
        return string


def load_from_script(fp):
    """Load external python script that gives glog2json settings.
    The script can define following 2 variables (both optional).

    * host (str): source host of the events
    * extra_fields (dict): fields added to every event

    Args:
        fp (str): file path of external python script.

    Returns:
        settings (tuple): a tuple of host and extra_fields.
        host is None if not defined in the script.
    """

    import os.path
    from importlib import util
    libname = os.path.splitext(os.path.basename(fp))[0]
    spec = util.spec_from_file_location(libname, fp)
    if spec is None:
        msg = "cannot load settings script {0}".format(fp)
        raise _common.ConverterDefinitionError(msg)
    script_mod = util.module_from_spec(spec)
    spec.loader.exec_module(script_mod)

    host = getattr(script_mod, "host", None)
    extra_fields = getattr(script_mod, "extra_fields", None)
    if extra_fields is None:
        extra_fields = dict()
    elif not isinstance(extra_fields, dict):
        msg = "extra_fields in {0} must be a dict".format(fp)
        raise _common.ConverterDefinitionError(msg)
    return (host, extra_fields)


def load_from_config(fp):
    """Load glog2json settings from configparser text file.
    Section general gives the source host (option host, optional),
    and section fields gives extra fields added to every event.
    A field value is loaded as JSON if possible
    (e.g., numbers, true/false, or lists), otherwise as a string.
    example/sample.conf gives an example.

    Note that configparser converts option names to lower case.

    Args:
        fp (str): file path of configparser text file.

    Returns:
        settings (tuple): a tuple of host and extra_fields.
        host is None if not given.
    """

    def _get_value(conf, section, option):
        # ignore line feed
        s = conf[section][option].replace("\r\n", "").replace("\n", "")
        return parse_field_value(s)

    import configparser
    conf = configparser.ConfigParser(interpolation=None)
    try:
        with open(fp) as f:
            conf.read_file(f)
    except configparser.Error as e:
        msg = "invalid config file {0}: {1}".format(fp, e)
        raise _common.ConverterDefinitionError(msg) from e

    host = conf.get('general', 'host', fallback=None)
    extra_fields = {}
    if conf.has_section('fields'):
        for option in conf.options('fields'):
            extra_fields[option] = _get_value(conf, 'fields', option)
    return (host, extra_fields)
