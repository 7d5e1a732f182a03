#!/usr/bin/env python

import logging
import sys

import click

_logger = logging.getLogger("glog2json")


def iter_lines(files):
    """Yield raw lines (in bytes, with line feed code) of the input files.
    Compressed files (.gz, .bz2, .tar.*) are extracted."""
    if len(files) == 0:
        for line in sys.stdin.buffer:
            yield line
    else:
        for fp in files:
            if ".tar." in fp:
                import tarfile
                with tarfile.open(fp, 'r') as tar:
                    for info in tar.getmembers():
                        if info.isfile():
                            with tar.extractfile(info) as f:
                                for line in f:
                                    yield line
            elif fp.endswith(".bz2"):
                import bz2
                with bz2.open(fp, 'rb') as f:
                    for line in f:
                        yield line
            elif fp.endswith(".gz"):
                import gzip
                with gzip.open(fp, 'rb') as f:
                    for line in f:
                        yield line
            else:
                with open(fp, 'rb') as f:
                    for line in f:
                        yield line


def parse_field_options(fields):
    """Parse KEY=VALUE options into a dict."""
    from .load import parse_field_value
    d = {}
    for item in fields:
        key, sep, value = item.partition("=")
        if sep == "" or key == "":
            raise click.BadParameter("expected KEY=VALUE, got {0!r}".format(item),
                                     param_hint="--field")
        d[key] = parse_field_value(value)
    return d


@click.command()
@click.argument("files", nargs=-1)
@click.option("--config", "-c", default=None,
              help="filename of config file (configparser format)")
@click.option("--script", "-s", default=None,
              help="filename of python script giving host and extra_fields")
@click.option("--host", default=None, envvar="GLOG2JSON_HOST",
              help="source host of the events (default: hostname)")
@click.option("--field", "-f", "fields", multiple=True,
              help="extra field in KEY=VALUE, added to every event")
@click.option("--encoding", default="utf-8",
              help="encoding to load input data")
@click.option("--output", "-o", default=None,
              help="output filename")
@click.option("--skip-errors", "skip_errors", is_flag=True,
              help="skip lines failed to convert instead of aborting")
@click.option("--verbose", "-v", is_flag=True,
              help="verbose output to stderr")
def main(files, config, script, host, fields, encoding, output, skip_errors, verbose):
    """Convert glog lines in FILES (or stdin if FILES not given)
    into logstash JSON events, one event per line."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    from . import init_converter, LogConvertFailure, ConverterDefinitionError
    from .load import load_from_config, load_from_script

    conf_host = None
    extra_fields = {}
    try:
        if config:
            conf_host, tmp_fields = load_from_config(config)
            extra_fields.update(tmp_fields)
        if script:
            tmp_host, tmp_fields = load_from_script(script)
            conf_host = tmp_host or conf_host
            extra_fields.update(tmp_fields)
    except ConverterDefinitionError as e:
        raise click.ClickException(str(e))
    extra_fields.update(parse_field_options(fields))

    try:
        conv = init_converter(host=host or conf_host,
                              extra_fields=extra_fields,
                              encoding=encoding)
    except ConverterDefinitionError as e:
        raise click.BadParameter(str(e))

    if output:
        f_output = open(output, "wb")
    else:
        f_output = sys.stdout.buffer

    try:
        for lineno, line in enumerate(iter_lines(files), 1):
            if line.rstrip(b"\r\n") == b"":
                continue
            try:
                buf = conv.convert(line)
            except LogConvertFailure as e:
                if not skip_errors:
                    raise click.ClickException("line {0}: {1}".format(lineno, e))
                _logger.warning("skip line %d: %s", lineno, e)
                continue
            f_output.write(buf + b"\n")
    finally:
        if output:
            f_output.close()
        else:
            f_output.flush()


if __name__ == "__main__":
    main()
