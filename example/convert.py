#!/usr/bin/env python
# coding: utf-8

import os.path
import glog2json

lines = [
    b"I1024 09:30:46.947024 400004 file.go:10] hello\n",
    b"W1024 09:30:47.000113 400004 server.go:128] slow response: 1.2s\n",
    b"E1024 09:30:48.250000   17 db.go:54] connection refused\n",
    b"goroutine 1 [running]:\n",
]

if __name__ == "__main__":
    place = os.path.dirname(__file__) or "."
    host, extra_fields = glog2json.load_from_config(place + "/sample.conf")
    conv = glog2json.init_converter(host=host, extra_fields=extra_fields)

    for line in lines:
        print(line)
        print("-> {0}".format(conv.convert(line).decode("utf-8")))
