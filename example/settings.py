#!/usr/bin/env python

# glog2json settings for load_from_script()

import os

host = os.environ.get("GLOG2JSON_HOST", "test.here.com")

extra_fields = {
    "service": "billing",
    "environment": "production",
    "shard": 3,
}
