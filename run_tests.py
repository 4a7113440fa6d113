#!/usr/bin/env python3
"""
Run the test suite in-process.

    ./run_tests.py                   # whole suite, verbose
    ./run_tests.py -k redis -x       # extra arguments go straight to pytest

Exits with pytest's own exit code.
"""

import os
import sys

import pytest

DEFAULT_ARGS = ["-v", "--tb=short"]


def run_tests(argv=None) -> int:
    project_dir = os.path.dirname(os.path.abspath(__file__))
    args = list(argv) if argv else DEFAULT_ARGS
    return int(pytest.main([os.path.join(project_dir, "tests"), "--rootdir", project_dir, *args]))


if __name__ == "__main__":
    sys.exit(run_tests(sys.argv[1:]))
