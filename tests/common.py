"""
Common utilities used in our test scripts.
"""

import os
import shutil
import tempfile
import contextlib

from begone.testutils import MockTestServer


def run_tests(scope):
    for func in list(scope.values()):
        if callable(func) and func.__name__.startswith("test_"):
            print(f"Running {func.__name__} ...")
            func()
    print("Done")


def write_pages(root, pages):
    """ Write a dict of relative paths (using forward slashes) to text or
    bytes into the given directory.
    """
    for relpath, content in pages.items():
        filename = os.path.join(root, *relpath.split("/"))
        os.makedirs(os.path.dirname(filename), exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        with open(filename, "wb") as f:
            f.write(content)


@contextlib.contextmanager
def pages_dir(pages):
    """ Context manager that creates a temporary pages directory with the
    given pages, and removes it afterwards.
    """
    root = tempfile.mkdtemp(prefix="begone_test_")
    try:
        write_pages(root, pages)
        yield os.path.realpath(root)
    finally:
        shutil.rmtree(root, ignore_errors=True)


def make_server(app):
    return MockTestServer(app)
