"""Shared test helpers: captured markup, fake HTTP responses and archives."""

import hashlib
import io
import logging
import os
import zipfile
from unittest.mock import MagicMock

import pytest

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def load_fixture(name):
    with open(os.path.join(FIXTURES_DIR, name), encoding="utf-8") as fh:
        return fh.read()


def make_response(status_code=200, text="", content=b""):
    """MagicMock shaped like a requests.Response."""
    res = MagicMock()
    res.status_code = status_code
    res.text = text
    res.iter_content.return_value = iter([content[i:i + 7] for i in range(0, len(content), 7)])
    return res


def make_zip(members):
    """Build zip bytes from a {name: bytes} mapping."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return buf.getvalue()


def sha256(data):
    return hashlib.sha256(data).hexdigest()


@pytest.fixture
def hvm_home(tmp_path):
    home = tmp_path / ".hvm"
    home.mkdir()
    return str(home)


@pytest.fixture
def bin_dir(tmp_path):
    return str(tmp_path / "bin")


@pytest.fixture(autouse=True)
def restore_constants(monkeypatch):
    """Runtime configuration mutates Constants; undo it after every test."""
    from constants import Constants

    for attr in [a for a in vars(Constants) if a.isupper()]:
        monkeypatch.setattr(Constants, attr, getattr(Constants, attr))
    monkeypatch.delenv("HVM_LOG_LEVEL", raising=False)
    monkeypatch.delenv("HVM_HOME", raising=False)
    monkeypatch.delenv("HVM_BIN_DIR", raising=False)
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler.get_name() in ("hvm-console", "hvm-file"):
            root.removeHandler(handler)
            handler.close()


def fake_install(hvm_home, tool, version):
    """Place an executable where a finished install would leave one."""
    path = os.path.join(hvm_home, tool, version, tool)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(f"#!/bin/sh\necho {tool} {version}\n")
    os.chmod(path, 0o755)
    return path
