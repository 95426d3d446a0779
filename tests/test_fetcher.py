"""Tests for checksum-verified installation."""

import os
from unittest.mock import patch

import pytest
import requests

from conftest import make_response, make_zip, sha256
from constants import Tools
from common.errors import (
    AlreadyInstalledError,
    ArchiveExtractError,
    ChecksumMismatchError,
    DirectoryCreateError,
    ManifestFetchError,
    MissingChecksumError,
    NetworkFailureError,
)
from installer import install, is_installed
from installer.fetcher import archive_url
from releases.models import Release

RELEASES = "https://releases.hashicorp.com"


class FakeReleases:
    """Routes requests.get calls to canned manifest and archive responses."""

    def __init__(self, tool, version, archive_bytes, manifest=None, archive_status=200):
        self.tool = tool
        self.version = version
        self.archive_bytes = archive_bytes
        self.manifest = manifest
        self.archive_status = archive_status
        self.urls = []
        self.archive_requests = 0

    def __call__(self, url, **kwargs):
        self.urls.append(url)
        base = f"{RELEASES}/{self.tool}/{self.version}/"
        if url == f"{base}{self.tool}_{self.version}_SHA256SUMS":
            if self.manifest is None:
                return make_response(404, text="Not Found")
            return make_response(200, text=self.manifest)
        if url.startswith(base) and url.endswith(".zip"):
            assert kwargs.get("stream") is True
            self.archive_requests += 1
            return make_response(self.archive_status, content=self.archive_bytes)
        return make_response(404, text="Not Found")


def consul_payload():
    return make_zip({"consul": b"#!/bin/sh\necho consul 1.4.2\n"})


class TestInstallSuccess:
    """Happy path for the install pipeline."""

    @patch("common.http_client.requests.get")
    def test_consul_1_4_2(self, mock_get, hvm_home):
        archive = consul_payload()
        manifest = (
            f"{sha256(b'other')}  consul_1.4.2_darwin_amd64.zip\n"
            f"{sha256(archive)}  consul_1.4.2_linux_amd64.zip\n"
        )
        fake = FakeReleases("consul", "1.4.2", archive, manifest)
        mock_get.side_effect = fake

        installed = install("consul", "1.4.2", "linux", "amd64", hvm_home)

        expected = os.path.join(hvm_home, "consul", "1.4.2", "consul")
        assert installed.path == expected
        assert installed.tool is Tools.CONSUL
        assert installed.version == "1.4.2"
        assert is_installed(hvm_home, "consul", "1.4.2")
        assert os.access(expected, os.X_OK)
        with open(expected, "rb") as fh:
            assert b"consul 1.4.2" in fh.read()
        # Checksum query parameter is consumed locally, not sent upstream
        assert fake.urls[-1] == f"{RELEASES}/consul/1.4.2/consul_1.4.2_linux_amd64.zip"
        # Archive is removed once unpacked
        assert os.listdir(os.path.dirname(expected)) == ["consul"]

    @patch("common.http_client.requests.get")
    def test_nomad_legacy_manifest(self, mock_get, hvm_home):
        archive = make_zip({"nomad": b"nomad-0.6.0"})
        manifest = f"{sha256(archive)}  nomad_0.6.0_linux_amd64.zip\n"
        mock_get.side_effect = FakeReleases("nomad", "0.6.0", archive, manifest)

        install(Tools.NOMAD, "0.6.0", "linux", "amd64", hvm_home)

        assert is_installed(hvm_home, Tools.NOMAD, "0.6.0")

    @patch("common.http_client.requests.get")
    def test_nomad_modern_manifest(self, mock_get, hvm_home):
        archive = make_zip({"nomad": b"nomad-0.8.5"})
        manifest = f"{sha256(archive)}  ./nomad_0.8.5_linux_amd64.zip\n"
        mock_get.side_effect = FakeReleases("nomad", "0.8.5", archive, manifest)

        install(Tools.NOMAD, "0.8.5", "linux", "amd64", hvm_home)

        assert is_installed(hvm_home, Tools.NOMAD, "0.8.5")

    @patch("common.http_client.requests.get")
    def test_existing_empty_version_dir_is_fine(self, mock_get, hvm_home):
        os.makedirs(os.path.join(hvm_home, "consul", "1.4.2"))
        archive = consul_payload()
        mock_get.side_effect = FakeReleases(
            "consul", "1.4.2", archive, f"{sha256(archive)}  consul_1.4.2_linux_amd64.zip\n"
        )

        install("consul", "1.4.2", "linux", "amd64", hvm_home)

        assert is_installed(hvm_home, "consul", "1.4.2")


class TestInstallFailures:
    """No failure leaves an executable behind."""

    @patch("common.http_client.requests.get")
    def test_corrupt_manifest_digest(self, mock_get, hvm_home):
        archive = make_zip({"nomad": b"nomad-0.8.5"})
        manifest = f"{sha256(b'something else')}  ./nomad_0.8.5_linux_amd64.zip\n"
        fake = FakeReleases("nomad", "0.8.5", archive, manifest)
        mock_get.side_effect = fake

        with pytest.raises(ChecksumMismatchError):
            install("nomad", "0.8.5", "linux", "amd64", hvm_home)

        assert fake.archive_requests == 1
        assert not is_installed(hvm_home, "nomad", "0.8.5")
        assert not os.path.exists(os.path.join(hvm_home, "nomad", "0.8.5", "nomad"))
        # The version directory created by this attempt is cleaned up
        assert not os.path.exists(os.path.join(hvm_home, "nomad", "0.8.5"))

    @patch("common.http_client.requests.get")
    def test_missing_manifest_entry_fails_before_download(self, mock_get, hvm_home):
        archive = consul_payload()
        manifest = f"{sha256(archive)}  consul_1.4.2_darwin_amd64.zip\n"
        fake = FakeReleases("consul", "1.4.2", archive, manifest)
        mock_get.side_effect = fake

        with pytest.raises(MissingChecksumError):
            install("consul", "1.4.2", "linux", "amd64", hvm_home)

        assert fake.archive_requests == 0
        assert not is_installed(hvm_home, "consul", "1.4.2")

    @patch("common.http_client.requests.get")
    def test_manifest_not_found(self, mock_get, hvm_home):
        fake = FakeReleases("consul", "1.4.2", consul_payload(), manifest=None)
        mock_get.side_effect = fake

        with pytest.raises(ManifestFetchError):
            install("consul", "1.4.2", "linux", "amd64", hvm_home)

        assert fake.archive_requests == 0
        assert not is_installed(hvm_home, "consul", "1.4.2")

    @patch("common.http_client.requests.get")
    def test_archive_http_error(self, mock_get, hvm_home):
        archive = consul_payload()
        mock_get.side_effect = FakeReleases(
            "consul", "1.4.2", archive, f"{sha256(archive)}  consul_1.4.2_linux_amd64.zip\n",
            archive_status=403,
        )

        with pytest.raises(NetworkFailureError):
            install("consul", "1.4.2", "linux", "amd64", hvm_home)

        assert not is_installed(hvm_home, "consul", "1.4.2")

    @patch("common.http_client.requests.get")
    def test_connection_error(self, mock_get, hvm_home):
        mock_get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(NetworkFailureError):
            install("consul", "1.4.2", "linux", "amd64", hvm_home)

        assert not is_installed(hvm_home, "consul", "1.4.2")

    @patch("common.http_client.requests.get")
    def test_archive_without_executable(self, mock_get, hvm_home):
        archive = make_zip({"README": b"nothing to see"})
        mock_get.side_effect = FakeReleases(
            "consul", "1.4.2", archive, f"{sha256(archive)}  consul_1.4.2_linux_amd64.zip\n"
        )

        with pytest.raises(ArchiveExtractError):
            install("consul", "1.4.2", "linux", "amd64", hvm_home)

        assert not is_installed(hvm_home, "consul", "1.4.2")

    @patch("common.http_client.requests.get")
    def test_already_installed(self, mock_get, hvm_home):
        target = os.path.join(hvm_home, "consul", "1.4.2")
        os.makedirs(target)
        with open(os.path.join(target, "consul"), "w", encoding="utf-8") as fh:
            fh.write("existing")

        with pytest.raises(AlreadyInstalledError):
            install("consul", "1.4.2", "linux", "amd64", hvm_home)

        mock_get.assert_not_called()

    @patch("common.http_client.requests.get")
    def test_directory_create_failure(self, mock_get, hvm_home):
        # A regular file where the tool directory should be
        with open(os.path.join(hvm_home, "consul"), "w", encoding="utf-8") as fh:
            fh.write("in the way")

        with pytest.raises(DirectoryCreateError):
            install("consul", "1.4.2", "linux", "amd64", hvm_home)

        mock_get.assert_not_called()


class TestArchiveUrl:
    """Download URL construction."""

    def test_embeds_checksum(self):
        url = archive_url(Release(Tools.CONSUL, "1.4.2"), "consul_1.4.2_linux_amd64.zip", "ab" * 32)
        assert url == (
            "https://releases.hashicorp.com/consul/1.4.2/consul_1.4.2_linux_amd64.zip"
            f"?checksum=sha256:{'ab' * 32}"
        )
