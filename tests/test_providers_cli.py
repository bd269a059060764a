"""Tests for the provlock command line."""

import json
from unittest.mock import patch

import pytest
import respx
import yaml
from httpx import Response
from provlock.core.errors import ExitCode
from provlock.providers.cli import main
from provlock.providers.lock import LockEntry, ProviderLock, save_lock

REGISTRY = "https://registry.npmjs.org"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("NO_BUN", "PROVLOCK_NO_BUN", "PROVLOCK_REGISTRY_URL", "PROVLOCK_NAMESPACE_PREFIXES"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def declaration(tmp_path):
    def write(providers):
        path = tmp_path / "provlock.yaml"
        path.write_text(yaml.safe_dump({"providers": providers}))
        return path

    return write


def _args(declaration_path, platform_dir, *rest):
    return ["--config", str(declaration_path), "--platform-dir", str(platform_dir), *rest]


class TestList:
    def test_lists_locked_providers(self, platform_dir, capsys):
        save_lock(
            ProviderLock(
                [
                    LockEntry("aws", "@pulumi/aws", "6.0.0", "aws"),
                    LockEntry("random", "@pulumi/random", "latest", ""),
                ]
            ),
            platform_dir / "provider-lock.json",
        )

        exit_code = main(["--platform-dir", str(platform_dir), "list"])

        assert exit_code == ExitCode.SUCCESS
        out = capsys.readouterr().out.splitlines()
        assert out == ["aws\t@pulumi/aws\t6.0.0\taws", "random\t@pulumi/random\tlatest\t-"]

    def test_empty_lock(self, platform_dir, capsys):
        assert main(["--platform-dir", str(platform_dir), "list"]) == ExitCode.SUCCESS
        assert capsys.readouterr().out == ""


class TestCheck:
    def test_stale_lock_is_warning(self, platform_dir, declaration):
        path = declaration({"aws": {}})

        assert main(_args(path, platform_dir, "check")) == ExitCode.WARNING

    def test_up_to_date(self, platform_dir, declaration):
        path = declaration({"aws": {"version": "6.0.0"}})
        save_lock(
            ProviderLock([LockEntry("aws", "@pulumi/aws", "6.0.0", "aws")]),
            platform_dir / "provider-lock.json",
        )

        assert main(_args(path, platform_dir, "check")) == ExitCode.SUCCESS

    def test_missing_declaration(self, platform_dir, tmp_path):
        exit_code = main(_args(tmp_path / "missing.yaml", platform_dir, "check"))

        assert exit_code == ExitCode.CONFIG_ERROR

    def test_malformed_lock(self, platform_dir, declaration):
        path = declaration({"aws": {}})
        (platform_dir / "provider-lock.json").write_text("{broken")

        assert main(_args(path, platform_dir, "check")) == ExitCode.CONFIG_ERROR


class TestInstall:
    def test_install_aws(self, platform_dir, declaration, fake_installer):
        path = declaration({"aws": {}})

        with respx.mock:
            respx.get(f"{REGISTRY}/@sst-provider/aws/latest").mock(return_value=Response(404))
            respx.get(f"{REGISTRY}/@pulumi/aws/latest").mock(
                return_value=Response(200, json={"name": "@pulumi/aws"})
            )
            with patch("subprocess.run", side_effect=fake_installer({"@pulumi/aws": "aws"})):
                exit_code = main(_args(path, platform_dir, "install"))

        assert exit_code == ExitCode.SUCCESS
        lock = json.loads((platform_dir / "provider-lock.json").read_text())
        assert lock == [{"name": "aws", "package": "@pulumi/aws", "version": "latest", "alias": "aws"}]

    def test_install_noop_when_up_to_date(self, platform_dir, declaration):
        path = declaration({"aws": {}})
        save_lock(
            ProviderLock([LockEntry("aws", "@pulumi/aws", "latest", "aws")]),
            platform_dir / "provider-lock.json",
        )

        with patch("subprocess.run") as mock_run:
            assert main(_args(path, platform_dir, "install")) == ExitCode.SUCCESS

        mock_run.assert_not_called()

    def test_unresolved_provider(self, platform_dir, declaration):
        path = declaration({"nope": {}})

        with respx.mock:
            respx.get(url__startswith=REGISTRY).mock(return_value=Response(404))
            exit_code = main(_args(path, platform_dir, "install"))

        assert exit_code == ExitCode.PROVIDER_ERROR
        assert not (platform_dir / "provider-lock.json").exists()

    def test_installer_failure(self, platform_dir, declaration, fake_installer):
        path = declaration({"aws": {}})

        with respx.mock:
            respx.get(url__startswith=REGISTRY).mock(
                return_value=Response(200, json={"name": "@sst-provider/aws"})
            )
            with patch("subprocess.run", side_effect=fake_installer({}, returncode=1, output="x")):
                exit_code = main(_args(path, platform_dir, "install"))

        assert exit_code == ExitCode.INSTALL_ERROR


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out
