"""Tests for package-manager adjustments (nestgen.scaffolder.package_manager).

Covers:
- install_command per package manager
- rewrite_scripts only reports changed scripts
- configure_package_manager lock-file removal and package.json rewrite
- Missing or malformed package.json
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nestgen.scaffolder.package_manager import (
    configure_package_manager,
    install_command,
    rewrite_scripts,
)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


@pytest.fixture
def project(tmp_path: Path) -> Path:
    pkg = {
        "name": "my-api",
        "scripts": {
            "build": "nest build",
            "prisma:generate": "npx prisma generate",
            "prisma:migrate": "npx prisma migrate dev",
        },
    }
    (tmp_path / "package.json").write_text(json.dumps(pkg), encoding="utf-8")
    (tmp_path / "package-lock.json").write_text("{}", encoding="utf-8")
    return tmp_path


class TestInstallCommand:
    @pytest.mark.parametrize("pm", ["npm", "yarn", "pnpm"])
    def test_known(self, pm: str):
        assert install_command(pm) == [pm, "install"]

    def test_unknown_falls_back_to_npm(self):
        assert install_command("bun") == ["npm", "install"]

    def test_returns_copy(self):
        install_command("npm").append("--force")
        assert install_command("npm") == ["npm", "install"]


class TestRewriteScripts:
    def test_npm_unchanged(self):
        assert rewrite_scripts({"a": "npx prisma generate"}, "npm") == {}

    def test_yarn(self):
        scripts = {"a": "npx prisma generate", "b": "nest build", "c": 3}
        assert rewrite_scripts(scripts, "yarn") == {"a": "yarn prisma generate"}


class TestConfigurePackageManager:
    @pytest.mark.parametrize("pm", ["yarn", "pnpm"])
    def test_non_npm(self, project: Path, pm: str):
        assert configure_package_manager(project, pm) is True
        assert not (project / "package-lock.json").exists()
        text = (project / "package.json").read_text(encoding="utf-8")
        pkg = json.loads(text)
        assert pkg["scripts"]["prisma:generate"] == f"{pm} prisma generate"
        assert pkg["scripts"]["prisma:migrate"] == f"{pm} prisma migrate dev"
        assert pkg["scripts"]["build"] == "nest build"
        assert text.endswith("}\n")

    def test_npm_keeps_lock_file(self, project: Path):
        assert configure_package_manager(project, "npm") is True
        assert (project / "package-lock.json").exists()
        pkg = json.loads((project / "package.json").read_text(encoding="utf-8"))
        assert pkg["scripts"]["prisma:generate"] == "npx prisma generate"

    def test_missing_package_json(self, tmp_path: Path):
        assert configure_package_manager(tmp_path, "yarn") is False

    def test_malformed_package_json(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{ not json", encoding="utf-8")
        assert configure_package_manager(tmp_path, "yarn") is False
        assert (tmp_path / "package.json").read_text(encoding="utf-8") == "{ not json"
