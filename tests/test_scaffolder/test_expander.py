"""Tests for template-tree expansion (nestgen.scaffolder.expander).

Covers:
- Template leaves rendered with the suffix stripped
- Plain-mapping contexts receive the documented defaults
- Plain files byte-copied
- Excluded names skipped at any depth
- Nested directories mirrored
- Missing source directory
- Expansion of the bundled project template
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nestgen.errors import TemplateNotFoundError
from nestgen.scaffolder.expander import DEFAULT_EXCLUDES, TreeExpander
from nestgen.scaffolder.templates import TemplateContext


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    root = tmp_path / "template"
    (root / "src").mkdir(parents=True)
    (root / "a.txt").write_text("static {{ project_name }}\n", encoding="utf-8")
    (root / "b.tpl").write_text("Hi {{ name }}", encoding="utf-8")
    (root / "src" / "main.ts.j2").write_text("// {{ project_name }}\n", encoding="utf-8")
    (root / "logo.bin").write_bytes(bytes(range(256)))
    for excluded in ("node_modules", ".git", "dist"):
        (root / excluded).mkdir()
        (root / excluded / "junk.txt").write_text("junk", encoding="utf-8")
    (root / "src" / "node_modules").mkdir()
    (root / "src" / "node_modules" / "deep.txt").write_text("deep", encoding="utf-8")
    (root / ".DS_Store").write_bytes(b"\x00")
    (root / "package-lock.json").write_text("{}", encoding="utf-8")
    return root


# ---------------------------------------------------------------------------
# TreeExpander
# ---------------------------------------------------------------------------


class TestTreeExpander:
    @pytest.mark.asyncio
    async def test_renders_and_copies(self, source_tree: Path, tmp_path: Path):
        dest = tmp_path / "out"
        written = await TreeExpander().expand(
            source_tree, dest, TemplateContext(project_name="x")
        )

        assert (dest / "a.txt").read_text(encoding="utf-8") == "static {{ project_name }}\n"
        assert (dest / "b").read_text(encoding="utf-8") == "Hi x"
        assert (dest / "src" / "main.ts").read_text(encoding="utf-8") == "// x\n"
        assert (dest / "logo.bin").read_bytes() == bytes(range(256))
        assert set(written) == {
            dest / "a.txt",
            dest / "b",
            dest / "logo.bin",
            dest / "src" / "main.ts",
        }

    @pytest.mark.asyncio
    async def test_mapping_context_gets_defaults(self, tmp_path: Path):
        source = tmp_path / "template"
        source.mkdir()
        (source / "b.tpl").write_text(
            "{{ name }}|{{ license }}|{{ auth_strategy }}", encoding="utf-8"
        )
        dest = tmp_path / "out"
        await TreeExpander().expand(source, dest, {"project_name": "demo"})
        assert (dest / "b").read_text(encoding="utf-8") == "demo|UNLICENSED|jwt"

    @pytest.mark.asyncio
    async def test_excluded_names_skipped(self, source_tree: Path, tmp_path: Path):
        dest = tmp_path / "out"
        await TreeExpander().expand(source_tree, dest, {"project_name": "x"})

        for name in DEFAULT_EXCLUDES:
            assert not (dest / name).exists()
        assert not (dest / "src" / "node_modules").exists()

    @pytest.mark.asyncio
    async def test_source_untouched(self, source_tree: Path, tmp_path: Path):
        before = sorted(p.relative_to(source_tree) for p in source_tree.rglob("*"))
        await TreeExpander().expand(source_tree, tmp_path / "out", {"project_name": "x"})
        after = sorted(p.relative_to(source_tree) for p in source_tree.rglob("*"))
        assert before == after

    @pytest.mark.asyncio
    async def test_custom_excludes(self, source_tree: Path, tmp_path: Path):
        dest = tmp_path / "out"
        await TreeExpander(excludes={"src"}).expand(source_tree, dest, {"project_name": "x"})
        assert not (dest / "src").exists()
        assert (dest / "node_modules" / "junk.txt").exists()

    @pytest.mark.asyncio
    async def test_missing_source(self, tmp_path: Path):
        with pytest.raises(TemplateNotFoundError):
            await TreeExpander().expand(tmp_path / "absent", tmp_path / "out", {})

    def test_template_suffix(self):
        expander = TreeExpander()
        assert expander.template_suffix("package.json.j2") == ".j2"
        assert expander.template_suffix("b.tpl") == ".tpl"
        assert expander.template_suffix("main.ts") is None
        assert expander.template_suffix(".j2") is None

    @pytest.mark.asyncio
    async def test_bundled_project_template(self, config, tmp_path: Path):
        dest = tmp_path / "my-api"
        context = TemplateContext(project_name="my-api", description='A "quoted" API')
        await TreeExpander().expand(config.project_template_path, dest, context)

        pkg = json.loads((dest / "package.json").read_text(encoding="utf-8"))
        assert pkg["name"] == "my-api"
        assert pkg["description"] == 'A "quoted" API'
        assert pkg["license"] == "UNLICENSED"
        assert (dest / "src" / "app.module.ts").exists()
        assert (dest / ".gitignore").exists()
        assert (dest / "jest-mocks" / "jsonwebtoken.js").exists()
        assert "my_api" in (dest / ".env.example").read_text(encoding="utf-8")
        assert not list(dest.rglob("*.j2"))
