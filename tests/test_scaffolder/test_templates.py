"""Tests for Jinja2 rendering (nestgen.scaffolder.templates).

Covers:
- TemplateContext defaults and the ``name`` alias
- render / render_string with models and plain mappings
- Missing templates surface as TemplateNotFoundError
- render_to_file creates parent directories
- The snake_case filter
- Every bundled resource template renders
"""

from __future__ import annotations

from pathlib import Path

import pytest

from nestgen.config import Config
from nestgen.errors import ErrorKind, TemplateNotFoundError
from nestgen.resource import ResourceDescriptor
from nestgen.scaffolder.planner import GeneratorId
from nestgen.scaffolder.templates import TemplateContext, TemplateRenderer


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


@pytest.fixture
def renderer(tmp_path: Path) -> TemplateRenderer:
    (tmp_path / "greeting.txt.j2").write_text("Hello {{ name }}!\n", encoding="utf-8")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "inner.ts.j2").write_text("{{ value }}", encoding="utf-8")
    return TemplateRenderer(tmp_path)


# ---------------------------------------------------------------------------
# TemplateContext
# ---------------------------------------------------------------------------


class TestTemplateContext:
    def test_defaults(self):
        context = TemplateContext(project_name="my-api")
        assert context.license == "UNLICENSED"
        assert context.database == "prisma-postgresql"
        assert context.auth_strategy == "jwt"
        assert context.package_manager == "npm"
        assert context.description == ""

    def test_name_alias(self):
        variables = TemplateContext(project_name="my-api").as_template_vars()
        assert variables["name"] == "my-api"
        assert variables["project_name"] == "my-api"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    def test_render_with_model(self, renderer: TemplateRenderer):
        assert renderer.render("greeting.txt.j2", TemplateContext(project_name="x")) == "Hello x!\n"

    def test_render_with_mapping(self, renderer: TemplateRenderer):
        assert renderer.render("nested/inner.ts.j2", {"value": 42}) == "42"

    def test_missing_template(self, renderer: TemplateRenderer):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            renderer.render("nope.j2", {})
        assert exc_info.value.kind is ErrorKind.TEMPLATE_NOT_FOUND
        assert exc_info.value.expected == "nope.j2"

    def test_mapping_gets_context_defaults(self, renderer: TemplateRenderer):
        text = "{{ license }}|{{ auth_strategy }}|{{ database }}|{{ package_manager }}"
        assert renderer.render_string(text, {}) == "UNLICENSED|jwt|prisma-postgresql|npm"

    def test_mapping_overrides_defaults(self, renderer: TemplateRenderer):
        text = "{{ license }}|{{ description }}"
        assert renderer.render_string(text, {"license": "MIT"}) == "MIT|"

    def test_mapping_name_follows_project_name(self, renderer: TemplateRenderer):
        assert renderer.render("greeting.txt.j2", {"project_name": "demo"}) == "Hello demo!\n"
        assert renderer.render_string("{{ name }}", {"project_name": "a", "name": "b"}) == "b"

    def test_render_string_unknown_key_is_empty(self, renderer: TemplateRenderer):
        assert renderer.render_string("[{{ missing }}]", {}) == "[]"

    def test_render_string_keeps_trailing_newline(self, renderer: TemplateRenderer):
        assert renderer.render_string("{{ name }}\n", {"name": "a"}) == "a\n"

    def test_render_string_does_not_html_escape(self, renderer: TemplateRenderer):
        assert renderer.render_string("{{ v }}", {"v": "a & 'b' <c>"}) == "a & 'b' <c>"

    def test_render_is_deterministic(self, renderer: TemplateRenderer):
        context = TemplateContext(project_name="same")
        assert renderer.render("greeting.txt.j2", context) == renderer.render(
            "greeting.txt.j2", context
        )

    @pytest.mark.asyncio
    async def test_render_to_file(self, renderer: TemplateRenderer, tmp_path: Path):
        out = tmp_path / "out" / "deep" / "greeting.txt"
        written = await renderer.render_to_file("greeting.txt.j2", out, {"name": "file"})
        assert written == out
        assert out.read_text(encoding="utf-8") == "Hello file!\n"


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestFilters:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("{{ 'OrderItem' | snake_case }}", "order_item"),
            ("{{ 'my-api' | snake_case }}", "my_api"),
            ("{{ 'my api' | snake_case }}", "my_api"),
        ],
    )
    def test_filter(self, renderer: TemplateRenderer, expression: str, expected: str):
        assert renderer.render_string(expression, {}) == expected


# ---------------------------------------------------------------------------
# Bundled resource templates
# ---------------------------------------------------------------------------


class TestBundledTemplates:
    @pytest.fixture
    def resource_renderer(self, config: Config) -> TemplateRenderer:
        return TemplateRenderer(config.resource_template_dir)

    @pytest.mark.parametrize("generator", list(GeneratorId))
    def test_resource_template_renders(
        self, resource_renderer: TemplateRenderer, generator: GeneratorId
    ):
        resource = ResourceDescriptor.from_name("order")
        content = resource_renderer.render(generator.template, {"resource": resource})
        assert "Order" in content
        assert "{{" not in content

    def test_module_binds_repository_token(self, resource_renderer: TemplateRenderer):
        content = resource_renderer.render(
            GeneratorId.MODULE.template,
            {"resource": ResourceDescriptor.from_name("order")},
        )
        assert "provide: 'ORDER_REPOSITORY'" in content
        assert "useClass: PrismaOrderRepository" in content
        assert "export class OrderModule {}" in content

    def test_service_injects_token(self, resource_renderer: TemplateRenderer):
        content = resource_renderer.render(
            GeneratorId.SERVICE.template,
            {"resource": ResourceDescriptor.from_name("order")},
        )
        assert "@Inject('ORDER_REPOSITORY')" in content
        assert "IOrderRepository" in content

    @pytest.mark.parametrize("name", ["interface", "prisma", "in-memory"])
    def test_repository_templates_render(self, config: Config, name: str):
        renderer = TemplateRenderer(config.repository_template_dir)
        content = renderer.render(
            f"{name}.ts.j2",
            {"resource": ResourceDescriptor.from_name("users")},
        )
        assert "IUsersRepository" in content
