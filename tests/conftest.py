"""Shared pytest fixtures for the nestgen test suite.

Provides reusable fixtures for:
- Temporary project directories with a minimal ``src/app.module.ts``
- App-module sources in the layouts found in real projects
- A ``Config`` pointing at the bundled templates
- Mock subprocess helpers
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from nestgen.config import Config


# ---------------------------------------------------------------------------
# App-module sources
# ---------------------------------------------------------------------------

EMPTY_APP_MODULE = textwrap.dedent(
    """\
    import { Module } from '@nestjs/common';

    @Module({
      imports: [],
    })
    export class AppModule {}
    """
)

VERTICAL_APP_MODULE = textwrap.dedent(
    """\
    import { Module } from '@nestjs/common';
    import { ConfigModule } from '@nestjs/config';
    import { AuthModule } from './auth/auth.module';
    import { PrismaModule } from './prisma/prisma.module';

    @Module({
      imports: [
        ConfigModule.forRoot({ isGlobal: true }),
        PrismaModule,
        AuthModule,
      ],
    })
    export class AppModule {}
    """
)


@pytest.fixture
def empty_app_module() -> str:
    """App module whose ``imports`` array is empty."""
    return EMPTY_APP_MODULE


@pytest.fixture
def vertical_app_module() -> str:
    """App module with one element per line and a trailing comma."""
    return VERTICAL_APP_MODULE


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary NestJS project containing only ``src/app.module.ts``."""
    project_dir = tmp_path / "test-project"
    (project_dir / "src").mkdir(parents=True)
    (project_dir / "src" / "app.module.ts").write_text(EMPTY_APP_MODULE, encoding="utf-8")
    yield project_dir


@pytest.fixture
def write_app_module(tmp_path: Path):
    """Factory writing an app module with the given text and returning its path."""
    def factory(text: str, name: str = "app.module.ts") -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return path

    return factory


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> Config:
    """Config using the templates bundled with the package."""
    return Config(templates_dir=Path(__file__).parent.parent / "nestgen" / "templates")


# ---------------------------------------------------------------------------
# Subprocess mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
