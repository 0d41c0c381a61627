"""Package-manager specific adjustments of a freshly expanded project.

The project template is written for npm.  For yarn and pnpm the npm lock
file is removed and ``npx`` invocations in ``package.json`` scripts are
rewritten to the chosen tool.  Failures here are reported, never raised:
the project is usable without them.
"""

from __future__ import annotations

import json
from pathlib import Path

from nestgen.utils import print_warning

INSTALL_COMMANDS: dict[str, list[str]] = {
    "npm": ["npm", "install"],
    "yarn": ["yarn", "install"],
    "pnpm": ["pnpm", "install"],
}

_NPX_REPLACEMENTS: dict[str, str] = {
    "yarn": "yarn ",
    "pnpm": "pnpm ",
}


def install_command(package_manager: str) -> list[str]:
    """Return the argv installing dependencies with *package_manager*."""
    return list(INSTALL_COMMANDS.get(package_manager, INSTALL_COMMANDS["npm"]))


def rewrite_scripts(scripts: dict[str, object], package_manager: str) -> dict[str, str]:
    """Return the scripts whose ``npx`` calls change for *package_manager*."""
    replacement = _NPX_REPLACEMENTS.get(package_manager)
    if replacement is None:
        return {}
    updates: dict[str, str] = {}
    for name, value in scripts.items():
        if not isinstance(value, str):
            continue
        updated = value.replace("npx ", replacement)
        if updated != value:
            updates[name] = updated
    return updates


def configure_package_manager(target_dir: str | Path, package_manager: str) -> bool:
    """Adapt the project at *target_dir* to *package_manager*.

    Returns ``True`` when ``package.json`` was processed, ``False`` when it
    is missing or could not be updated.
    """
    root = Path(target_dir)
    package_json = root / "package.json"
    if not package_json.exists():
        return False

    try:
        if package_manager != "npm":
            lock_file = root / "package-lock.json"
            if lock_file.exists():
                lock_file.unlink()

        pkg = json.loads(package_json.read_text(encoding="utf-8"))
        scripts = pkg.get("scripts")
        if isinstance(scripts, dict):
            scripts.update(rewrite_scripts(scripts, package_manager))
        package_json.write_text(json.dumps(pkg, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except (OSError, ValueError, AttributeError) as exc:
        print_warning(f"  Could not configure package.json for {package_manager}: {exc}")
        return False
    return True
