from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
PACKAGE = "tableside"

# Layer name -> modules that layer must never import.
LAYER_RULES: dict[str, frozenset[str]] = {
    "domain": frozenset(
        {
            "pydantic",
            "prometheus_client",
            "opentelemetry",
            "threading",
            f"{PACKAGE}.application",
            f"{PACKAGE}.infrastructure",
            f"{PACKAGE}.config",
            f"{PACKAGE}.bootstrap",
        }
    ),
    "application": frozenset(
        {
            f"{PACKAGE}.config",
            f"{PACKAGE}.bootstrap",
            f"{PACKAGE}.infrastructure.messaging",
        }
    ),
}


@dataclass(frozen=True)
class Violation:
    file_path: Path
    line: int
    module: str
    layer: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from sorted(root.rglob("*.py"))


def _module_name(file_path: Path, src_root: Path) -> str | None:
    try:
        relative = file_path.resolve().relative_to(src_root.resolve())
    except ValueError:
        return None
    return ".".join(relative.with_suffix("").parts)


def _layer_of(module_name: str | None) -> str | None:
    if module_name is None:
        return None
    parts = module_name.split(".")
    if len(parts) > 1 and parts[0] == PACKAGE and parts[1] in LAYER_RULES:
        return parts[1]
    return None


def _resolve(node: ast.ImportFrom, module_name: str | None) -> str | None:
    if node.level == 0:
        return node.module
    if module_name is None:
        return node.module
    base = module_name.split(".")[: -node.level]
    if node.module:
        base.append(node.module)
    return ".".join(base)


def _matches(module: str, forbidden: frozenset[str]) -> bool:
    return any(module == item or module.startswith(f"{item}.") for item in forbidden)


def _scan_file(file_path: Path, src_root: Path, default_layer: str | None) -> list[Violation]:
    module_name = _module_name(file_path, src_root)
    layer = _layer_of(module_name) or default_layer
    if layer is None:
        return []
    forbidden = LAYER_RULES[layer]

    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    violations: list[Violation] = []
    for node in ast.walk(tree):
        imported: list[str] = []
        if isinstance(node, ast.Import):
            imported = [alias.name for alias in node.names]
        elif isinstance(node, ast.ImportFrom):
            resolved = _resolve(node, module_name)
            if resolved:
                imported = [resolved]
        for module in imported:
            if _matches(module, forbidden):
                violations.append(
                    Violation(file_path=file_path, line=node.lineno, module=module, layer=layer)
                )
    return violations


def find_violations(
    paths: Sequence[Path],
    src_root: Path = SRC_ROOT,
    default_layer: str | None = None,
) -> list[Violation]:
    """Scan ``paths`` and report imports that break the layer rules.

    A file's layer comes from its location under ``src_root``; files
    outside it are checked against ``default_layer`` when one is given
    and skipped otherwise.
    """
    violations: list[Violation] = []
    for path in paths:
        for file_path in _python_files(path):
            violations.extend(_scan_file(file_path, src_root, default_layer))
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Layer dependency policy check for src/tableside."
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Path to scan (repeatable). Defaults to src/tableside.",
    )
    parser.add_argument(
        "--layer",
        choices=sorted(LAYER_RULES),
        default=None,
        help="Layer rules to apply to files outside src/tableside.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    scan_paths = [Path(item) for item in args.path] if args.path else [SRC_ROOT / PACKAGE]

    violations = find_violations(scan_paths, default_layer=args.layer)
    if not violations:
        print("depcheck passed")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"{violation.file_path}:{violation.line} [{violation.layer}] -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
