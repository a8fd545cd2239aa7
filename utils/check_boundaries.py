#!/usr/bin/env python3
# ruff: noqa: T201
"""Architectural boundary validation for Abhyasa.

Run standalone: python utils/check_boundaries.py
Exit code 0 = all checks pass, 1 = violations found

Checks:
1. Purity Boundary - No I/O or network imports in engines/utils
2. Clock Boundary - Engines never read the system clock themselves
3. Logging Quality - Lazy %s formatting, no f-strings in logger calls
4. Type Syntax - Modern "X | None" instead of Optional[X]
5. Exception Handling - No bare except / except Exception in the package
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import re
import sys
from typing import NamedTuple

# Base paths
REPO_ROOT = Path(__file__).parent.parent
PACKAGE_PATH = REPO_ROOT / "abhyasa"

# Pure modules that must not perform I/O
PURE_MODULE_DIRS = ("engines", "utils")

# The only module allowed to read the clock (dt_today_local)
CLOCK_ALLOWLIST = ("dt_utils.py",)


class Violation(NamedTuple):
    """A boundary violation with context."""

    category: str
    file_path: Path
    line_number: int
    line_content: str
    message: str
    doc_reference: str


def _pure_module_files(package_path: Path) -> list[Path]:
    files: list[Path] = []
    for name in PURE_MODULE_DIRS:
        module_path = package_path / name
        if module_path.is_dir():
            files.extend(sorted(module_path.rglob("*.py")))
    return files


def _scan(
    files: Iterable[Path],
    patterns: list[re.Pattern[str]],
    category: str,
    message: str,
    doc_reference: str,
) -> list[Violation]:
    """Return one violation per line matching any of the patterns."""
    violations = []
    for file_path in files:
        try:
            with open(file_path, encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    if any(pattern.search(line) for pattern in patterns):
                        violations.append(
                            Violation(
                                category=category,
                                file_path=file_path,
                                line_number=line_num,
                                line_content=line.strip(),
                                message=message,
                                doc_reference=doc_reference,
                            )
                        )
        except OSError as e:
            print(f"Warning: Could not read {file_path}: {e}", file=sys.stderr)
    return violations


def find_io_imports_in_pure_modules(
    package_path: Path = PACKAGE_PATH,
) -> list[Violation]:
    """Check: engines and utils do no I/O."""
    patterns = [
        re.compile(
            r"^\s*(from|import)\s+(os|io|socket|sqlite3|shutil|subprocess|requests|httpx|urllib)\b"
        ),
        re.compile(r"\bopen\("),
    ]
    return _scan(
        _pure_module_files(package_path),
        patterns,
        category="PURITY",
        message="I/O in a pure module - engines only read their arguments",
        doc_reference="DESIGN.md § Engines",
    )


def find_clock_reads_in_engines(package_path: Path = PACKAGE_PATH) -> list[Violation]:
    """Check: the clock is read only through utils.dt_utils."""
    patterns = [
        re.compile(r"\b(datetime|date)\.(now|today|utcnow)\("),
        re.compile(r"\btime\.(time|monotonic)\("),
    ]
    files = [
        path
        for path in _pure_module_files(package_path)
        if path.name not in CLOCK_ALLOWLIST
    ]
    return _scan(
        files,
        patterns,
        category="CLOCK",
        message="Read 'today' via a reference_date argument or dt_utils, not the clock",
        doc_reference="DESIGN.md § Configuration",
    )


def find_fstrings_in_logging(package_path: Path = PACKAGE_PATH) -> list[Violation]:
    """Check: No f-strings in logging statements."""
    pattern = re.compile(
        r'(LOGGER|const\.LOGGER)\.(debug|info|warning|error|exception)\s*\(\s*f["\']'
    )
    return _scan(
        sorted(package_path.rglob("*.py")),
        [pattern],
        category="LOGGING",
        message='Use lazy logging: logger.debug("msg: %s", var) not f"msg: {var}"',
        doc_reference="DESIGN.md § Logging",
    )


def find_old_typing_syntax(package_path: Path = PACKAGE_PATH) -> list[Violation]:
    """Check: Modern type syntax (str | None, not Optional[str])."""
    return _scan(
        sorted(package_path.rglob("*.py")),
        [re.compile(r"\bOptional\[")],
        category="TYPE_SYNTAX",
        message='Use modern syntax: "str | None" instead of "Optional[str]"',
        doc_reference="DESIGN.md § Types",
    )


def find_bare_exceptions(package_path: Path = PACKAGE_PATH) -> list[Violation]:
    """Check: No bare except or Exception catches."""
    return _scan(
        sorted(package_path.rglob("*.py")),
        [re.compile(r"^\s*except\s*(\(?\s*(Exception|BaseException)\s*\)?)?\s*(as\s+\w+)?\s*:")],
        category="EXCEPTION",
        message="Use specific exception types, not bare except / Exception",
        doc_reference="DESIGN.md § Error handling",
    )


CHECKS = [
    ("Purity Boundary", find_io_imports_in_pure_modules),
    ("Clock Boundary", find_clock_reads_in_engines),
    ("Logging Quality", find_fstrings_in_logging),
    ("Type Syntax", find_old_typing_syntax),
    ("Exception Handling", find_bare_exceptions),
]


def format_violations(violations: list[Violation]) -> str:
    """Format violations for display."""
    if not violations:
        return ""

    by_category: dict[str, list[Violation]] = {}
    for v in violations:
        by_category.setdefault(v.category, []).append(v)

    output = []
    for category, items in sorted(by_category.items()):
        output.append(f"\n{'=' * 80}")
        output.append(f"❌ {category} VIOLATIONS ({len(items)} found)")
        output.append(f"{'=' * 80}")

        for v in items:
            try:
                rel_path = v.file_path.relative_to(REPO_ROOT)
            except ValueError:
                rel_path = v.file_path
            output.append(f"\n📁 {rel_path}:{v.line_number}")
            output.append(f"   {v.line_content}")
            output.append(f"   ⚠️  {v.message}")
            output.append(f"   📖 See: {v.doc_reference}")

    return "\n".join(output)


def main() -> int:
    """Run all boundary checks."""
    print("🔍 Running architectural boundary checks...")
    print(f"   Checking: {PACKAGE_PATH.relative_to(REPO_ROOT)}\n")

    all_violations = []
    for check_name, check_func in CHECKS:
        print(f"   ⏳ Checking {check_name}...", end=" ")
        violations = check_func()
        if violations:
            print(f"❌ {len(violations)} violation(s)")
            all_violations.extend(violations)
        else:
            print("✅")

    if all_violations:
        print(format_violations(all_violations))
        print(f"\n{'=' * 80}")
        print(f"❌ FAILED: {len(all_violations)} boundary violation(s) found")
        print(f"{'=' * 80}")
        return 1

    print("\n" + "=" * 80)
    print("✅ SUCCESS: All architectural boundaries validated")
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
