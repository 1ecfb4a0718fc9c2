"""
Writing rendered files to disk.

Honors an ignore file (.php-scaffold-ignore) in the output directory and
records what was generated in .php-scaffold/FILES and .php-scaffold/VERSION.
"""

from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import Dict, List

from .. import __version__
from ..gen_logging import get_logger

logger = get_logger(__name__)

IGNORE_FILE = ".php-scaffold-ignore"
METADATA_DIR = ".php-scaffold"


@dataclass
class WriteReport:
    written: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)

    @property
    def generated(self) -> List[str]:
        """Files that hold generator output after this run."""
        return sorted(self.written + self.unchanged)


def read_ignore_patterns(out_dir: Path) -> List[str]:
    """Patterns from the ignore file; blank lines and '#' comments skipped."""
    ignore_file = Path(out_dir) / IGNORE_FILE
    if not ignore_file.is_file():
        return []
    patterns = []
    for line in ignore_file.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def is_ignored(rel_path: str, patterns: List[str]) -> bool:
    """
    gitignore-flavoured matching: last matching pattern wins, '!' negates.

    A pattern ending in '/' matches everything below that directory; a
    pattern without '/' also matches the bare file name.
    """
    ignored = False
    name = rel_path.rsplit("/", 1)[-1]
    for pattern in patterns:
        negate = pattern.startswith("!")
        if negate:
            pattern = pattern[1:]
        pattern = pattern.lstrip("/")
        if pattern.endswith("/"):
            matched = rel_path.startswith(pattern) or fnmatch(rel_path, pattern + "*")
        elif "/" in pattern:
            matched = fnmatch(rel_path, pattern)
        else:
            matched = fnmatch(name, pattern) or fnmatch(rel_path, pattern)
        if matched:
            ignored = not negate
    return ignored


def write_artifacts(
    rendered: Dict[str, str],
    out_dir,
    ignore_patterns: List[str] = None,
    skip_existing: bool = False,
    dry_run: bool = False,
) -> WriteReport:
    """Write rendered files below out_dir and return what happened to each."""
    out_dir = Path(out_dir)
    if ignore_patterns is None:
        ignore_patterns = read_ignore_patterns(out_dir)

    report = WriteReport()
    for rel_path, content in rendered.items():
        target = out_dir / rel_path
        if is_ignored(rel_path, ignore_patterns):
            report.ignored.append(rel_path)
            logger.debug(f"    [IGNORE] {rel_path}")
            continue
        if target.exists():
            if target.read_text(encoding="utf-8") == content:
                report.unchanged.append(rel_path)
                continue
            if skip_existing:
                report.existing.append(rel_path)
                logger.debug(f"    [EXISTS] {rel_path}")
                continue
        if not dry_run:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        report.written.append(rel_path)
        logger.debug(f"    [WRITE]  {rel_path}")

    if not dry_run:
        write_manifest(out_dir, report.generated)
    return report


def write_manifest(out_dir: Path, files: List[str]) -> None:
    meta = Path(out_dir) / METADATA_DIR
    meta.mkdir(parents=True, exist_ok=True)
    (meta / "FILES").write_text("".join(f"{f}\n" for f in sorted(files)), encoding="utf-8")
    (meta / "VERSION").write_text(f"{__version__}\n", encoding="utf-8")


def read_manifest(out_dir) -> List[str]:
    manifest = Path(out_dir) / METADATA_DIR / "FILES"
    if not manifest.is_file():
        return []
    return [line for line in manifest.read_text(encoding="utf-8").splitlines() if line]
