"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_IGNORED_DIRS = ("target", "src/bin", ".git", ".github")


@dataclass(slots=True)
class AppConfig:
    manifest_name: str = "Cargo.toml"
    bin_key: str = "bin"
    source_extension: str = ".rs"
    default_dir: str = "src"
    name_delimiter: str = "-"
    ignored_dirs: tuple[str, ...] = DEFAULT_IGNORED_DIRS

    def ignored_paths(self, root: Path) -> set[Path]:
        """Absolute directories the source walker must not descend into."""
        return {Path(root) / folder for folder in self.ignored_dirs}

    def resolve_target(
        self,
        target: Path,
        *,
        root: Path,
        cwd: Path,
        from_root: bool = False,
    ) -> Path:
        target = Path(target)
        if target.is_absolute():
            return target
        base_dir = root if from_root else cwd
        return Path(base_dir) / target

    def with_extension(self, target: Path) -> Path:
        """Append the source extension when the target has none."""
        target = Path(target)
        if target.suffix == self.source_extension:
            return target
        return target.with_name(target.name + self.source_extension)
