"""Export projects as Markdown files, rewriting only what changed."""

import logging
from pathlib import Path

from taskmark.core.views.projects import export_filename
from taskmark.models.project import Project


class MarkdownExporter:
    """Write one ``.md`` file per project into an output directory.

    - Files whose contents are already identical are not touched.
    - Each written name is unique; duplicate project names get ``-1``, ``-2``...
    - ``finalize(delete_others=True)`` removes ``.md`` files not written this run.
    """

    def __init__(self, outdir: str | Path, *, dry_run: bool = False) -> None:
        self.outdir = Path(outdir).resolve()
        self.dry_run = dry_run
        self.logger = logging.getLogger("exporter")

        if not dry_run:
            self.outdir.mkdir(parents=True, exist_ok=True)

        self.logger.debug(f"Exporter ready, outdir {str(self.outdir)!r}, dry_run {dry_run!r}")
        self._files_made: set[Path] = set()
        self._unique_names: set[Path] = set()

        self.num_created = 0
        self.num_updated = 0
        self.num_same = 0
        self.num_removed = 0

    def is_possible_output(self, fname: Path) -> bool:
        """Only Markdown files are ever written or cleaned up."""
        return fname.suffix == ".md"

    def _target(self, fname_rel: str) -> Path:
        if Path(fname_rel).is_absolute():
            msg = f"must be relative: {fname_rel!r}"
            raise ValueError(msg)
        fname = (self.outdir / fname_rel).resolve()
        if fname.parent != self.outdir:
            msg = f"Path escapes outdir: {str(fname)!r}"
            raise ValueError(msg)
        return fname

    def make_unique_name(self, base: str, *, suffix: str = ".md") -> str:
        """Append numbers to ``base`` until ``base + suffix`` is unused this run."""
        unique_str = ""
        unique_count = 0
        while True:
            fname = self._target(base + unique_str + suffix)
            if fname not in self._files_made and fname not in self._unique_names:
                break
            unique_count += 1
            unique_str = f"-{unique_count}"
        self._unique_names.add(fname)
        return base + unique_str + suffix

    def make_file(self, fname_rel: str, contents: str) -> None:
        """Write ``contents`` to a file relative to the output directory."""
        fname = self._target(fname_rel)
        if not self.is_possible_output(fname):
            msg = f"Wanted to write {str(fname)!r} but is_possible_output() returns False"
            raise ValueError(msg)
        if not contents.endswith("\n"):
            contents += "\n"

        self._files_made.add(fname)
        action = "create"
        try:
            if fname.read_text(encoding="utf-8") == contents:
                self.num_same += 1
                return
            action = "update"
        except (FileNotFoundError, UnicodeDecodeError):
            pass

        if action == "create":
            self.num_created += 1
        else:
            self.num_updated += 1

        if self.dry_run:
            self.logger.info(f"dry-run: would {action} {str(fname)!r}")
        else:
            self.logger.debug(f"Writing ({action}) {str(fname)!r}")
            fname.write_text(contents, encoding="utf-8")

    def finalize(self, *, delete_others: bool = False) -> None:
        """Log statistics; optionally remove stale Markdown files."""
        stale: list[Path] = []
        if self.outdir.is_dir():
            stale = sorted(
                p
                for p in self.outdir.iterdir()
                if p.is_file() and self.is_possible_output(p) and p not in self._files_made
            )

        self.logger.info(
            f"Outputs: {self.num_same} same, {self.num_updated} changed, "
            f"{self.num_created} new, {len(stale)} stale"
        )

        if not delete_others:
            return
        for fname in stale:
            self.num_removed += 1
            if self.dry_run:
                self.logger.info(f"dry-run: would remove {str(fname)!r}")
            else:
                self.logger.debug(f"Removing file: {str(fname)!r}")
                fname.unlink()


def export_projects(
    exporter: MarkdownExporter,
    projects: list[Project],
    *,
    delete_others: bool = False,
) -> list[str]:
    """Export every project and return the written file names."""
    written: list[str] = []
    for project in projects:
        base = export_filename(project.name).removesuffix(".md")
        name = exporter.make_unique_name(base or "untitled")
        exporter.make_file(name, project.content)
        written.append(name)
    exporter.finalize(delete_others=delete_others)
    return written
