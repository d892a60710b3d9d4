"""Write generated artifacts to disk as one all-or-nothing batch.

Every artifact is first written to a staging directory inside the output
directory, then moved into place with ``os.replace``. Files that already
exist are moved aside first so a failed move can restore them.
"""

import os
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple, Union

from .codegen.core.errors import ArtifactWriteError, RollbackIncompleteError
from .codegen.core.generator import GenerationResult
from .logging_config import get_logger

logger = get_logger(__name__)

STAGING_PREFIX = ".crudgen-staging-"


def _relative_target(path: str) -> PurePosixPath:
    relative = PurePosixPath(path)
    if relative.is_absolute() or ".." in relative.parts or not relative.parts:
        raise ArtifactWriteError(f"Refusing to write outside the output directory: {path}")
    return relative


def check_targets(result: GenerationResult, out_dir: Union[str, Path]) -> List[Path]:
    """Return the artifact targets under ``out_dir`` that already exist."""
    out_dir = Path(out_dir)
    targets = [out_dir.joinpath(*_relative_target(a.path).parts) for a in result.artifacts]
    return [target for target in targets if target.exists()]


def materialize(
    result: GenerationResult,
    out_dir: Union[str, Path],
    force: bool = False,
) -> List[Path]:
    """
    Write every artifact of a successful generation under ``out_dir``.

    Args:
        result: Successful GenerationResult
        out_dir: Project root the artifact paths are relative to
        force: Overwrite files that already exist

    Returns:
        Written file paths in planned order

    Raises:
        ArtifactWriteError: If the result failed, a target exists and
            ``force`` is not set, or any write or move fails. Nothing is left
            changed when this is raised.
        RollbackIncompleteError: If a move failed and some files could not
            be restored; their backups stay in the staging directory.
    """
    if not result.success:
        raise ArtifactWriteError(
            f"Cannot write a failed generation result: {result.error_message}"
        )

    out_dir = Path(out_dir)
    targets = [
        (artifact, out_dir.joinpath(*_relative_target(artifact.path).parts))
        for artifact in result.artifacts
    ]

    existing = [target for _, target in targets if target.exists()]
    if existing and not force:
        names = ", ".join(str(p) for p in existing)
        raise ArtifactWriteError(f"Refusing to overwrite existing file(s): {names}")

    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=out_dir))
    except OSError as e:
        raise ArtifactWriteError(f"Cannot create output directory {out_dir}: {e}") from e

    keep_staging = False
    try:
        staged = _stage(targets, staging)
        _move_into_place(staged, staging)
    except RollbackIncompleteError:
        keep_staging = True
        raise
    finally:
        if not keep_staging:
            shutil.rmtree(staging, ignore_errors=True)

    written = [target for _, target in targets]
    logger.info("Wrote %d file(s) under %s", len(written), out_dir)
    return written


def _stage(targets, staging: Path) -> List[Tuple[Path, Path]]:
    staged = []
    for index, (artifact, target) in enumerate(targets):
        staged_path = staging / f"{index:03d}{target.suffix}"
        try:
            staged_path.write_text(artifact.content, encoding="utf-8")
        except OSError as e:
            raise ArtifactWriteError(f"Cannot stage {artifact.path}: {e}") from e
        staged.append((staged_path, target))
    return staged


def _move_into_place(staged: List[Tuple[Path, Path]], staging: Path):
    backup_dir = staging / "backup"
    backup_dir.mkdir()

    # (target, backup or None) for every move to undo
    moved: List[Tuple[Path, Optional[Path]]] = []
    created_dirs: List[Path] = []

    try:
        for index, (staged_path, target) in enumerate(staged):
            created_dirs.extend(_make_parents(target.parent))

            backup = None
            if target.exists():
                backup = backup_dir / str(index)
                os.replace(target, backup)

            try:
                os.replace(staged_path, target)
            except OSError:
                if backup is not None:
                    moved.append((target, backup))
                raise

            moved.append((target, backup))
            logger.debug("Moved %s into place", target)
    except OSError as e:
        unrestored = _rollback(moved, created_dirs)
        if unrestored:
            names = ", ".join(str(p) for p in unrestored)
            raise RollbackIncompleteError(
                f"Writing artifacts failed and {names} could not be restored; "
                f"backups are kept in {staging}: {e}",
                staging,
            ) from e
        raise ArtifactWriteError(f"Writing artifacts failed, changes rolled back: {e}") from e


def _make_parents(directory: Path) -> List[Path]:
    missing = []
    while not directory.exists():
        missing.append(directory)
        directory = directory.parent
    for path in reversed(missing):
        path.mkdir()
    return list(reversed(missing))


def _rollback(moved: List[Tuple[Path, Optional[Path]]], created_dirs: List[Path]) -> List[Path]:
    """Undo completed moves; return the targets that could not be restored."""
    unrestored = []
    for target, backup in reversed(moved):
        try:
            if backup is not None:
                os.replace(backup, target)
            else:
                target.unlink()
        except OSError as e:
            logger.error("Rollback of %s failed: %s", target, e)
            unrestored.append(target)

    for directory in reversed(created_dirs):
        try:
            directory.rmdir()
        except OSError:
            logger.debug("Left non-empty directory %s", directory)

    return unrestored
