"""
Dynamic module loading for externally defined handlers
"""

import importlib.util
import itertools
import logging
import os
from pathlib import Path
from types import ModuleType
from typing import Any, List, Optional, Tuple, Union

logger = logging.getLogger('archon.utils.file_scanner')

_load_counter = itertools.count()


def load_module(path: Path) -> ModuleType:
    """
    Execute the source file at ``path`` as a fresh module.

    The module is not added to ``sys.modules``; loading the same file twice
    executes it twice.
    """
    module_name = f"archon_dynamic_{path.stem}_{next(_load_counter)}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot create a module spec for {path}")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def import_files(
    root_dir: Union[str, Path],
    attribute: Optional[str] = None,
    failures: Optional[List[Tuple[Path, Exception]]] = None
) -> List[Any]:
    """
    Import every Python source file under ``root_dir``.

    Subdirectories are visited depth-first in the order the filesystem lists
    them. Files whose name starts with ``_`` are skipped. For each module the
    value of ``attribute`` is collected when the module defines it, otherwise
    the module itself.

    Args:
        root_dir: Directory to scan
        attribute: Name of the module-level export to collect
        failures: When given, ``(path, exception)`` pairs for files that
            failed to import are appended to it

    Returns:
        Collected exports, one per successfully imported file
    """
    root = Path(root_dir).resolve()
    if not root.is_dir():
        logger.warning(f"Module directory does not exist: {root}")
        return []

    modules: List[Any] = []

    for entry in os.listdir(root):
        full_path = root / entry

        if full_path.is_dir():
            if entry.startswith(('_', '.')):
                continue
            modules.extend(import_files(full_path, attribute, failures))
        elif entry.lower().endswith('.py') and not entry.startswith('_'):
            try:
                logger.debug(f"Importing: {full_path}")
                module = load_module(full_path)
            except Exception as e:
                logger.warning(f"Failed to import: {full_path}: {e}")
                if failures is not None:
                    failures.append((full_path, e))
                continue

            if attribute and hasattr(module, attribute):
                modules.append(getattr(module, attribute))
            else:
                modules.append(module)

    return modules
