"""Generation-run registry: mode flags and per-package companion imports."""

from __future__ import annotations

import threading
from typing import Dict, List

from ..logging import get_logger
from ..models import PackageIdentity

_LOGGER = get_logger("registry")


class Registry:
    """Configuration and derived state for a single generation run.

    Configure the flags first, then plan. Companion imports accumulate per
    declared package path and are read back when rendering any artifact that
    shares that package.
    """

    def __init__(self) -> None:
        self._separate_package = False
        self._standalone = False
        self._omit_package_doc = False
        self._companion_imports: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def set_separate_package(self, enabled: bool) -> None:
        self._separate_package = bool(enabled)

    def set_standalone(self, enabled: bool) -> None:
        self._standalone = bool(enabled)

    def set_omit_package_doc(self, enabled: bool) -> None:
        self._omit_package_doc = bool(enabled)

    @property
    def separate_package(self) -> bool:
        return self._separate_package

    @property
    def standalone(self) -> bool:
        return self._standalone

    @property
    def omit_package_doc(self) -> bool:
        return self._omit_package_doc

    def record_companion_import(self, primary_package: PackageIdentity, companion_path: str) -> None:
        """Append ``companion_path`` to the imports of ``primary_package``.

        No-op unless separate-package mode is enabled. Duplicates are kept;
        consumers de-duplicate when they read the list.
        """
        if not self._separate_package:
            return
        with self._lock:
            self._companion_imports.setdefault(primary_package.path, []).append(companion_path)
        _LOGGER.debug("Recorded companion import %s for %s", companion_path, primary_package.path)

    def companion_imports_for(self, primary_package: PackageIdentity) -> List[str]:
        """Return a copy of the recorded companion imports for a package."""
        if not self._separate_package:
            return []
        with self._lock:
            return list(self._companion_imports.get(primary_package.path, ()))


__all__ = ["Registry"]
