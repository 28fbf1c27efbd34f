"""
Bounded pool of split output handles.

Split routing can produce more output files than the host allows to be
open at once. The pool keeps at most ``max_open`` handles and closes the
least recently opened one when it needs room. A path is truncated the
first time it is opened and appended to on every later reopen, so the
file ends up byte-identical to one written through a single handle.
"""

import logging
import os
from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Set, TextIO

from ..errors import ResourceError
from .reader import open_text

logger = logging.getLogger(__name__)


class SplitOutputPool:
    """LRU-by-open-time cache of output handles keyed by split key."""

    def __init__(
        self,
        output_dir: Path,
        template: str = '{key}.{ext}',
        ext: str = 'fastq',
        max_open: int = 64,
    ):
        if max_open < 1:
            raise ValueError("max_open must be at least 1")
        self.output_dir = Path(output_dir)
        self.template = template
        self.ext = ext
        self.max_open = max_open
        self.evictions = 0
        self._handles: 'OrderedDict[str, TextIO]' = OrderedDict()
        self._paths: Dict[str, Path] = {}
        self._created: Set[Path] = set()

    def path_for(self, key: str) -> Path:
        """Output path for a split key."""
        if key not in self._paths:
            safe_key = key.replace(os.sep, '_')
            self._paths[key] = self.output_dir / self.template.format(key=safe_key, ext=self.ext)
        return self._paths[key]

    def get(self, key: str) -> TextIO:
        """Return an open handle for ``key``, opening (or reopening) it if needed."""
        handle = self._handles.get(key)
        if handle is not None:
            return handle

        if len(self._handles) >= self.max_open:
            self._evict()

        path = self.path_for(key)
        mode = 'at' if path in self._created else 'wt'
        if path not in self._created:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ResourceError(path, e) from e
        handle = open_text(path, mode)
        self._created.add(path)
        self._handles[key] = handle
        logger.debug(f"Opened split output {path} ({mode})")
        return handle

    def _evict(self):
        key, handle = self._handles.popitem(last=False)
        handle.close()
        self.evictions += 1
        logger.debug(f"Closed split output for {key!r} to stay within {self.max_open} handles")

    @property
    def open_keys(self) -> List[str]:
        """Keys with an open handle, oldest first."""
        return list(self._handles)

    @property
    def paths(self) -> List[Path]:
        """Every path written so far, in first-open order."""
        return [self._paths[key] for key in self._paths if self._paths[key] in self._created]

    def close(self):
        while self._handles:
            _, handle = self._handles.popitem(last=False)
            handle.close()

    def __enter__(self) -> 'SplitOutputPool':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
