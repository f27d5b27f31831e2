"""
Credit Roles
============

Flat list of permitted ``CreditsItem@role`` values, one per line.
"""

from pathlib import Path
from typing import Iterable, Optional, Union
import logging

from dvbi_core.reference.classification_scheme import ClassificationScheme
from dvbi_core.reference.sources import DEFAULT_TIMEOUT, fetch_url, read_file

logger = logging.getLogger(__name__)


class RoleList(ClassificationScheme):
    """Role values held with the same lookups as a classification scheme."""

    def load_lines(self, text: str) -> int:
        added = 0
        for line in text.splitlines():
            value = line.strip()
            if value:
                self.insert_value(value)
                added += 1
        return added

    def load(self,
             files: Optional[Iterable[Union[str, Path]]] = None,
             urls: Optional[Iterable[str]] = None,
             purge: bool = False,
             timeout: float = DEFAULT_TIMEOUT,
             **kwargs) -> int:
        """
        Load roles from text files and/or URLs.

        With purge, the existing roles are only replaced when at least one
        source was read.

        Returns:
            Number of roles held
        """
        incoming = RoleList()
        sources = read = 0
        for path in files or []:
            sources += 1
            text = read_file(path, "roles")
            if text is not None:
                incoming.load_lines(text)
                read += 1
        for url in urls or []:
            sources += 1
            content = fetch_url(url, "roles", timeout)
            if content is not None:
                incoming.load_lines(content.decode("utf-8", errors="replace"))
                read += 1
        if sources and not read:
            logger.error(f"No role source could be read, keeping {self.count()} role(s)")
            return self.count()
        if purge:
            self.empty()
        for value in incoming._values:
            self.insert_value(value)
        logger.info(f"Loaded {self.count()} role(s)")
        return self.count()
