"""
ISO 3166 Countries
==================

Country code lookups. The source is a JSON list of
``{"name": ..., "alpha2": ..., "alpha3": ..., "numeric": ...}`` entries.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

from dvbi_core.reference.sources import DEFAULT_TIMEOUT, read_source

logger = logging.getLogger(__name__)


def _normalise_entry(entry: Dict[str, Any]) -> Dict[str, str]:
    alpha2 = str(entry.get("alpha2", ""))
    alpha3 = str(entry.get("alpha3", ""))
    return {
        "alpha2": alpha2 if len(alpha2) == 2 else "**",
        "alpha3": alpha3 if len(alpha3) == 3 else "***",
        "numeric": str(entry.get("numeric", "")),
    }


class ISOCountries:
    """
    Store of ISO 3166 country codes.

    Two-letter and three-letter lookups are enabled independently; a code
    whose length does not match an enabled mode is never valid.

    Example:
        >>> countries = ISOCountries(use2=True, use3=False)
        >>> countries.load_text('[{"alpha2": "GB", "alpha3": "GBR", "numeric": "826"}]')
        1
        >>> countries.is_iso3166_code("GB"), countries.is_iso3166_code("GBR")
        (True, False)
    """

    def __init__(self, use2: bool = True, use3: bool = False):
        self.use2 = use2
        self.use3 = use3
        self._countries: List[Dict[str, str]] = []

    def count(self) -> int:
        return len(self._countries)

    def empty(self) -> None:
        self._countries = []

    def is_empty(self) -> bool:
        return not self._countries

    @staticmethod
    def _parse(text: str) -> Optional[List[Dict[str, str]]]:
        try:
            data = json.loads(text)
        except ValueError as e:
            logger.error(f"Malformed country list: {e}")
            return None
        if not isinstance(data, list):
            logger.error("Malformed country list: expected a JSON array")
            return None
        return [_normalise_entry(entry) for entry in data if isinstance(entry, dict)]

    def load_text(self, text: str) -> int:
        """
        Add the entries of a JSON country list.

        Returns:
            Number of entries added, 0 if the text is not a JSON list
        """
        entries = self._parse(text)
        if entries is None:
            return 0
        self._countries.extend(entries)
        return len(entries)

    def load(self,
             file: Optional[Union[str, Path]] = None,
             url: Optional[str] = None,
             purge: bool = True,
             timeout: float = DEFAULT_TIMEOUT) -> bool:
        """
        Load a country list from a file or URL.

        The existing entries are kept unless the new list was read and parsed.

        Returns:
            True if the source was read and parsed
        """
        text = read_source(file, url, "countries", timeout)
        if text is None:
            return False
        entries = self._parse(text)
        if entries is None:
            logger.warning(f"Keeping the {self.count()} countries already loaded")
            return False
        if purge:
            self._countries = entries
        else:
            self._countries.extend(entries)
        logger.info(f"Loaded {len(entries)} countries")
        return True

    def is_iso3166_code(self, code: Optional[str], case_sensitive: bool = True) -> bool:
        """
        Check a country code.

        Args:
            code: Two or three letter code
            case_sensitive: False to ignore case

        Returns:
            True if the code is known for an enabled code length
        """
        if not isinstance(code, str):
            return False
        if self.use3 and len(code) == 3:
            field_name = "alpha3"
        elif self.use2 and len(code) == 2:
            field_name = "alpha2"
        else:
            return False
        if case_sensitive:
            return any(entry[field_name] == code for entry in self._countries)
        lowered = code.lower()
        return any(entry[field_name].lower() == lowered for entry in self._countries)
