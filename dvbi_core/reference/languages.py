"""
IANA Language Subtags
=====================

Language tag lookups against the IANA Language Subtag Registry
(https://www.iana.org/assignments/language-subtag-registry).

The registry is a sequence of records separated by ``%%`` lines, each
record a set of ``Field: value`` lines:

    %%
    Type: language
    Subtag: en
    Description: English
    Added: 2005-10-16
    %%
    Type: region
    Subtag: GB
    Description: United Kingdom

Language, extlang, script, region and variant subtags are collected into
one flat set. A compound tag such as ``en-GB`` is known only when every
one of its subtags is known on its own.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union
import logging

from dvbi_core.reference.sources import DEFAULT_TIMEOUT, read_source

logger = logging.getLogger(__name__)

SUBTAG_TYPES = ("language", "extlang", "script", "region", "variant")
SIGN_LANGUAGE_PREFIX = "sgn"


class LanguageState(str, Enum):
    """Result of a language lookup."""

    KNOWN = "known"
    DEPRECATED = "deprecated"
    UNKNOWN = "unknown"
    NOT_SPECIFIED = "not specified"
    INVALID = "invalid"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class LanguageLookup:
    """State of a language tag, with the registry's preferred value when deprecated."""
    state: LanguageState
    preferred: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.state == LanguageState.KNOWN


def _parse_record(text: str) -> Dict[str, List[str]]:
    fields: Dict[str, List[str]] = {}
    last_key = None
    for raw in text.replace("\r", "").split("\n"):
        if not raw.strip():
            continue
        if raw[0] in " \t" and last_key:
            fields[last_key][-1] += " " + raw.strip()
            continue
        key, sep, value = raw.partition(":")
        if not sep:
            continue
        last_key = key.strip()
        fields.setdefault(last_key, []).append(value.strip())
    return fields


class IANALanguages:
    """
    Store of known language subtags.

    Example:
        >>> langs = IANALanguages()
        >>> langs.load_text("%%\\nType: language\\nSubtag: en\\n%%\\nType: region\\nSubtag: GB\\n")
        >>> langs.is_known("en-GB").state
        <LanguageState.KNOWN: 'known'>
    """

    def __init__(self):
        self._known: Set[str] = set()
        self._ranges: List[Tuple[str, str]] = []
        self._redundant: Dict[str, Optional[str]] = {}
        self._deprecated: Dict[str, Optional[str]] = {}
        self._sign_languages: Set[str] = set()
        self.file_date: Optional[str] = None

    def empty(self) -> None:
        self._known.clear()
        self._ranges = []
        self._redundant.clear()
        self._deprecated.clear()
        self._sign_languages.clear()
        self.file_date = None

    def is_empty(self) -> bool:
        return not self._known and not self._redundant and not self._ranges

    def count(self) -> str:
        return f"lang={len(self._known)},sign={len(self._sign_languages)},redun={len(self._redundant)}"

    def stats(self) -> Dict[str, Any]:
        """Sizes of the loaded sets."""
        result = {
            "numLanguages": len(self._known),
            "numRedundantLanguages": len(self._redundant),
            "numLanguageRanges": len(self._ranges),
            "numSignLanguages": len(self._sign_languages),
        }
        if self.file_date:
            result["languageFileDate"] = self.file_date
        return result

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _add_range(self, subtag: str) -> None:
        start, _, end = subtag.lower().partition("..")
        if len(start) != len(end):
            return
        self._ranges.append((start, end) if start <= end else (end, start))

    def _process_record(self, fields: Dict[str, List[str]]) -> None:
        if "File-Date" in fields:
            self.file_date = fields["File-Date"][0]
        record_type = fields.get("Type", [""])[0]
        descriptions = " ".join(fields.get("Description", [])).lower()
        prefixes = [p.lower() for p in fields.get("Prefix", [])]
        deprecated = "Deprecated" in fields
        preferred = fields.get("Preferred-Value", [None])[0]

        if record_type in SUBTAG_TYPES:
            for subtag in fields.get("Subtag", []):
                if ".." in subtag:
                    self._add_range(subtag)
                    continue
                lowered = subtag.lower()
                self._known.add(lowered)
                if deprecated:
                    self._deprecated[lowered] = preferred
                if record_type in ("language", "extlang") and (
                        "sign" in descriptions or SIGN_LANGUAGE_PREFIX in prefixes):
                    self._sign_languages.add(lowered)
                    if record_type == "extlang":
                        self._sign_languages.add(f"{SIGN_LANGUAGE_PREFIX}-{lowered}")
        elif record_type == "redundant":
            for tag in fields.get("Tag", []):
                lowered = tag.lower()
                self._redundant[lowered] = preferred
                if lowered.startswith(f"{SIGN_LANGUAGE_PREFIX}-"):
                    self._sign_languages.add(lowered)

    def load_text(self, text: str) -> None:
        """Add the records of registry text to the store."""
        for entry in text.split("%%"):
            fields = _parse_record(entry)
            if fields:
                self._process_record(fields)

    def load(self,
             file: Optional[Union[str, Path]] = None,
             url: Optional[str] = None,
             purge: bool = True,
             timeout: float = DEFAULT_TIMEOUT) -> bool:
        """
        Load the subtag registry from a file or URL.

        Args:
            file: Local copy of the registry
            url: HTTP(S) location of the registry
            purge: Replace existing entries, once the new text has given some
            timeout: URL request timeout in seconds

        Returns:
            True if registry text was read and held subtags
        """
        text = read_source(file, url, "languages", timeout)
        if text is None:
            return False
        if not purge:
            self.load_text(text)
            logger.info(f"Loaded languages ({self.count()})")
            return True

        incoming = IANALanguages()
        incoming.load_text(text)
        if incoming.is_empty():
            logger.error(f"No language subtags found in {file or url}, keeping languages ({self.count()})")
            return False
        self._known, self._ranges = incoming._known, incoming._ranges
        self._redundant, self._deprecated = incoming._redundant, incoming._deprecated
        self._sign_languages, self.file_date = incoming._sign_languages, incoming.file_date
        logger.info(f"Loaded languages ({self.count()})")
        return True

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _in_range(self, value: str) -> bool:
        return any(len(start) == len(value) and start <= value <= end for start, end in self._ranges)

    def _subtag_known(self, subtag: str) -> bool:
        return subtag in self._known or self._in_range(subtag)

    def is_known(self, value: Any) -> LanguageLookup:
        """
        Determine the known state of a language tag.

        Args:
            value: Language tag, e.g. 'en', 'en-GB', 'qaa'

        Returns:
            LanguageLookup with the state and any preferred replacement
        """
        if value is None or value == "":
            return LanguageLookup(LanguageState.NOT_SPECIFIED)
        if not isinstance(value, str):
            return LanguageLookup(LanguageState.INVALID)

        lowered = value.lower()
        if lowered in self._known:
            if lowered in self._deprecated:
                return LanguageLookup(LanguageState.DEPRECATED, self._deprecated[lowered])
            return LanguageLookup(LanguageState.KNOWN)

        if lowered in self._redundant:
            return LanguageLookup(LanguageState.DEPRECATED, self._redundant[lowered])

        if self._in_range(lowered):
            return LanguageLookup(LanguageState.KNOWN)

        if "-" in lowered:
            parts = lowered.split("-")
            checked = 0
            for part in parts:
                if len(part) == 1:
                    break
                if not part or not self._subtag_known(part):
                    return LanguageLookup(LanguageState.UNKNOWN)
                checked += 1
            if checked > 0:
                return LanguageLookup(LanguageState.KNOWN)

        return LanguageLookup(LanguageState.UNKNOWN)

    def is_known_sign_language(self, value: Optional[str]) -> bool:
        """True if the value, or the value prefixed with 'sgn-', is a sign language."""
        if not isinstance(value, str) or not value:
            return False
        lowered = value.lower()
        return lowered in self._sign_languages or f"{SIGN_LANGUAGE_PREFIX}-{lowered}" in self._sign_languages
