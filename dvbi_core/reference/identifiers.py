"""
Content Protection Identifiers
==============================

CA system and DRM system identifier registries.

CA systems are registered as ranges of identifiers:

    [{"id_from": "0x0100", "id_to": "0x01FF", "name": "Canal Plus"}]

DRM systems are registered as URNs, typically ``urn:uuid:...``:

    [{"id": "urn:uuid:edef8ba9-79d6-4ace-a3c8-27dcd51d21ed", "name": "Widevine"}]
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union
import logging

from dvbi_core.reference.sources import DEFAULT_TIMEOUT, read_source

logger = logging.getLogger(__name__)

CA_SYSTEM_ID_REGISTRY = "DVB CA System ID registry"
DRM_SYSTEM_ID_REGISTRY = "DASH-IF Content Protection list"

_DECIMAL_REGEX = re.compile(r"^\d+$")


def parse_ca_system_id(value: Any) -> Optional[int]:
    """
    Parse a CA system identifier written in decimal or hexadecimal.

    Returns:
        The identifier, or None if it is neither
    """
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if _DECIMAL_REGEX.match(text):
        return int(text)
    try:
        return int(text, 16)
    except ValueError:
        return None


@dataclass(frozen=True)
class CASystemRange:
    id_from: int
    id_to: int
    name: str = ""

    def contains(self, value: int) -> bool:
        return self.id_from <= value <= self.id_to


class ContentProtectionRegistry:
    """
    CA and DRM system identifiers.

    An empty registry knows nothing: callers report an identifier they
    cannot check as unverified rather than as unknown.
    """

    def __init__(self):
        self.ca_systems: List[CASystemRange] = []
        self.drm_systems: List[str] = []

    def empty(self) -> None:
        self.ca_systems = []
        self.drm_systems = []

    @property
    def has_ca_systems(self) -> bool:
        return bool(self.ca_systems)

    @property
    def has_drm_systems(self) -> bool:
        return bool(self.drm_systems)

    def add_ca_system(self, id_from: Any, id_to: Any = None, name: str = "") -> bool:
        start = parse_ca_system_id(id_from)
        end = parse_ca_system_id(id_to) if id_to is not None else start
        if start is None or end is None:
            logger.warning(f"Ignoring CA system range {id_from}..{id_to}")
            return False
        self.ca_systems.append(CASystemRange(min(start, end), max(start, end), name))
        return True

    def add_drm_system(self, system_id: str) -> None:
        if system_id:
            self.drm_systems.append(system_id.strip().lower())

    def load_ca_text(self, text: str) -> int:
        try:
            data = json.loads(text)
        except ValueError as e:
            logger.error(f"Malformed {CA_SYSTEM_ID_REGISTRY}: {e}")
            return 0
        added = 0
        for entry in data if isinstance(data, list) else []:
            if isinstance(entry, dict) and self.add_ca_system(
                    entry.get("id_from", entry.get("id")), entry.get("id_to"), entry.get("name", "")):
                added += 1
        return added

    def load_drm_text(self, text: str) -> int:
        try:
            data = json.loads(text)
        except ValueError as e:
            logger.error(f"Malformed {DRM_SYSTEM_ID_REGISTRY}: {e}")
            return 0
        added = 0
        for entry in data if isinstance(data, list) else []:
            system_id = entry.get("id") if isinstance(entry, dict) else entry
            if isinstance(system_id, str) and system_id:
                self.add_drm_system(system_id)
                added += 1
        return added

    def load_ca_systems(self, file: Optional[Union[str, Path]] = None, url: Optional[str] = None,
                        purge: bool = True, timeout: float = DEFAULT_TIMEOUT) -> bool:
        text = read_source(file, url, "CA system identifiers", timeout)
        if text is None:
            return False
        incoming = ContentProtectionRegistry()
        if not incoming.load_ca_text(text):
            logger.error(f"No CA system ranges read, keeping {len(self.ca_systems)}")
            return False
        self.ca_systems = incoming.ca_systems if purge else self.ca_systems + incoming.ca_systems
        logger.info(f"Loaded {len(incoming.ca_systems)} CA system range(s)")
        return True

    def load_drm_systems(self, file: Optional[Union[str, Path]] = None, url: Optional[str] = None,
                         purge: bool = True, timeout: float = DEFAULT_TIMEOUT) -> bool:
        text = read_source(file, url, "DRM system identifiers", timeout)
        if text is None:
            return False
        incoming = ContentProtectionRegistry()
        if not incoming.load_drm_text(text):
            logger.error(f"No DRM system identifiers read, keeping {len(self.drm_systems)}")
            return False
        self.drm_systems = incoming.drm_systems if purge else self.drm_systems + incoming.drm_systems
        logger.info(f"Loaded {len(incoming.drm_systems)} DRM system identifier(s)")
        return True

    def is_known_ca_system(self, value: Any) -> bool:
        """True if the (decimal or hexadecimal) identifier is in a registered range."""
        parsed = parse_ca_system_id(value)
        if parsed is None:
            return False
        return any(entry.contains(parsed) for entry in self.ca_systems)

    def is_known_drm_system(self, value: Optional[str]) -> bool:
        """True if the value matches a registered URN, or the part of one after its last ':'."""
        if not isinstance(value, str) or not value:
            return False
        lowered = value.strip().lower()
        return any(known == lowered or known[known.rfind(":") + 1:] == lowered for known in self.drm_systems)
