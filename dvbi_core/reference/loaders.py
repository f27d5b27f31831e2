"""
Reference Store Loading
=======================

The ReferenceStores bundle handed to the validators, and the synchronous
and asynchronous ways of populating it from a ReferenceDataConfig.

Single-shot use loads synchronously:

    stores = load_reference_stores(config.reference)
    checker = ServiceListCheck(stores, schemas)

A server loads at startup without blocking its event loop:

    stores = await load_reference_stores_async(config.reference)

On reload, a new bundle is built and swapped in; a bundle in use by a
running validation is never modified.
"""

import asyncio
import dataclasses
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

from dvbi_core.config import settings as cfg
from dvbi_core.config.settings import ReferenceDataConfig
from dvbi_core.reference.classification_scheme import ClassificationScheme
from dvbi_core.reference.countries import ISOCountries
from dvbi_core.reference.identifiers import ContentProtectionRegistry
from dvbi_core.reference.languages import IANALanguages
from dvbi_core.reference.roles import RoleList

logger = logging.getLogger(__name__)

# classification scheme vocabularies, in the order they are loaded
CS_VOCABULARIES = (
    cfg.GENRES,
    cfg.VIDEO_CODECS,
    cfg.AUDIO_CODECS,
    cfg.PICTURE_FORMATS,
    cfg.COLORIMETRY,
    cfg.SERVICE_TYPES,
    cfg.RECORDING_INFO,
    cfg.AUDIO_PRESENTATION,
    cfg.AUDIO_CONFORMANCE,
    cfg.VIDEO_CONFORMANCE,
    cfg.ACCESSIBILITY_PURPOSES,
    cfg.AUDIO_PURPOSES,
    cfg.SUBTITLE_CARRIAGES,
    cfg.SUBTITLE_CODINGS,
    cfg.SUBTITLE_PURPOSES,
    cfg.RATINGS,
)


@dataclass
class ReferenceStores:
    """
    Every reference data store used by the validators.

    Attributes:
        languages: IANA language subtags
        countries: ISO 3166 alpha-3 country codes
        genres: TV-Anytime and DVB genre terms
        video_codecs, audio_codecs: Coding format terms
        picture_formats, colorimetry: Video attribute terms
        service_types, recording_info: Service level terms
        audio_presentation: Audio mix types
        audio_conformance, video_conformance: Conformance points
        accessibility_purposes, audio_purposes: Accessibility purposes
        subtitle_carriages, subtitle_codings, subtitle_purposes: Subtitle terms
        ratings: Parental guidance and content alert terms
        credits_roles: CreditsItem@role values
        content_protection: CA and DRM system identifiers
    """
    languages: IANALanguages = field(default_factory=IANALanguages)
    countries: ISOCountries = field(default_factory=lambda: ISOCountries(use2=False, use3=True))
    genres: ClassificationScheme = field(default_factory=ClassificationScheme)
    video_codecs: ClassificationScheme = field(default_factory=ClassificationScheme)
    audio_codecs: ClassificationScheme = field(default_factory=ClassificationScheme)
    picture_formats: ClassificationScheme = field(default_factory=ClassificationScheme)
    colorimetry: ClassificationScheme = field(default_factory=ClassificationScheme)
    service_types: ClassificationScheme = field(default_factory=ClassificationScheme)
    recording_info: ClassificationScheme = field(default_factory=ClassificationScheme)
    audio_presentation: ClassificationScheme = field(default_factory=ClassificationScheme)
    audio_conformance: ClassificationScheme = field(default_factory=ClassificationScheme)
    video_conformance: ClassificationScheme = field(default_factory=ClassificationScheme)
    accessibility_purposes: ClassificationScheme = field(default_factory=ClassificationScheme)
    audio_purposes: ClassificationScheme = field(default_factory=ClassificationScheme)
    subtitle_carriages: ClassificationScheme = field(default_factory=ClassificationScheme)
    subtitle_codings: ClassificationScheme = field(default_factory=ClassificationScheme)
    subtitle_purposes: ClassificationScheme = field(default_factory=ClassificationScheme)
    ratings: ClassificationScheme = field(default_factory=ClassificationScheme)
    credits_roles: RoleList = field(default_factory=RoleList)
    content_protection: ContentProtectionRegistry = field(default_factory=ContentProtectionRegistry)

    def replace(self, **changes: Any) -> "ReferenceStores":
        """A new bundle with some stores swapped out."""
        return dataclasses.replace(self, **changes)

    def stats(self) -> Dict[str, Any]:
        result = dict(self.languages.stats())
        result["numKnownCountries"] = self.countries.count()
        for name in CS_VOCABULARIES:
            result[f"num_{name}"] = getattr(self, name).count()
        result["numCreditItemRoles"] = self.credits_roles.count()
        result["numCASystems"] = len(self.content_protection.ca_systems)
        result["numDRMSystems"] = len(self.content_protection.drm_systems)
        return result


def _load_each(load, files, urls, purge: bool, timeout: float) -> None:
    """
    Run a single-source loader over every configured location in turn.

    Only the first location that is read may purge, so later ones add to it.
    """
    for location in [{"file": file} for file in files] + [{"url": url} for url in urls]:
        if load(purge=purge, timeout=timeout, **location):
            purge = False


def load_reference_stores(config: Optional[ReferenceDataConfig] = None) -> ReferenceStores:
    """
    Load every store, blocking until done.

    Sources that cannot be read are logged and leave their store empty.

    Args:
        config: Reference data configuration; defaults when None

    Returns:
        Populated ReferenceStores
    """
    config = config or ReferenceDataConfig()
    stores = ReferenceStores()
    use_urls = config.use_urls

    def locations(name: str):
        source = config.source(name)
        return ([], source.urls) if use_urls else (source.files, [])

    files, urls = locations(cfg.LANGUAGES)
    _load_each(stores.languages.load, files, urls, config.purge, config.timeout)

    files, urls = locations(cfg.COUNTRIES)
    _load_each(stores.countries.load, files, urls, config.purge, config.timeout)

    for name in CS_VOCABULARIES:
        files, urls = locations(name)
        getattr(stores, name).load(
            files=files, urls=urls, leaf_nodes_only=config.source(name).leaf_nodes_only,
            purge=config.purge, timeout=config.timeout,
        )

    files, urls = locations(cfg.CREDITS_ROLES)
    stores.credits_roles.load(files=files, urls=urls, purge=config.purge, timeout=config.timeout)

    files, urls = locations(cfg.CA_SYSTEMS)
    _load_each(stores.content_protection.load_ca_systems, files, urls, config.purge, config.timeout)
    files, urls = locations(cfg.DRM_SYSTEMS)
    _load_each(stores.content_protection.load_drm_systems, files, urls, config.purge, config.timeout)

    logger.info(f"Reference data loaded ({'URLs' if use_urls else 'files'}): {stores.languages.count()}, "
                f"{stores.countries.count()} countries, {stores.genres.count()} genres")
    return stores


async def load_reference_stores_async(config: Optional[ReferenceDataConfig] = None,
                                      executor: Optional[ThreadPoolExecutor] = None) -> ReferenceStores:
    """
    Load every store without blocking the event loop.

    The synchronous loader runs in a thread pool.

    Args:
        config: Reference data configuration; defaults when None
        executor: Thread pool to use; a single-worker pool is created when None

    Returns:
        Populated ReferenceStores
    """
    loop = asyncio.get_running_loop()
    if executor is not None:
        return await loop.run_in_executor(executor, load_reference_stores, config)
    with ThreadPoolExecutor(max_workers=1) as pool:
        return await loop.run_in_executor(pool, load_reference_stores, config)
