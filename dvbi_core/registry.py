"""
Service List Registry
=====================

Answers service list discovery queries (ETSI TS 103 770 clause 5.1.3)
from a master ``ServiceListEntryPoints`` document.

A query narrows the registry to the provider offerings and service list
offerings that match it:

    ProviderName       provider <Name> values
    regulatorListFlag  ServiceListOffering@regulatorListFlag (default false)
    Language           offered <Language> values
    TargetCountry      offered <TargetCountry> values
    Genre              offered <Genre> values
    Delivery           delivery systems offered in <Delivery>
    inlineImages       keep data: URLs in <RelatedMaterial> (default false)

The master document is parsed once and never modified. Each query works
on its own deep copy, so concurrent queries see the same registry.

Usage:
    from dvbi_core.registry import RegistryQuery, ServiceListRegistry

    registry = ServiceListRegistry(countries=stores.countries, genres=stores.genres)
    registry.load("slr.xml")
    query, errors = RegistryQuery.from_params({"TargetCountry": "DEU"}, stores.countries, stores.genres)
    if not errors:
        xml = registry.filter(query, parse_user_agent(user_agent).requested_version)
"""

import copy
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

from lxml import etree

from dvbi_core import definitions as dvbi
from dvbi_core.patterns import is_http_url, is_tva_audio_language_type
from dvbi_core.reference.classification_scheme import ClassificationScheme
from dvbi_core.reference.countries import ISOCountries
from dvbi_core.reference.sources import DEFAULT_TIMEOUT, fetch_url, read_file
from dvbi_core.xml.utils import attr, children, first_child, has_child, safe_get_text

logger = logging.getLogger(__name__)

RFC2397_PREFIX = "data:"
MINIMUM_VERSIONED_REQUEST = 6

EMPTY_REGISTRY = (
    f'<ServiceListEntryPoints xmlns="{dvbi.SLEPR_NAMESPACE}">'
    "<ServiceListRegistryEntity><Name>EMPTY</Name></ServiceListRegistryEntity>"
    "</ServiceListEntryPoints>"
)

_UAS_REGEX = re.compile(
    r"(DVB-I/A177r)(\d+)( \(([^;]*);([^;]*);([^;]*);([^;]*);([^;]*);([^;]*);([^;]*)\))?"
)


class DeliverySystem(str, Enum):
    """Delivery values accepted in a query."""

    DASH = "dvb-dash"
    TERRESTRIAL = "dvb-t"
    SATELLITE = "dvb-s"
    CABLE = "dvb-c"
    IPTV = "dvb-iptv"
    APPLICATION = "application"

    @property
    def label(self) -> str:
        labels = {
            self.DASH: "DVB-DASH",
            self.TERRESTRIAL: "DVB-T",
            self.SATELLITE: "DVB-S",
            self.CABLE: "DVB-C",
            self.IPTV: "DVB IPTV (RTSP or multicast)",
            self.APPLICATION: "Application",
        }
        return labels.get(self, self.value)

    @property
    def delivery_elements(self) -> Tuple[str, ...]:
        """Children of <Delivery> that provide this system."""
        elements = {
            self.DASH: ("DASHDelivery",),
            self.TERRESTRIAL: ("DVBTDelivery",),
            self.SATELLITE: ("DVBSDelivery",),
            self.CABLE: ("DVBCDelivery",),
            self.IPTV: ("RTSPDelivery", "MulticastTSDelivery"),
            self.APPLICATION: ("ApplicationDelivery",),
        }
        return elements[self]


class ProcessingMode(str, Enum):
    """
    How version specific <ServiceListURI> elements are selected.

    DEFAULT keeps offerings with a URI for the requested version or with an
    unversioned URI. ITALY keeps only the URIs for the requested version,
    or only unversioned URIs when no version was requested.
    """

    DEFAULT = "default"
    ITALY = "italy"


ALLOWED_ARGUMENTS = ("ProviderName", "regulatorListFlag", "Language", "TargetCountry", "Genre", "Delivery",
                     "inlineImages")


@dataclass
class UserAgent:
    """
    Fields of a DVB-I user agent string (A177 clause 5.4.1).

    Attributes:
        ok: True if the string contained a DVB-I product token
        version: A177 revision, e.g. 7 for A177r7
    """
    ok: bool = False
    version: int = -1
    capabilities: Optional[str] = None
    vendor_name: Optional[str] = None
    model_name: Optional[str] = None
    software_version: Optional[str] = None
    hardware_version: Optional[str] = None
    family: Optional[str] = None
    reserved: Optional[str] = None

    @property
    def requested_version(self) -> int:
        """The A177 revision to filter by, or -1 for none."""
        return self.version if self.ok and self.version >= MINIMUM_VERSIONED_REQUEST else -1


def parse_user_agent(uas: Optional[str]) -> UserAgent:
    """
    Extract the A177 revision, and the device fields when present, from a user agent.

    Args:
        uas: The User-Agent header value

    Returns:
        UserAgent; ``ok`` is False when there is no ``DVB-I/A177r<n>`` token
    """
    if not uas:
        return UserAgent()
    found = _UAS_REGEX.search(uas)
    if found is None:
        return UserAgent()
    return UserAgent(
        ok=True,
        version=int(found.group(2)),
        capabilities=found.group(4),
        vendor_name=found.group(5),
        model_name=found.group(6),
        software_version=found.group(7),
        hardware_version=found.group(8),
        family=found.group(9),
        reserved=found.group(10),
    )


@dataclass
class RegistryQuery:
    """
    A checked service list discovery query.

    List valued attributes are None when the argument was not given.
    """
    provider_names: Optional[List[str]] = None
    regulator_list_flag: Optional[str] = None
    languages: Optional[List[str]] = None
    target_countries: Optional[List[str]] = None
    genres: Optional[List[str]] = None
    delivery: Optional[List[DeliverySystem]] = None
    inline_images: bool = False

    @classmethod
    def from_params(cls,
                    params: Dict[str, Any],
                    countries: Optional[ISOCountries] = None,
                    genres: Optional[ClassificationScheme] = None) -> Tuple["RegistryQuery", List[str]]:
        """
        Check query arguments and build a query from them.

        Each argument may be a single string or a list of strings, as
        produced by most query string parsers.

        Args:
            params: Query arguments by name
            countries: Known ISO 3166 codes for TargetCountry; unchecked when None, logged when empty
            genres: Known genres for Genre; unchecked when None, logged when empty

        Returns:
            Tuple of (query, parse errors); the query should not be used when
            there are errors
        """
        errors: List[str] = []
        values: Dict[str, List[str]] = {}
        for key, value in params.items():
            if key not in ALLOWED_ARGUMENTS:
                errors.append(f"invalid argument - {key}")
                continue
            if isinstance(value, str):
                values[key] = [value]
            elif isinstance(value, (list, tuple)):
                values[key] = list(value)
            else:
                errors.append(f"invalid type [{type(value).__name__}] for {key}")

        def check(name: str, predicate) -> None:
            for item in values.get(name, []):
                if not isinstance(item, str) or not predicate(item):
                    errors.append(f"invalid {name} [{item}]")

        def is_boolean(value: str) -> bool:
            return value in ("true", "false")

        check("regulatorListFlag", is_boolean)
        if len(values.get("regulatorListFlag", [])) > 1:
            errors.append("only a single &regulatorListFlag can be specified")
        check("inlineImages", is_boolean)
        if len(values.get("inlineImages", [])) > 1:
            errors.append("only a single &inlineImages can be specified")

        def unverifiable(name: str, store: Any) -> bool:
            if store is None or not values.get(name):
                return True
            if store.is_empty():
                logger.warning(f"{name} {values[name]} not checked, no reference data is loaded")
                return True
            return False

        if not unverifiable("TargetCountry", countries):
            check("TargetCountry", lambda country: countries.is_iso3166_code(country, case_sensitive=False))
        check("Language", lambda language: is_tva_audio_language_type(language, case_sensitive=False))
        check("Delivery", lambda system: system in [d.value for d in DeliverySystem])
        if not unverifiable("Genre", genres):
            check("Genre", genres.is_in)

        query = cls(
            provider_names=values.get("ProviderName"),
            regulator_list_flag=values["regulatorListFlag"][0] if values.get("regulatorListFlag") else None,
            languages=values.get("Language"),
            target_countries=values.get("TargetCountry"),
            genres=values.get("Genre"),
            inline_images=bool(values.get("inlineImages")) and values["inlineImages"][0].lower() == "true",
        )
        if "Delivery" in values and not errors:
            query.delivery = [DeliverySystem(system) for system in values["Delivery"]]
        return query, errors

    def filters_offerings(self, requested_version: int) -> bool:
        return bool(self.regulator_list_flag or self.languages or self.target_countries or self.genres or
                    self.delivery or requested_version != -1)


@dataclass
class FilterResult:
    """
    Output of a registry query.

    Attributes:
        document: Serialized ServiceListEntryPoints
        vary_on_user_agent: True if the response depended on the requested version
    """
    document: bytes
    vary_on_user_agent: bool = False


def _standard_version(uri: Any) -> Optional[int]:
    value = attr(uri, "standardVersion")
    if not value or ":" not in value:
        return None
    tail = value[value.rfind(":") + 1:]
    return int(tail) if tail.isdigit() else None


class ServiceListRegistry:
    """
    Holds the master registry document and answers queries against it.

    Args:
        countries: Known countries, used to check TargetCountry arguments
        genres: Known genres, used to check Genre arguments
        mode: How version specific ServiceListURIs are selected
    """

    def __init__(self,
                 countries: Optional[ISOCountries] = None,
                 genres: Optional[ClassificationScheme] = None,
                 mode: ProcessingMode = ProcessingMode.DEFAULT):
        self.countries = countries
        self.genres = genres
        self.mode = mode
        self.source: Optional[str] = None
        self.read_error: Optional[str] = None
        self._master = etree.fromstring(EMPTY_REGISTRY.encode("utf-8"))
        self._num_requests = 0

    def stats(self) -> Dict[str, Any]:
        return {
            "numRequests": self._num_requests,
            "SLRfile": self.source or "not set",
            "SLRreadError": self.read_error or "",
            "numGenres": self.genres.count() if self.genres is not None else 0,
            "numCountries": self.countries.count() if self.countries is not None else 0,
            "processing": self.mode.value,
        }

    def load_text(self, text: Union[str, bytes], source: str = "<text>") -> bool:
        """
        Replace the master document.

        On a parse failure the registry is emptied and the error kept for stats().

        Returns:
            True if the document was parsed
        """
        self.source = source
        self.read_error = None
        data = text.encode("utf-8") if isinstance(text, str) else text
        parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
        try:
            self._master = etree.fromstring(data, parser)
        except etree.XMLSyntaxError as e:
            self.read_error = f"error ({e}) parsing {source}"
            logger.error(self.read_error)
            self._master = etree.fromstring(EMPTY_REGISTRY.encode("utf-8"))
            return False
        logger.info(f"Loaded service list registry from {source}")
        return True

    def load(self, source: Union[str, Path], timeout: float = DEFAULT_TIMEOUT) -> bool:
        """
        Load the master document from a file or an HTTP(S) URL.

        Returns:
            True if the document was read and parsed
        """
        source = str(source)
        if is_http_url(source):
            content = fetch_url(source, "service list registry", timeout)
        else:
            content = read_file(source, "service list registry")
        if content is None:
            self.source = source
            self.read_error = f"unable to read {source}"
            self._master = etree.fromstring(EMPTY_REGISTRY.encode("utf-8"))
            return False
        return self.load_text(content, source)

    def filter(self, query: RegistryQuery, requested_version: int = -1) -> bytes:
        """Serialized registry narrowed to the query."""
        return self.filter_with_details(query, requested_version).document

    def filter_with_details(self, query: RegistryQuery, requested_version: int = -1) -> FilterResult:
        """
        Answer a query.

        Args:
            query: Checked query arguments
            requested_version: A177 revision from the user agent, or -1

        Returns:
            FilterResult with the serialized document
        """
        self._num_requests += 1
        root = copy.deepcopy(self._master)
        vary = False

        if query.provider_names:
            for provider in children(root, "ProviderOffering"):
                names = children(first_child(provider, "Provider"), "Name")
                if not any(safe_get_text(name) in query.provider_names for name in names):
                    root.remove(provider)

        if self.mode == ProcessingMode.ITALY:
            vary = self._select_versioned_uris(root, requested_version) or vary

        if query.filters_offerings(requested_version):
            for provider in children(root, "ProviderOffering"):
                for offering in children(provider, "ServiceListOffering"):
                    remove, depends_on_version = self._exclude_offering(offering, query, requested_version)
                    vary = vary or depends_on_version
                    if remove:
                        provider.remove(offering)

        for provider in children(root, "ProviderOffering"):
            if not has_child(provider, "ServiceListOffering"):
                root.remove(provider)

        if not query.inline_images:
            self._remove_inline_images(root)

        return FilterResult(
            document=etree.tostring(root, xml_declaration=True, encoding="UTF-8"),
            vary_on_user_agent=vary,
        )

    def _select_versioned_uris(self, root: Any, requested_version: int) -> bool:
        vary = False
        for provider in children(root, "ProviderOffering"):
            for offering in children(provider, "ServiceListOffering"):
                uris = children(offering, "ServiceListURI")
                explicit = any(_standard_version(uri) == requested_version for uri in uris)
                for uri in uris:
                    version = _standard_version(uri)
                    has_version = attr(uri, "standardVersion") is not None
                    if requested_version == -1:
                        remove = has_version
                    else:
                        remove = (explicit and not has_version) or \
                            (version is not None and version != requested_version)
                    if remove:
                        offering.remove(uri)
                        vary = True
                if not has_child(offering, "ServiceListURI"):
                    provider.remove(offering)
            if not has_child(provider, "ServiceListOffering"):
                root.remove(provider)
        return vary

    def _exclude_offering(self, offering: Any, query: RegistryQuery, requested_version: int) -> Tuple[bool, bool]:
        """
        Decide whether a ServiceListOffering fails the query.

        An offering that does not signal a Language, TargetCountry or
        Genre at all is kept for that criterion.

        Returns:
            Tuple of (exclude, decision depended on the requested version)
        """
        if query.regulator_list_flag is not None:
            if attr(offering, "regulatorListFlag", "false") != query.regulator_list_flag:
                return True, False

        if self.mode == ProcessingMode.DEFAULT and requested_version != -1:
            version_uri = f"{dvbi.STANDARD_VERSION_PREFIX}:{requested_version}"
            uris = children(offering, "ServiceListURI")
            if not any(attr(uri, "standardVersion") in (None, version_uri) for uri in uris):
                return True, True

        if query.languages:
            offered = [safe_get_text(language) for language in children(offering, "Language")]
            if offered and not any(language in query.languages for language in offered):
                return True, False

        if query.target_countries:
            offered = []
            for target_country in children(offering, "TargetCountry"):
                offered.extend(safe_get_text(target_country).split(","))
            if offered and not any(country in query.target_countries for country in offered):
                return True, False

        if query.genres:
            offered = [safe_get_text(genre) for genre in children(offering, "Genre")]
            if offered and not any(genre in query.genres for genre in offered):
                return True, False

        if query.delivery:
            delivery = first_child(offering, "Delivery")
            if delivery is None:
                return True, False
            if not any(has_child(delivery, element) for system in query.delivery
                       for element in system.delivery_elements):
                return True, False

        return False, False

    @staticmethod
    def _remove_inline_images(root: Any) -> None:
        for provider in children(root, "ProviderOffering"):
            for offering in children(provider, "ServiceListOffering"):
                for related_material in children(offering, "RelatedMaterial"):
                    for media_locator in children(related_material, "MediaLocator"):
                        for media_uri in children(media_locator, "MediaUri"):
                            if safe_get_text(media_uri).strip().lower().startswith(RFC2397_PREFIX):
                                media_locator.remove(media_uri)
                        if not has_child(media_locator, "MediaUri"):
                            related_material.remove(media_locator)
                    if not has_child(related_material, "MediaLocator"):
                        offering.remove(related_material)
