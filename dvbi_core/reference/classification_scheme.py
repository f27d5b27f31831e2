"""
Classification Schemes
======================

Controlled vocabularies expressed as TV-Anytime/DVB ClassificationScheme
documents. Every ``Term`` with a ``termID`` is stored as ``uri:termID``,
where ``uri`` is the scheme's ``@uri``.

Example:
    >>> cs = ClassificationScheme()
    >>> cs.load_text('<ClassificationScheme uri="urn:dvb:metadata:cs:ServiceTypeCS:2019">'
    ...              '<Term termID="linear"/></ClassificationScheme>')
    1
    >>> cs.is_in("urn:dvb:metadata:cs:ServiceTypeCS:2019:linear")
    True
"""

from pathlib import Path
from typing import Any, Iterable, List, Optional, Set, Union
import logging

from lxml import etree

from dvbi_core.reference.sources import DEFAULT_TIMEOUT, fetch_url, read_file
from dvbi_core.xml.utils import attr, child_elements, has_child, local_name

logger = logging.getLogger(__name__)

CS_URI_DELIMITER = ":"


def _collect_terms(term: Any, scheme_uri: str, values: List[str], leaf_nodes_only: bool) -> None:
    if local_name(term) != "Term":
        return
    term_id = attr(term, "termID")
    if term_id and (not leaf_nodes_only or not has_child(term, "Term")):
        values.append(f"{scheme_uri}{CS_URI_DELIMITER}{term_id}")
    for sub_term in child_elements(term):
        _collect_terms(sub_term, scheme_uri, values, leaf_nodes_only)


def parse_classification_scheme(data: Union[str, bytes], leaf_nodes_only: bool = False):
    """
    Flatten a classification scheme document.

    Args:
        data: Document text
        leaf_nodes_only: Only keep terms without child terms

    Returns:
        Tuple of (scheme uri or None, list of qualified terms)

    Raises:
        etree.XMLSyntaxError: The document is not well formed
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
    root = etree.fromstring(data, parser)
    scheme_uri = attr(root, "uri")
    if not scheme_uri:
        return None, []
    values: List[str] = []
    for term in child_elements(root):
        _collect_terms(term, scheme_uri, values, leaf_nodes_only)
    return scheme_uri, values


class ClassificationScheme:
    """
    Set of qualified classification scheme terms.

    Lookups are exact: a hierarchical scheme only knows the terms that were
    inserted, never their ancestors by inference.
    """

    def __init__(self, leaf_nodes_only: bool = False):
        self._values: Set[str] = set()
        self._lower_values: Set[str] = set()
        self._schemes: List[str] = []
        self.leaf_nodes_only = leaf_nodes_only

    def count(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def empty(self) -> None:
        self._values.clear()
        self._lower_values.clear()
        self._schemes = []

    def is_empty(self) -> bool:
        return not self._values

    def insert_value(self, value: str) -> None:
        if value:
            self._values.add(value)
            self._lower_values.add(value.lower())

    def values_range(self) -> str:
        return "-only leaf nodes are used from the CS" if self.leaf_nodes_only else "all nodes in the CS are used"

    @property
    def schemes(self) -> List[str]:
        return list(self._schemes)

    def load_text(self, data: Union[str, bytes], source: str = "<text>") -> int:
        """
        Add the terms of one classification scheme document.

        Returns:
            Number of terms added, 0 if the document could not be parsed
        """
        try:
            scheme_uri, values = parse_classification_scheme(data, self.leaf_nodes_only)
        except etree.XMLSyntaxError as e:
            logger.error(f"Malformed classification scheme {source}: {e}")
            return 0
        if scheme_uri is None:
            logger.warning(f"Classification scheme {source} has no @uri, ignored")
            return 0
        for value in values:
            self.insert_value(value)
        if scheme_uri not in self._schemes:
            self._schemes.append(scheme_uri)
        return len(values)

    def load(self,
             files: Optional[Iterable[Union[str, Path]]] = None,
             urls: Optional[Iterable[str]] = None,
             leaf_nodes_only: Optional[bool] = None,
             purge: bool = False,
             extra_values: Optional[Iterable[str]] = None,
             timeout: float = DEFAULT_TIMEOUT) -> int:
        """
        Load terms from files and/or URLs.

        Args:
            files: Local classification scheme documents
            urls: HTTP(S) classification scheme documents
            leaf_nodes_only: Override the leaf-only setting for this load
            purge: Discard existing terms first
            extra_values: Additional qualified terms to insert
            timeout: URL request timeout in seconds

        Returns:
            Number of terms held after loading. With purge, the existing
            terms are only replaced when at least one source was read.
        """
        if leaf_nodes_only is not None:
            self.leaf_nodes_only = leaf_nodes_only
        nodes = "leaf" if self.leaf_nodes_only else "all"

        incoming = ClassificationScheme(self.leaf_nodes_only)
        sources = 0
        for path in files or []:
            sources += 1
            text = read_file(path, f"CS ({nodes} nodes)")
            if text is not None:
                incoming.load_text(text, str(path))
        for url in urls or []:
            sources += 1
            content = fetch_url(url, f"CS ({nodes} nodes)", timeout)
            if content is not None:
                incoming.load_text(content, url)

        if sources and not incoming.schemes:
            logger.error(f"None of {sources} classification scheme source(s) could be read")
            if purge:
                logger.warning(f"Keeping the {self.count()} term(s) already loaded")
                return self.count()

        for value in extra_values or []:
            if isinstance(value, str):
                incoming.insert_value(value)
        if purge:
            self.empty()
        self._values |= incoming._values
        self._lower_values |= incoming._lower_values
        self._schemes.extend(scheme for scheme in incoming.schemes if scheme not in self._schemes)

        logger.info(f"Classification scheme holds {self.count()} term(s) from {len(self._schemes)} scheme(s)")
        return self.count()

    def is_in(self, value: Optional[str], case_sensitive: bool = True) -> bool:
        if not isinstance(value, str):
            return False
        if case_sensitive:
            return value in self._values
        return value.lower() in self._lower_values

    def has_scheme(self, term: Optional[str]) -> bool:
        """True if the scheme part of a qualified term is a loaded scheme."""
        if not isinstance(term, str):
            return False
        pos = term.rfind(CS_URI_DELIMITER)
        if pos == -1:
            return False
        return term[:pos] in self._schemes
