"""
Accessibility Attributes
========================

Checks for the TV-Anytime ``<AccessibilityAttributes>`` element in service
list content attributes, related material and content guide AV attributes.
"""

from typing import Any, List, Optional

from dvbi_core.patterns import is_valid_bcp47
from dvbi_core.reference.classification_scheme import CS_URI_DELIMITER, ClassificationScheme
from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.validation.schema_checks import (
    UNBOUNDED,
    ElementSpec,
    check_top_elements_and_cardinality,
)
from dvbi_core.validation.vocabulary import not_in_store, unverified_value
from dvbi_core.xml.utils import attr, child_elements, children, elementize, local_name, quote, safe_get_text

K_ACCESSIBILITY = "accessibility"

MEDIA_ACCESSIBILITY_ELEMENTS = [
    ElementSpec("SubtitleAttributes", 0, UNBOUNDED),
    ElementSpec("AudioDescriptionAttributes", 0, UNBOUNDED),
    ElementSpec("SigningAttributes", 0, UNBOUNDED),
    ElementSpec("DialogueEnhancementAttributes", 0, UNBOUNDED),
    ElementSpec("SpokenSubtitlesAttributes", 0, UNBOUNDED),
]
APPLICATION_ACCESSIBILITY_ELEMENTS = [
    ElementSpec("MagnificationUIAttributes", 0, UNBOUNDED),
    ElementSpec("HighContrastUIAttributes", 0, UNBOUNDED),
    ElementSpec("ScreenReaderAttributes", 0, UNBOUNDED),
    ElementSpec("ResponseToUserActionAttributes", 0, UNBOUNDED),
]
ACCESSIBILITY_ELEMENTS = [spec.name for spec in MEDIA_ACCESSIBILITY_ELEMENTS + APPLICATION_ACCESSIBILITY_ELEMENTS]

APP_INFORMATION_ELEMENTS = [ElementSpec("AppInformation", min_occurs=0), ElementSpec("Personalisation", min_occurs=0)]
APP_ELEMENTS = [ElementSpec("Purpose", max_occurs=UNBOUNDED)] + APP_INFORMATION_ELEMENTS
APP_ELEMENT_NAMES = ["Purpose", "AppInformation", "Personalisation"]

# UI attribute element -> the leading digit of its AccessibilityPurposeCS terms, code number
UI_ATTRIBUTES = {
    "MagnificationUIAttributes": ("1", 10),
    "HighContrastUIAttributes": ("2", 20),
    "ScreenReaderAttributes": ("3", 30),
    "ResponseToUserActionAttributes": ("4", 40),
}
AUDIO_ACCESSIBILITY_ATTRIBUTES = {
    "AudioDescriptionAttributes": 60,
    "DialogueEnhancementAttributes": 80,
    "SpokenSubtitlesAttributes": 90,
}


class AccessibilityChecker:
    """
    Checks one AccessibilityAttributes element.

    Args:
        stores: ReferenceStores providing the accessibility vocabularies
        errs: Finding collector
        code: Code prefix for findings
    """

    def __init__(self, stores: Any, errs: ErrorList, code: str):
        self.stores = stores
        self.errs = errs
        self.code = code

    def _check_cs(self, element: Any, child_name: str, cs: ClassificationScheme, number: Any,
                  collected: Optional[List[str]] = None) -> bool:
        ok = True
        for child in children(element, child_name):
            href = attr(child, "href")
            if not_in_store(cs, href, self.errs, f"{self.code}-{number}", "accessibility", child):
                self.errs.add_error(
                    code=f"{self.code}-{number}",
                    message=f"{quote(href)} is not valid for {elementize(child_name)} in "
                            f"{elementize(local_name(element))}",
                    fragment=child,
                    key=K_ACCESSIBILITY,
                )
                ok = False
            if href and collected is not None:
                collected.append(href)
        return ok

    def _check_purpose(self, element: Any, main_term: str, number: int) -> None:
        purposes = self.stores.accessibility_purposes
        for purpose in children(element, "Purpose"):
            term = attr(purpose, "href")
            if not term:
                continue
            if not_in_store(purposes, term, self.errs, f"{self.code}-{number}a", "accessibility purpose", purpose):
                self.errs.add_error(
                    code=f"{self.code}-{number}a",
                    message=f"{quote(term)} is not a valid accessibility purpose",
                    fragment=purpose,
                    key=K_ACCESSIBILITY,
                )
            pos = term.rfind(CS_URI_DELIMITER)
            if pos != -1 and term[pos + 1:pos + 2] != main_term:
                self.errs.add_error(
                    code=f"{self.code}-{number}b",
                    message=f"{quote(term)} is not valid for {elementize(local_name(element))}",
                    fragment=purpose,
                    key=K_ACCESSIBILITY,
                )

    def _check_language_format(self, element: Any, child_name: str, number: Any) -> None:
        for child in children(element, child_name):
            value = safe_get_text(child).strip()
            if not is_valid_bcp47(value):
                self.errs.add_error(
                    code=f"{self.code}-{number}a",
                    message=f"language value {quote(value)} does not match format for Language-Tag in BCP47",
                    fragment=child,
                    key=K_ACCESSIBILITY,
                )

    def _check_sign_language(self, element: Any, number: int) -> None:
        languages = self.stores.languages
        for child in children(element, "SignLanguage"):
            value = safe_get_text(child).strip()
            if languages.is_empty():
                self.errs.add_error(**unverified_value(value, "sign language", f"{self.code}-{number}b", child))
            elif not languages.is_known_sign_language(value):
                self.errs.add_error(
                    code=f"{self.code}-{number}b",
                    message=f"{quote(value)} is not a valid sign language for <SignLanguage> in "
                            f"{elementize(local_name(element))}",
                    fragment=child,
                    key=K_ACCESSIBILITY,
                    description="language used for <SignLanguage> must be a sign language in the "
                                "IANA language-subtag-registry",
                )

    def _check_audio_attributes(self, element: Any, number: int) -> None:
        for audio in children(element, "AudioAttributes"):
            check_top_elements_and_cardinality(
                audio,
                [ElementSpec("Coding", 0), ElementSpec("MixType", 0), ElementSpec("AudioLanguage", 0)],
                ["Coding", "NumOfChannels", "MixType", "AudioLanguage", "SampleFrequency",
                 "BitsPerSample", "BitRate"],
                False, self.errs, f"{self.code}-{number}a",
            )
            self._check_language_format(audio, "AudioLanguage", f"{number}b")
            for language in children(audio, "AudioLanguage"):
                if attr(language, "purpose") is not None:
                    self.errs.add_error(
                        code=f"{self.code}-{number}c",
                        message="AudioLanguage@purpose should not be specified for <AccessibilityAttributes>",
                        fragment=language,
                        key=K_ACCESSIBILITY,
                        clause="A177 table 56 (clause 6.10.10)",
                    )
            self._check_cs(audio, "Coding", self.stores.audio_codecs, f"{number}d")
            self._check_cs(audio, "MixType", self.stores.audio_presentation, f"{number}e")

    def check(self, accessibility: Any) -> None:
        if accessibility is None:
            self.errs.add_error(
                type=Severity.APPLICATION, code="AA000",
                message="check_accessibility_attributes() called with accessibility==None",
            )
            return

        parent = accessibility.getparent()
        parent_name = local_name(parent) if parent is not None else ""
        if parent_name == "RelatedMaterial":
            specs, number = MEDIA_ACCESSIBILITY_ELEMENTS + APPLICATION_ACCESSIBILITY_ELEMENTS, 1
        elif parent_name == "AVAttributes":
            specs, number = MEDIA_ACCESSIBILITY_ELEMENTS, 2
        elif parent_name == "ContentAttributes":
            specs, number = MEDIA_ACCESSIBILITY_ELEMENTS, 3
        else:
            self.errs.add_error(
                type=Severity.APPLICATION, code="AA001",
                message="Invalid parent element for <AccessibilityAttributes>",
                key=K_ACCESSIBILITY,
            )
            return
        check_top_elements_and_cardinality(accessibility, specs, ACCESSIBILITY_ELEMENTS, False, self.errs,
                                           f"{self.code}-{number}")

        for child in child_elements(accessibility):
            name = local_name(child)
            if name in UI_ATTRIBUTES:
                main_term, base = UI_ATTRIBUTES[name]
                extra = [ElementSpec("ScreenReaderLanguage", 0, UNBOUNDED)] if name == "ScreenReaderAttributes" else []
                check_top_elements_and_cardinality(
                    child, extra + APP_ELEMENTS, APP_ELEMENT_NAMES + [s.name for s in extra], False, self.errs,
                    f"{self.code}-{base + 1}",
                )
                self._check_purpose(child, main_term, base + 3)
                if extra:
                    self._check_language_format(child, "ScreenReaderLanguage", base + 4)
            elif name == "SubtitleAttributes":
                check_top_elements_and_cardinality(
                    child,
                    [ElementSpec("Carriage"), ElementSpec("Coding", max_occurs=UNBOUNDED),
                     ElementSpec("SubtitleLanguage"), ElementSpec("Purpose", 0, UNBOUNDED),
                     ElementSpec("SuitableForTTS")] + APP_INFORMATION_ELEMENTS,
                    [], False, self.errs, f"{self.code}-51",
                )
                self._check_cs(child, "Carriage", self.stores.subtitle_carriages, 53)
                self._check_cs(child, "Coding", self.stores.subtitle_codings, 54)
                self._check_language_format(child, "SubtitleLanguage", 55)
                self._check_cs(child, "Purpose", self.stores.subtitle_purposes, 56)
            elif name in AUDIO_ACCESSIBILITY_ATTRIBUTES:
                base = AUDIO_ACCESSIBILITY_ATTRIBUTES[name]
                specs = [ElementSpec("AudioAttributes")]
                if name == "AudioDescriptionAttributes":
                    specs.append(ElementSpec("ReceiverMix", min_occurs=0))
                check_top_elements_and_cardinality(child, specs + APP_INFORMATION_ELEMENTS, [], False, self.errs,
                                                   f"{self.code}-{base + 1}")
                self._check_audio_attributes(child, base + 3)
            elif name == "SigningAttributes":
                check_top_elements_and_cardinality(
                    child,
                    [ElementSpec("Coding"), ElementSpec("SignLanguage", 0), ElementSpec("Closed", 0)]
                    + APP_INFORMATION_ELEMENTS,
                    [], False, self.errs, f"{self.code}-71",
                )
                if not self._check_cs(child, "Coding", self.stores.video_codecs, 73):
                    self.errs.error_description(
                        f"{self.code}-73", description="value for <Coding> is not taken from the VideoCodecCS",
                    )
                self._check_sign_language(child, 74)


def check_accessibility_attributes(accessibility: Any, stores: Any, errs: ErrorList, code: str) -> None:
    """
    Check an AccessibilityAttributes element.

    Terms are only checked against vocabularies that are loaded.

    Args:
        accessibility: The <AccessibilityAttributes> element
        stores: ReferenceStores
        errs: Finding collector
        code: Code prefix for findings
    """
    AccessibilityChecker(stores, errs, code).check(accessibility)
