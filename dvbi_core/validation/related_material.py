"""
Related Material Images
=======================

Structural checks for ``<RelatedMaterial>`` blocks that signal images:
logos in service lists and promotional still images in content guides.
"""

from typing import Any, List, Optional, Sequence

from dvbi_core.definitions import JPEG_IMAGE_CS_VALUE, PNG_IMAGE_CS_VALUE, PROMOTIONAL_STILL_IMAGE_URI
from dvbi_core.patterns import (
    is_data_uri,
    is_http_url,
    is_jpeg_mime,
    is_png_mime,
    valid_image_mime,
    valid_image_set,
)
from dvbi_core.reference.languages import IANALanguages
from dvbi_core.validation.base import ErrorList, Severity
from dvbi_core.validation.errors import K_INVALID_HREF, K_INVALID_URL, cg_invalid_href_value, invalid_url
from dvbi_core.validation.multilingual import check_language
from dvbi_core.validation.schema_checks import ElementSpec, check_attributes, check_top_elements_and_cardinality
from dvbi_core.xml.utils import attr, children, elementize, first_child, local_name, quote, safe_get_text

# elements defined by the TV-Anytime schema for each parent
RELATED_MATERIAL_ELEMENTS = [
    "HowRelated", "Format", "MediaLocator", "SegmentReference",
    "PromotionalText", "PromotionalMedia", "SourceMediaLocator",
]
MEDIA_LOCATOR_ELEMENTS = ["MediaUri", "InlineMedia", "StreamID"]
FORMAT_ELEMENTS = ["VideoFormat", "AudioFormat", "StillPictureFormat", "AVAttributes"]

HOW_RELATED_ATTRIBUTES = ["href", "metadataOrigin"]
MEDIA_URI_ATTRIBUTES = ["contentType"]
MEDIA_LOCATOR_ATTRIBUTES = ["contentLanguage"]
STILL_PICTURE_FORMAT_ATTRIBUTES = ["horizontalSize", "verticalSize", "href"]

IMAGE_SET_DESCRIPTION = ("At least one image shall be provided with the Media Type image/jpeg "
                         "or image/png for compatibility purposes")


def validate_image_related_material(related_material: Any,
                                    location: str,
                                    allowed_how_related: Sequence[str],
                                    errs: ErrorList,
                                    code: str,
                                    languages: Optional[IANALanguages] = None) -> None:
    """
    Check a RelatedMaterial that signals a single image.

    The block must hold one HowRelated whose href is in the allowed list, an
    optional Format and one MediaLocator. A StillPictureFormat coding must
    agree with the MIME type of the MediaUri, which must be an HTTP(S) URL.

    Args:
        related_material: The <RelatedMaterial> element
        location: Description of the parent for messages
        allowed_how_related: Permitted HowRelated@href values
        errs: Finding collector
        code: Code prefix for findings
        languages: Language store for MediaLocator@contentLanguage
    """
    if related_material is None:
        errs.add_error(
            type=Severity.APPLICATION, code="PS000",
            message="validate_image_related_material() called with related_material==None",
        )
        return

    check_top_elements_and_cardinality(
        related_material,
        [ElementSpec("HowRelated"), ElementSpec("Format", min_occurs=0), ElementSpec("MediaLocator")],
        RELATED_MATERIAL_ELEMENTS, False, errs, f"{code}-1",
    )

    # only the first instance of each element is used
    how_related = first_child(related_material, "HowRelated")
    format_element = first_child(related_material, "Format")
    media_locator = first_child(related_material, "MediaLocator")
    if how_related is None or media_locator is None:
        return

    check_attributes(how_related, ["href"], [], HOW_RELATED_ATTRIBUTES, errs, f"{code}-2")
    href = attr(how_related, "href")
    if href and href not in allowed_how_related:
        errs.add_error(
            code=f"{code}-10",
            message=f"HowRelated@href={quote(href)} is not valid for this use",
            fragment=how_related,
            key=K_INVALID_HREF,
        )
        return

    is_jpeg = is_png = False
    still_picture_format = None
    if format_element is not None:
        check_top_elements_and_cardinality(
            format_element, [ElementSpec("StillPictureFormat")], FORMAT_ELEMENTS, False, errs, f"{code}-11",
        )
        errs.error_description(f"{code}-11", description="Only the StillPictureFormat sub-element is permitted.",
                               clause="A177 Table 59")
        for still_picture in children(format_element, "StillPictureFormat"):
            still_picture_format = still_picture
            check_attributes(still_picture, STILL_PICTURE_FORMAT_ATTRIBUTES, [],
                             STILL_PICTURE_FORMAT_ATTRIBUTES, errs, f"{code}-12")
            coding = attr(still_picture, "href")
            if coding == JPEG_IMAGE_CS_VALUE:
                is_jpeg = True
            elif coding == PNG_IMAGE_CS_VALUE:
                is_png = True
            elif coding:
                errs.add_error(**cg_invalid_href_value(
                    coding, still_picture,
                    f"{local_name(related_material)}.Format.StillPictureFormat", f"{code}-13",
                ))

    check_top_elements_and_cardinality(
        media_locator, [ElementSpec("MediaUri")], MEDIA_LOCATOR_ELEMENTS, False, errs, f"{code}-21",
    )

    media_uris = children(media_locator, "MediaUri")
    for media_uri in media_uris:
        check_attributes(media_uri, ["contentType"], [], MEDIA_URI_ATTRIBUTES, errs, f"{code}-22")
        content_type = attr(media_uri, "contentType")
        if content_type:
            if not valid_image_mime(content_type):
                errs.add_error(
                    code=f"{code}-23",
                    message=f"invalid MediaLocator@contentType={quote(content_type)} specified for "
                            f"{elementize(local_name(related_material))} in {location}",
                    fragment=media_uri,
                    key="invalid format",
                    description=IMAGE_SET_DESCRIPTION,
                    clause="A177 clause 6.10.13",
                )
            if still_picture_format is not None and (
                    (is_jpeg_mime(content_type) and not is_jpeg) or (is_png_mime(content_type) and not is_png)):
                errs.add_error(
                    code=f"{code}-24",
                    message=f"conflicting media types in <StillPictureFormat> and <MediaUri> for {location}",
                    multi_element_error=[still_picture_format, media_uri],
                    key="invalid format",
                )
        uri = safe_get_text(media_uri).strip()
        if not is_http_url(uri):
            errs.add_error(
                code=f"{code}-25",
                message=f"<MediaUri>={quote(uri)} is not a valid Image URL",
                key=K_INVALID_URL,
                fragment=media_uri,
            )

    content_language = attr(media_locator, "contentLanguage")
    if content_language:
        check_language(content_language, media_locator, errs, f"{code}-27", languages)
    if not media_uris:
        errs.add_error(
            code=f"{code}-26",
            message=f"<MediaUri> not specified for <MediaLocator> logo in {location}",
            fragment=media_locator,
            key="no MediaUri",
        )


def validate_promotional_still_image(related_material: Any,
                                     location: str,
                                     errs: ErrorList,
                                     code: str,
                                     languages: Optional[IANALanguages] = None) -> None:
    """Check a content guide promotional still image."""
    validate_image_related_material(
        related_material, location, [PROMOTIONAL_STILL_IMAGE_URI], errs, code, languages,
    )


def check_valid_logos(related_material: Any,
                      location: str,
                      errs: ErrorList,
                      code: str,
                      languages: Optional[IANALanguages] = None) -> None:
    """
    Check the image locations of a logo RelatedMaterial.

    Each MediaLocator holds a MediaUri with an image contentType and an
    HTTP(S) URL or inline data URI. A type outside the allowed image types is
    a warning on its MediaUri, and the remaining types must form a valid image
    set, holding at least one JPEG or PNG.

    Args:
        related_material: The <RelatedMaterial> element
        location: Description of the parent for messages
        errs: Finding collector
        code: Code prefix for findings
        languages: Language store for MediaLocator@contentLanguage
    """
    if related_material is None:
        return

    specified_media_types: List[str] = []
    for media_locator in children(related_material, "MediaLocator"):
        check_top_elements_and_cardinality(
            media_locator, [ElementSpec("MediaUri")], MEDIA_LOCATOR_ELEMENTS, False, errs, f"{code}-1",
        )
        check_attributes(media_locator, [], MEDIA_LOCATOR_ATTRIBUTES, MEDIA_LOCATOR_ATTRIBUTES, errs, f"{code}-2")

        content_language = attr(media_locator, "contentLanguage")
        if content_language:
            check_language(content_language, media_locator, errs, f"{code}-3", languages)

        for media_uri in children(media_locator, "MediaUri"):
            check_attributes(media_uri, ["contentType"], [], MEDIA_URI_ATTRIBUTES, errs, f"{code}-4")
            content_type = attr(media_uri, "contentType")
            if content_type:
                if not valid_image_mime(content_type):
                    errs.add_error(
                        type=Severity.WARNING,
                        code=f"{code}-5",
                        message=f"non-standard @contentType {quote(content_type)} specified for "
                                f"<RelatedMaterial><MediaLocator> in {location}",
                        key="non-standard MediaUri@contentType",
                        fragment=media_uri,
                    )
                specified_media_types.append(content_type)
            uri = safe_get_text(media_uri).strip()
            if not is_http_url(uri) and not is_data_uri(uri):
                errs.add_error(**invalid_url(uri, media_uri, "MediaUri", f"{code}-6"))

    allowed_types = [mime for mime in specified_media_types if valid_image_mime(mime)]
    if specified_media_types and not valid_image_set(allowed_types):
        errs.add_error(
            code=f"{code}-7",
            message="A PNG or JPG image must be specified",
            key="invalid image set",
            line=related_material.sourceline,
            description=IMAGE_SET_DESCRIPTION,
        )
