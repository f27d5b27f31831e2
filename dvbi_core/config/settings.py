"""
Configuration Settings
======================

Configuration dataclasses for the DVB-I validators: where reference data
and XML schemas are found, and general validation behaviour.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, List, Dict, Any
import json
import logging

import yaml

logger = logging.getLogger(__name__)

DVB_METADATA = "https://dvb.org/metadata/"
REPO_RAW = "https://raw.githubusercontent.com/paulhiggs/dvb-i-tools/main/"
IANA_SUBTAG_REGISTRY_URL = "https://www.iana.org/assignments/language-subtag-registry/language-subtag-registry"

# vocabulary names used by ReferenceDataConfig and ReferenceStores
LANGUAGES = "languages"
COUNTRIES = "countries"
GENRES = "genres"
VIDEO_CODECS = "video_codecs"
AUDIO_CODECS = "audio_codecs"
PICTURE_FORMATS = "picture_formats"
COLORIMETRY = "colorimetry"
SERVICE_TYPES = "service_types"
RECORDING_INFO = "recording_info"
AUDIO_PRESENTATION = "audio_presentation"
AUDIO_CONFORMANCE = "audio_conformance"
VIDEO_CONFORMANCE = "video_conformance"
ACCESSIBILITY_PURPOSES = "accessibility_purposes"
AUDIO_PURPOSES = "audio_purposes"
SUBTITLE_CARRIAGES = "subtitle_carriages"
SUBTITLE_CODINGS = "subtitle_codings"
SUBTITLE_PURPOSES = "subtitle_purposes"
RATINGS = "ratings"
CREDITS_ROLES = "credits_roles"
CA_SYSTEMS = "ca_systems"
DRM_SYSTEMS = "drm_systems"


@dataclass
class VocabularySource:
    """Local files and URLs for one vocabulary."""

    files: List[str] = field(default_factory=list)
    urls: List[str] = field(default_factory=list)
    leaf_nodes_only: bool = False


def _cs(paths: List[str], urls: List[str], leaf_nodes_only: bool = False) -> VocabularySource:
    return VocabularySource(files=paths, urls=urls, leaf_nodes_only=leaf_nodes_only)


def default_vocabularies(data_dir: str = "res") -> Dict[str, VocabularySource]:
    """Default locations of every vocabulary, relative to data_dir."""
    dvb_cs = f"{data_dir}/dvb/cs"
    dvbi = f"{data_dir}/dvbi"
    tva = f"{data_dir}/tva"
    mpeg7 = f"{data_dir}/mpeg7"

    return {
        LANGUAGES: _cs([f"{data_dir}/iana/language-subtag-registry"], [IANA_SUBTAG_REGISTRY_URL]),
        COUNTRIES: _cs([f"{data_dir}/iso/iso3166-countries.json"],
                       [f"{REPO_RAW}res/iso/iso3166-countries.json"]),
        GENRES: _cs(
            [f"{tva}/ContentCS.xml", f"{tva}/FormatCS.xml", f"{dvbi}/DVBContentSubjectCS-2019.xml"],
            [f"{REPO_RAW}res/tva/ContentCS.xml", f"{REPO_RAW}res/tva/FormatCS.xml",
             f"{DVB_METADATA}cs/2019/DVBContentSubjectCS-2019.xml"],
        ),
        VIDEO_CODECS: _cs(
            [f"{dvb_cs}/2007/VideoCodecCS.xml", f"{dvb_cs}/2021/VideoCodecCS.xml",
             f"{dvb_cs}/2022/VideoCodecCS.xml", f"{mpeg7}/VisualCodingFormatCS.xml"],
            [f"{DVB_METADATA}cs/2007/VideoCodecCS.xml", f"{DVB_METADATA}cs/2021/VideoCodecCS.xml",
             f"{DVB_METADATA}cs/2022/VideoCodecCS.xml", f"{REPO_RAW}res/mpeg7/VisualCodingFormatCS.xml"],
            leaf_nodes_only=True,
        ),
        AUDIO_CODECS: _cs(
            [f"{dvb_cs}/2007/AudioCodecCS.xml", f"{dvb_cs}/2020/AudioCodecCS.xml",
             f"{mpeg7}/AudioCodingFormatCS.xml"],
            [f"{DVB_METADATA}cs/2007/AudioCodecCS.xml", f"{DVB_METADATA}cs/2020/AudioCodecCS.xml",
             f"{REPO_RAW}res/mpeg7/AudioCodingFormatCS.xml"],
            leaf_nodes_only=True,
        ),
        PICTURE_FORMATS: _cs([f"{tva}/PictureFormatCS.xml"], [f"{REPO_RAW}res/tva/PictureFormatCS.xml"]),
        COLORIMETRY: _cs([f"{dvb_cs}/2020/ColorimetryCS.xml"], [f"{DVB_METADATA}cs/2020/ColorimetryCS.xml"],
                         leaf_nodes_only=True),
        SERVICE_TYPES: _cs([f"{dvbi}/DVBServiceTypeCS-2019.xml"],
                           [f"{DVB_METADATA}cs/2022/DVBServiceTypeCS-2019.xml"]),
        RECORDING_INFO: _cs([f"{dvbi}/DVBRecordingInfoCS-2019.xml"],
                            [f"{REPO_RAW}res/dvbi/DVBRecordingInfoCS-2019.xml"]),
        AUDIO_PRESENTATION: _cs([f"{mpeg7}/AudioPresentationCS.xml"],
                                [f"{REPO_RAW}res/mpeg7/AudioPresentationCS.xml"]),
        AUDIO_CONFORMANCE: _cs([f"{dvb_cs}/2017/AudioConformancePointsCS.xml"],
                               [f"{DVB_METADATA}cs/2017/AudioConformancePointsCS.xml"], leaf_nodes_only=True),
        VIDEO_CONFORMANCE: _cs(
            [f"{dvb_cs}/2017/VideoConformancePointsCS.xml", f"{dvb_cs}/2021/VideoConformancePointsCS.xml",
             f"{dvb_cs}/2022/VideoConformancePointsCS.xml"],
            [f"{DVB_METADATA}cs/2017/VideoConformancePointsCS.xml",
             f"{DVB_METADATA}cs/2021/VideoConformancePointsCS.xml",
             f"{DVB_METADATA}cs/2022/VideoConformancePointsCS.xml"],
            leaf_nodes_only=True,
        ),
        ACCESSIBILITY_PURPOSES: _cs([f"{tva}/AccessibilityPurposeCS.xml"],
                                    [f"{REPO_RAW}res/tva/AccessibilityPurposeCS.xml"], leaf_nodes_only=True),
        AUDIO_PURPOSES: _cs([f"{tva}/AudioPurposeCS.xml"], [f"{REPO_RAW}res/tva/AudioPurposeCS.xml"],
                            leaf_nodes_only=True),
        SUBTITLE_CARRIAGES: _cs([f"{tva}/SubtitleCarriageCS.xml"], [f"{REPO_RAW}res/tva/SubtitleCarriageCS.xml"]),
        SUBTITLE_CODINGS: _cs([f"{tva}/SubtitleCodingFormatCS.xml"],
                              [f"{REPO_RAW}res/tva/SubtitleCodingFormatCS.xml"]),
        SUBTITLE_PURPOSES: _cs([f"{tva}/SubtitlePurposeCS.xml"], [f"{REPO_RAW}res/tva/SubtitlePurposeCS.xml"]),
        RATINGS: _cs(
            [f"{tva}/ContentAlertCS.xml", f"{dvb_cs}/2007/ParentalGuidanceCS.xml"],
            [f"{REPO_RAW}res/tva/ContentAlertCS.xml", f"{DVB_METADATA}cs/2007/ParentalGuidanceCS.xml"],
        ),
        CREDITS_ROLES: _cs(
            [f"{dvbi}/CreditsItem@role-values.txt", f"{dvbi}/CreditsItem@role-values-v2.txt"],
            [f"{REPO_RAW}res/dvbi/CreditsItem@role-values.txt", f"{REPO_RAW}res/dvbi/CreditsItem@role-values-v2.txt"],
        ),
        CA_SYSTEMS: _cs([f"{data_dir}/dvb/ca-system-ids.json"], []),
        DRM_SYSTEMS: _cs([f"{data_dir}/dashif/content-protection-ids.json"], []),
    }


@dataclass
class ReferenceDataConfig:
    """Reference data sources."""

    data_dir: str = "res"
    use_urls: bool = False
    timeout: float = 30.0
    purge: bool = True
    vocabularies: Dict[str, VocabularySource] = field(default_factory=default_vocabularies)

    def source(self, name: str) -> VocabularySource:
        """The configured source for a vocabulary, empty if none."""
        return self.vocabularies.get(name, VocabularySource())

    def to_dict(self) -> dict:
        return {
            'data_dir': self.data_dir,
            'use_urls': self.use_urls,
            'timeout': self.timeout,
            'purge': self.purge,
            'vocabularies': {name: asdict(source) for name, source in self.vocabularies.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ReferenceDataConfig':
        config = cls(data_dir=data.get('data_dir', "res"))
        config.vocabularies = default_vocabularies(config.data_dir)
        for key in ('use_urls', 'timeout', 'purge'):
            if key in data:
                setattr(config, key, data[key])
        for name, source in (data.get('vocabularies') or {}).items():
            config.vocabularies[name] = VocabularySource(**source)
        return config


@dataclass
class SchemaConfig:
    """XML schema locations."""

    directory: str = ""  # Empty means XSD validation is skipped
    files: Dict[str, str] = field(default_factory=dict)  # namespace -> file name override
    strict: bool = False


@dataclass
class ValidatorConfig:
    """
    Complete validator configuration.

    Contains all configuration for a validation deployment:
    - Reference data sources
    - XML schema locations
    - Logging and reporting options

    Example:
        config = ValidatorConfig()
        config.reference.use_urls = True
        config.schemas.directory = "schemas"
        save_config(config, Path("config.yaml"))
    """

    reference: ReferenceDataConfig = field(default_factory=ReferenceDataConfig)
    schemas: SchemaConfig = field(default_factory=SchemaConfig)

    # General settings
    log_level: str = "INFO"
    report_schema_version: bool = True

    # Custom extensions
    custom: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'reference': self.reference.to_dict(),
            'schemas': asdict(self.schemas),
            'log_level': self.log_level,
            'report_schema_version': self.report_schema_version,
            'custom': self.custom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ValidatorConfig':
        """Create from dictionary."""
        config = cls()

        if 'reference' in data:
            config.reference = ReferenceDataConfig.from_dict(data['reference'])
        if 'schemas' in data:
            config.schemas = SchemaConfig(**data['schemas'])

        if 'log_level' in data:
            config.log_level = data['log_level']
        if 'report_schema_version' in data:
            config.report_schema_version = data['report_schema_version']
        if 'custom' in data:
            config.custom = data['custom']

        return config


def load_config(config_path: Path) -> ValidatorConfig:
    """
    Load configuration from file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config_path: Path to config file

    Returns:
        ValidatorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    logger.info(f"Loaded configuration from {config_path}")
    return ValidatorConfig.from_dict(data or {})


def save_config(config: ValidatorConfig, config_path: Path) -> None:
    """
    Save configuration to file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config: ValidatorConfig to save
        config_path: Path to save config file

    Raises:
        ValueError: If file format is not supported
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()
    data = config.to_dict()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        elif suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    logger.info(f"Saved configuration to {config_path}")


def get_default_config() -> ValidatorConfig:
    """Get default configuration."""
    return ValidatorConfig()


def configure_logging(config: Optional[ValidatorConfig] = None) -> None:
    """Apply the configured log level to the root logger."""
    level_name = (config.log_level if config else "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
