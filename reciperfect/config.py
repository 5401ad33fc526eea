"""Configuration model and loaders for Reciperfect.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide loader entry points for environment, `config.env`, and YAML sources.
- Validate settings once at startup; validation errors are the only fatal errors.

Key types:
- `ReciperfectConfig`: normalized runtime settings for the watch service.
- `ConfigLoader`: static construction helpers for `ReciperfectConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values
import yaml

from .parsing import (
    normalize_optional_string,
    parse_keyword_list,
    parse_positive_number,
)


DEFAULT_FILTER_KEYWORDS: tuple[str, ...] = (
    ":",
    ".com",
    "takeout",
    "General",
    "Recipe",
    "U of M",
    "U Of M",
    "Ingredients",
    "Recipes On",
    "Steps",
    "Item Locations",
    "Ingredient",
    "Qty",
    "Save",
)
_DEFAULT_TRANSLATION_MODEL = "gpt-4.1-mini"
_DEFAULT_TTS_MODEL = "gpt-4o-mini-tts"
_SUPPORTED_EXTRACTOR_IDS = frozenset({"aws"})
_SUPPORTED_PROVIDER_IDS = frozenset({"aws", "openai"})


@dataclass(slots=True)
class ReciperfectConfig:
    """Runtime configuration for the translation watch service.

    Attributes:
        upload_dir: Watched directory; assembled audio is written next to inputs.
        publish_url: Endpoint receiving the JSON manifest for each file.
        file_url_prefix: Public URL prefix for processed source files.
        audio_url_prefix: Public URL prefix for assembled audio, defaults to `file_url_prefix`.
        aws_region: AWS region for Textract, Translate, and Polly clients.
        source_language: Translation source language code (`auto` detects).
        target_language: Translation target language code.
        tts_voice: Speech synthesis voice identifier.
        tts_language: Speech synthesis language code.
        audio_format: Speech synthesis output format.
        filter_keywords: Case-sensitive substrings that drop a line.
        min_segment_length: Lines with this many characters or fewer are dropped.
        provider_extractor: Extraction provider identifier.
        provider_translator: Translation provider identifier.
        provider_tts: Speech synthesis provider identifier.
        model_translate: OpenAI translation model identifier.
        model_tts: OpenAI speech model identifier.
        api_key: Optional OpenAI API key (never logged or published).
        poll_interval_seconds: Directory polling interval.
        publish_timeout_seconds: Optional publish request timeout.
        extra: Additional metadata for future extensions.
    """

    upload_dir: Path
    publish_url: str
    file_url_prefix: str
    audio_url_prefix: str | None = None
    aws_region: str = "us-west-2"
    source_language: str = "auto"
    target_language: str = "es"
    tts_voice: str = "Lupe"
    tts_language: str = "es-US"
    audio_format: str = "mp3"
    filter_keywords: tuple[str, ...] = DEFAULT_FILTER_KEYWORDS
    min_segment_length: int = 2
    provider_extractor: str = "aws"
    provider_translator: str = "aws"
    provider_tts: str = "aws"
    model_translate: str = _DEFAULT_TRANSLATION_MODEL
    model_tts: str = _DEFAULT_TTS_MODEL
    api_key: str | None = None
    poll_interval_seconds: float = 1.0
    publish_timeout_seconds: float | None = None
    extra: dict[str, str] = field(default_factory=dict)

    @property
    def resolved_audio_url_prefix(self) -> str:
        """Return the audio URL prefix, falling back to the file URL prefix."""

        return self.audio_url_prefix if self.audio_url_prefix is not None else self.file_url_prefix

    def validate(self, *, require_upload_dir: bool = False) -> None:
        """Validate configuration values before the service starts."""

        self._require_non_empty(self.publish_url, "publish_url")
        self._require_non_empty(self.file_url_prefix, "file_url_prefix")
        self._require_non_empty(self.aws_region, "aws_region")
        self._require_non_empty(self.source_language, "source_language")
        self._require_non_empty(self.target_language, "target_language")
        self._require_non_empty(self.tts_voice, "tts_voice")
        self._require_non_empty(self.tts_language, "tts_language")
        self._require_non_empty(self.audio_format, "audio_format")
        self._validate_provider_id(
            self.provider_extractor, "provider_extractor", _SUPPORTED_EXTRACTOR_IDS
        )
        self._validate_provider_id(
            self.provider_translator, "provider_translator", _SUPPORTED_PROVIDER_IDS
        )
        self._validate_provider_id(self.provider_tts, "provider_tts", _SUPPORTED_PROVIDER_IDS)
        if "openai" in {self.provider_translator, self.provider_tts}:
            self._require_non_empty(self.model_translate, "model_translate")
            self._require_non_empty(self.model_tts, "model_tts")
        if isinstance(self.min_segment_length, bool) or self.min_segment_length < 0:
            raise ValueError("`min_segment_length` must be a non-negative integer.")
        if self.poll_interval_seconds <= 0:
            raise ValueError("`poll_interval_seconds` must be a positive number.")
        if self.publish_timeout_seconds is not None and self.publish_timeout_seconds <= 0:
            raise ValueError("`publish_timeout_seconds` must be a positive number.")
        if require_upload_dir and not self.upload_dir.is_dir():
            raise ValueError(f"Upload directory `{self.upload_dir}` does not exist.")

    def as_summary(self) -> dict[str, str]:
        """Return non-secret settings safe to print or log."""

        return {
            "upload_dir": str(self.upload_dir),
            "publish_url": self.publish_url,
            "file_url_prefix": self.file_url_prefix,
            "audio_url_prefix": self.resolved_audio_url_prefix,
            "aws_region": self.aws_region,
            "source_language": self.source_language,
            "target_language": self.target_language,
            "tts_voice": self.tts_voice,
            "tts_language": self.tts_language,
            "audio_format": self.audio_format,
            "filter_keywords": ",".join(self.filter_keywords),
            "min_segment_length": str(self.min_segment_length),
            "provider_extractor": self.provider_extractor,
            "provider_translator": self.provider_translator,
            "provider_tts": self.provider_tts,
            "api_key": "set" if self.api_key else "not set",
        }

    @staticmethod
    def _validate_provider_id(
        provider_id: str, field_name: str, supported_ids: frozenset[str]
    ) -> None:
        """Validate provider identifiers against currently supported providers."""

        if provider_id not in supported_ids:
            supported = ", ".join(sorted(supported_ids))
            raise ValueError(
                f"Unsupported `{field_name}` value `{provider_id}`; supported: {supported}."
            )

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


_ENV_KEYS: dict[str, str] = {
    "upload_dir": "RECIPERFECT_UPLOAD_DIR",
    "publish_url": "RECIPERFECT_PUBLISH_URL",
    "file_url_prefix": "RECIPERFECT_FILE_URL_PREFIX",
    "audio_url_prefix": "RECIPERFECT_AUDIO_URL_PREFIX",
    "aws_region": "RECIPERFECT_AWS_REGION",
    "source_language": "RECIPERFECT_SOURCE_LANGUAGE",
    "target_language": "RECIPERFECT_TARGET_LANGUAGE",
    "tts_voice": "RECIPERFECT_TTS_VOICE",
    "tts_language": "RECIPERFECT_TTS_LANGUAGE",
    "audio_format": "RECIPERFECT_AUDIO_FORMAT",
    "filter_keywords": "RECIPERFECT_FILTER_KEYWORDS",
    "min_segment_length": "RECIPERFECT_MIN_SEGMENT_LENGTH",
    "provider_extractor": "RECIPERFECT_PROVIDER_EXTRACTOR",
    "provider_translator": "RECIPERFECT_PROVIDER_TRANSLATOR",
    "provider_tts": "RECIPERFECT_PROVIDER_TTS",
    "model_translate": "RECIPERFECT_MODEL_TRANSLATE",
    "model_tts": "RECIPERFECT_MODEL_TTS",
    "api_key": "OPENAI_API_KEY",
    "poll_interval_seconds": "RECIPERFECT_POLL_INTERVAL_SECONDS",
    "publish_timeout_seconds": "RECIPERFECT_PUBLISH_TIMEOUT_SECONDS",
}
_FALLBACK_ENV_KEYS: dict[str, str] = {
    "upload_dir": "UPLOAD_DIR",
    "publish_url": "ADD_URL",
    "file_url_prefix": "FS_URL",
    "aws_region": "AWS_REGION",
    "source_language": "TRANSLATE_SOURCE_LANG_CODE",
    "target_language": "TRANSLATE_TARGET_LANG_CODE",
    "tts_voice": "POLLY_VOICE_ID",
    "filter_keywords": "TEXTRACT_FILTER_KEYWORDS",
}


class ConfigLoader:
    """Factory methods for creating `ReciperfectConfig` from external sources."""

    _REQUIRED_KEYS = frozenset({"upload_dir", "publish_url", "file_url_prefix"})
    _SUPPORTED_YAML_KEYS = frozenset(_ENV_KEYS) | {"extra"}

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> ReciperfectConfig:
        """Create a validated config from environment variables.

        `RECIPERFECT_*` names win; the plain `config.env` names such as
        `UPLOAD_DIR`, `ADD_URL`, and `FS_URL` are read when the prefixed name
        is unset.
        """

        env_map: Mapping[str, str] = os.environ if env is None else env

        payload: dict[str, Any] = {}
        for field_name, env_key in _ENV_KEYS.items():
            value = normalize_optional_string(env_map.get(env_key))
            if value is None and field_name in _FALLBACK_ENV_KEYS:
                value = normalize_optional_string(env_map.get(_FALLBACK_ENV_KEYS[field_name]))
            if value is not None:
                payload[field_name] = value

        missing = sorted(
            _ENV_KEYS[key] for key in ConfigLoader._REQUIRED_KEYS if key not in payload
        )
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"Environment variable(s) required: {key_list}.")

        return ConfigLoader._build_config_from_mapping(payload, source_label="environment")

    @staticmethod
    def from_env_file(path: Path, env: Mapping[str, str] | None = None) -> ReciperfectConfig:
        """Create a validated config from a `config.env` file.

        Values already present in the process environment take precedence over
        values declared in the file.
        """

        if not path.is_file():
            raise FileNotFoundError(path)
        file_values = {
            key: value for key, value in dotenv_values(path).items() if value is not None
        }
        env_map: Mapping[str, str] = os.environ if env is None else env
        return ConfigLoader.from_env({**file_values, **env_map})

    @staticmethod
    def from_yaml(path: Path) -> ReciperfectConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        source_label = f"YAML `{path}`"
        ConfigLoader._validate_yaml_keys(payload, source_label)
        return ConfigLoader._build_config_from_mapping(payload, source_label=source_label)

    @staticmethod
    def _validate_yaml_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required YAML keys."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        missing = sorted(key for key in ConfigLoader._REQUIRED_KEYS if key not in payload)
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"{source_label} is missing required key(s): {key_list}.")

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> ReciperfectConfig:
        """Build a validated config from a normalized mapping payload."""

        defaults = ReciperfectConfig(upload_dir=Path("."), publish_url="", file_url_prefix="")

        def _string(key: str, default: str | None) -> str | None:
            if key not in payload:
                return default
            value = normalize_optional_string(payload[key])
            return default if value is None else value

        def _number(key: str, default: Any, *, integer: bool = False) -> Any:
            if key not in payload or normalize_optional_string(payload[key]) is None:
                return default
            try:
                return parse_positive_number(payload[key], key, integer=integer)
            except ValueError as exc:
                raise ValueError(f"{source_label} field {exc}") from exc

        upload_dir = _string("upload_dir", None)
        publish_url = _string("publish_url", None)
        file_url_prefix = _string("file_url_prefix", None)
        for key, value in (
            ("upload_dir", upload_dir),
            ("publish_url", publish_url),
            ("file_url_prefix", file_url_prefix),
        ):
            if value is None:
                raise ValueError(f"{source_label} requires non-empty `{key}`.")

        if "filter_keywords" in payload:
            try:
                filter_keywords = parse_keyword_list(payload["filter_keywords"])
            except ValueError as exc:
                raise ValueError(f"{source_label} field `filter_keywords`: {exc}") from exc
        else:
            filter_keywords = defaults.filter_keywords

        min_segment_length = defaults.min_segment_length
        if "min_segment_length" in payload:
            min_segment_length = ConfigLoader._non_negative_int(
                payload["min_segment_length"], "min_segment_length", source_label
            )

        config = ReciperfectConfig(
            upload_dir=Path(str(upload_dir)),
            publish_url=str(publish_url),
            file_url_prefix=str(file_url_prefix),
            audio_url_prefix=_string("audio_url_prefix", None),
            aws_region=_string("aws_region", defaults.aws_region),
            source_language=_string("source_language", defaults.source_language),
            target_language=_string("target_language", defaults.target_language),
            tts_voice=_string("tts_voice", defaults.tts_voice),
            tts_language=_string("tts_language", defaults.tts_language),
            audio_format=_string("audio_format", defaults.audio_format),
            filter_keywords=filter_keywords,
            min_segment_length=min_segment_length,
            provider_extractor=_string("provider_extractor", defaults.provider_extractor),
            provider_translator=_string("provider_translator", defaults.provider_translator),
            provider_tts=_string("provider_tts", defaults.provider_tts),
            model_translate=_string("model_translate", defaults.model_translate),
            model_tts=_string("model_tts", defaults.model_tts),
            api_key=_string("api_key", None),
            poll_interval_seconds=_number(
                "poll_interval_seconds", defaults.poll_interval_seconds
            ),
            publish_timeout_seconds=_number("publish_timeout_seconds", None),
            extra=ConfigLoader._optional_string_map(payload, "extra", source_label),
        )
        config.validate()
        return config

    @staticmethod
    def _non_negative_int(value: Any, key: str, source_label: str) -> int:
        """Parse a non-negative integer field value."""

        if isinstance(value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a non-negative integer.")
        if isinstance(value, int):
            parsed = value
        else:
            normalized = normalize_optional_string(value)
            try:
                parsed = int(normalized) if normalized is not None else -1
            except ValueError as exc:
                raise ValueError(
                    f"{source_label} field `{key}` must be a non-negative integer."
                ) from exc
        if parsed < 0:
            raise ValueError(f"{source_label} field `{key}` must be a non-negative integer.")
        return parsed

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        if key not in payload:
            return {}

        raw = payload[key]
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized
