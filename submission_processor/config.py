"""
Configuration for the submission processor.
Profiles describe the handler variants; individual settings can be overridden
from environment variables.
"""

import json
import os
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

URI_SCHEMES = ("gs", "https")
RECORD_FORMATS = ("low_level", "simple")


@dataclass(frozen=True)
class ProcessorProfile:
    """Settings that distinguish one handler variant from another."""

    source_url_field: str = "releaseUrl"
    uri_scheme: str = "gs"
    record_format: str = "low_level"
    record_status: bool = True
    record_failures: bool = False


PROFILES: Dict[str, ProcessorProfile] = {
    "release": ProcessorProfile(),
    "submission": ProcessorProfile(
        source_url_field="submissionUrl",
        uri_scheme="https",
        record_format="simple",
        record_failures=True,
    ),
    "notify_only": ProcessorProfile(
        source_url_field="submissionUrl",
        uri_scheme="https",
        record_format="simple",
        record_status=False,
    ),
}


@dataclass(frozen=True)
class SmtpSettings:
    """Connection and sender settings for the SMTP relay."""

    host: str = "smtp.mailgun.org"
    port: int = 587
    username: str = ""
    password: str = field(default="", repr=False)
    from_address: str = ""
    use_tls: bool = True
    use_ssl: bool = False


@dataclass(frozen=True)
class ProcessorConfig:
    bucket_name: str
    table_name: Optional[str]
    profile: ProcessorProfile
    smtp: SmtpSettings
    recipient_map: Dict[str, str] = field(default_factory=dict)
    recipient_domain: Optional[str] = None
    default_recipient: Optional[str] = None
    fetch_timeout: Optional[float] = None
    aws_region: Optional[str] = None

    def validate(self) -> None:
        """Raise ValueError if the configuration cannot drive the pipeline."""
        if not self.bucket_name:
            raise ValueError("GCS_BUCKET_NAME environment variable not set")
        if self.profile.record_status and not self.table_name:
            raise ValueError("DYNAMODB_TABLE_NAME environment variable not set")
        if self.profile.uri_scheme not in URI_SCHEMES:
            raise ValueError(f"Unsupported storage URI scheme: {self.profile.uri_scheme}")
        if self.profile.record_format not in RECORD_FORMATS:
            raise ValueError(f"Unsupported record format: {self.profile.record_format}")


def get_profile(name: str) -> ProcessorProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown submission profile '{name}', expected one of: {', '.join(PROFILES)}"
        ) from None


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_recipient_map() -> Dict[str, str]:
    raw = os.environ.get("EMAIL_RECIPIENT_MAP", "").strip()
    if not raw:
        return {}
    try:
        mapping = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"EMAIL_RECIPIENT_MAP is not valid JSON: {e}") from e
    if not isinstance(mapping, dict):
        raise ValueError("EMAIL_RECIPIENT_MAP must be a JSON object")
    return {str(k): str(v) for k, v in mapping.items()}


def get_smtp_settings_from_env() -> SmtpSettings:
    """Get SMTP relay settings from environment variables.

    Returns:
        SmtpSettings for the notifier
    """
    username = os.environ.get("EMAIL_USERNAME", "")
    return SmtpSettings(
        host=os.environ.get("SMTP_HOST", "smtp.mailgun.org"),
        port=int(os.environ.get("SMTP_PORT", "587")),
        username=username,
        password=os.environ.get("EMAIL_PASSWORD", ""),
        from_address=os.environ.get("EMAIL_FROM_ADDRESS") or username,
        use_tls=_env_bool("SMTP_USE_TLS", True),
        use_ssl=_env_bool("SMTP_USE_SSL", False),
    )


def get_config_from_env(profile_name: Optional[str] = None) -> ProcessorConfig:
    """Build the processor configuration from environment variables.

    Args:
        profile_name: Profile preset to start from (defaults to SUBMISSION_PROFILE)

    Returns:
        Validated ProcessorConfig
    """
    profile = get_profile(profile_name or os.environ.get("SUBMISSION_PROFILE", "release"))

    # Per-setting overrides on top of the preset
    profile = replace(
        profile,
        source_url_field=os.environ.get("SOURCE_URL_FIELD") or profile.source_url_field,
        uri_scheme=os.environ.get("STORAGE_URI_SCHEME") or profile.uri_scheme,
        record_format=os.environ.get("RECORD_FORMAT") or profile.record_format,
        record_status=_env_bool("RECORD_STATUS", profile.record_status),
        record_failures=_env_bool("RECORD_FAILURES", profile.record_failures),
    )

    timeout = os.environ.get("FETCH_TIMEOUT_SECONDS")

    config = ProcessorConfig(
        bucket_name=os.environ.get("GCS_BUCKET_NAME", ""),
        table_name=os.environ.get("DYNAMODB_TABLE_NAME") or None,
        profile=profile,
        smtp=get_smtp_settings_from_env(),
        recipient_map=_env_recipient_map(),
        recipient_domain=os.environ.get("EMAIL_RECIPIENT_DOMAIN") or None,
        default_recipient=os.environ.get("EMAIL_DEFAULT_RECIPIENT") or None,
        fetch_timeout=float(timeout) if timeout else None,
        aws_region=os.environ.get("AWS_REGION") or None,
    )
    config.validate()
    return config
