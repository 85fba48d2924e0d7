import pytest

from submission_processor.config import PROFILES, get_config_from_env, get_smtp_settings_from_env

ENV_VARS = [
    "SUBMISSION_PROFILE", "GCS_BUCKET_NAME", "DYNAMODB_TABLE_NAME", "SOURCE_URL_FIELD",
    "STORAGE_URI_SCHEME", "RECORD_FORMAT", "RECORD_STATUS", "RECORD_FAILURES",
    "FETCH_TIMEOUT_SECONDS", "SMTP_HOST", "SMTP_PORT", "SMTP_USE_TLS", "SMTP_USE_SSL",
    "EMAIL_USERNAME", "EMAIL_PASSWORD", "EMAIL_FROM_ADDRESS", "EMAIL_RECIPIENT_MAP",
    "EMAIL_RECIPIENT_DOMAIN", "EMAIL_DEFAULT_RECIPIENT", "AWS_REGION",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GCS_BUCKET_NAME", "submissions")
    monkeypatch.setenv("DYNAMODB_TABLE_NAME", "submission-status")


def test_release_profile_is_default():
    config = get_config_from_env()

    assert config.profile == PROFILES["release"]
    assert config.profile.source_url_field == "releaseUrl"
    assert config.profile.uri_scheme == "gs"
    assert config.profile.record_format == "low_level"
    assert config.profile.record_failures is False


def test_submission_profile(monkeypatch):
    monkeypatch.setenv("SUBMISSION_PROFILE", "submission")

    profile = get_config_from_env().profile

    assert profile.source_url_field == "submissionUrl"
    assert profile.uri_scheme == "https"
    assert profile.record_format == "simple"
    assert profile.record_failures is True


def test_notify_only_profile_needs_no_table(monkeypatch):
    monkeypatch.delenv("DYNAMODB_TABLE_NAME")

    config = get_config_from_env("notify_only")

    assert config.profile.record_status is False
    assert config.table_name is None


def test_individual_overrides(monkeypatch):
    monkeypatch.setenv("RECORD_FAILURES", "true")
    monkeypatch.setenv("STORAGE_URI_SCHEME", "https")
    monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "12.5")

    config = get_config_from_env()

    assert config.profile.record_failures is True
    assert config.profile.uri_scheme == "https"
    assert config.profile.record_format == "low_level"
    assert config.fetch_timeout == 12.5


def test_missing_bucket(monkeypatch):
    monkeypatch.delenv("GCS_BUCKET_NAME")

    with pytest.raises(ValueError, match="GCS_BUCKET_NAME"):
        get_config_from_env()


def test_missing_table_when_recording(monkeypatch):
    monkeypatch.delenv("DYNAMODB_TABLE_NAME")

    with pytest.raises(ValueError, match="DYNAMODB_TABLE_NAME"):
        get_config_from_env("release")


@pytest.mark.parametrize("name,value", [("SUBMISSION_PROFILE", "legacy"), ("STORAGE_URI_SCHEME", "s3"),
                                        ("RECORD_FORMAT", "wide"), ("EMAIL_RECIPIENT_MAP", "{bad")])
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        get_config_from_env()


def test_recipient_settings(monkeypatch):
    monkeypatch.setenv("EMAIL_RECIPIENT_MAP", '{"u1": "ada@example.com"}')
    monkeypatch.setenv("EMAIL_RECIPIENT_DOMAIN", "school.edu")
    monkeypatch.setenv("EMAIL_DEFAULT_RECIPIENT", "grader@example.com")

    config = get_config_from_env()

    assert config.recipient_map == {"u1": "ada@example.com"}
    assert config.recipient_domain == "school.edu"
    assert config.default_recipient == "grader@example.com"


def test_smtp_settings(monkeypatch):
    monkeypatch.setenv("EMAIL_USERNAME", "postmaster@example.com")
    monkeypatch.setenv("EMAIL_PASSWORD", "secret")
    monkeypatch.setenv("SMTP_PORT", "465")
    monkeypatch.setenv("SMTP_USE_SSL", "yes")

    smtp = get_smtp_settings_from_env()

    assert smtp.host == "smtp.mailgun.org"
    assert smtp.port == 465
    assert smtp.use_ssl is True
    assert smtp.from_address == "postmaster@example.com"
    assert smtp.password == "secret"
