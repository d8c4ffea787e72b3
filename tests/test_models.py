"""
Tests for request validation and outcome models.

## Test Perspectives Table

| Case ID | Input / Precondition | Perspective (Equivalence / Boundary) | Expected Result | Notes |
|---------|---------------------|---------------------------------------|-----------------|-------|
| TC-UV-N-01 | http/https URL | Equivalence – normal | valid | - |
| TC-UV-A-01 | ftp, relative, empty, None | Equivalence – abnormal | invalid | - |
| TC-UV-B-01 | Malformed port | Boundary – port | invalid | - |
| TC-PV-N-01 | http/https/socks5 proxy | Equivalence – normal | valid | - |
| TC-PV-A-01 | socks4 proxy | Equivalence – abnormal | invalid | - |
| TC-TV-N-01 | "30", 1.5 | Equivalence – normal | float | - |
| TC-TV-B-01 | 0, -1, nan, inf, "abc" | Boundary – non-positive | ValidationError | - |
| TC-FR-N-01 | create() with valid input | Equivalence – normal | Frozen request | - |
| TC-FR-A-01 | create() with bad URL/proxy/engine | Equivalence – abnormal | ValidationError with message | - |
| TC-SO-N-01 | SessionOutcome.blocked(404) | Equivalence – normal | Reason "Blocked with status code 404" | - |
| TC-LP-N-01 | LaunchProfile fields | Equivalence – normal | Immutable | - |
"""

import dataclasses

import pytest

from crawlhtml.crawler.errors import ErrorCode, ValidationError
from crawlhtml.crawler.models import (
    EngineVariant,
    FetchRequest,
    LaunchProfile,
    OutcomeKind,
    ProxyConfig,
    SessionOutcome,
    is_valid_proxy_url,
    is_valid_url,
    validate_timeout,
)


@pytest.mark.unit
class TestUrlValidation:
    """Tests for URL and proxy URL validation."""

    @pytest.mark.parametrize(
        "url", ["http://example.com", "https://example.com/path?q=1", "HTTPS://EXAMPLE.COM"]
    )
    def test_valid_urls(self, url: str) -> None:
        assert is_valid_url(url) is True

    @pytest.mark.parametrize(
        "url", ["ftp://example.com", "example.com", "/relative", "", None, "http://"]
    )
    def test_invalid_urls(self, url: str | None) -> None:
        assert is_valid_url(url) is False

    def test_malformed_port(self) -> None:
        # Given: A URL whose port is not a number
        # When: is_valid_url is called
        # Then: False is returned instead of raising
        assert is_valid_url("http://example.com:notaport") is False

    @pytest.mark.parametrize(
        "proxy",
        ["http://proxy.test:8080", "https://u:p@proxy.test", "socks5://127.0.0.1:1080"],
    )
    def test_valid_proxies(self, proxy: str) -> None:
        assert is_valid_proxy_url(proxy) is True

    @pytest.mark.parametrize("proxy", ["socks4://proxy.test:1080", "proxy.test:8080", ""])
    def test_invalid_proxies(self, proxy: str) -> None:
        assert is_valid_proxy_url(proxy) is False


@pytest.mark.unit
class TestTimeoutValidation:
    """Tests for validate_timeout."""

    @pytest.mark.parametrize("value, expected", [("30", 30.0), (1.5, 1.5), (60, 60.0)])
    def test_positive_values(self, value: object, expected: float) -> None:
        assert validate_timeout(value) == expected

    @pytest.mark.parametrize("value", [0, -1, "0", "nan", "inf", "abc", None])
    def test_rejected_values(self, value: object) -> None:
        # Given: A non-positive or non-numeric timeout
        # When: validate_timeout is called
        # Then: ValidationError with the CLI message is raised
        with pytest.raises(ValidationError) as exc_info:
            validate_timeout(value)
        assert exc_info.value.message == "--timeout must be a positive number of seconds."
        assert exc_info.value.code == ErrorCode.INVALID_PARAMS


@pytest.mark.unit
class TestFetchRequest:
    """Tests for FetchRequest.create."""

    def test_create_valid(self) -> None:
        request = FetchRequest.create(
            "https://example.com",
            proxy_url="socks5://proxy.test:1080",
            timeout_seconds="45",
            headless=False,
            engine_variant="hardened",
            use_cache=False,
        )

        assert request.url == "https://example.com"
        assert request.proxy_url == "socks5://proxy.test:1080"
        assert request.timeout_seconds == 45.0
        assert request.headless is False
        assert request.engine_variant == EngineVariant.HARDENED
        assert request.use_cache is False

    def test_defaults(self) -> None:
        request = FetchRequest.create("https://example.com")
        assert request.proxy_url is None
        assert request.timeout_seconds == 60.0
        assert request.headless is True
        assert request.engine_variant == EngineVariant.STANDARD
        assert request.use_cache is True

    def test_request_is_frozen(self) -> None:
        request = FetchRequest.create("https://example.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.url = "https://other.test"  # type: ignore[misc]

    def test_invalid_url(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            FetchRequest.create("not-a-url")
        assert exc_info.value.message == "First argument must be a valid URL."
        assert exc_info.value.param_name == "url"

    def test_invalid_proxy(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            FetchRequest.create("https://example.com", proxy_url="ftp://proxy.test")
        assert exc_info.value.message == "--proxy must be a valid HTTP/HTTPS/SOCKS5 URL."
        assert exc_info.value.param_name == "proxy"

    def test_invalid_engine(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            FetchRequest.create("https://example.com", engine_variant="chromium")
        assert exc_info.value.param_name == "engine"


@pytest.mark.unit
class TestSessionOutcome:
    """Tests for SessionOutcome constructors."""

    def test_success(self) -> None:
        outcome = SessionOutcome.success("<html></html>", status_code=200)
        assert outcome.ok is True
        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.error_code is None

    def test_blocked(self) -> None:
        # Given: A 404 main response
        # When: A blocked outcome is built
        # Then: It carries the status and the standard reason
        outcome = SessionOutcome.blocked(404)
        assert outcome.ok is False
        assert outcome.kind == OutcomeKind.BLOCKED
        assert outcome.status_code == 404
        assert outcome.reason == "Blocked with status code 404"
        assert outcome.error_code == ErrorCode.RESPONSE_BLOCKED

    def test_failed_default_code(self) -> None:
        outcome = SessionOutcome.failed("boom")
        assert outcome.kind == OutcomeKind.FAILED
        assert outcome.error_code == ErrorCode.ENGINE_FAULT

    def test_to_dict_omits_html(self) -> None:
        data = SessionOutcome.success("<p>x</p>").to_dict()
        assert "html" not in data
        assert data["content_length"] == len("<p>x</p>")
        assert data["kind"] == "success"


@pytest.mark.unit
class TestLaunchProfileModel:
    """Tests for LaunchProfile immutability and launch kwargs."""

    def test_mappings_are_read_only(self) -> None:
        profile = LaunchProfile(
            engine_variant=EngineVariant.HARDENED,
            headless=True,
            profile_overrides={"executable_path": "/opt/camoufox"},
        )
        with pytest.raises(TypeError):
            profile.profile_overrides["executable_path"] = "/tmp/evil"  # type: ignore[index]

    def test_args_become_tuple(self) -> None:
        profile = LaunchProfile(
            engine_variant=EngineVariant.STANDARD,
            headless=True,
            extra_args=["--no-sandbox"],  # type: ignore[arg-type]
        )
        assert profile.extra_args == ("--no-sandbox",)

    def test_to_launch_kwargs(self) -> None:
        profile = LaunchProfile(
            engine_variant=EngineVariant.HARDENED,
            headless=False,
            proxy=ProxyConfig(server="http://proxy.test:8080", username="u", password="p"),
            extra_args=("--a", "--b=1"),
            profile_overrides={"firefox_user_prefs": {"x": 1}},
        )

        kwargs = profile.to_launch_kwargs()

        assert kwargs == {
            "firefox_user_prefs": {"x": 1},
            "headless": False,
            "args": ["--a", "--b=1"],
            "proxy": {"server": "http://proxy.test:8080", "username": "u", "password": "p"},
        }

    def test_to_dict_hides_credentials(self) -> None:
        profile = LaunchProfile(
            engine_variant=EngineVariant.STANDARD,
            headless=True,
            proxy=ProxyConfig(server="http://proxy.test:8080", username="u", password="secret"),
        )
        assert "secret" not in repr(profile.to_dict())
