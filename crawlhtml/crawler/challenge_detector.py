"""Interstitial challenge page detection."""

# Active Cloudflare challenge, not just a mention of Cloudflare
CLOUDFLARE_INDICATORS = (
    "cf-browser-verification",
    "_cf_chl_opt",
    "checking your browser before accessing",
    "please wait while we verify your browser",
    "ray id:</strong>",
)

TURNSTILE_INDICATORS = (
    'class="cf-turnstile"',
    "challenges.cloudflare.com/turnstile",
)

# Widgets must be present, references in article text do not count
CAPTCHA_INDICATORS = (
    'src="https://hcaptcha.com',
    'src="https://www.hcaptcha.com',
    "data-sitekey=",
    'class="h-captcha"',
    'class="g-recaptcha"',
    'id="captcha-container"',
    "grecaptcha.execute",
    "hcaptcha.execute",
)

# Challenge types that clear on their own once the browser passes the checks
AUTO_RESOLVING_TYPES = frozenset({"cloudflare", "js_challenge", "turnstile"})


def _contains_any(content_lower: str, indicators: tuple[str, ...]) -> bool:
    return any(ind in content_lower for ind in indicators)


def is_challenge_page(content: str, headers: dict[str, str] | None = None) -> bool:
    """Check if page is a challenge/captcha interstitial.

    Args:
        content: Page HTML.
        headers: Response headers (lower-cased keys), if available.

    Returns:
        True if a challenge is detected.
    """
    content_lower = content.lower()

    if _contains_any(content_lower, CLOUDFLARE_INDICATORS):
        return True

    # "Just a moment..." is the Cloudflare interstitial title
    if "just a moment" in content_lower and (
        "cloudflare" in content_lower or "_cf_" in content_lower
    ):
        return True

    if _contains_any(content_lower, CAPTCHA_INDICATORS):
        return True

    if _contains_any(content_lower, TURNSTILE_INDICATORS):
        return True

    headers = headers or {}
    if "cloudflare" in headers.get("server", "").lower() and headers.get("cf-ray"):
        # Challenge pages are tiny with minimal markup
        if len(content) < 5000 and "<body" in content_lower and content_lower.count("<div") < 10:
            return True

    return False


def detect_challenge_type(content: str) -> str:
    """Classify a page already known to be a challenge.

    Returns:
        One of turnstile, hcaptcha, recaptcha, captcha, cloudflare, js_challenge.
    """
    content_lower = content.lower()

    if _contains_any(content_lower, TURNSTILE_INDICATORS):
        return "turnstile"

    if 'src="https://hcaptcha.com' in content_lower or 'class="h-captcha"' in content_lower:
        return "hcaptcha"

    if 'class="g-recaptcha"' in content_lower or "grecaptcha.execute" in content_lower:
        return "recaptcha"

    if "data-sitekey=" in content_lower:
        if "hcaptcha" in content_lower:
            return "hcaptcha"
        if "recaptcha" in content_lower:
            return "recaptcha"
        return "captcha"

    if _contains_any(content_lower, CLOUDFLARE_INDICATORS[:3]):
        return "cloudflare"

    if "just a moment" in content_lower and "cloudflare" in content_lower:
        return "js_challenge"

    return "cloudflare"


def is_auto_resolving(challenge_type: str) -> bool:
    """Whether waiting can clear this challenge without human input."""
    return challenge_type in AUTO_RESOLVING_TYPES
