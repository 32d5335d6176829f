"""Heuristic feature extraction from creative headline, thumbnail and landing URL."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from creative_engine.services.analysis.types import (
    Complexity,
    Contrast,
    CreativeFeatures,
    CreativeRecord,
    DestinationFeatures,
    HeadlineFeatures,
    ImageFeatures,
    Sentiment,
)

BRAND_KEYWORDS = ("amazon", "ebay", "walmart", "target", "costco", "nike", "apple", "samsung")
POSITIVE_WORDS = (
    "amazing",
    "incredible",
    "best",
    "great",
    "fantastic",
    "awesome",
    "perfect",
    "love",
    "stunning",
    "exclusive",
)
NEGATIVE_WORDS = (
    "worst",
    "terrible",
    "awful",
    "bad",
    "hate",
    "never",
    "impossible",
    "problem",
    "struggle",
)
BENEFIT_WORDS = ("save", "discount", "deal", "offer", "free", "bonus", "gift", "reward", "exclusive", "limited")
CURIOSITY_WORDS = ("secret", "hidden", "revealed", "truth", "insider", "shocking", "surprising", "unexpected")
TIME_PATTERNS = ("today", "now", "instant", "immediately", "quick", "fast", "24/7", "overnight", "same day")
STEP_PATTERNS = ("step", "easy", "simple", "minute", "second", "hour")
CTA_WORDS = (
    "click",
    "get",
    "buy",
    "shop",
    "order",
    "try",
    "discover",
    "find",
    "learn",
    "see",
    "save",
    "win",
    "join",
    "start",
)
SUPERLATIVES = ("best", "top", "ultimate", "premier", "leading", "most", "highest", "greatest", "#1")
ECOMMERCE_INDICATORS = ("shop", "store", "cart", "buy", "product", "order", "checkout")
COLOR_NAMES = ("red", "blue", "green", "yellow", "white", "black")

_CURRENCY_RE = re.compile(r"[$£€¥₹]")
_QUESTION_WORD_RE = re.compile(r"\b(what|how|why|when|where|which|who)\b", re.IGNORECASE)
_IMPERATIVE_RE = re.compile(
    r"\b(get|buy|shop|order|try|discover|find|learn|see|save|win|join|start)\b",
    re.IGNORECASE,
)

_FACE_RE = re.compile(r"face|person|portrait|selfie|headshot")
_EYE_CONTACT_RE = re.compile(r"direct|contact|looking|gaze")
_CLOSE_UP_RE = re.compile(r"close|zoom|detail|macro")
_TEXT_OVERLAY_RE = re.compile(r"text|title|caption|overlay|banner")
_LOGO_RE = re.compile(r"logo|brand|company")
_STOREFRONT_RE = re.compile(r"store|shop|retail|building|storefront")


def matching_keywords(text: str, keywords: tuple[str, ...]) -> list[str]:
    """Return the keywords contained in `text` (case-insensitive substring match)."""
    lowered = text.lower()
    return [keyword for keyword in keywords if keyword in lowered]


def classify_sentiment(
    text: str,
    positive: tuple[str, ...] = POSITIVE_WORDS,
    negative: tuple[str, ...] = NEGATIVE_WORDS,
) -> Sentiment:
    """Majority vote of positive vs negative keyword hits; ties are neutral."""
    positive_hits = len(matching_keywords(text, positive))
    negative_hits = len(matching_keywords(text, negative))
    if positive_hits > negative_hits:
        return "positive"
    if negative_hits > positive_hits:
        return "negative"
    return "neutral"


def extract_headline_features(headline: str) -> HeadlineFeatures:
    lowered = headline.lower()
    return HeadlineFeatures(
        length=len(headline),
        has_numerals=any(char.isdigit() for char in headline),
        has_currency=bool(_CURRENCY_RE.search(headline)),
        has_brand_mention=any(brand in lowered for brand in BRAND_KEYWORDS),
        is_question="?" in headline or bool(_QUESTION_WORD_RE.search(headline)),
        is_imperative=bool(_IMPERATIVE_RE.search(headline)),
        sentiment=classify_sentiment(headline),
        benefit_keywords=matching_keywords(headline, BENEFIT_WORDS),
        curiosity_keywords=matching_keywords(headline, CURIOSITY_WORDS),
        time_elements=matching_keywords(headline, TIME_PATTERNS),
        step_elements=matching_keywords(headline, STEP_PATTERNS),
        cta_words=matching_keywords(headline, CTA_WORDS),
        superlatives=matching_keywords(headline, SUPERLATIVES),
    )


def extract_image_features(thumbnail_url: str) -> ImageFeatures:
    """Guess image traits from naming conventions in the thumbnail URL.

    Low accuracy by construction: a file called ``portrait.jpg`` counts as
    having a face whatever it shows. Kept until a vision backend is wired in.
    """
    url = thumbnail_url.lower()
    filename = url.rsplit("/", 1)[-1]

    has_face = bool(_FACE_RE.search(filename)) or "face" in url
    has_eye_contact = has_face and (bool(_EYE_CONTACT_RE.search(filename)) or "eye" in url)
    has_text_overlay = bool(_TEXT_OVERLAY_RE.search(filename))
    has_logo = bool(_LOGO_RE.search(filename)) or "logo" in url

    contrast: Contrast = "high" if has_text_overlay else "medium" if has_face else "low"
    complexity: Complexity
    if has_text_overlay and has_logo:
        complexity = "complex"
    elif has_face or has_logo:
        complexity = "moderate"
    else:
        complexity = "simple"

    return ImageFeatures(
        has_face=has_face,
        has_eye_contact=has_eye_contact,
        is_close_up=bool(_CLOSE_UP_RE.search(filename)) or "close" in url,
        has_text_overlay=has_text_overlay,
        has_logo=has_logo,
        is_storefront=bool(_STOREFRONT_RE.search(filename)),
        dominant_colors=[color for color in COLOR_NAMES if color in url],
        contrast=contrast,
        complexity=complexity,
    )


def extract_destination_features(destination_url: str) -> DestinationFeatures:
    try:
        parsed = urlparse(destination_url)
    except ValueError:
        return DestinationFeatures.unknown()
    if not parsed.scheme or not parsed.hostname:
        return DestinationFeatures.unknown()

    domain = parsed.hostname
    path = parsed.path.lower()
    is_ecommerce = any(
        indicator in domain or indicator in path for indicator in ECOMMERCE_INDICATORS
    )
    # Load time and mobile support are not probed yet.
    return DestinationFeatures(
        domain=domain,
        is_ecommerce=is_ecommerce,
        has_ssl=parsed.scheme == "https",
        load_time_ms=0.0,
        is_mobile=True,
        has_contact_info=is_ecommerce,
    )


def extract_features(creative: CreativeRecord) -> CreativeFeatures:
    """Build the full feature bundle for a creative."""
    return CreativeFeatures(
        headline=extract_headline_features(creative.headline),
        image=extract_image_features(creative.thumbnail_url),
        destination=extract_destination_features(creative.destination_url),
    )
