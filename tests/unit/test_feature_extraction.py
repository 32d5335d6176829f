"""Unit tests for heuristic creative feature extraction."""

from __future__ import annotations

from creative_engine.services.analysis.features import (
    classify_sentiment,
    extract_destination_features,
    extract_features,
    extract_headline_features,
    extract_image_features,
)


def test_headline_features_detect_hooks_and_keyword_buckets() -> None:
    features = extract_headline_features("Get 5 Secrets to Save $100 Today?")

    assert features.length == len("Get 5 Secrets to Save $100 Today?")
    assert features.has_numerals is True
    assert features.has_currency is True
    assert features.is_question is True
    assert features.is_imperative is True
    assert "save" in features.benefit_keywords
    assert "secret" in features.curiosity_keywords
    assert "today" in features.time_elements
    assert {"get", "save"} <= set(features.cta_words)


def test_headline_brand_mention_and_plain_statement() -> None:
    features = extract_headline_features("Nike running shoes for everyone")

    assert features.has_brand_mention is True
    assert features.has_numerals is False
    assert features.is_question is False
    assert features.time_elements == []


def test_sentiment_is_majority_vote_with_neutral_ties() -> None:
    assert classify_sentiment("The best and greatest gadget") == "positive"
    assert classify_sentiment("Amazing deals, never miss out") == "neutral"
    assert classify_sentiment("The worst mistake homeowners make") == "negative"


def test_image_features_from_face_filename() -> None:
    features = extract_image_features("https://cdn.example.com/img/face-direct-portrait.jpg")

    assert features.has_face is True
    assert features.has_eye_contact is True
    assert features.contrast == "medium"
    assert features.complexity == "moderate"


def test_image_features_overlay_and_logo_are_complex_high_contrast() -> None:
    features = extract_image_features("https://cdn.example.com/img/banner-logo.png")

    assert features.has_face is False
    assert features.has_text_overlay is True
    assert features.has_logo is True
    assert features.contrast == "high"
    assert features.complexity == "complex"


def test_image_features_default_to_low_contrast_simple() -> None:
    features = extract_image_features("https://cdn.example.com/img/plain.jpg")

    assert features.has_face is False
    assert features.contrast == "low"
    assert features.complexity == "simple"
    assert features.dominant_colors == []


def test_destination_features_for_ecommerce_https_url() -> None:
    features = extract_destination_features("https://shop.example.com/products/1")

    assert features.domain == "shop.example.com"
    assert features.is_ecommerce is True
    assert features.has_ssl is True
    assert features.has_contact_info is True


def test_malformed_destination_url_yields_unknown_features() -> None:
    for url in ("not a url", "http://[::1", ""):
        features = extract_destination_features(url)

        assert features.domain == "unknown"
        assert features.is_ecommerce is False
        assert features.has_ssl is False
        assert features.is_mobile is False


def test_extract_features_bundles_all_three_parts(make_creative) -> None:
    creative = make_creative(destination_url="::::")

    features = extract_features(creative)

    assert features.headline.length == len(creative.headline)
    assert features.image.has_face is False
    assert features.destination.domain == "unknown"
    assert features.to_dict()["destination"]["domain"] == "unknown"
