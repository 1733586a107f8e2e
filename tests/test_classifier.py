import pytest

from classifier import PageClassifier
from schema import PageType


@pytest.fixture
def classifier():
    return PageClassifier()


@pytest.mark.parametrize("url, expected", [
    ("https://example.com/", PageType.HOMEPAGE),
    ("https://example.com/about-us", PageType.ABOUT),
    ("https://example.com/practice-areas/personal-injury", PageType.PRACTICE_AREA),
    ("https://example.com/wrongful-death", PageType.PRACTICE_AREA),
    ("https://example.com/products/widget", PageType.PRODUCT),
    ("https://example.com/services/tax", PageType.SERVICE),
    ("https://example.com/pricing", PageType.PRICING),
    ("https://example.com/features", PageType.FEATURES),
    ("https://example.com/blog", PageType.BLOG),
    ("https://example.com/blog/", PageType.BLOG),
    ("https://example.com/blog/my-post", PageType.BLOG_POST),
    ("https://example.com/news/2024/launch", PageType.BLOG_POST),
    ("https://example.com/case-studies/acme", PageType.CASE_STUDY),
    ("https://example.com/docs/getting-started", PageType.DOCUMENTATION),
    ("https://example.com/faq", PageType.FAQ),
    ("https://example.com/contact", PageType.CONTACT),
    ("https://example.com/careers", PageType.CAREERS),
    ("https://example.com/privacy-policy", PageType.LEGAL),
])
def test_classify_by_path(classifier, url, expected):
    assert classifier.classify(url) == expected


def test_path_rules_win_over_content(classifier):
    page_type = classifier.classify("https://example.com/pricing", "Frequently asked questions", ["FAQ"])

    assert page_type == PageType.PRICING


def test_classify_by_headings(classifier):
    page_type = classifier.classify("https://example.com/questions", "Help", ["Frequently Asked Questions"])

    assert page_type == PageType.FAQ


def test_classify_by_title(classifier):
    assert classifier.classify("https://example.com/who", "Who We Are") == PageType.ABOUT
    assert classifier.classify("https://example.com/team-lead", "Meet our attorney") == PageType.SERVICE


def test_unmatched_page_is_other(classifier):
    assert classifier.classify("https://example.com/random", "Hello", ["Welcome"]) == PageType.OTHER
