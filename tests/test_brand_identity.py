import brand_identity
from schema import Confidence, ExtractedBrandInfo


def test_domain_based_name():
    assert brand_identity.domain_based_name("www.acme-legal.com") == "Acme Legal"
    assert brand_identity.domain_based_name("smithpartners.law") == "Smithpartners"
    assert brand_identity.domain_based_name("example.co.uk") == "Example"


def test_is_domain_based():
    assert brand_identity.is_domain_based("ACMELEGAL.COM", "Acmelegal")
    assert brand_identity.is_domain_based("Acme Legal Group", "Acme")
    assert not brand_identity.is_domain_based("Smith Partners", "Acmelegal")


def test_schema_org_name_wins_with_high_confidence():
    info = ExtractedBrandInfo(
        domain_based_name="Acmelegal",
        schema_org_name="Acme Legal",
        og_site_name="Acme Legal",
    )

    brand_identity.resolve(info)

    assert info.recommended_name == "Acme Legal"
    assert info.confidence == Confidence.HIGH


def test_domain_echo_falls_back_to_domain_name():
    info = ExtractedBrandInfo(domain_based_name="Acmelegal", logo_text="ACMELEGAL.COM")

    brand_identity.resolve(info)

    assert info.recommended_name == "Acmelegal"
    assert info.confidence == Confidence.LOW


def test_agreeing_sources_give_high_confidence():
    info = ExtractedBrandInfo(
        domain_based_name="Sp",
        og_site_name="Smith & Partners",
        footer_company_name="Smith Partners",
    )

    name, confidence = brand_identity.select_best_name(info)

    assert name == "Smith & Partners"
    assert confidence == Confidence.HIGH


def test_disagreeing_sources_give_medium_confidence():
    info = ExtractedBrandInfo(
        domain_based_name="Sp",
        og_site_name="Smith Partners",
        footer_company_name="Jones Group",
    )

    name, confidence = brand_identity.select_best_name(info)

    assert name == "Smith Partners"
    assert confidence == Confidence.MEDIUM


def test_logo_text_mentioning_logo_is_ignored():
    info = ExtractedBrandInfo(domain_based_name="Acme", logo_text="Company Logo", title_brand_name="Widget Works")

    name, confidence = brand_identity.select_best_name(info)

    assert name == "Widget Works"
    assert confidence == Confidence.MEDIUM


def test_strip_legal_suffix():
    assert brand_identity.strip_legal_suffix("Acme Widgets, Inc. All rights reserved") == "Acme Widgets"
    assert brand_identity.strip_legal_suffix("Smith Partners LLP") == "Smith Partners"
    assert brand_identity.strip_legal_suffix("Lincoln Partners") == "Lincoln Partners"


def test_title_brand_fragment():
    assert brand_identity.title_brand_fragment("Personal Injury Lawyers | Smith Partners") == "Smith Partners"
    assert brand_identity.title_brand_fragment("Smith Partners - Home") == "Smith Partners"
    assert brand_identity.title_brand_fragment("Smith Partners") is None
    assert brand_identity.title_brand_fragment("") is None


def test_extract_about_page_name():
    assert brand_identity.extract_about_page_name("Smith Partners is a leading injury firm.") == "Smith Partners"
    assert brand_identity.extract_about_page_name("Welcome to Acme Widgets. We make things.") == "Acme Widgets"
    assert brand_identity.extract_about_page_name("Our history", ["About Jones & Co"]) == "Jones & Co"
    assert brand_identity.extract_about_page_name("We are a small team.", ["About Us"]) is None
