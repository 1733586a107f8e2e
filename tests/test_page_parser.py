from page_parser import (
    absolute_url,
    extract_brand_signals,
    extract_links,
    extract_navigation,
    iter_navigation,
    make_soup,
    normalize_url,
    parse_page,
    parse_sitemap,
)
from settings import BLACKLIST

NAV_HTML = """
<html><body>
<header>
  <nav>
    <ul>
      <li><a href="/">Home</a></li>
      <li>
        <a href="/practice-areas">Practice Areas
          <span class="caret">v</span></a>
        <ul class="dropdown-menu">
          <li><a href="/practice-areas/personal-injury">Personal Injury</a></li>
          <li>
            <a href="/practice-areas/employment">Employment</a>
            <ul class="sub-menu">
              <li><a href="/practice-areas/employment/discrimination">Discrimination</a></li>
            </ul>
          </li>
          <li><a>No link</a></li>
        </ul>
      </li>
      <li><a href="/contact">Contact</a></li>
    </ul>
  </nav>
</header>
</body></html>
"""


def test_normalize_url():
    assert normalize_url("HTTPS://Example.com/About/?q=1#team") == "https://example.com/About"
    assert normalize_url("https://example.com") == "https://example.com/"
    assert normalize_url("https://example.com/") == "https://example.com/"
    assert normalize_url("mailto:hello@example.com") is None
    assert normalize_url("/relative/path") is None


def test_extract_links_filters_and_dedupes():
    soup = make_soup(
        '<a href="/a">A</a><a href="/a#section">A again</a><a href="b?x=1">B</a>'
        '<a href="https://other.com/c">Other</a><a href="/brochure.pdf">PDF</a>'
        '<a href="mailto:x@example.com">Mail</a>'
    )

    links = extract_links(soup, "https://example.com/dir/", "example.com", BLACKLIST)

    assert links == ["https://example.com/a", "https://example.com/dir/b"]


def test_parse_page_strips_chrome_from_body_but_keeps_links():
    html = (
        "<html><head><title> Acme | Widgets </title>"
        '<meta name="description" content=" Widgets for all. ">'
        "<script>var x = 1;</script></head>"
        '<body><nav><a href="/about">About</a></nav>'
        "<h1>Great   widgets</h1><p>We build them.</p>"
        "<footer>Copyright</footer></body></html>"
    )

    page = parse_page(html, "https://example.com/", "example.com")

    assert page.title == "Acme | Widgets"
    assert page.meta_description == "Widgets for all."
    assert page.headings == ("Great widgets",)
    assert page.body_text == "Great widgets We build them."
    assert page.links == ("https://example.com/about",)


def test_parse_page_truncates_body_text():
    page = parse_page("<body><p>" + "x" * 50 + "</p></body>", "https://example.com/", "example.com", body_text_limit=10)

    assert page.body_text == "x" * 10


def test_extract_navigation_builds_tree():
    navigation = extract_navigation(make_soup(NAV_HTML), "https://example.com/")

    assert [item.label for item in navigation] == ["Home", "Practice Areas", "Contact"]
    practice = navigation[1]
    assert practice.href == "https://example.com/practice-areas"
    assert practice.is_dropdown
    assert [child.label for child in practice.children] == ["Personal Injury", "Employment"]
    assert [child.label for child in practice.children[1].children] == ["Discrimination"]
    assert not navigation[0].is_dropdown


def test_extract_navigation_depth_cap():
    navigation = extract_navigation(make_soup(NAV_HTML), "https://example.com/", max_depth=2)

    employment = navigation[1].children[1]
    assert employment.children == []


def test_extract_navigation_flat_fallback():
    soup = make_soup('<nav><p><a href="/one">One</a> <a href="/two">Two</a></p></nav>')

    navigation = extract_navigation(soup, "https://example.com/")

    assert [(item.label, item.href) for item in navigation] == [
        ("One", "https://example.com/one"),
        ("Two", "https://example.com/two"),
    ]


def test_extract_navigation_without_nav():
    assert extract_navigation(make_soup("<div><a href='/x'>X</a></div>"), "https://example.com/") == []


def test_iter_navigation_is_pre_order():
    navigation = extract_navigation(make_soup(NAV_HTML), "https://example.com/")

    walked = [(item.label, depth) for item, depth in iter_navigation(navigation)]

    assert walked == [
        ("Home", 0),
        ("Practice Areas", 0),
        ("Personal Injury", 1),
        ("Employment", 1),
        ("Discrimination", 2),
        ("Contact", 0),
    ]


def test_extract_brand_signals():
    html = """
    <html><head>
      <title>Home | Smith Partners</title>
      <meta property="og:site_name" content="Smith Partners">
      <script type="application/ld+json">
        {"@context": "https://schema.org", "@graph": [
          {"@type": "WebSite", "name": "Smith Partners Site"},
          {"@type": "LegalService", "name": "Smith Partners"}
        ]}
      </script>
    </head><body>
      <header><a class="logo" href="/"><img src="/logo.png" alt="Smith Partners logo"></a></header>
      <footer><p>© 2015-2024 Smith Partners LLP. All rights reserved.</p></footer>
    </body></html>
    """

    info = extract_brand_signals(make_soup(html), "https://smithpartners.com/")

    assert info.domain_based_name == "Smithpartners"
    assert info.logo_text is None
    assert info.title_brand_name == "Smith Partners"
    assert info.og_site_name == "Smith Partners"
    assert info.schema_org_name == "Smith Partners"
    assert info.footer_company_name == "Smith Partners"
    assert info.recommended_name == ""


def test_extract_brand_signals_from_publisher_and_aria_label():
    html = """
    <html><head>
      <script type="application/ld+json">{"@type": "Article", "publisher": {"@type": "Organization", "name": "Widget Works"}}</script>
      <script type="application/ld+json">not json</script>
    </head><body>
      <header><a href="/" aria-label="Widget Works">W</a></header>
    </body></html>
    """

    info = extract_brand_signals(make_soup(html), "https://widgetworks.io/")

    assert info.schema_org_name == "Widget Works"
    assert info.logo_text == "Widget Works"
    assert info.footer_company_name is None


def test_parse_sitemap():
    xml = """<?xml version="1.0" encoding="UTF-8"?>
    <urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
      <url><loc>https://example.com/</loc></url>
      <url><loc>https://example.com/about/</loc></url>
      <url><loc>https://example.com/about</loc></url>
      <url><loc>https://other.com/page</loc></url>
      <url><loc>https://example.com/post-sitemap.xml</loc></url>
    </urlset>
    """

    assert parse_sitemap(xml, "example.com") == ["https://example.com/", "https://example.com/about"]


def test_blank_publisher_name_does_not_hide_later_organization():
    html = """
    <html><head><script type="application/ld+json">
      [{"@type": "Article", "publisher": {"@type": "Organization", "name": "  "}},
       {"@type": "Organization", "name": "Widget Works"}]
    </script></head><body></body></html>
    """

    assert extract_brand_signals(make_soup(html), "https://widgetworks.io/").schema_org_name == "Widget Works"


def test_malformed_hrefs_are_skipped():
    soup = make_soup('<a href="http://[broken">Bad</a><a href="/ok">Ok</a>')

    assert extract_links(soup, "https://example.com/", "example.com") == ["https://example.com/ok"]
    assert absolute_url("https://example.com/", "http://[broken") is None
    assert absolute_url("https://example.com/dir/", "page") == "https://example.com/dir/page"
