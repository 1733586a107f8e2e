from dataclasses import replace

from app import page_type_chart, pages_frame
from schema import CrawledPage, PageType, empty_crawl_result


def test_pages_frame_and_chart():
    pages = (
        CrawledPage(url="https://acme.com/", title="Home", page_type=PageType.HOMEPAGE, body_text="Hello",
                    headings=("Welcome",), outbound_links=("https://acme.com/about",)),
        CrawledPage(url="https://acme.com/about", title="About", page_type=PageType.ABOUT, body_text="About us"),
    )
    result = replace(empty_crawl_result("https://acme.com"), pages=pages, pages_crawled=2)

    df = pages_frame(result)

    assert list(df["Page Type"]) == ["homepage", "about"]
    assert list(df["Links"]) == [1, 0]
    assert df.loc[0, "Text Size"] == 5

    fig = page_type_chart(df)
    assert fig.layout.title.text == "Page Type Distribution"


def test_pages_frame_empty():
    df = pages_frame(empty_crawl_result("https://acme.com"))

    assert df.empty
    assert "URL" in df.columns
