from dataclasses import replace

import pandas as pd
import plotly.express as px
import streamlit as st

import api
from crawler import SiteCrawler
from database import Session
from exceptions import BrandProfilerError
from models import Target
from settings import configure_logging, settings


def pages_frame(crawl_result):
    return pd.DataFrame([
        {
            "URL": page.url,
            "Title": page.title,
            "Page Type": page.page_type.value,
            "Headings": len(page.headings),
            "Links": len(page.outbound_links),
            "Text Size": len(page.body_text),
        } for page in crawl_result.pages
    ], columns=["URL", "Title", "Page Type", "Headings", "Links", "Text Size"])


def page_type_chart(df):
    fig = px.histogram(df, x="Page Type", title="Page Type Distribution")
    fig.update_xaxes(type='category')
    return fig


def add_target_form():
    with st.sidebar.form("add_target"):
        st.subheader("Add target")
        name = st.text_input("Name")
        website_url = st.text_input("Website URL", "https://example.com")
        tracked_brand = st.text_input("Brand name (optional)")
        if st.form_submit_button("Add") and name and website_url:
            with Session() as session:
                session.add(Target(name=name, website_url=website_url, tracked_brand=tracked_brand or None))
                session.commit()
            st.rerun()


def show_overview(target):
    overview = api.get_overview(target.id)
    col1, col2, col3 = st.columns(3)

    if col1.button("Generate"):
        try:
            response = api.generate(target.id)
            st.info(response['message'])
        except BrandProfilerError as e:
            st.error(str(e))
    if col2.button("Regenerate (force)"):
        try:
            response = api.generate(target.id, force=True)
            st.info(response['message'])
        except BrandProfilerError as e:
            st.error(str(e))
    if col3.button("Refresh"):
        st.rerun()

    if overview is None:
        st.write("No brand overview yet. Trigger generation to create one.")
        return

    st.metric("Status", overview['status'])
    st.caption(f"Last updated {overview['updated_at']}")
    if overview['status'] == 'RUNNING':
        st.write("Generation in progress... press Refresh to check again.")
    if overview['error']:
        st.error(overview['error'])
    if overview['warnings']:
        st.warning(overview['warnings'])
    if overview['summary']:
        st.markdown(overview['summary'])
    if overview['structured_profile']:
        with st.expander("Structured profile"):
            st.json(overview['structured_profile'])


def crawl_preview(target):
    st.subheader("Crawl Preview")
    max_pages = st.slider("Maximum pages:", 5, 200, 25)
    if not st.button("Crawl now"):
        return

    crawler = SiteCrawler(config=replace(settings.crawl, max_pages=max_pages))
    with st.spinner('Crawling in progress... Please wait.'):
        try:
            result = crawler.crawl(target.website_url)
        except BrandProfilerError as e:
            st.error(str(e))
            return

    brand = result.brand_info
    st.write(f"**Brand name:** {brand.recommended_name} ({brand.confidence.value} confidence)")
    st.write(f"**Pages crawled:** {result.pages_crawled} - sitemap {'found' if result.sitemap_found else 'not found'}")

    df = pages_frame(result)
    st.dataframe(df)
    if not df.empty:
        st.plotly_chart(page_type_chart(df))


def main():
    st.set_page_config(layout="wide")
    configure_logging()
    st.title("Brand Profiler")

    add_target_form()
    with Session() as session:
        targets = session.query(Target).order_by(Target.name).all()
    if not targets:
        st.write("Add a target in the sidebar to get started.")
        return

    target = st.selectbox("Target", targets, format_func=lambda t: f"{t.name} ({t.website_url or 'no website'})")
    st.header("Brand Overview")
    show_overview(target)
    if target.website_url:
        crawl_preview(target)


if __name__ == "__main__":
    main()
