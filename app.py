"""
LeadIntel - Streamlit Console
Paste a website URL (or many) to scrape it, analyze the company, score the
lead and draft an outreach email. Stored leads can be filtered, sorted and
deleted per workspace.
"""

import atexit
import logging
import os

import streamlit as st

from leadintel.config import PipelineConfig
from leadintel.errors import AcquisitionError, LeadNotFoundError, PersistenceError
from leadintel.models import LeadFilter, LeadRecord
from leadintel.pipeline import LeadPipeline, build_pipeline

CONFIG = PipelineConfig.from_env()

logging.basicConfig(
    level=getattr(logging, CONFIG.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

SORT_LABELS = {
    "Newest first": "newest",
    "Score (high to low)": "score-high",
    "Score (low to high)": "score-low",
    "Company name": "name",
}
PAGE_SIZE = 10

st.set_page_config(
    page_title="LeadIntel",
    page_icon="L",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_pipeline() -> LeadPipeline:
    """One pipeline per process; closed when the process exits."""
    pipeline = build_pipeline(CONFIG)
    atexit.register(pipeline.close)
    return pipeline


def init_session_state():
    """Initialize session state variables."""
    defaults = {
        "owner_id": os.getenv("OWNER_ID", "default"),
        "last_record": None,
        "bulk_report": None,
        "page": 1,
    }
    for key, val in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = val


def render_sidebar():
    with st.sidebar:
        st.markdown("### LeadIntel")
        st.text_input(
            "Workspace",
            key="owner_id",
            help="Leads are stored per workspace and never shown to other workspaces.",
        )
        st.markdown("---")
        st.caption(f"Model: {CONFIG.llm_model}")
        st.caption("Scraper: " + ("Firecrawl" if CONFIG.firecrawl_api_key else "direct fetch"))
        hooks = [url for url in (CONFIG.lead_webhook_url, CONFIG.high_score_webhook_url) if url]
        st.caption(f"Webhooks configured: {len(hooks)}")


def render_lead(record: LeadRecord, key_prefix: str):
    col1, col2, col3 = st.columns(3)
    col1.metric("Lead Score", f"{record.lead_score}/10")
    col2.metric("Industry", record.industry)
    col3.metric("Company Size", record.company_size)

    if record.summary:
        st.markdown(f"**Summary:** {record.summary}")
    st.markdown(f"**Location:** {record.location}")
    st.markdown(f"**Target Audience:** {record.target_audience}")
    st.markdown(f"**Value Proposition:** {record.value_proposition}")

    if record.services:
        st.markdown("**Services:** " + ", ".join(record.services))
    if record.pain_points:
        st.markdown("**Pain Points:**")
        for point in record.pain_points:
            st.markdown(f"- {point}")
    if record.tech_stack:
        st.markdown("**Tech Stack:** " + ", ".join(record.tech_stack))

    contacts = record.contacts
    st.markdown(
        f"**Contacts:** {', '.join(sorted(contacts.emails)) or 'no emails'} | "
        f"{', '.join(sorted(contacts.phones)) or 'no phones'}"
    )
    for link in sorted(contacts.social_links):
        st.markdown(f"- {link}")

    st.text_input("Subject", value=record.generated_email.subject, key=f"{key_prefix}_subject")
    st.text_area("Body", value=record.generated_email.body, height=280, key=f"{key_prefix}_body")


def render_single_mode():
    st.subheader("Analyze a Website")
    col1, col2 = st.columns([3, 1])
    with col1:
        url = st.text_input("Website URL", placeholder="https://example.com")
    with col2:
        st.markdown("<br>", unsafe_allow_html=True)
        run_clicked = st.button("Analyze", type="primary", use_container_width=True)

    if run_clicked and url:
        pipeline = get_pipeline()
        status = st.empty()
        try:
            with st.spinner("Analyzing..."):
                record = pipeline.analyze(url.strip(), st.session_state["owner_id"], progress_callback=status.text)
        except (AcquisitionError, PersistenceError) as e:
            st.error(str(e))
            return
        st.session_state["last_record"] = record
        status.text("Analysis complete")

    record = st.session_state.get("last_record")
    if record:
        st.markdown(f"### {record.company_name}")
        render_lead(record, key_prefix="single")


def render_bulk_mode():
    st.subheader("Bulk Analysis")
    urls_text = st.text_area(
        "Enter URLs (one per line)",
        placeholder="https://company1.com\nhttps://company2.com",
        height=150,
    )

    if st.button("Analyze All", type="primary"):
        urls = [u.strip() for u in urls_text.strip().splitlines() if u.strip()]
        if not urls:
            st.warning("Please enter at least one URL.")
            return
        pipeline = get_pipeline()
        with st.spinner(f"Analyzing {len(urls)} websites..."):
            st.session_state["bulk_report"] = pipeline.analyze_bulk(urls, st.session_state["owner_id"])

    report = st.session_state.get("bulk_report")
    if report:
        if report.succeeded:
            st.success(f"Successfully analyzed {report.succeeded} of {len(report.items)} websites")
        if report.failed:
            st.error(f"{report.failed} website(s) failed")
        for item in report.items:
            if item.ok:
                st.markdown(f"[OK] {item.record.company_name} - {item.url} - score {item.record.lead_score}")
            else:
                st.markdown(f"[FAILED] {item.url} - {item.error}")


def render_leads():
    st.subheader("My Leads")
    owner_id = st.session_state["owner_id"]
    store = get_pipeline().store

    try:
        stats = store.stats(owner_id)
    except PersistenceError as e:
        st.error(str(e))
        return
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Leads", stats.total_leads)
    col2.metric("Average Score", stats.avg_score)
    col3.metric("High-Score Leads", stats.high_score_leads)

    col1, col2, col3, col4 = st.columns(4)
    search = col1.text_input("Search")
    industry = col2.text_input("Industry")
    min_score, max_score = col3.slider("Score range", 0.0, 10.0, (0.0, 10.0), step=0.5)
    sort_label = col4.selectbox("Sort by", list(SORT_LABELS))

    filters = LeadFilter(
        search=search or None,
        industry=industry or None,
        min_score=min_score,
        max_score=max_score,
    )
    total = store.count(owner_id, filters)
    pages = max(1, -(-total // PAGE_SIZE))
    page = st.number_input("Page", min_value=1, max_value=pages, value=min(st.session_state["page"], pages))
    st.session_state["page"] = page

    for record in store.find(owner_id, filters, sort=SORT_LABELS[sort_label], page=page, limit=PAGE_SIZE):
        with st.expander(f"{record.company_name} - {record.lead_score}/10 - {record.url}"):
            render_lead(record, key_prefix=f"lead_{record.id}")
            if st.button("Delete lead", key=f"delete_{record.id}"):
                try:
                    store.delete(record.id, owner_id)
                except LeadNotFoundError:
                    st.warning("Lead was already deleted.")
                st.rerun()


def main():
    init_session_state()
    render_sidebar()

    if not CONFIG.anthropic_api_key:
        st.error("ANTHROPIC_API_KEY is not set. Add it to your environment or .env file.")
        return

    tab1, tab2, tab3 = st.tabs(["Analyze", "Bulk", "Leads"])
    with tab1:
        render_single_mode()
    with tab2:
        render_bulk_mode()
    with tab3:
        render_leads()


if __name__ == "__main__":
    main()
