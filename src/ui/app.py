import logging

import streamlit as st
from dotenv import load_dotenv

from src.core.config import get_ui_settings, load_config
from src.ui.view import (
    GENERIC_ERROR,
    ViewOutcome,
    banner_text,
    can_submit,
    complete_submission,
    format_percent,
    is_review,
    pretty_label,
    start_submission,
    submit_description,
    threshold_for,
    top_suggestions,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
load_dotenv()

settings = get_ui_settings(load_config("config.yaml"))

st.set_page_config(page_title="Auto-Ticket Classifier", page_icon="🎫", layout="centered")

if "description" not in st.session_state:
    st.session_state.description = ""
if "loading" not in st.session_state:
    st.session_state.loading = False
if "outcome" not in st.session_state:
    st.session_state.outcome = ViewOutcome()

st.title("Auto-Ticket Classifier")
st.caption("Describe your issue and let the AI suggest the best department to handle it.")

st.warning(
    "🚧 **Experimental Model.** This system is still under development. "
    "Please verify the results manually as some classifications may be inaccurate."
)

description = st.text_area(
    "Description of the Issue",
    key="description",
    height=120,
    placeholder="Ex: Cannot install VPN client, says I don't have permission...",
)

st.button(
    "Analyzing..." if st.session_state.loading else "Classify Ticket",
    disabled=not can_submit(description, st.session_state.loading),
    on_click=start_submission,
    args=(st.session_state,),
    width="stretch",
    type="primary",
)

if st.session_state.loading:
    # This run rendered the button disabled; make the call, then redraw enabled
    latest = ViewOutcome(error=GENERIC_ERROR)
    try:
        with st.spinner("Analyzing..."):
            latest = submit_description(settings["api_url"], description, settings["timeout_seconds"])
    finally:
        complete_submission(st.session_state, latest)
    st.rerun()

outcome: ViewOutcome = st.session_state.outcome

if outcome.error:
    st.error(outcome.error)

if outcome.result:
    result = outcome.result
    with st.container(border=True):
        st.subheader("Analysis Result")
        st.caption(f"ID: {result.get('ticketId', '')}")

        if is_review(result):
            st.warning(banner_text(result))
        else:
            st.success(banner_text(result))

        st.markdown("**Suggested Category**")
        st.markdown(f"### {pretty_label(result.get('category'))}")
        if is_review(result):
            st.caption(f"Top guess: **{pretty_label(result.get('category_label'))}**")

        confidence = float(result.get("confidence", 0.0))
        st.markdown(f"**Confidence** `{format_percent(confidence)}`")
        st.progress(min(max(confidence, 0.0), 1.0))
        st.caption(f"Threshold used: `{format_percent(threshold_for(result, settings['default_threshold']))}`")

        rows = top_suggestions(result)
        if rows:
            st.markdown("**Top suggestions**")
            for label, percent in rows:
                left, right = st.columns([4, 1])
                left.write(label)
                right.write(f"`{percent}`")
