"""
Streamlit web interface for PRD mockup generation.

Upload a requirements document (Word, PDF or image) and/or describe the
product, then preview and download the generated HTML mockups.
"""

from datetime import datetime

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from prd_mockups.io.document_loader import (
    ALLOWED_EXTENSIONS,
    EMPTY_REQUEST_MESSAGE,
)
from prd_mockups.models import UploadedDocument
from prd_mockups.pipeline.generation import DEFAULT_MODELS, GeneratorSettings
from prd_mockups.service import RequestService
from prd_mockups.utils.progress import run_with_messages

# Load environment variables
load_dotenv()

# Page configuration
st.set_page_config(
    page_title="PRD Mockup Generator",
    page_icon="🎨",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        margin-bottom: 1rem;
    }
    .sub-header {
        font-size: 1.2rem;
        color: #666;
        margin-bottom: 2rem;
    }
</style>
""", unsafe_allow_html=True)

LOADING_MESSAGES = [
    "Parsing the document...",
    "Understanding requirements and interaction flows...",
    "Generating proposal A: classic table layout...",
    "Generating proposal B: card grid design...",
    "Generating proposal C: dark professional edition...",
    "Final polish, almost there...",
]
MESSAGE_INTERVAL_SECONDS = 2.5

# Initialize session state
if "generation_response" not in st.session_state:
    st.session_state.generation_response = None


def main():
    """Main application entry point."""

    st.markdown('<div class="main-header">🎨 PRD Mockup Generator</div>', unsafe_allow_html=True)
    st.markdown(
        '<div class="sub-header">Turn product requirements into interactive HTML mockups</div>',
        unsafe_allow_html=True
    )

    defaults = GeneratorSettings.from_env()

    with st.sidebar:
        st.header("⚙️ Configuration")

        st.subheader("LLM Provider")
        providers = list(DEFAULT_MODELS)
        provider = st.selectbox(
            "Provider",
            providers,
            index=providers.index(defaults.provider) if defaults.provider in providers else 0,
            help="Select the LLM provider for generation"
        )

        model_name = st.text_input(
            "Model",
            value=defaults.model_name or DEFAULT_MODELS[provider]
        )

        temperature = st.slider(
            "Temperature",
            min_value=0.0,
            max_value=1.0,
            value=defaults.temperature,
            step=0.1,
            help="Lower = more deterministic, Higher = more creative"
        )

        max_tokens = st.number_input(
            "Max Tokens",
            min_value=1024,
            max_value=64000,
            value=defaults.max_tokens,
            step=1024
        )

    settings = defaults.model_copy(update={
        "provider": provider,
        "model_name": model_name or None,
        "temperature": temperature,
        "max_tokens": int(max_tokens),
    })

    upload_and_generate(settings)
    results()


def upload_and_generate(settings: GeneratorSettings):
    """Upload a document and generate mockups."""

    st.header("📤 Requirements")

    uploaded_file = st.file_uploader(
        "Requirements document",
        type=ALLOWED_EXTENSIONS,
        help="Word (.docx), PDF or image"
    )

    context = st.text_area(
        "Description (optional)",
        placeholder="Describe the page, e.g. a dark SaaS dashboard for managing subscriptions",
        height=120
    )

    if not st.button("🚀 Generate Mockups", type="primary"):
        return

    document = None
    if uploaded_file is not None:
        document = UploadedDocument(
            filename=uploaded_file.name,
            content=uploaded_file.getvalue(),
            content_type=uploaded_file.type
        )

    if document is None and not context.strip():
        st.error(f"❌ {EMPTY_REQUEST_MESSAGE}")
        return

    run_id = f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    response = run_with_wait_messages(
        RequestService(settings=settings).handle, document, context, run_id=run_id
    )

    st.session_state.generation_response = response
    if response.success:
        st.success(f"✅ {len(response.designs)} design(s) generated!")


def run_with_wait_messages(func, *args, **kwargs):
    """Run func while the spinner's status line rotates through LOADING_MESSAGES."""
    status = st.empty()

    with st.spinner("🔄 Generating mockups..."):
        try:
            return run_with_messages(
                func,
                LOADING_MESSAGES,
                lambda message: status.info(f"⏳ {message}"),
                MESSAGE_INTERVAL_SECONDS,
                *args,
                **kwargs
            )
        finally:
            status.empty()


def results():
    """Preview and download generated designs."""

    response = st.session_state.generation_response
    if response is None:
        return

    if not response.success:
        st.error(f"❌ {response.error}")
        return

    st.divider()
    st.header("🖥️ Designs")

    meta_col1, meta_col2, meta_col3 = st.columns(3)
    with meta_col1:
        st.metric("Model", response.model_name or "-")
    with meta_col2:
        if response.prompt_tokens:
            st.metric("Prompt Tokens", f"{response.prompt_tokens:,}")
    with meta_col3:
        if response.completion_tokens:
            st.metric("Completion Tokens", f"{response.completion_tokens:,}")

    tabs = st.tabs([f"{design.id}. {design.title}" for design in response.designs])
    for index, (tab, design) in enumerate(zip(tabs, response.designs)):
        with tab:
            st.download_button(
                label="⬇️ Download HTML",
                data=design.html,
                file_name=design.filename(),
                mime="text/html",
                key=f"download_design_{index}"
            )

            components.html(design.html, height=720, scrolling=True)

            with st.expander("View HTML Source Code", expanded=False):
                st.code(design.html, language="html", line_numbers=True)


if __name__ == "__main__":
    main()
