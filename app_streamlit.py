#!/usr/bin/env python3
import streamlit as st
import json
import os
from typing import Optional

from sisma.assistant import NormativeAssistant, EXAMPLE_QUESTION
from sisma.checklist import ChecklistEvaluator, EXAMPLE_CHECKLIST
from sisma.config import SismaConfig, configure_logging
from sisma.errors import AssistantError, ChecklistValidationError, ConfigurationError, ImageAnalysisError
from sisma.export import report_to_json, report_to_markdown, SEVERITY_ICON
from sisma.image_analysis import MockImageAnalyzer, annotate_image
from sisma.llm_analysis import build_report_generator, build_responder
from sisma.models import ChecklistEvaluation, ImageAnalysisResult


st.set_page_config(
    page_title="SISMA Inspection Assistant",
    layout="wide",
    initial_sidebar_state="expanded"
)


def initialize_session_state():
    """Initialize session state variables"""
    if 'assistant_answer' not in st.session_state:
        st.session_state.assistant_answer = None
    if 'question' not in st.session_state:
        st.session_state.question = ""
    if 'image_result' not in st.session_state:
        st.session_state.image_result = None
    if 'evaluation' not in st.session_state:
        st.session_state.evaluation = None
    if 'checklist_json' not in st.session_state:
        st.session_state.checklist_json = json.dumps(EXAMPLE_CHECKLIST, indent=2, ensure_ascii=False)


def load_config(provider_choice: str) -> Optional[SismaConfig]:
    try:
        config = SismaConfig.from_env()
    except ConfigurationError as e:
        st.error(str(e))
        return None
    config = config.model_copy(update={"provider": provider_choice.lower()})
    configure_logging(config.log_level)
    return config


def use_example_question():
    st.session_state.question = EXAMPLE_QUESTION


def display_assistant_tab(config: SismaConfig):
    st.header("Normative Assistant")
    st.markdown("Ask about standards, procedures and safety regulations. "
                "The assistant answers with a source citation and a practical recommendation.")

    col1, col2 = st.columns([5, 1])
    with col1:
        question = st.text_area("Your question", key="question", placeholder=EXAMPLE_QUESTION, height=100)
    with col2:
        st.write("")
        st.button("Example", on_click=use_example_question)

    if st.button("Query Regulation", type="primary"):
        assistant = NormativeAssistant(build_responder(config))
        with st.spinner("Querying..."):
            try:
                st.session_state.assistant_answer = assistant.ask(question)
            except AssistantError as e:
                st.session_state.assistant_answer = None
                st.error(str(e))

    if st.session_state.assistant_answer:
        st.markdown("---")
        st.subheader("Assistant Answer")
        st.code(st.session_state.assistant_answer, language=None)


def display_image_tab(config: SismaConfig):
    st.header("Visual Non-Conformity Analysis (PoC)")
    st.markdown("Upload an inspection photo to detect potential safety problems. "
                "This proof of concept uses simulated detections.")

    uploaded_file = st.file_uploader(
        "Upload image",
        type=['png', 'jpg', 'jpeg'],
        help="PNG or JPG up to 10MB"
    )

    if uploaded_file is None:
        st.session_state.image_result = None
        return

    st.image(uploaded_file.getvalue(), caption="Preview", width=480)

    if st.button("Analyze Image", type="primary"):
        analyzer = MockImageAnalyzer(delay=config.image_analysis_delay)
        with st.spinner("Analyzing..."):
            try:
                st.session_state.image_result = analyzer.analyze(uploaded_file.getvalue())
            except ImageAnalysisError as e:
                st.session_state.image_result = None
                st.error(str(e))

    result: Optional[ImageAnalysisResult] = st.session_state.image_result
    if result is None:
        return

    st.markdown("---")
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Analyzed Image")
        st.image(annotate_image(uploaded_file.getvalue(), result.detections), width="stretch")
    with col2:
        st.subheader("Analysis Result")
        if result.flagged:
            st.warning(f"**Suggested action:** {result.suggested_action}")
        st.json(result.to_dict())


def display_evaluation(evaluation: ChecklistEvaluation):
    report = evaluation.report

    st.subheader("Compliance")
    col1, col2 = st.columns([4, 1])
    with col1:
        st.progress(min(100, int(round(evaluation.compliance))))
    with col2:
        st.metric("Compliance", f"{evaluation.compliance:.2f}%")

    if evaluation.fallback:
        st.warning("The AI service was unavailable. This is a locally generated fallback report.")

    st.subheader("Non-Conformities")
    if not report.non_conformities:
        st.success("No non-conformities found.")
    for nc in report.non_conformities:
        with st.expander(f"{SEVERITY_ICON[nc.severity]} {nc.severity.value}: {nc.question_id}"):
            st.write(f"**Suggested action:** {nc.suggested_action}")

    st.subheader("Generated Report")
    st.write(report.summary)
    with st.expander("Full JSON Report"):
        st.json(report.to_dict())

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="Download JSON Report",
            data=report_to_json(report),
            file_name=f"{report.report_id}.json",
            mime="application/json"
        )
    with col2:
        st.download_button(
            label="Download Summary (Markdown)",
            data=report_to_markdown(report, evaluation.compliance),
            file_name=f"{report.report_id}.md",
            mime="text/markdown"
        )

    st.markdown(f"[Download PDF report (simulated link) →]({report.pdf_url})")


def display_checklist_tab(config: SismaConfig):
    st.header("Checklist Processor and Report Generator")
    st.markdown("Paste the inspection checklist JSON to validate it, compute compliance "
                "and generate the final report with summary and suggested actions.")

    checklist_json = st.text_area("Checklist JSON", key="checklist_json", height=360)

    if st.button("Process and Generate Report", type="primary"):
        evaluator = ChecklistEvaluator(build_report_generator(config))
        with st.spinner("Processing..."):
            try:
                st.session_state.evaluation = evaluator.evaluate(checklist_json)
            except ChecklistValidationError as e:
                st.session_state.evaluation = None
                st.error(str(e))
                if e.errors:
                    st.code("\n".join(e.errors), language=None)

    if st.session_state.evaluation is not None:
        st.markdown("---")
        display_evaluation(st.session_state.evaluation)


def main():
    """Main Streamlit application"""

    initialize_session_state()

    with st.sidebar:
        st.title("SISMA")
        st.markdown("---")

        st.header("Settings")

        provider_choice = st.selectbox(
            "AI Engine",
            ["Gemini", "OpenAI", "Offline"],
            index=0,
            help="Offline skips the AI service; checklists get the fallback report"
        )

        st.markdown("---")

        if provider_choice == "Gemini":
            gemini_key = st.text_input(
                "Gemini API Key",
                type="password",
                help="Enter your Gemini API key (optional, uses env var if not provided)"
            )
            if gemini_key:
                os.environ['GEMINI_API_KEY'] = gemini_key

        if provider_choice == "OpenAI":
            openai_key = st.text_input(
                "OpenAI API Key",
                type="password",
                help="Enter your OpenAI API key (optional, uses env var if not provided)"
            )
            if openai_key:
                os.environ['OPENAI_API_KEY'] = openai_key

        st.markdown("---")
        st.markdown("### About")
        st.markdown("""
        Inspection support for fire-safety equipment.

        **Features:**
        - Normative Q&A with source citations
        - Simulated hazard detection on photos
        - Checklist compliance score and report
        """)

    config = load_config(provider_choice)
    if config is None:
        return

    st.title("SISMA Inspection Assistant")

    tab1, tab2, tab3 = st.tabs([
        "Normative Assistant",
        "Image Analysis",
        "Process Checklist",
    ])

    with tab1:
        display_assistant_tab(config)

    with tab2:
        display_image_tab(config)

    with tab3:
        display_checklist_tab(config)


if __name__ == "__main__":
    main()
