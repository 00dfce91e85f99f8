"""
Streamlit Student Form Generator

Upload student records, pick a template and download the filled workbook.
"""

import streamlit as st
import json
import io
from pathlib import Path

from openpyxl import load_workbook

from roster_forms import (
    RosterFormsError,
    build_records,
    clone_records,
    fill_worksheet,
    get_default_config,
    merge_config,
    records_to_frame,
    resolve_path,
    select_classcode,
    select_slice,
    validate_config,
    validate_records,
)
from roster_forms.workbook_io import get_sheet

BASE_DIR = Path(__file__).resolve().parent
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MODE_CLONE = "One sheet per student (template-all)"
MODE_FILL = "Single student (template3)"


# Page configuration
st.set_page_config(
    page_title="Student Form Generator",
    page_icon="📋",
    layout="wide",
    initial_sidebar_state="collapsed"
)


def init_session_state():
    """Initialize session state with default values."""
    if "config" not in st.session_state:
        st.session_state.config = get_default_config()

    if "config_loaded" not in st.session_state:
        st.session_state.config_loaded = False

    if "raw_items" not in st.session_state:
        st.session_state.raw_items = []

    if "data_name" not in st.session_state:
        st.session_state.data_name = ""


def config_to_json(config: dict) -> str:
    """Convert config dict to JSON string."""
    return json.dumps(config, indent=2, ensure_ascii=False)


def current_records() -> list[dict]:
    """Records with class codes, recomputed so config changes apply immediately."""
    classcode = st.session_state.config["classcode"]
    return build_records(
        st.session_state.raw_items,
        base=classcode["base"],
        block_size=classcode["block_size"],
        source=st.session_state.data_name or "upload",
    )


def read_template_bytes(uploaded, template_name: str) -> bytes | None:
    """Bytes of the uploaded template, or of the template next to the app."""
    if uploaded is not None:
        return uploaded.getvalue()
    path = resolve_path(st.session_state.config["template_dir"], BASE_DIR) / template_name
    if path.exists():
        return path.read_bytes()
    return None


def render_sidebar():
    """Render a minimal sidebar for quick config access."""
    st.sidebar.header("Quick Access")

    uploaded_config = st.sidebar.file_uploader(
        "Upload config JSON",
        type=["json"],
        key="sidebar_config_uploader",
        help="Overrides cell maps, sheet names and class code settings"
    )

    if uploaded_config is not None:
        try:
            user_config = json.load(uploaded_config)
            if not isinstance(user_config, dict):
                raise ValueError("config must be a JSON object")
            st.session_state.config = merge_config(user_config)
            st.session_state.config_loaded = True
            st.sidebar.success("✓ Config loaded!")
        except (json.JSONDecodeError, ValueError) as e:
            st.sidebar.error(f"Invalid config file: {e}")

    st.sidebar.download_button(
        "📥 Download Config",
        data=config_to_json(st.session_state.config),
        file_name="config.json",
        mime="application/json"
    )


def render_step1_data():
    """Render Step 1: Student records."""
    raw_items = st.session_state.raw_items

    if raw_items:
        st.header(f"Step 1: Students ✓ ({len(raw_items)} loaded)")
    else:
        st.header("Step 1: Students")

    st.markdown("Upload a JSON array of student objects (name, year, school, address, address2, ...).")

    uploaded = st.file_uploader("Upload data JSON", type=["json"], key="data_uploader")
    if uploaded is not None:
        try:
            items = json.loads(uploaded.getvalue().decode("utf-8-sig"))
            build_records(items, source=uploaded.name)
            st.session_state.raw_items = items
            st.session_state.data_name = uploaded.name
        except (json.JSONDecodeError, UnicodeDecodeError, RosterFormsError) as e:
            st.error(f"❌ {e}")
    elif not raw_items:
        default_data = resolve_path(st.session_state.config["data_file"], BASE_DIR)
        if default_data.exists() and st.button(f"Use {default_data.name}"):
            st.session_state.raw_items = json.loads(default_data.read_text(encoding="utf-8-sig"))
            st.session_state.data_name = default_data.name
            st.rerun()

    if not st.session_state.raw_items:
        st.info("Upload a data file to continue")
        return

    records = current_records()
    for issue in validate_records(records):
        if issue["type"] == "warning":
            st.warning(f"⚠️ {issue['message']}")
        else:
            st.error(f"❌ {issue['message']}")

    with st.expander("Preview students"):
        st.dataframe(records_to_frame(records), hide_index=True, use_container_width=True)


def render_step2_selection() -> list[dict]:
    """Render Step 2: Choose which students to write."""
    st.header("Step 2: Selection")

    if not st.session_state.raw_items:
        st.info("Complete Step 1 to choose students")
        return []

    records = current_records()
    classcodes = sorted({r["classcode"] for r in records})

    tab1, tab2 = st.tabs(["🏫 By class code", "🔢 By position"])

    with tab1:
        by_class = st.checkbox("Select a whole class", key="by_class")
        classcode = st.selectbox("Class code", classcodes, disabled=not by_class)

    with tab2:
        col1, col2 = st.columns(2)
        with col1:
            start = st.number_input("First record", min_value=0, max_value=len(records) - 1, value=0, step=1)
        with col2:
            end = st.number_input("Last record (exclusive)", min_value=1, max_value=len(records), value=len(records), step=1)

    if by_class:
        selected = select_classcode(records, classcode)
    elif start >= end:
        st.error("❌ First record must come before the last one")
        return []
    else:
        selected = select_slice(records, int(start), int(end))

    st.success(f"✓ {len(selected)} students selected")
    return selected


def render_step3_generate(selected: list[dict]):
    """Render Step 3: Template and generation."""
    config = st.session_state.config
    st.header("Step 3: Generate Excel")

    mode = st.radio("Output", [MODE_CLONE, MODE_FILL], horizontal=True)
    settings = config["clone"] if mode == MODE_CLONE else config["fill"]

    uploaded_template = st.file_uploader(
        f"Template (default: {settings['template']})",
        type=["xlsx"],
        key="template_uploader"
    )
    template_bytes = read_template_bytes(uploaded_template, settings["template"])

    issues = validate_config(config)
    errors = [i for i in issues if i["type"] == "error"]
    for issue in issues:
        if issue["type"] == "warning":
            st.warning(f"⚠️ {issue['message']}")
        else:
            st.error(f"❌ {issue['message']}")

    if template_bytes is None:
        st.info(f"Upload a template or place {settings['template']} next to the app")

    can_generate = not errors and bool(selected) and template_bytes is not None

    st.divider()

    if st.button("🚀 Generate Excel", disabled=not can_generate, type="primary", use_container_width=True):
        with st.spinner("Generating Excel file..."):
            try:
                wb = load_workbook(io.BytesIO(template_bytes), rich_text=True)
                ws = get_sheet(wb, settings["sheet"])

                if mode == MODE_CLONE:
                    result = clone_records(
                        wb, ws, selected,
                        cells=settings["cells"],
                        labels=settings["labels"],
                        sheet_prefix=settings["sheet_prefix"],
                    )
                    file_name = settings["output_file"]
                    for item in result.skipped_ranges:
                        st.warning(f"⚠️ Merge {item.range} skipped on {item.sheet}: {item.reason}")
                else:
                    first = selected[0]
                    fill_worksheet(ws, first, settings["cells"])
                    file_name = f"filled_{first.get('code') or 'record'}_{first.get('name2') or 'record'}.xlsx"

                buffer = io.BytesIO()
                wb.save(buffer)
                buffer.seek(0)
            except (RosterFormsError, OSError, ValueError) as e:
                st.error(f"❌ {e}")
                return

            st.download_button(
                "📥 Download Excel File",
                data=buffer,
                file_name=file_name,
                mime=XLSX_MIME,
                type="primary",
                use_container_width=True
            )

            st.success("✓ Excel file generated successfully!")

    if not can_generate and not selected:
        st.info("Complete Steps 1 and 2 to enable generation")


def main():
    """Main application entry point."""
    init_session_state()

    st.title("📋 Student Form Generator")

    render_sidebar()

    render_step1_data()

    st.divider()

    selected = render_step2_selection()

    st.divider()

    render_step3_generate(selected)


if __name__ == "__main__":
    main()
