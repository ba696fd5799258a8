"""
DeFiScan Governance Modeller - Streamlit Application.

Interactive rating of DeFi protocol governance:
- Classify privileged functions per project (impact + governance mechanism)
- Severities derived live from the likelihood mapping and severity matrix
- Final AAA..D rating per project and across all projects
- Editable rating rules, severity matrix and likelihood mapping

Run with: streamlit run streamlit_app.py
"""

import json
import logging
from dataclasses import replace

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# =============================================================================
# PAGE CONFIG
# =============================================================================

st.set_page_config(
    page_title="DeFiScan Governance Modeller",
    page_icon="🛡️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# =============================================================================
# IMPORTS
# =============================================================================

IMPORTS_OK = False
IMPORT_ERROR = ""

try:
    from defiscan_modeller import (
        FinalRating,
        FunctionType,
        Impact,
        Likelihood,
        Severity,
        ConfigurationError,
        LocalStateCache,
        __version__,
        parse_projects,
    )
    from defiscan_modeller.config import LOG_LEVEL
    from defiscan_modeller.core import (
        GOVERNANCE_TYPES,
        GOVERNANCE_TYPE_LABELS,
        add_project,
        apply_configuration,
        default_state,
        find_rule_gaps,
        group_projects_by_rating,
        import_projects,
        project_rating,
        remove_project,
        rename_project,
        replace_entries,
        scale_position,
        summarize,
        worst_case,
    )
    from defiscan_modeller.frames import (
        entries_to_frame,
        frame_to_entries,
        frame_to_matrix,
        frame_to_rules,
        likelihood_config_from_frames,
        matrix_to_frame,
        named_likelihoods_to_frame,
        rules_to_frame,
        voting_rules_to_frame,
    )
    from defiscan_modeller.storage import state_to_dict
    from defiscan_modeller.thresholds import RATING_COLORS, SEVERITY_COLORS, get_rating_info
    IMPORTS_OK = True
except ImportError as e:
    IMPORT_ERROR = str(e)

logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================

def init_session_state():
    """Initialize session state variables."""
    if "cache" not in st.session_state:
        st.session_state.cache = LocalStateCache()
    if "modeller_state" not in st.session_state:
        st.session_state.modeller_state = st.session_state.cache.load()
    if "editor_version" not in st.session_state:
        st.session_state.editor_version = 0
    if "legacy_mode" not in st.session_state:
        st.session_state.legacy_mode = False


def commit(state):
    """Store a new modeller state, persist it and reset the table editors."""
    st.session_state.modeller_state = state
    st.session_state.editor_version += 1
    try:
        st.session_state.cache.save(state)
    except OSError as e:
        logger.warning("Failed to save state cache: %s", e)
        st.warning(f"Changes are kept for this session only: {e}")


def editor_key(name: str) -> str:
    return f"{name}_{st.session_state.editor_version}"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def format_pair(pair) -> str:
    if pair is None:
        return "No entries"
    return f"{pair.severity.value} severity / {pair.impact.value} impact"


def rating_badge(rating, caption: str = ""):
    color = RATING_COLORS[rating]
    info = get_rating_info(rating)
    st.markdown(f"""
    <div style="text-align: center; padding: 16px; background-color: {color}; border-radius: 10px; color: white;">
        <h1 style="margin: 0;">{rating.value}</h1>
        <p style="margin: 0;">{info['scores']}</p>
    </div>
    """, unsafe_allow_html=True)
    if caption:
        st.caption(caption)


def color_severity(value: str) -> str:
    severity = Severity.parse(value)
    if severity is None:
        return ""
    return f"background-color: {SEVERITY_COLORS[severity]}; color: white"


# =============================================================================
# RATING SCALE
# =============================================================================

def build_rating_scale_figure(state, legacy: bool) -> go.Figure:
    """Horizontal AAA..D scale with the global rating marker and project titles."""
    rules = None if legacy else state.rating_rules
    summary = summarize(state, legacy=legacy)
    grouped = group_projects_by_rating(state.projects, rules)
    width = 100 / (len(FinalRating) - 1)

    fig = go.Figure()
    for rating in FinalRating:
        fig.add_trace(go.Bar(
            x=[width],
            y=["Rating"],
            base=[scale_position(rating) - width / 2],
            orientation="h",
            marker_color=RATING_COLORS[rating],
            text=rating.value,
            textposition="inside",
            hovertext=", ".join(grouped.get(rating, [])) or get_rating_info(rating)["scores"],
            hoverinfo="text",
            showlegend=False,
        ))

    global_rating = summary["global_rating"]
    fig.add_trace(go.Scatter(
        x=[scale_position(global_rating)],
        y=["Rating"],
        mode="markers+text",
        marker=dict(symbol="triangle-down", size=22, color="black"),
        text=[f"Global: {global_rating.value}"],
        textposition="top center",
        showlegend=False,
    ))

    for rating, titles in grouped.items():
        fig.add_annotation(
            x=scale_position(rating),
            y=-0.6,
            text="<br>".join(titles),
            showarrow=False,
            font=dict(size=11),
        )

    fig.update_layout(
        barmode="overlay",
        height=260,
        xaxis=dict(range=[-width / 2, 100 + width / 2], showticklabels=False, showgrid=False),
        yaxis=dict(showticklabels=False),
        margin=dict(l=10, r=10, t=40, b=60),
    )
    return fig


# =============================================================================
# TAB 1: RATINGS
# =============================================================================

def render_tab_ratings():
    st.header("📊 Final Ratings")

    state = st.session_state.modeller_state
    legacy = st.session_state.legacy_mode
    summary = summarize(state, legacy=legacy)
    global_rating = summary["global_rating"]
    info = get_rating_info(global_rating)

    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        rating_badge(global_rating, caption=f"Worst case: {format_pair(summary['global_worst_case'])}")
    st.markdown(f"**{info['scores']}**: {info['description']}")

    fig = build_rating_scale_figure(state, legacy)
    st.plotly_chart(fig, use_container_width=True, key=f"chart_{id(fig)}")

    st.subheader("Per-Project Ratings")
    rows = [
        {
            "Project": project["title"],
            "Entries": project["entries"],
            "Worst Case": format_pair(project["worst_case"]),
            "Rating": project["rating"].value,
        }
        for project in summary["projects"]
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    if legacy:
        st.info("Legacy mode: ratings use the fixed severity/impact ladder, the rule table is ignored.")


# =============================================================================
# TAB 2: PROJECTS
# =============================================================================

def entry_column_config() -> dict:
    return {
        "function": st.column_config.TextColumn("Function"),
        "impact": st.column_config.SelectboxColumn(
            "Impact", options=Impact.values(), required=True, default=Impact.LOW.value,
        ),
        "function_type": st.column_config.SelectboxColumn(
            "Function Type",
            options=[function_type.value for function_type in FunctionType],
            required=True,
            default=FunctionType.ADMIN.value,
        ),
        "governance_type": st.column_config.SelectboxColumn(
            "Governance Type",
            options=GOVERNANCE_TYPES,
            default="eoa",
            help=", ".join(f"{key} = {label}" for key, label in GOVERNANCE_TYPE_LABELS.items()),
        ),
        "voting_delay_days": st.column_config.NumberColumn("Voting Delay (days)", min_value=0),
        "required_voters": st.column_config.NumberColumn("Required Voters", min_value=0, step=1),
        "name": st.column_config.TextColumn("Dependency / Operator", help="Looked up in the likelihood mapping"),
        "severity": st.column_config.TextColumn("Severity", disabled=True),
    }


def render_project(project, can_remove: bool):
    state = st.session_state.modeller_state
    legacy = st.session_state.legacy_mode
    rules = None if legacy else state.rating_rules

    col1, col2, col3 = st.columns([4, 1, 1])
    with col1:
        title = st.text_input("Title", value=project.title, key=editor_key(f"title_{project.id}"))
        if title != project.title:
            commit(rename_project(state, project.id, title))
            st.rerun()
    with col2:
        st.metric("Rating", project_rating(project, rules).value)
    with col3:
        if can_remove and st.button("🗑️ Remove", key=f"remove_{project.id}"):
            commit(remove_project(state, project.id))
            st.rerun()

    frame = entries_to_frame(project.entries)
    edited = st.data_editor(
        frame,
        column_config=entry_column_config(),
        num_rows="dynamic",
        hide_index=True,
        use_container_width=True,
        key=editor_key(f"entries_{project.id}"),
    )

    entries = frame_to_entries(edited, project.entries, state.severity_matrix, state.likelihood_config)
    if entries != project.entries:
        commit(replace_entries(state, project.id, entries))
        st.rerun()

    pair = worst_case(project.entries)
    st.caption(f"Worst case: {format_pair(pair)}")
    if rules is not None and pair is not None:
        if (pair.severity, pair.impact) in find_rule_gaps(rules):
            st.warning("No rating rule matches this worst case; the project is rated AAA.")


def render_tab_projects():
    st.header("📋 Function Classifications")
    st.markdown("Classify each privileged function by its impact and the mechanism that controls it.")

    state = st.session_state.modeller_state
    can_remove = len(state.projects) > 1

    for project in state.projects:
        with st.expander(project.title or "Untitled Project", expanded=True):
            render_project(project, can_remove)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("➕ Add Project", use_container_width=True):
            commit(add_project(state))
            st.rerun()
    with col2:
        uploaded_file = st.file_uploader("Import projects (JSON)", type=["json"])
        if uploaded_file is not None and st.button("Import", use_container_width=True):
            try:
                projects = parse_projects(json.load(uploaded_file), fallback_title=uploaded_file.name)
            except json.JSONDecodeError as e:
                st.error(f"Error loading JSON: {e}")
            except ConfigurationError as e:
                st.error(f"Invalid project file: {e}")
            else:
                commit(import_projects(state, projects))
                st.success(f"✅ Imported {len(projects)} project(s)")
                st.rerun()


# =============================================================================
# TAB 3: RATING RULES
# =============================================================================

def render_tab_rating_rules():
    st.header("📏 Rating Rules")
    st.markdown(
        "Each rule maps the worst-case severity and impact of a project to a final rating. "
        "Projects without entries are always rated AAA."
    )

    state = st.session_state.modeller_state
    frame = rules_to_frame(state.rating_rules)
    edited = st.data_editor(
        frame,
        column_config={
            "rating": st.column_config.SelectboxColumn("Rating", options=FinalRating.values(), required=True),
            "severity": st.column_config.SelectboxColumn("Severity", options=Severity.values(), required=True),
            "impact": st.column_config.SelectboxColumn("Impact", options=Impact.values(), required=True),
            "description": st.column_config.TextColumn("Description"),
        },
        num_rows="dynamic",
        hide_index=True,
        use_container_width=True,
        key=editor_key("rating_rules"),
    )

    rules = frame_to_rules(edited, state.rating_rules)
    if rules != state.rating_rules:
        commit(apply_configuration(state, rating_rules=rules))
        st.rerun()

    gaps = find_rule_gaps(state.rating_rules)
    if gaps:
        with st.expander(f"⚠️ {len(gaps)} severity/impact pairs without a rule", expanded=False):
            st.markdown("\n".join(f"- {severity.value} severity, {impact.value} impact" for severity, impact in gaps))
            st.caption("A project whose worst case falls here is rated AAA.")


# =============================================================================
# TAB 4: SEVERITY MATRIX
# =============================================================================

def render_tab_severity_matrix():
    st.header("🧮 Severity Matrix")
    st.markdown("Severity for each Impact (rows) and Likelihood (columns). Changes recompute every entry.")

    state = st.session_state.modeller_state
    frame = matrix_to_frame(state.severity_matrix)
    edited = st.data_editor(
        frame,
        column_config={
            likelihood.value: st.column_config.SelectboxColumn(
                likelihood.value, options=Severity.values(), required=True,
            )
            for likelihood in Likelihood
        },
        use_container_width=True,
        key=editor_key("severity_matrix"),
    )

    matrix = frame_to_matrix(edited, state.severity_matrix)
    if matrix != state.severity_matrix:
        commit(apply_configuration(state, severity_matrix=matrix))
        st.rerun()

    st.dataframe(frame.style.map(color_severity), use_container_width=True)


# =============================================================================
# TAB 5: LIKELIHOOD MAPPING
# =============================================================================

def named_likelihood_editor(frame: pd.DataFrame, label: str, key: str) -> pd.DataFrame:
    return st.data_editor(
        frame,
        column_config={
            "name": st.column_config.TextColumn(label, required=True),
            "likelihood": st.column_config.SelectboxColumn(
                "Likelihood", options=Likelihood.values(), required=True, default=Likelihood.HIGH.value,
            ),
        },
        num_rows="dynamic",
        hide_index=True,
        use_container_width=True,
        key=editor_key(key),
    )


def render_tab_likelihood_mapping():
    st.header("🎯 Likelihood Mapping")
    st.markdown("How each governance mechanism translates into a likelihood. Changes recompute every entry.")

    state = st.session_state.modeller_state
    config = state.likelihood_config

    st.subheader("Voting")
    st.caption("Checked top to bottom; the first rule whose minimum delay and voters are met applies.")
    voting_frame = voting_rules_to_frame(config.voting)
    voting_edited = st.data_editor(
        voting_frame,
        column_config={
            "likelihood": st.column_config.SelectboxColumn("Likelihood", options=Likelihood.values(), required=True),
            "voting_min_delay_days": st.column_config.NumberColumn("Min Delay (days)", min_value=0),
            "voting_min_voters": st.column_config.NumberColumn("Min Voters", min_value=0, step=1),
            "description": st.column_config.TextColumn("Description"),
        },
        num_rows="dynamic",
        hide_index=True,
        use_container_width=True,
        key=editor_key("voting"),
    )

    st.subheader("Mechanisms")
    mechanisms = {}
    cols = st.columns(4)
    for col, field_name in zip(cols, ["eoa", "multisig", "multisig_delay_7d", "security_council"]):
        with col:
            current = getattr(config, field_name)
            choice = st.selectbox(
                GOVERNANCE_TYPE_LABELS[field_name],
                options=Likelihood.values(),
                index=current.rank,
                key=editor_key(f"mechanism_{field_name}"),
            )
            mechanisms[field_name] = Likelihood.parse(choice)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Dependencies")
        dependencies_frame = named_likelihoods_to_frame(config.dependencies)
        dependencies_edited = named_likelihood_editor(dependencies_frame, "Dependency", "dependencies")
    with col2:
        st.subheader("Operators")
        operators_frame = named_likelihoods_to_frame(config.operators)
        operators_edited = named_likelihood_editor(operators_frame, "Operator", "operators")

    new_config = likelihood_config_from_frames(config, voting_edited, dependencies_edited, operators_edited)
    new_config = replace(new_config, **mechanisms)
    if new_config != config:
        commit(apply_configuration(state, likelihood_config=new_config))
        st.rerun()


# =============================================================================
# SIDEBAR
# =============================================================================

def render_sidebar():
    with st.sidebar:
        st.title("🛡️ DeFiScan Modeller")

        st.session_state.legacy_mode = st.toggle(
            "Legacy rating ladder",
            value=st.session_state.legacy_mode,
            help="Rate with the fixed severity/impact ladder instead of the rule table.",
        )

        st.divider()
        st.download_button(
            "⬇️ Export state (JSON)",
            data=json.dumps(state_to_dict(st.session_state.modeller_state), indent=2),
            file_name="defiscan_state.json",
            mime="application/json",
            use_container_width=True,
        )

        if st.button("↺ Reset to defaults", use_container_width=True):
            commit(default_state())
            st.rerun()

        st.caption(f"Cache: {st.session_state.cache.path}")
        st.caption(f"v{__version__}")


# =============================================================================
# MAIN
# =============================================================================

def main():
    if not IMPORTS_OK:
        st.error(f"Import error: {IMPORT_ERROR}")
        return

    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    init_session_state()
    render_sidebar()

    tabs = st.tabs([
        "📊 Ratings",
        "📋 Projects",
        "📏 Rating Rules",
        "🧮 Severity Matrix",
        "🎯 Likelihood Mapping",
    ])

    with tabs[0]:
        render_tab_ratings()
    with tabs[1]:
        render_tab_projects()
    with tabs[2]:
        render_tab_rating_rules()
    with tabs[3]:
        render_tab_severity_matrix()
    with tabs[4]:
        render_tab_likelihood_mapping()


if __name__ == "__main__":
    main()
