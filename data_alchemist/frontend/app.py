"""
Streamlit user interface for the Data Alchemist application.

Users upload client, worker and task CSV files, validate them, fix
individual cells with AI suggestions, apply natural-language bulk
edits, collect rules and priority weights, and search across all three
datasets.  All data lives in ``st.session_state`` for the duration of
the browser session; nothing survives a reload except what the user
downloads.

Every action calls the backend API through
:mod:`data_alchemist.frontend.api_client`.  Failures are shown as error
notifications and leave the data untouched.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd  # type: ignore
import streamlit as st  # type: ignore

from data_alchemist.backend import rules as rules_config
from data_alchemist.frontend import api_client

DATA_TYPES = ["clients", "workers", "tasks"]
TITLES = {"clients": "Clients", "workers": "Workers", "tasks": "Tasks"}
FIELD_TYPES = ["Email", "Phone", "Date", "Number"]
VALIDATION_TYPES = ["Required", "Format Check", "Range Check", "Unique"]


def _reset_session() -> None:
    """Initialise default values in the Streamlit session state."""
    state_defaults = {
        "datasets": {t: [] for t in DATA_TYPES},  # rows per dataset type
        "errors": {t: [] for t in DATA_TYPES},  # validation issues per type
        "reports": {t: None for t in DATA_TYPES},  # validation reports per type
        "uploaded": {t: None for t in DATA_TYPES},  # (name, size) of the last upload
        "fix": None,  # pending AI fix awaiting apply/cancel
        "proposal": None,  # pending AI modification awaiting confirmation
        "rules": [],
        "recommendations": [],
        "search_results": None,
    }
    for key, default in state_defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


def _set_dataset(data_type: str, rows: List[Dict[str, Any]]) -> None:
    st.session_state.datasets[data_type] = rows
    # Issues refer to row indices and go stale with the data
    st.session_state.errors[data_type] = []
    st.session_state.reports[data_type] = None


def show_upload_section() -> None:
    st.header("Upload data")
    cols = st.columns(3)
    for col, data_type in zip(cols, DATA_TYPES):
        with col:
            uploaded = st.file_uploader(
                f"{TITLES[data_type]} CSV",
                type=["csv"],
                key=f"upload_{data_type}",
            )
            if uploaded is not None:
                marker = (uploaded.name, uploaded.size)
                if st.session_state.uploaded[data_type] != marker:
                    try:
                        rows = api_client.upload_csv(uploaded.name, uploaded.getvalue(), data_type)
                        _set_dataset(data_type, rows)
                        st.session_state.uploaded[data_type] = marker
                    except api_client.APIError as e:
                        st.error(f"Upload failed: {e}")
            count = len(st.session_state.datasets[data_type])
            if count:
                st.caption(f"{count} rows loaded")


def _issue_label(issue: Dict[str, Any]) -> str:
    label = f"Row {issue['row'] + 1} · {issue['column']}: {issue['error']}"
    if issue.get("suggestion"):
        label += f" (suggested: {issue['suggestion']})"
    return label


def show_dataset(data_type: str) -> None:
    """Render one dataset with its issues and per-issue AI fix buttons."""
    rows = st.session_state.datasets[data_type]
    if not rows:
        st.info(f"No {data_type} data uploaded yet.")
        return
    st.dataframe(pd.DataFrame(rows))
    try:
        csv_bytes = api_client.export_csv(rows)
        st.download_button(
            label=f"Download {data_type}.csv",
            data=csv_bytes,
            file_name=f"{data_type}.csv",
            mime="text/csv",
            key=f"download_{data_type}",
        )
    except api_client.APIError as e:
        st.error(f"Export failed: {e}")
    errors = st.session_state.errors[data_type]
    report = st.session_state.reports[data_type]
    if report:
        st.write(f"Quality score: **{report['quality_score']:.1f}%**")
        for rec in report.get("recommendations", []):
            st.warning(rec)
    for i, issue in enumerate(errors):
        left, right = st.columns([5, 1])
        left.write(_issue_label(issue))
        if right.button("AI fix", key=f"fix_{data_type}_{i}"):
            request_fix(data_type, issue)


def request_fix(data_type: str, issue: Dict[str, Any]) -> None:
    row = st.session_state.datasets[data_type][issue["row"]]
    current = row.get(issue["column"], "")
    suggestion = issue.get("suggestion")
    if not suggestion:
        with st.spinner("Asking the AI for a fix…"):
            try:
                suggestion = api_client.get_suggestion(issue["column"], issue["error"], current)
            except api_client.APIError as e:
                st.error(f"AI suggestion failed: {e}")
                return
    st.session_state.fix = {
        "data_type": data_type,
        "row": issue["row"],
        "column": issue["column"],
        "current": str(current),
        "suggestion": suggestion,
    }


def show_fix_dialog() -> None:
    fix = st.session_state.fix
    if not fix:
        return
    with st.container(border=True):
        st.subheader("AI Fix Suggestion")
        st.write(f"Current value: `{fix['current']}`")
        st.write(f"Suggested fix: `{fix['suggestion']}`")
        apply_col, cancel_col = st.columns(2)
        if apply_col.button("Apply", type="primary", key="fix_apply"):
            data_type = fix["data_type"]
            mod = {"rowIndex": fix["row"], "column": fix["column"], "newValue": fix["suggestion"]}
            try:
                rows, _ = api_client.apply_modifications(st.session_state.datasets[data_type], [mod])
            except api_client.APIError as e:
                st.error(f"Could not apply fix: {e}")
                return
            st.session_state.datasets[data_type] = rows
            st.session_state.errors[data_type] = [
                issue for issue in st.session_state.errors[data_type]
                if not (issue["row"] == fix["row"] and issue["column"] == fix["column"])
            ]
            st.session_state.fix = None
            st.rerun()
        if cancel_col.button("Cancel", key="fix_cancel"):
            st.session_state.fix = None
            st.rerun()


def show_validation_card() -> None:
    st.header("Validation")
    if st.button("Validate all data", type="primary"):
        for data_type in DATA_TYPES:
            rows = st.session_state.datasets[data_type]
            if not rows:
                continue
            try:
                errors, report = api_client.validate(data_type, rows)
            except api_client.APIError as e:
                st.error(f"Validation of {data_type} failed: {e}")
                continue
            st.session_state.errors[data_type] = errors
            st.session_state.reports[data_type] = report
        total = sum(len(v) for v in st.session_state.errors.values())
        st.success(f"Validation complete: {total} issue(s) found.")


def show_modification_card() -> None:
    """Propose a natural-language edit and ask for confirmation before applying it."""
    st.header("Natural Language Data Modification")
    data_type = st.selectbox("Dataset", DATA_TYPES, key="modify_type", format_func=TITLES.get)
    command = st.text_input(
        "Command",
        placeholder="e.g. 'Set PriorityLevel to 3 for every client in GroupA'",
        key="modify_command",
    )
    if st.button("Propose Changes"):
        rows = st.session_state.datasets[data_type]
        if not command.strip():
            st.warning("Enter a command first.")
        elif not rows:
            st.warning(f"Upload {data_type} data first.")
        else:
            with st.spinner("Asking the AI for a proposal…"):
                try:
                    proposal = api_client.propose_modification(command.strip(), rows, data_type)
                    st.session_state.proposal = {"data_type": data_type, **proposal}
                except api_client.APIError as e:
                    st.error(f"AI modification failed: {e}")
    proposal = st.session_state.proposal
    if not proposal:
        return
    with st.container(border=True):
        st.subheader("Confirm Modification")
        st.write(proposal["summary"])
        mods = proposal["modifications"]
        if not mods:
            st.info("The AI could not map this command onto the data.")
        else:
            affected = len({m["rowIndex"] for m in mods})
            st.write(f"This modification will affect {affected} row(s). Are you sure you want to proceed?")
            st.dataframe(pd.DataFrame(mods))
        confirm_col, cancel_col = st.columns(2)
        if mods and confirm_col.button("Confirm", type="primary", key="modify_confirm"):
            target = proposal["data_type"]
            try:
                rows, applied = api_client.apply_modifications(st.session_state.datasets[target], mods)
            except api_client.APIError as e:
                st.error(f"Could not apply modification: {e}")
                return
            _set_dataset(target, rows)
            st.session_state.proposal = None
            st.success(f"Applied {applied} change(s).")
            st.rerun()
        if cancel_col.button("Cancel", key="modify_cancel"):
            st.session_state.proposal = None
            st.rerun()


def show_rules_card() -> None:
    st.header("Define Rules & Priorities")
    left, right = st.columns(2)
    with left:
        st.subheader("Manual Rule Builder")
        field_type = st.selectbox("Field type", FIELD_TYPES, key="rule_field")
        validation_type = st.selectbox("Validation type", VALIDATION_TYPES, key="rule_validation")
        if st.button("Add Rule"):
            st.session_state.rules.append(rules_config.manual_rule(field_type, validation_type))
        st.subheader("AI-Powered Rule Creation")
        ai_text = st.text_input("Describe the rule in natural language", key="rule_ai_text")
        if st.button("Generate Rule") and ai_text.strip():
            st.session_state.rules.append(rules_config.ai_rule(ai_text))
    with right:
        st.subheader("Prioritization & Weights")
        weights = {
            name: st.slider(name.capitalize(), 0, 100, default, key=f"weight_{name}")
            for name, default in rules_config.DEFAULT_WEIGHTS.items()
        }
        st.subheader("Current Rules & Config")
        if not st.session_state.rules:
            st.caption("No rules defined yet")
        for rule in st.session_state.rules:
            st.text(rule)
        try:
            config_bytes = api_client.export_rules(st.session_state.rules, weights)
            st.download_button(
                "Export Config",
                data=config_bytes,
                file_name="rules.json",
                mime="application/json",
            )
        except api_client.APIError as e:
            st.error(f"Could not build rules config: {e}")


def show_recommendation_card() -> None:
    st.header("AI Rule Recommendations")
    data_type = st.selectbox("Dataset", DATA_TYPES, key="recommend_type", format_func=TITLES.get)
    if st.button("Get Suggestions"):
        rows = st.session_state.datasets[data_type]
        if not rows:
            st.warning(f"Upload {data_type} data first.")
        else:
            with st.spinner("Asking the AI for rule ideas…"):
                try:
                    st.session_state.recommendations = api_client.recommend_rules(rows, data_type)
                except api_client.APIError as e:
                    st.error(f"AI recommendations failed: {e}")
    if not st.session_state.recommendations:
        st.caption('Click "Get Suggestions" to see what the AI finds.')
    for position, rec in enumerate(st.session_state.recommendations):
        left, right = st.columns([5, 1])
        left.write(rec["description"])
        if right.button("Apply Rule", key=f"apply_rec_{position}"):
            st.session_state.rules.append(rec["description"])
            st.toast("Rule added")


def show_search_card() -> None:
    """Search all loaded datasets at once."""
    st.header("Search")
    query = st.text_input("Search your data", key="search_query")
    if st.button("Search") and query.strip():
        datasets = {t: rows for t, rows in st.session_state.datasets.items() if rows}
        if not datasets:
            st.warning("Upload some data first.")
        else:
            try:
                st.session_state.search_results = api_client.search_all(query.strip(), datasets)
            except api_client.APIError as e:
                st.error(f"Search failed: {e}")
    results = st.session_state.search_results
    if results is not None:
        for data_type, rows in results.items():
            st.write(f"**{TITLES[data_type]}**: {len(rows)} match(es)")
            if rows:
                st.dataframe(pd.DataFrame(rows))


def main() -> None:
    """Entry point for the Streamlit application."""
    st.set_page_config(page_title="Data Alchemist", page_icon="🧪", layout="wide")
    _reset_session()
    st.title("Data Alchemist")
    show_upload_section()
    st.divider()
    tabs = st.tabs([TITLES[t] for t in DATA_TYPES])
    for tab, data_type in zip(tabs, DATA_TYPES):
        with tab:
            show_dataset(data_type)
    show_fix_dialog()
    st.divider()
    show_validation_card()
    st.divider()
    show_modification_card()
    st.divider()
    show_rules_card()
    st.divider()
    show_recommendation_card()
    st.divider()
    show_search_card()


if __name__ == "__main__":
    main()
