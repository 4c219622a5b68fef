"""
Dash dashboard for visualizing auto-grade results of an assignment.

Run with: python main.py dashboard <assignment_id>
"""

from pathlib import Path

import pandas as pd
import plotly.express as px
from dash import Dash, dash_table, dcc, html
from dash.dependencies import Input, Output

from .gradebook import feedback_label
from .models import Submission


def build_results_frame(submissions: list[Submission]) -> pd.DataFrame:
    """
    One row per auto-graded submission.

    Args:
        submissions: Submissions with auto-grade results.

    Returns:
        DataFrame with score columns per submission.
    """
    rows = []
    for submission in submissions:
        result = submission.auto_grade_feedback
        if result is None:
            continue
        rows.append({
            "Submission": submission.id,
            "Student": submission.student_id or submission.id,
            "Total Score": result.total_score,
            "Max Score": result.max_score,
            "Percentage": result.percentage,
            "Passed Tests": sum(1 for entry in result.feedback if entry.passed),
            "Tests": len(result.feedback),
            "Status": submission.status.value,
        })
    return pd.DataFrame(
        rows,
        columns=["Submission", "Student", "Total Score", "Max Score", "Percentage", "Passed Tests", "Tests", "Status"],
    )


def build_pass_rate_frame(submissions: list[Submission]) -> pd.DataFrame:
    """
    Pass rate of each test case across submissions.

    Returns:
        DataFrame with one row per test label and its pass rate in percent.
    """
    rows = [
        {
            "Test": feedback_label(entry.cell_index, entry.test_type),
            "Passed": 1 if entry.passed else 0,
            "Hidden": entry.is_hidden,
        }
        for submission in submissions
        if submission.auto_grade_feedback is not None
        for entry in submission.auto_grade_feedback.feedback
    ]
    if not rows:
        return pd.DataFrame(columns=["Test", "Pass Rate", "Hidden"])

    df = pd.DataFrame(rows)
    rates = df.groupby("Test", sort=False).agg({"Passed": "mean", "Hidden": "any"}).reset_index()
    rates["Pass Rate"] = rates["Passed"] * 100
    return rates[["Test", "Pass Rate", "Hidden"]]


def create_dashboard(submissions: list[Submission], title: str = "Auto-Grade Dashboard"):
    """
    Create a Dash dashboard to visualize auto-grade results.

    Args:
        submissions: Auto-graded submissions of one assignment.
        title: Heading shown at the top of the page.
    """
    df = build_results_frame(submissions)
    rates = build_pass_rate_frame(submissions)

    app = Dash(__name__, suppress_callback_exceptions=True)

    avg_score = df["Percentage"].mean() if not df.empty else 0
    max_score = df["Percentage"].max() if not df.empty else 0
    min_score = df["Percentage"].min() if not df.empty else 0

    card_style = {"flex": "1", "textAlign": "center", "padding": "20px", "backgroundColor": "white", "borderRadius": "8px", "margin": "10px", "boxShadow": "0 2px 4px rgba(0,0,0,0.1)"}
    panel_style = {"padding": "20px", "backgroundColor": "white", "margin": "20px", "borderRadius": "8px", "boxShadow": "0 2px 4px rgba(0,0,0,0.1)"}

    app.layout = html.Div([
        # Header
        html.Div([
            html.H1(title, style={"color": "#2c3e50", "marginBottom": "5px"}),
            html.P(f"Graded Submissions: {len(df)}", style={"color": "#7f8c8d", "fontSize": "14px"}),
        ], style={"textAlign": "center", "padding": "20px", "backgroundColor": "#ecf0f1"}),

        # Statistics cards
        html.Div([
            html.Div([
                html.H3(f"{avg_score:.1f}%", style={"color": "#3498db", "margin": "0"}),
                html.P("Average Score", style={"color": "#7f8c8d", "margin": "0"}),
            ], style=card_style),
            html.Div([
                html.H3(f"{max_score:.1f}%", style={"color": "#27ae60", "margin": "0"}),
                html.P("Highest Score", style={"color": "#7f8c8d", "margin": "0"}),
            ], style=card_style),
            html.Div([
                html.H3(f"{min_score:.1f}%", style={"color": "#e74c3c", "margin": "0"}),
                html.P("Lowest Score", style={"color": "#7f8c8d", "margin": "0"}),
            ], style=card_style),
        ], style={"display": "flex", "justifyContent": "center", "padding": "10px 20px"}),

        # Charts row
        html.Div([
            html.Div([
                dcc.Graph(
                    id="scores-bar",
                    figure=px.bar(
                        df.sort_values("Percentage", ascending=False),
                        x="Student",
                        y="Percentage",
                        title="Scores by Student",
                    ).update_layout(xaxis_tickangle=-45, plot_bgcolor="white", yaxis_title="Score (%)"),
                )
            ], style={"flex": "1", "padding": "10px"}),
            html.Div([
                dcc.Graph(
                    id="pass-rate-bar",
                    figure=px.bar(
                        rates,
                        x="Test",
                        y="Pass Rate",
                        color="Hidden",
                        color_discrete_map={True: "#95a5a6", False: "#3498db"},
                        title="Pass Rate by Test",
                    ).update_layout(xaxis_tickangle=-45, plot_bgcolor="white", yaxis_title="Passed (%)"),
                )
            ], style={"flex": "1", "padding": "10px"}),
        ], style={"display": "flex", "padding": "10px 20px"}),

        # Grades table
        html.Div([
            html.H3("Detailed Grades", style={"color": "#2c3e50", "marginBottom": "10px"}),
            dash_table.DataTable(
                id="grades-table",
                columns=[{"name": col, "id": col} for col in df.columns],
                data=df.round(2).to_dict("records"),
                sort_action="native",
                filter_action="native",
                style_table={"overflowX": "auto"},
                style_cell={"textAlign": "left", "padding": "10px", "fontSize": "14px"},
                style_header={"backgroundColor": "#3498db", "color": "white", "fontWeight": "bold"},
                style_data_conditional=[
                    {"if": {"filter_query": "{Percentage} < 50"}, "backgroundColor": "#fadbd8"},
                    {"if": {"filter_query": "{Percentage} >= 90"}, "backgroundColor": "#d5f5e3"},
                ],
            ),
        ], style=panel_style),

        # Feedback section
        html.Div([
            html.H3("Test Feedback", style={"color": "#2c3e50", "marginBottom": "10px"}),
            dcc.Dropdown(
                id="submission-dropdown",
                options=[{"label": row["Student"], "value": row["Submission"]} for row in df.to_dict("records")],
                value=df["Submission"].iloc[0] if not df.empty else None,
                style={"marginBottom": "10px"},
            ),
            html.Div(id="feedback-content"),
        ], style=panel_style),
    ], style={"fontFamily": "Arial, sans-serif", "backgroundColor": "#f5f6fa", "minHeight": "100vh"})

    @app.callback(
        Output("feedback-content", "children"),
        Input("submission-dropdown", "value"),
    )
    def update_feedback(submission_id: str):
        if not submission_id:
            return html.P("Select a submission to view feedback.")

        submission = next((s for s in submissions if s.id == submission_id), None)
        if submission is None or submission.auto_grade_feedback is None:
            return html.P("Grade not found.")

        result = submission.auto_grade_feedback
        items = []
        for entry in result.feedback:
            status = "+" if entry.passed else "-"
            hidden = " [hidden]" if entry.is_hidden else ""
            items.append(html.Li(
                f"[{status}] cell {entry.cell_index} {entry.test_type}{hidden}: "
                f"{entry.points_earned:g}/{entry.points_possible:g} - {entry.message}",
                style={"color": "#27ae60" if entry.passed else "#e74c3c"},
            ))

        return html.Div([
            html.H4(f"{result.total_score:g}/{result.max_score:g} ({result.percentage:.1f}%)"),
            html.Ul(items),
        ])

    return app


def run_dashboard(submissions: list[Submission], port: int, debug: bool = False, grades_dir: Path | None = None) -> None:
    """Build the dashboard and serve it until interrupted."""
    title = "Auto-Grade Dashboard"
    if grades_dir is not None:
        title = f"{title}: {grades_dir.name}"
    app = create_dashboard(submissions, title=title)
    app.run(debug=debug, port=port)
