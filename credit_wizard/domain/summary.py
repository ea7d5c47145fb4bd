"""HTML summary of a completed credit assessment"""

import html
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from credit_wizard.domain.models import Assessment

_STYLE = """
    * { box-sizing: border-box; }
    body { font-family: Arial, sans-serif; color:#111; margin:28px; }
    h2 { margin: 0 0 4px; }
    h3 { margin: 18px 0 6px; }
    .muted { color:#666; font-size:12px; }
    table { width: 100%; border-collapse: collapse; margin-top: 8px; }
    th, td { border: 1px solid #ccc; padding: 8px; vertical-align: top; }
    th { text-align: left; background: #f5f5f5; }
    .right { text-align: right; }
    tfoot th, tfoot td { font-weight: bold; }
"""


def escape(value: Optional[object]) -> str:
    """HTML-escape any value; None renders as empty"""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def format_money(value: Optional[Decimal]) -> str:
    """Two-decimal amount, or a dash when the value is missing"""
    if value is None:
        return "-"
    return f"{Decimal(value):.2f}"


def format_timestamp(moment: datetime) -> str:
    """e.g. 'March 5, 2025 14:07 UTC'"""
    moment = moment.astimezone(timezone.utc).replace(microsecond=0)
    return f"{moment:%B} {moment.day}, {moment:%Y %H:%M} UTC"


def render_summary(assessment: Assessment, now: Optional[datetime] = None) -> str:
    """
    Render the assessment as a static HTML document.

    Rows follow catalog order; only answered questions are listed. The
    clock is read once, so output is identical for the same assessment
    and `now`.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    labels = {q.id: q.label for q in assessment.questions}
    rows = "".join(
        f"""
        <tr>
          <td>{escape(labels.get(question_id))}</td>
          <td>{"Yes" if answer.value else "No"}</td>
          <td class="right">{answer.points}</td>
        </tr>"""
        for question_id, answer in _ordered_answers(assessment)
    )

    return f"""<html>
<head>
  <meta charset="utf-8">
  <style>{_STYLE}</style>
</head>
<body>
  <h2>Credit Assessment Summary</h2>
  <p class="muted">Generated on {escape(format_timestamp(now))}</p>

  <h3>Eligibility</h3>
  <table>
    <thead><tr><th>Question</th><th>Answer</th><th class="right">Points</th></tr></thead>
    <tbody>{rows}
    </tbody>
    <tfoot><tr><th colspan="2">Total Points</th><td class="right">{assessment.score}</td></tr></tfoot>
  </table>

  <h3>Financials</h3>
  <table>
    <tbody>
      <tr><td>Monthly Income (USD)</td><td class="right">{format_money(assessment.income)}</td></tr>
      <tr><td>Monthly Expenses (USD)</td><td class="right">{format_money(assessment.expenses)}</td></tr>
    </tbody>
    <tfoot><tr><th>Approved Credit (USD)</th><td class="right">{format_money(assessment.offer)}</td></tr></tfoot>
  </table>
</body>
</html>
"""


def _ordered_answers(assessment: Assessment):
    for question in assessment.questions:
        answer = assessment.answers.get(question.id)
        if answer is not None:
            yield question.id, answer
