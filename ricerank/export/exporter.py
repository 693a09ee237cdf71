"""
RICE Export Formatter
=====================

Renders a ranked backlog into:
- a markdown document (copy/paste or render)
- flat rows of display strings (spreadsheet / CSV download)

Layout of the markdown is fixed; downstream consumers paste it as-is.

    # RICE Prioritization Results

    Timeframe: month
    Effort unit: days

    ## Ranked Backlog

    ### 1. Onboarding checklist (Score: 1583.33)
    Interactive first-run experience to reduce drop-off after signup.

    - Reach: 5000 users/month
    - Impact: 1
    - Confidence: 95%
    - Effort: 3 days

    Rationale: ...
    Next step: research - ...
    Success metric: ...

Numbers are stringified, never re-rounded: integral floats drop the ".0".
"""

import csv
import io
import math
from decimal import Decimal
from typing import Dict, List, Sequence

from ..scoring.rice_models import ExportBundle, RankedItem

CSV_COLUMNS = (
    "itemId", "title", "reach", "impact", "confidence",
    "effort", "riceScore", "rank", "note",
)


def format_number(value) -> str:
    """
    Display form of a number, as a browser would print it.

    Shortest round-trip digits, integral values without ".0", plain
    notation from 1e-6 up to 1e21 and exponent notation outside:
    150.0 -> "150", 1e-05 -> "0.00001", 1e21 -> "1e+21".
    """
    if isinstance(value, int) and abs(value) < 10 ** 21:
        return str(value)
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    point = exponent + k  # position of the decimal point relative to the digits

    if k <= point <= 21:
        body = digits + "0" * (point - k)
    elif 0 < point <= 21:
        body = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        body = "0." + "0" * -point + digits
    else:
        mantissa = digits[0] + (f".{digits[1:]}" if k > 1 else "")
        exp = point - 1
        body = f"{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"
    return sign + body


def _reach_label(item: RankedItem) -> str:
    reach = item.inputs.reach
    return f"{format_number(reach.value)} {reach.unit}/{reach.timeframe}"


def build_markdown(items: Sequence[RankedItem], timeframe: str, effort_unit: str) -> str:
    """Markdown document, one section per item in ranked order."""
    lines: List[str] = [
        "# RICE Prioritization Results",
        "",
        f"Timeframe: {timeframe}",
        f"Effort unit: {effort_unit}",
        "",
        "## Ranked Backlog",
        "",
    ]

    for it in items:
        lines.append(f"### {it.computed.rank}. {it.title} (Score: {format_number(it.computed.rice_score)})")
        if it.description:
            lines.append(it.description)
        lines.append("")
        lines.append(f"- Reach: {_reach_label(it)}")
        lines.append(f"- Impact: {format_number(it.inputs.impact)}")
        lines.append(f"- Confidence: {format_number(it.inputs.confidence)}%")
        lines.append(f"- Effort: {format_number(it.inputs.effort)} {effort_unit}")
        lines.append("")
        lines.append(f"Rationale: {it.rationale.why_this_rank}")
        lines.append(f"Next step: {it.recommended_next_step.type} - {it.recommended_next_step.suggestion}")
        lines.append(f"Success metric: {it.recommended_next_step.success_metric}")
        lines.append("")

    return "\n".join(lines)


def build_rows(items: Sequence[RankedItem], effort_unit: str) -> List[Dict[str, str]]:
    """One row of display strings per item, ranked order."""
    return [
        {
            "itemId": it.item_id,
            "title": it.title,
            "reach": _reach_label(it),
            "impact": format_number(it.inputs.impact),
            "confidence": f"{format_number(it.inputs.confidence)}%",
            "effort": f"{format_number(it.inputs.effort)} {effort_unit}",
            "riceScore": format_number(it.computed.rice_score),
            "rank": format_number(it.computed.rank),
            "note": it.recommended_next_step.suggestion,
        }
        for it in items
    ]


def build_exports(items: Sequence[RankedItem], timeframe: str, effort_unit: str) -> ExportBundle:
    """Markdown document and tabular rows for a ranked backlog."""
    return ExportBundle(
        markdown=build_markdown(items, timeframe, effort_unit),
        csv_rows=build_rows(items, effort_unit),
    )


def rows_to_csv(rows: Sequence[Dict[str, str]]) -> str:
    """
    Serialize rows as CSV text.

    Header comes from the first row's keys; every value is quoted and lines
    are joined with a bare newline. No rows gives an empty string.
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    output.write(",".join(headers) + "\n")
    for row in rows:
        writer.writerow([str(row.get(h) or "") for h in headers])

    return output.getvalue().rstrip("\n")
