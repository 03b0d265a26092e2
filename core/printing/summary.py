"""
core.printing.summary

The "print-summary" command: a dated account summary with a short
transactions table, sent through the PrintPipeline.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from core.printing.pipeline import PrintOptions, PrintPipeline


SUMMARY_TRANSACTIONS = [
    ("01/01/2025", "Opening deposit", "10,000", "-"),
    ("15/01/2025", "Monthly instalment", "2,000", "-"),
    ("30/01/2025", "Advance payment", "-", "5,000"),
]


def build_summary_document(today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    body = [["Date", "Description", "Credit", "Debit"]]
    body.extend(list(row) for row in SUMMARY_TRANSACTIONS)

    return {
        "title": "Overall Summary",
        "subtitle": f"Printed on {today.strftime('%d/%m/%Y')}",
        "content": [
            {"text": "Loan transactions:", "style": "sectionHeader"},
            {"table": {"header_rows": 1, "body": body}},
            {"text": "Totals:", "style": "subSectionHeader"},
            {"text": "Credit 12,000 / Debit 5,000 / Balance 7,000"},
        ],
    }


async def print_summary(pipeline: PrintPipeline, args: Any = None) -> Dict[str, bool]:
    """Build the summary document and print it.

    `args` may carry print options (e.g. {"printer": "Office"}).
    """
    pipeline.log_store.info("Print summary operation started")

    options = PrintOptions(filename="summary")
    if isinstance(args, dict):
        options = PrintOptions(**{"filename": "summary", **args})

    return await pipeline.print_document(build_summary_document(), options)
