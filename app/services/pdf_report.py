# app/services/pdf_report.py
from typing import List

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from app.models.submission import SubmissionDetail


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1.
    return text.encode("latin-1", "replace").decode("latin-1")


def _render(title: str, lines: List[str]) -> bytes:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Times", size=30)
    pdf.cell(0, 20, _latin1(title))
    pdf.ln(20)
    pdf.set_font("Times", size=12)
    for line in lines:
        if not line:
            pdf.ln(6)
            continue
        pdf.multi_cell(0, 8, _latin1(line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())


def render_test_pdf() -> bytes:
    return _render("Test PDF Generation", [])


def render_submission_report(submission: SubmissionDetail) -> bytes:
    info = submission.personal_info
    scores = submission.scores
    lines = [
        f"Student Name: {info.full_name}",
        f"Email: {info.email}",
        f"Phone: {info.phone}",
        f"Target Score: {info.target}",
        f"Submission Time: {submission.created_at:%Y-%m-%d %H:%M:%S}",
        "",
        f"Reading & Writing Fill in the Blanks: {scores.rwfib.correct}/{scores.rwfib.total}",
        f"Reading Fill in the Blanks: {scores.rfib.correct}/{scores.rfib.total}",
        f"Write From Dictation: {scores.wfd.correct}/{scores.wfd.total}",
    ]
    if submission.notes:
        lines += ["", f"Notes: {submission.notes}"]
    return _render("Placement Test Report", lines)
