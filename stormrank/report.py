from __future__ import annotations

"""
Report generator
----------------
Renders the ranked tables of a finished `StormAnalysis`:
- `render_bar_charts` draws one horizontal bar chart per metric (top-N)
- `generate_docx_report` writes a DOCX report with the charts, top-N
  tables, pipeline statistics and a reproducibility footer

Report dependencies (matplotlib, numpy, python-docx) are imported lazily so
the pipeline itself runs without them.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple
import os
import tempfile

from .config import DEFAULT_TOP_N
from .models import ImpactSummary, RankedTable


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database"
    institutional_author: str = "NOAA National Centers for Environmental Information"
    location: str = "Asheville, NC, USA"
    # defaults to the day the report is built
    access_date_iso: str = field(default_factory=lambda: date.today().isoformat())
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "Bulk storm data file (1950-2011), compressed CSV."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Storm Impact Report"
    subtitle: str = "Health and economic impact of severe weather events in the United States"
    dataset_name: str = "NOAA Storm Database"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many event types to show in bar charts / tables
    top_n: int = DEFAULT_TOP_N


# metric -> (chart title, axis label, is money)
METRIC_LABELS: Dict[str, Tuple[str, str, bool]] = {
    "fatalities": ("Fatalities by Event Type", "Fatalities", False),
    "injuries": ("Injuries by Event Type", "Injuries", False),
    "crop_damage": ("Crop Damage by Event Type", "Crop damage (US$ billions)", True),
    "property_damage": ("Property Damage by Event Type", "Property damage (US$ billions)", True),
}


def format_total(metric: str, value: float) -> str:
    if METRIC_LABELS.get(metric, ("", "", False))[2]:
        return f"${value:,.0f}"
    return f"{int(value):,}"


# -----------------------------
# Charts
# -----------------------------

def render_bar_charts(
    summary: ImpactSummary,
    out_dir: str,
    *,
    top_n: int = DEFAULT_TOP_N,
) -> List[Tuple[str, str]]:
    """
    Draw one horizontal bar chart per non-empty ranked table.

    Returns (title, png_path) pairs in metric order. The largest total is
    drawn at the top of each chart.
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    os.makedirs(out_dir, exist_ok=True)
    charts: List[Tuple[str, str]] = []

    for table in summary.tables():
        rows = table.top(top_n)
        if not rows:
            continue
        title, xlabel, is_money = METRIC_LABELS[table.metric]
        title = f"Top {len(rows)} {title}"
        labels = [k for k, _ in rows][::-1]
        values = np.array([v for _, v in rows][::-1], dtype=float)
        if is_money:
            values = values / 1e9
        pos = np.arange(len(labels))

        plt.figure(figsize=(8, 5))
        plt.barh(pos, values, color="C0" if not is_money else "C1", edgecolor="black", linewidth=0.6)
        plt.yticks(pos, labels)
        plt.title(title)
        plt.xlabel(xlabel)
        plt.tight_layout()
        path = os.path.join(out_dir, f"top_{table.metric}.png")
        plt.savefig(path, dpi=200)
        plt.close()
        charts.append((title, path))

    return charts


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    analysis,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report + charts for a finished StormAnalysis.

    The dataset file is not modified; everything comes from the in-memory
    working set and its ranked tables.
    """
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    summary: Optional[ImpactSummary] = analysis.summary
    if summary is None or summary.is_empty():
        raise ValueError("No results to report on (run the pipeline first, or the working set is empty).")

    tmpdir = tempfile.mkdtemp(prefix="stormrank_report_")
    charts = render_bar_charts(summary, tmpdir, top_n=config.top_n)

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(header: List[str], rows: List[List[str]]) -> None:
        t = doc.add_table(rows=1, cols=len(header))
        for i, h in enumerate(header):
            t.rows[0].cells[i].text = h
        for row in rows:
            cells = t.add_row().cells
            for i, v in enumerate(row):
                cells[i].text = v

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    cfg = analysis.config
    doc.add_paragraph("")
    _kv("Dataset", config.dataset_name)
    _kv("Records loaded", str(len(analysis.records)))
    _kv("Records analysed", str(len(analysis.working)))
    _kv("Year range", f"{cfg.year_min} to {cfg.year_max}")

    # Dataset citation section
    doc.add_paragraph("")
    doc.add_heading("Dataset citation", level=1)
    cit = config.citation
    if cit.file_name:
        doc.add_paragraph(f"Data file used: {cit.file_name}")
    if cit.file_note:
        doc.add_paragraph(f"File note: {cit.file_note}")
    doc.add_paragraph(
        f"{cit.institutional_author} (accessed {cit.access_date_iso}). "
        f"{cit.database_name}. {cit.location}. {cit.website}."
    )

    # Data processing
    doc.add_paragraph("")
    doc.add_heading("Data processing", level=1)
    fs = analysis.filter_stats
    if fs is not None:
        doc.add_paragraph("Records removed before analysis:")
        _table(["Reason", "Records"], [
            ["Unparseable begin date", str(fs.bad_date)],
            [f"Outside {cfg.year_min}-{cfg.year_max}", str(fs.out_of_range)],
            ["No fatalities, injuries or damage", str(fs.zero_impact)],
            ["Unknown event type (OTHER, ?)", str(fs.excluded_type)],
        ])
    rs = analysis.rule_stats
    if rs is not None:
        doc.add_paragraph("")
        doc.add_paragraph(
            f"Event types were normalized from {rs.distinct_before} distinct spellings to "
            f"{rs.distinct_after} labels using an ordered list of pattern rules. "
            f"{len(rs.unmatched)} spellings matched no rule and were kept as recorded."
        )
    ds = analysis.damage_stats
    if ds is not None and ds.invalid_total:
        doc.add_paragraph(
            f"Damage exponent codes {', '.join(repr(c) for c in sorted(ds.invalid_codes))} are not "
            f"valid; {ds.invalid_property} property and {ds.invalid_crop} crop damage values were left "
            "out of the damage totals."
        )
    if analysis.stage_log:
        doc.add_paragraph("Pipeline stages:")
        for line in analysis.stage_log:
            doc.add_paragraph(line, style="List Bullet")

    # Results
    doc.add_paragraph("")
    doc.add_heading("Results", level=1)
    chart_by_metric = {os.path.basename(p): (t, p) for t, p in charts}
    for table in summary.tables():
        title, _, _ = METRIC_LABELS[table.metric]
        doc.add_heading(title, level=2)
        chart = chart_by_metric.get(f"top_{table.metric}.png")
        if chart:
            doc.add_picture(chart[1], width=Inches(6.0))
        rows = _top_rows(table, config.top_n)
        if rows:
            _table(["Rank", "Event type", "Total"], rows)
        else:
            doc.add_paragraph("No records.")
        if table.excluded:
            doc.add_paragraph(f"{table.excluded} records excluded (invalid damage exponent).")
        doc.add_paragraph("")

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as pkg_version
    from datetime import datetime as _dt
    generated_at = _dt.now().isoformat(timespec="seconds")

    doc.add_paragraph(f"stormrank version: {pkg_version}")
    doc.add_paragraph(f"Report generated at: {generated_at}")
    if config.citation.file_name:
        doc.add_paragraph(f"Dataset file: {config.citation.file_name}")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path


def _top_rows(table: RankedTable, n: int) -> List[List[str]]:
    return [[str(i), k, format_total(table.metric, v)] for i, (k, v) in enumerate(table.top(n), start=1)]
