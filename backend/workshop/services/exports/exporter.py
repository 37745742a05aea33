import datetime as dt
import re
from pathlib import Path
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm

from workshop.core.config import settings
from workshop.schemas.public import PublicChecklistOut, PublicBudgetOut

MARGIN = 15 * mm
ROW_H = 8 * mm
_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def _fmt_date(value: dt.datetime | None, with_time: bool = False) -> str:
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y %H:%M" if with_time else "%d/%m/%Y")


def _money(value) -> str:
    return f"R$ {value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def _header(c: canvas.Canvas, title: str) -> float:
    width, height = A4
    y = height - 20 * mm
    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(width / 2, y, settings.COMPANY_NAME)
    y -= 8 * mm
    c.setFont("Helvetica", 10)
    if settings.COMPANY_ADDRESS:
        c.drawCentredString(width / 2, y, settings.COMPANY_ADDRESS)
        y -= 6 * mm
    if settings.COMPANY_PHONE:
        c.drawCentredString(width / 2, y, f"Phone: {settings.COMPANY_PHONE}")
        y -= 6 * mm
    y -= 8 * mm
    c.setFont("Helvetica-Bold", 16)
    c.drawCentredString(width / 2, y, title)
    return y - 15 * mm


def _table(c: canvas.Canvas, y: float, columns: list[tuple[str, float]], rows: list[list[str]]) -> float:
    """Bordered table; starts a new page when the next row would hit the footer."""
    _, height = A4
    total_w = sum(w for _, w in columns)

    def draw_row(y, cells, bold=False):
        if bold:
            c.setFillGray(0.94)
            c.rect(MARGIN, y - ROW_H, total_w, ROW_H, fill=1, stroke=0)
            c.setFillGray(0)
        c.rect(MARGIN, y - ROW_H, total_w, ROW_H)
        c.setFont("Helvetica-Bold" if bold else "Helvetica", 9)
        x = MARGIN
        for (_, w), text in zip(columns, cells):
            c.line(x, y, x, y - ROW_H)
            # clip to roughly what fits the column
            c.drawString(x + 2 * mm, y - 5.5 * mm, text[: max(int(w / mm / 2), 4)])
            x += w
        return y - ROW_H

    y = draw_row(y, [name for name, _ in columns], bold=True)
    for cells in rows:
        if y < 40 * mm:
            c.showPage()
            y = height - 30 * mm
        y = draw_row(y, cells)
    return y


def _observations(c: canvas.Canvas, y: float, label: str, text: str | None) -> float:
    if not text:
        return y
    _, height = A4
    if y < 60 * mm:
        c.showPage()
        y = height - 30 * mm
    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, label)
    y -= 7 * mm
    c.setFont("Helvetica", 10)
    for line in text.splitlines() or [text]:
        c.drawString(MARGIN, y, line[:110])
        y -= 5 * mm
    return y


def _footer(c: canvas.Canvas, left: str, created_at: dt.datetime) -> None:
    width, _ = A4
    c.setFont("Helvetica", 8)
    c.drawString(MARGIN, 15 * mm, left)
    c.drawRightString(width - MARGIN, 15 * mm, f"Date: {_fmt_date(created_at)}")


def export_checklist_pdf(snap: PublicChecklistOut, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, _ = A4
    y = _header(c, "INSPECTION CHECKLIST")

    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, "Customer:")
    c.drawString(width / 2 + 10 * mm, y, "Vehicle:")
    y -= 8 * mm
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN, y, f"Name: {snap.customer_name}")
    c.drawString(width / 2 + 10 * mm, y, f"Model: {snap.vehicle_name}")
    y -= 6 * mm
    c.drawString(MARGIN, y, f"Status: {snap.status}  ({snap.progress.label})")
    c.drawString(width / 2 + 10 * mm, y, f"Plate: {snap.plate}")
    y -= 6 * mm
    if snap.mechanic_name:
        c.drawString(MARGIN, y, f"Mechanic: {snap.mechanic_name}")
        y -= 6 * mm
    y -= 8 * mm

    c.setFont("Helvetica-Bold", 10)
    c.drawString(MARGIN, y, "Inspection items:")
    y -= 4 * mm
    rows = [["OK" if i.checked else "X", i.item_name, i.category, i.observation or ""] for i in snap.items]
    y = _table(c, y, [("Status", 20 * mm), ("Item", 80 * mm), ("Category", 40 * mm), ("Observation", 35 * mm)], rows)
    _observations(c, y - 12 * mm, "General observations:", snap.general_observations)

    _footer(c, f"Checklist: {snap.vehicle_name} - {snap.plate}", snap.created_at)
    c.showPage()
    c.save()
    return out_path


def export_budget_pdf(snap: PublicBudgetOut, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, _ = A4
    y = _header(c, f"BUDGET {snap.budget_number or ''}".strip())

    c.setFont("Helvetica", 10)
    lines = [
        f"Customer: {snap.customer_name}",
        f"Vehicle: {snap.vehicle_name}"
        + (f" - {snap.vehicle_plate}" if snap.vehicle_plate else "")
        + (f" ({snap.vehicle_year})" if snap.vehicle_year else ""),
        f"Status: {snap.status}",
        f"Mechanic: {snap.mechanic_name or '-'}",
    ]
    for ln in lines:
        c.drawString(MARGIN, y, ln)
        y -= 6 * mm
    y -= 6 * mm

    rows = [
        [i.service_name, i.service_category or "", f"{i.quantity:g}", _money(i.unit_price), _money(i.total_price)]
        for i in snap.items
    ]
    y = _table(
        c, y,
        [("Service", 65 * mm), ("Category", 35 * mm), ("Qty", 15 * mm), ("Unit price", 30 * mm), ("Total", 30 * mm)],
        rows,
    )
    y -= 10 * mm
    c.setFont("Helvetica", 10)
    c.drawRightString(width - MARGIN, y, f"Subtotal: {_money(snap.total_amount)}")
    if snap.discount_amount:
        y -= 6 * mm
        c.drawRightString(width - MARGIN, y, f"Discount: - {_money(snap.discount_amount)}")
    y -= 7 * mm
    c.setFont("Helvetica-Bold", 11)
    c.drawRightString(width - MARGIN, y, f"Total: {_money(snap.final_amount)}")
    _observations(c, y - 12 * mm, "Observations:", snap.observations)

    _footer(c, f"Budget: {snap.budget_number or ''} - {snap.vehicle_name}", snap.created_at)
    c.showPage()
    c.save()
    return out_path


def default_export_path(prefix: str, ext: str) -> Path:
    """A fresh file path directly inside EXPORT_DIR; ``prefix`` is reduced to a slug."""
    ts = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
    slug = _UNSAFE.sub("_", prefix).strip("._") or "export"
    base = Path(settings.EXPORT_DIR).resolve()
    out = (base / f"{slug}_{ts}.{ext}").resolve()
    if out.parent != base:
        raise ValueError(f"export path escapes {base}")
    return out
