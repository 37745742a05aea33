from workshop.db.models import Checklist
from workshop.services import gateway
from workshop.services.exports.exporter import export_checklist_pdf, export_budget_pdf
from workshop.services.public_viewer import snapshot_of


def test_checklist_pdf_spans_pages(db, admin, mechanic, make_checklist, tmp_path):
    c = make_checklist(mechanic, n_items=60, general_observations="Barulho na suspensão\nTrocar pneus")
    gateway.apply(db, admin, Checklist, c.id, {"status": "completed"})
    out = export_checklist_pdf(snapshot_of(db.get(Checklist, c.id)), tmp_path / "pdf" / "c.pdf")
    data = out.read_bytes()
    assert data.startswith(b"%PDF")
    # page tree plus at least two pages
    assert data.count(b"/Type /Page") >= 3

def test_budget_pdf(db, mechanic, make_budget, tmp_path):
    b = make_budget(mechanic, discount_amount="10", observations="Validade 15 dias")
    out = export_budget_pdf(snapshot_of(b), tmp_path / "b.pdf")
    assert out.read_bytes().startswith(b"%PDF")


def test_export_path_is_a_slug_inside_export_dir(tmp_path, monkeypatch):
    from workshop.core.config import settings
    from workshop.services.exports.exporter import default_export_path

    monkeypatch.setattr(settings, "EXPORT_DIR", str(tmp_path / "exports"))
    out = default_export_path("checklist_/../../x/../y", "pdf")
    assert out.parent == (tmp_path / "exports").resolve()
    assert "/" not in out.name and ".." not in out.name
    assert default_export_path("../..", "pdf").name.startswith("export_")
