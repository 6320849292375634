import json

from hisab.cli import main
from hisab.models.product import Product


def test_seed_export_import_clear(db, tmp_path, capsys):
    seed = tmp_path / "products.json"
    seed.write_text(json.dumps([
        {"name": "Soap", "salePrice": 2.5, "quantity": 100},
        {"name": "Tea", "price": "3.00", "stock": 4},
    ]), encoding="utf-8")
    assert main(["seed", str(seed)]) == 0

    out = tmp_path / "backup.json"
    assert main(["export", "-o", str(out)]) == 0
    doc = json.loads(out.read_text(encoding="utf-8"))
    assert sorted(p["name"] for p in doc["products"]) == ["Soap", "Tea"]

    assert main(["clear"]) == 2
    assert main(["clear", "--yes"]) == 0
    db.expire_all()
    assert db.query(Product).count() == 0

    assert main(["import", str(out)]) == 0
    db.expire_all()
    assert db.query(Product).count() == 2


def test_import_reports_format_error(db, tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"products": []}), encoding="utf-8")
    assert main(["import", str(bad)]) == 1
    lines = [ln for ln in capsys.readouterr().err.splitlines() if ln.startswith("{")]
    err = json.loads(lines[-1])
    assert err["error"] == "FormatError"
    assert err["changed"] is False
