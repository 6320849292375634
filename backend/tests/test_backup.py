import json

import pytest

from hisab.errors import FormatError
from hisab.models.customer import Customer
from hisab.models.product import Product
from hisab.models.transaction import Transaction
from hisab.services import backup_service
from hisab.services.backup_service import BackupService
from hisab.services.customer_service import CustomerLedger
from hisab.services.product_service import ProductService
from hisab.services.transaction_service import TransactionEngine


@pytest.fixture()
def backup(db):
    return BackupService(db)


@pytest.fixture()
def seeded(db):
    products = ProductService(db)
    engine = TransactionEngine(db)
    ledger = CustomerLedger(db)
    soap = products.add_product("Soap", 2.50, 100)
    tea = products.add_product("Tea", 3.10, 20)
    products.add_product("Empty shelf", 0, 0)
    engine.complete_sale(engine.build_draft([(soap, 10)]).lines)
    engine.complete_sale(
        engine.build_draft([(soap, 5), (tea, 2)]).lines,
        is_credit_sale=True,
        customer_name="Bob",
        customer_phone="555-0100",
    )
    ledger.upsert_customer("Zed")
    return {"soap": soap, "tea": tea}


def _comparable(doc):
    return {
        "products": sorted(
            (p["name"], p["salePrice"], p["quantity"], p["createdAt"], p["updatedAt"]) for p in doc["products"]
        ),
        "customers": sorted(
            (c["name"], c["phoneNumber"], c["outstandingBalance"], c["createdAt"]) for c in doc["customers"]
        ),
        "transactions": sorted(
            (
                t["timestamp"],
                t["totalAmount"],
                t["isCreditSale"],
                t["customerId"] is not None,
                tuple((ln["productName"], ln["quantity"], ln["unitPrice"]) for ln in t["lines"]),
            )
            for t in doc["transactions"]
        ),
    }


def test_export_format(backup, seeded):
    doc = backup.export_all()
    assert set(doc) == {"products", "customers", "transactions", "exportDate", "version"}
    assert doc["version"] == "1.0"
    assert doc["exportDate"].endswith("Z")
    soap = next(p for p in doc["products"] if p["name"] == "Soap")
    assert soap["salePrice"] == 2.5
    assert soap["quantity"] == 85
    bob = next(c for c in doc["customers"] if c["name"] == "Bob")
    assert bob["outstandingBalance"] == 18.7
    credit = next(t for t in doc["transactions"] if t["isCreditSale"])
    assert credit["customerId"] == bob["id"]
    assert credit["totalAmount"] == 18.7
    json.dumps(doc)


def test_round_trip(backup, seeded, db):
    original = backup.export_all()
    counts = backup.import_all(json.dumps(original))
    assert counts == {"products": 3, "customers": 2, "transactions": 2}
    again = backup.export_all()
    assert _comparable(again) == _comparable(original)

    bob = db.query(Customer).filter(Customer.name == "Bob").one()
    credit = db.query(Transaction).filter(Transaction.is_credit_sale.is_(True)).one()
    assert credit.customer_id == bob.id


def test_import_remaps_ids(backup, db):
    doc = {
        "products": [{"id": 40, "name": "Soap", "salePrice": 2.5, "quantity": 1}],
        "customers": [{"id": 7, "name": "Bob", "outstandingBalance": 12.5}],
        "transactions": [
            {
                "id": 99,
                "timestamp": 1700000000,
                "totalAmount": 12.5,
                "isCreditSale": 1,
                "customerId": 7,
                "lines": [{"productId": 40, "productName": "Soap", "quantity": 5, "unitPrice": 2.5}],
            },
            {"id": 98, "timestamp": 1600000000, "totalAmount": 1, "isCreditSale": 0, "customerId": 3},
        ],
        "somethingElse": True,
    }
    backup.import_all(doc)
    products = db.query(Product).all()
    assert [(p.id, p.name) for p in products] == [(1, "Soap")]
    bob = db.query(Customer).one()
    assert bob.id == 1 and bob.outstanding_balance_cents == 1250
    txs = db.query(Transaction).order_by(Transaction.id).all()
    # oldest first
    assert [t.timestamp for t in txs] == [1600000000, 1700000000]
    assert txs[0].customer_id is None
    assert txs[1].customer_id == 1 and txs[1].is_credit_sale is True
    assert txs[1].lines[0].product_id == 1


def test_import_backfills_missing_timestamps(backup, db):
    backup.import_all({
        "products": [{"name": "Soap", "salePrice": 1, "quantity": 1}],
        "customers": [],
        "transactions": [{"totalAmount": 1, "isCreditSale": False}],
    })
    p = db.query(Product).one()
    t = db.query(Transaction).one()
    assert p.created_at > 0 and p.updated_at > 0
    assert t.timestamp > 0 and t.created_at > 0


@pytest.mark.parametrize(
    "document",
    [
        {"products": [], "customers": []},
        {"customers": [], "transactions": []},
        {"products": {}, "customers": [], "transactions": []},
        "not json",
        "[]",
        {"products": [{"name": "", "salePrice": 1, "quantity": 1}], "customers": [], "transactions": []},
        {"products": [{"name": "X", "salePrice": -1, "quantity": 1}], "customers": [], "transactions": []},
        {"products": [], "customers": [], "transactions": [{"totalAmount": "abc", "isCreditSale": False}]},
        {"products": [{"name": "X", "salePrice": "1e20", "quantity": 1}], "customers": [], "transactions": []},
        {"products": [{"name": "X", "salePrice": 1, "quantity": 10 ** 20}], "customers": [], "transactions": []},
        {"products": [], "customers": [{"name": "Bob", "outstandingBalance": -10 ** 20}], "transactions": []},
        {
            "products": [],
            "customers": [],
            "transactions": [
                {"totalAmount": 1, "isCreditSale": False, "lines": [{"quantity": 1, "unitPrice": 10 ** 20}]},
            ],
        },
    ],
)
def test_bad_document_leaves_store_untouched(backup, seeded, db, document):
    before = _comparable(backup.export_all())
    with pytest.raises(FormatError) as exc:
        backup.import_all(document)
    assert exc.value.changed is False
    assert _comparable(backup.export_all()) == before


def test_export_is_bounded(backup, seeded):
    doc = backup.export_all(transaction_limit=1)
    assert len(doc["transactions"]) == 1
    assert doc["transactions"][0]["isCreditSale"] is True


def test_clear_all_resets_ids(backup, seeded, db):
    backup.clear_all()
    assert db.query(Product).count() == 0
    assert db.query(Customer).count() == 0
    assert db.query(Transaction).count() == 0
    assert ProductService(db).add_product("Fresh", 1, 1) == 1
    assert CustomerLedger(db).upsert_customer("New") == 1


def test_import_drops_unknown_product_links_with_warning(backup, db, monkeypatch):
    warnings = []
    monkeypatch.setattr(backup_service.log, "warning", warnings.append)
    backup.import_all({
        "products": [{"id": 1, "name": "Soap", "salePrice": 2.5, "quantity": 1}],
        "customers": [],
        "transactions": [
            {
                "id": 5,
                "totalAmount": 5,
                "isCreditSale": False,
                "lines": [
                    {"productId": 1, "productName": "Soap", "quantity": 1, "unitPrice": 2.5},
                    {"productId": 77, "productName": "Gone", "quantity": 1, "unitPrice": 2.5},
                ],
            },
        ],
    })
    lines = sorted(db.query(Transaction).one().lines, key=lambda ln: ln.product_name)
    assert [(ln.product_name, ln.product_id) for ln in lines] == [("Gone", None), ("Soap", 1)]
    assert any("unknown product 77" in w for w in warnings)
