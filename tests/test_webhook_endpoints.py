"""End-to-end tests through the FastAPI app.

The payment store is the in-memory SQLite table from conftest and WhatsApp
sends go to the recording dispatcher.
"""
from decimal import Decimal

from app.services.notification.service import NOT_FOUND_TEXT


def test_webhook_form_post_issues_receipt(client, make_payment, dispatcher, receipts_dir):
    make_payment("T1", amount=Decimal("500"))

    resp = client.post("/api/whatsapp/verify", data={"From": "addr1", "Body": "Transaction ID: T1"})

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["pdfUrl"].endswith("/api/receipts/receipt-T1.pdf")
    assert (receipts_dir / "receipt-T1.pdf").exists()
    assert len(dispatcher.calls) == 1
    assert dispatcher.calls[0].to == "addr1"
    assert dispatcher.calls[0].media_urls == [body["pdfUrl"]]
    assert "receipt-T1.pdf" in dispatcher.calls[0].media_urls[0]


def test_webhook_json_post_is_accepted(client, make_payment):
    make_payment("T1")

    resp = client.post("/api/whatsapp/verify", json={"From": "addr1", "Body": "Transaction ID: T1\nthanks"})

    assert resp.status_code == 200, resp.text
    assert resp.json()["success"] is True


def test_webhook_unknown_transaction_is_404(client, dispatcher, receipts_dir):
    resp = client.post("/api/whatsapp/verify", data={"From": "addr1", "Body": "Transaction ID: T1"})

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Payment not found"}
    assert [(c.to, c.body) for c in dispatcher.calls] == [("addr1", NOT_FOUND_TEXT)]
    assert not (receipts_dir / "receipt-T1.pdf").exists()


def test_webhook_without_marker_is_400(client, dispatcher):
    resp = client.post("/api/whatsapp/verify", data={"From": "addr1", "Body": "hi"})

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert len(dispatcher.calls) == 1


def test_webhook_invalid_json_is_400(client, dispatcher):
    resp = client.post(
        "/api/whatsapp/verify",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid payload", "code": "WHK001"}
    assert dispatcher.calls == []


def test_issued_receipt_can_be_downloaded(client, make_payment):
    make_payment("T1")
    client.post("/api/whatsapp/verify", data={"From": "addr1", "Body": "Transaction ID: T1"})

    resp = client.get("/api/receipts/receipt-T1.pdf")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["accept-ranges"] == "bytes"
    assert resp.headers["cache-control"].startswith("public, max-age=")
    assert resp.headers["content-disposition"] == 'inline; filename="receipt-T1.pdf"'
    assert resp.content.startswith(b"%PDF")


def test_receipt_range_request(client, store):
    artifact = bytes(range(200)) * 5
    store.save("R1", artifact)

    resp = client.get("/api/receipts/receipt-R1.pdf", headers={"Range": "bytes=0-99"})

    assert resp.status_code == 206
    assert resp.headers["content-range"] == "bytes 0-99/1000"
    assert resp.headers["content-length"] == "100"
    assert resp.content == artifact[:100]


def test_receipt_full_body_without_range(client, store):
    artifact = b"x" * 1000
    store.save("R1", artifact)

    resp = client.get("/api/receipts/receipt-R1.pdf")

    assert resp.status_code == 200
    assert resp.headers["content-length"] == "1000"
    assert resp.content == artifact


def test_receipt_multi_range_is_rejected(client, store):
    store.save("R1", b"x" * 1000)

    resp = client.get("/api/receipts/receipt-R1.pdf", headers={"Range": "bytes=0-9,20-29"})

    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_receipt_unsatisfiable_range(client, store):
    store.save("R1", b"x" * 1000)

    resp = client.get("/api/receipts/receipt-R1.pdf", headers={"Range": "bytes=1000-"})

    assert resp.status_code == 416
    assert resp.headers["content-range"] == "bytes */1000"


def test_receipt_bad_name_is_400(client):
    resp = client.get("/api/receipts/receipt-abc.pdf.exe")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid filename", "code": "FIL001"}


def test_receipt_missing_is_404(client):
    resp = client.get("/api/receipts/receipt-nothing.pdf")
    assert resp.status_code == 404
    assert resp.json()["message"] == "PDF not found"


def test_static_mount_serves_pdf_headers(client, store):
    store.save("S1", b"%PDF-static")

    resp = client.get("/receipts/receipt-S1.pdf")

    assert resp.status_code == 200
    assert resp.content == b"%PDF-static"
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == 'inline; filename="receipt-S1.pdf"'
    assert resp.headers["accept-ranges"] == "bytes"


def test_health_reports_ok(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "OK"
    assert body["timestamp"].endswith("Z")


def test_metrics_endpoint_exposes_receipt_counters(client, make_payment):
    make_payment("T1")
    client.post("/api/whatsapp/verify", data={"From": "addr1", "Body": "Transaction ID: T1"})

    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert "receipts_issued_total" in resp.text
    assert "receipt_pipeline_failures_total" in resp.text
