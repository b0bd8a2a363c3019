from fastapi.testclient import TestClient

from context_relevance.api import app
from context_relevance.content_hash import fingerprint


client = TestClient(app)


def _buckets():
    return {
        "nearby": [{"id": "n1", "confidence": 0.5, "name": "form.cancel"}],
        "keyPattern": [
            {
                "id": "k1",
                "confidence": 0.9,
                "name": "form.save",
                "translations": [
                    {"language": "en", "value": "Save"},
                    {"language": "de", "value": "Speichern", "approvalStatus": "APPROVED"},
                ],
            }
        ],
        "semantic": [{"id": "bad", "confidence": 1.4}],
    }


def test_health_endpoint():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}


def test_rank_endpoint_orders_and_reports_rejected():
    resp = client.post("/context/rank", json={"buckets": _buckets(), "target_language": "de"})
    assert resp.status_code == 200
    data = resp.json()
    assert [c["id"] for c in data["ranked"]] == ["k1", "n1"]
    assert data["ranked"][0]["relationship_type"] == "KEY_PATTERN"
    assert abs(data["ranked"][0]["score"] - 0.9 * 0.9 * 1.2) < 1e-9
    assert data["rejected"] == ["bad"]


def test_rank_endpoint_empty_body():
    resp = client.post("/context/rank", json={})
    assert resp.status_code == 200
    assert resp.json() == {"ranked": [], "rejected": []}


def test_prompt_endpoint_builds_context_block():
    resp = client.post(
        "/context/prompt",
        json={"buckets": _buckets(), "source_language": "en", "target_language": "de"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [c["id"] for c in data["selected"]] == ["k1"]
    assert data["context_prompt"].startswith("<related_keys>")
    assert 'name="form.save" type="KEY_PATTERN" confidence="0.90" approved="true"' in data["context_prompt"]


def test_prompt_endpoint_requires_languages():
    resp = client.post("/context/prompt", json={"buckets": {}, "source_language": "", "target_language": "de"})
    assert resp.status_code == 422


def test_fingerprint_and_cache_validate():
    fp = client.post("/quality/fingerprint", json={"source_text": "Hello", "target_text": "Bonjour"}).json()
    assert fp["fingerprint"] == fingerprint("Hello", "Bonjour")

    ok = client.post(
        "/quality/cache/validate",
        json={"cached_fingerprint": fp["fingerprint"], "source_text": "Hello", "target_text": "Bonjour"},
    ).json()
    assert ok["valid"] is True

    stale = client.post(
        "/quality/cache/validate",
        json={"cached_fingerprint": fp["fingerprint"], "source_text": "Hello", "target_text": "Salut"},
    ).json()
    assert stale["valid"] is False

    missing = client.post("/quality/cache/validate", json={"source_text": "a", "target_text": "b"}).json()
    assert missing["valid"] is False


def test_cache_validate_with_full_record_returns_score():
    record = {
        "fingerprint": fingerprint("Save", "Speichern"),
        "score": 88,
        "computed_at": "2024-05-01T12:00:00Z",
    }
    hit = client.post(
        "/quality/cache/validate",
        json={"cached": record, "source_text": "Save", "target_text": "Speichern"},
    ).json()
    assert hit == {"valid": True, "fingerprint": record["fingerprint"], "score": 88}


def test_classify_endpoint():
    assert client.post("/quality/classify", json={"score": 80}).json()["decision"] == "AutoApprove"
    assert client.post("/quality/classify", json={"score": 60}).json()["decision"] == "Default"
    assert client.post("/quality/classify", json={"score": 59}).json()["decision"] == "Flag"
    custom = client.post(
        "/quality/classify",
        json={"score": 85, "config": {"autoApproveThreshold": 90, "flagThreshold": 50}},
    ).json()
    assert custom["decision"] == "Default"


def test_classify_endpoint_rejects_out_of_range_score():
    assert client.post("/quality/classify", json={"score": 101}).status_code == 422


def test_config_merge_endpoint():
    resp = client.post("/quality/config/merge", json={"update": {"flagThreshold": 70}})
    assert resp.status_code == 200
    assert resp.json()["flagThreshold"] == 70

    bad = client.post("/quality/config/merge", json={"update": {"flagThreshold": 95}})
    assert bad.status_code == 422


def test_summary_endpoint():
    resp = client.post(
        "/quality/summary",
        json={"rows": [{"language": "de", "score": 90}, {"language": "de", "score": None}]},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_scored"] == 1
    assert data["total_translations"] == 2
    assert data["distribution"]["excellent"] == 1
