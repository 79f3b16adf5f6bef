import logging
import threading

import pytest
from fastapi import HTTPException
from fastapi.openapi.docs import get_swagger_ui_html
from starlette.requests import Request

from pedigree_py.models import Dog
from pedigree_py.storage import Storage, MemoryAncestryStore
from pedigree_py.web import app as web_app
from pedigree_py.web.app import app


@pytest.fixture
def store(tmp_path, monkeypatch):
    st = Storage(tmp_path / "store")
    st.add_dog(Dog(id="P", name="Rex"))
    st.add_dog(Dog(id="Q", name="Queenie"))
    st.add_dog(Dog(id="S", name="Sam", sire_id="P", dam_id="Q"))
    st.add_dog(Dog(id="D", name="Dot", sire_id="P", dam_id="Q"))
    monkeypatch.setattr(web_app, "storage", st)
    yield st
    st.close()


def _request(path="/linebreeding"):
    return Request({"type": "http", "method": "GET", "path": path, "headers": [], "query_string": b""})


def test_openapi_schema_callable():
    schema = app.openapi()
    assert isinstance(schema, dict)
    assert "openapi" in schema
    assert "/api/linebreeding-analysis" in schema["paths"]


def test_docs_renderer_returns_html_response():
    resp = get_swagger_ui_html(openapi_url=app.openapi_url, title=f"{app.title} - Swagger UI")
    assert "html" in resp.media_type


def test_routes():
    paths = {getattr(r, "path", None) for r in app.routes}
    assert {
        "/api/dogs/{dog_id}",
        "/api/dogs/{dog_id}/pedigree",
        "/api/dogs/{dog_id}/inbreeding",
        "/api/linebreeding-analysis",
        "/api/linebreeding-analysis/profile",
        "/linebreeding",
    } <= paths


def test_linebreeding_get(store):
    body = web_app.api_linebreeding("S", "D", 6)
    assert body["sireId"] == "S"
    assert body["inbreedingCoefficient"] == 0.25
    assert body["geneticDiversity"] == 0.75
    assert body["recommendations"] == ["high risk, alternative pairing strongly recommended"]
    assert body["dataIntegrityWarnings"] == []
    anc = body["commonAncestors"][0]
    assert anc["ancestorId"] == "P"
    assert anc["name"] == "Rex"
    assert anc["pathways"] == ["Sire > Grandsire & Dam > Grandsire"]


def test_linebreeding_post_uses_default_generations(store):
    body = web_app.api_linebreeding_post({"sireId": "S", "damId": "D"})
    assert body["generations"] == web_app.cfg.default_generations
    assert body["inbreedingCoefficient"] == 0.25


def test_invalid_arguments_are_400(store):
    with pytest.raises(HTTPException) as exc:
        web_app.api_linebreeding("S", "S", 6)
    assert exc.value.status_code == 400
    assert exc.value.detail["field"] == "damId"

    with pytest.raises(HTTPException) as exc:
        web_app.api_linebreeding_post({"sireId": "S", "damId": "D", "generations": 42})
    assert exc.value.status_code == 400
    assert exc.value.detail["field"] == "generations"

    with pytest.raises(HTTPException) as exc:
        web_app.api_linebreeding("S", "nobody", 6)
    assert exc.value.detail["field"] == "damId"


def test_profile(store):
    body = web_app.api_linebreeding_profile("S", "D", 2)
    assert body["profile"] == [{"generation": 1, "coefficient": 0.25}, {"generation": 2, "coefficient": 0.25}]


def test_dog_endpoints(store):
    store.add_dog(Dog(id="PUP", name="Pup", sire_id="S", dam_id="D"))
    d = web_app.api_dog("S")
    assert d["dog"]["name"] == "Sam"
    assert d["sire"]["id"] == "P"
    assert [c["id"] for c in d["offspring"]] == ["PUP"]

    assert web_app.api_dog_inbreeding("PUP", 6)["coefficient"] == 0.25
    chart = web_app.api_dog_pedigree("PUP", 1)["pedigree"]
    assert [e["dog_id"] for e in chart] == ["PUP", "S", "D"]

    with pytest.raises(HTTPException) as exc:
        web_app.api_dog("nobody")
    assert exc.value.status_code == 404
    with pytest.raises(HTTPException) as exc:
        web_app.api_dog_pedigree("PUP", 0)
    assert exc.value.status_code == 400


def test_linebreeding_page(store):
    resp = web_app.linebreeding_page(_request(), "S", "D", 6)
    html = resp.body.decode("utf-8")
    assert "25.00%" in html
    assert "Rex" in html

    resp = web_app.linebreeding_page(_request(), "S", "S", 6)
    assert "cannot be paired with itself" in resp.body.decode("utf-8")

    empty = web_app.linebreeding_page(_request(), None, None, None)
    assert "<form" in empty.body.decode("utf-8")


def test_computation_error_is_500_and_logged_once(monkeypatch, caplog):
    # corrupted records: A's parents both have A as their sire
    cyclic = MemoryAncestryStore([
        Dog(id="A", sire_id="B", dam_id="C"),
        Dog(id="B", sire_id="A"),
        Dog(id="C", sire_id="A"),
        Dog(id="S", sire_id="A"),
        Dog(id="D", sire_id="A"),
    ])
    monkeypatch.setattr(web_app, "storage", cyclic)
    with caplog.at_level(logging.ERROR):
        with pytest.raises(HTTPException) as exc:
            web_app.api_linebreeding("S", "D", 6)
    assert exc.value.status_code == 500
    tracebacks = [r for r in caplog.records if r.exc_info]
    assert len(tracebacks) == 1


def test_store_is_created_once_under_concurrent_first_use(tmp_path, monkeypatch):
    monkeypatch.setattr(web_app, "storage", None)
    monkeypatch.setattr(web_app.cfg, "data_dir", tmp_path / "lazy")
    created = []
    real_storage = web_app.Storage

    def counting_storage(root):
        st = real_storage(root)
        created.append(st)
        return st

    monkeypatch.setattr(web_app, "Storage", counting_storage)
    seen = []
    start = threading.Barrier(8)

    def first_request():
        start.wait()
        seen.append(web_app._store())

    threads = [threading.Thread(target=first_request) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    try:
        assert len(created) == 1
        assert all(s is created[0] for s in seen)
    finally:
        for st in created:
            st.close()
