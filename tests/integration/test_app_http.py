import requests


def test_openapi_and_docs_http(live_server):
    base = live_server
    r = requests.get(base + "/openapi.json", timeout=5)
    assert r.status_code == 200
    j = r.json()
    assert "openapi" in j and "paths" in j

    r2 = requests.get(base + "/docs", timeout=5)
    assert r2.status_code == 200
    assert "text/html" in r2.headers.get("content-type", "")


def test_linebreeding_analysis_http(live_server):
    r = requests.get(live_server + "/api/linebreeding-analysis", params={"sire_id": "S", "dam_id": "D", "generations": 6}, timeout=5)
    assert r.status_code == 200
    j = r.json()
    assert j["inbreedingCoefficient"] == 0.25
    assert j["geneticDiversity"] == 0.75
    assert j["recommendations"] == ["high risk, alternative pairing strongly recommended"]
    reg = {a["ancestorId"]: a["registrationNumber"] for a in j["commonAncestors"]}
    assert reg == {"P": "KC-P", "Q": None}

    r2 = requests.post(live_server + "/api/linebreeding-analysis", json={"sireId": "D", "damId": "S"}, timeout=5)
    assert r2.status_code == 200
    assert r2.json()["inbreedingCoefficient"] == 0.25


def test_bad_requests_http(live_server):
    r = requests.get(live_server + "/api/linebreeding-analysis", params={"sire_id": "S", "dam_id": "S"}, timeout=5)
    assert r.status_code == 400
    assert r.json()["detail"]["field"] == "damId"

    r2 = requests.get(live_server + "/api/linebreeding-analysis", params={"sire_id": "S", "dam_id": "D", "generations": 11}, timeout=5)
    assert r2.status_code == 400

    r3 = requests.get(live_server + "/api/dogs/nobody", timeout=5)
    assert r3.status_code == 404


def test_warnings_are_part_of_the_response(live_server):
    r = requests.get(live_server + "/api/linebreeding-analysis", params={"sire_id": "W", "dam_id": "D"}, timeout=5)
    assert r.status_code == 200
    j = r.json()
    # W and D are half siblings through Q; W's sire is not on record
    assert j["inbreedingCoefficient"] == 0.125
    assert [w["missingId"] for w in j["dataIntegrityWarnings"]] == ["ghost"]


def test_linebreeding_page_http(live_server):
    r = requests.get(live_server + "/linebreeding", params={"sire_id": "S", "dam_id": "D"}, timeout=5)
    assert r.status_code == 200
    assert "text/html" in r.headers.get("content-type", "")
    assert "25.00%" in r.text
