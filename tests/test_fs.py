from pedigree_py import fs


def test_ensure_dir_and_atomic_write_and_read(tmp_path):
    d = tmp_path / "sub"
    p = d / "file.txt"
    fs.ensure_dir(d)
    assert d.exists()
    fs.atomic_write_text(p, "hello")
    assert p.read_text() == "hello"
    fs.atomic_write_text(p, "again")
    assert p.read_text() == "again"
    assert [x.name for x in d.iterdir()] == ["file.txt"]


def test_json_save_and_load(tmp_path):
    p = tmp_path / "out" / "data.json"
    obj = {"a": 1, "b": "x"}
    fs.json_save(p, obj)
    loaded = fs.json_load(p, default=None)
    assert loaded == obj


def test_json_load_default(tmp_path):
    assert fs.json_load(tmp_path / "missing.json", default={}) == {}
    bad = tmp_path / "bad.json"
    bad.write_text("{")
    assert fs.json_load(bad, default="x") == "x"
