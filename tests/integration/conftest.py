import os
import sys
import socket
import time
import subprocess
from pathlib import Path
import urllib.request

import pytest

from pedigree_py.models import Dog
from pedigree_py.storage import Storage


def _find_free_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    addr, port = s.getsockname()
    s.close()
    return port


def _seed(data_dir: Path) -> None:
    # Full siblings S and D out of P x Q, plus a dog with a dangling sire
    st = Storage(data_dir)
    st.add_dog(Dog(id="P", name="Rex", registration_number="KC-P"))
    st.add_dog(Dog(id="Q", name="Queenie"))
    st.add_dog(Dog(id="S", name="Sam", sire_id="P", dam_id="Q"))
    st.add_dog(Dog(id="D", name="Dot", sire_id="P", dam_id="Q"))
    st.add_dog(Dog(id="W", name="Waif", sire_id="ghost", dam_id="Q"))
    st.close()


@pytest.fixture(scope="module")
def live_server(tmp_path_factory):
    """Start a uvicorn server on a seeded data dir and yield the base url.

    The data dir is filled through Storage before the server starts, the
    server is pointed at it with PEDIGREE_DATA_DIR, and readiness is polled
    on /openapi.json. After the tests the server is terminated.
    """
    data_dir = tmp_path_factory.mktemp("pedigree_live")
    _seed(data_dir)
    repo_root = Path(__file__).resolve().parents[2]

    port = _find_free_port()
    cmd = [sys.executable, "-m", "uvicorn", "pedigree_py.web.app:app", "--host", "127.0.0.1", "--port", str(port)]
    env = os.environ.copy()
    env["PEDIGREE_DATA_DIR"] = str(data_dir)
    env.pop("PEDIGREE_CONFIG", None)
    env_pythonpath = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = str(repo_root) + (os.pathsep + env_pythonpath if env_pythonpath else "")
    # Do not capture stdout/stderr so server startup errors are visible in test output
    proc = subprocess.Popen(cmd, cwd=str(data_dir), env=env, stdout=None, stderr=None)

    base = f"http://127.0.0.1:{port}"
    # allow a bit more time on slower CI hosts
    deadline = time.time() + 30
    last_exc = None
    while time.time() < deadline:
        try:
            with urllib.request.urlopen(base + "/openapi.json", timeout=1) as r:
                if r.status == 200:
                    break
        except Exception as e:
            last_exc = e
            time.sleep(0.2)
            continue
    else:
        proc.kill()
        proc.wait(timeout=5)
        pytest.fail(f"Server did not become ready in time; last error: {last_exc}")

    try:
        yield base
    finally:
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
