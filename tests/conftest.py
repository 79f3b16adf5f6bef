import os
import sys
import tempfile
import shutil
import atexit
from pathlib import Path

# Ensure repo root is on sys.path so tests can import the package directly
root = Path(__file__).resolve().parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

_pedigree_test_data_dir = None


def pytest_configure(config):
    """Point PEDIGREE_DATA_DIR at a session temp dir so the web app and any
    subprocesses never write into the repository-local `data/` folder."""
    global _pedigree_test_data_dir
    td = tempfile.mkdtemp(prefix="pedigree_test_data_")
    _pedigree_test_data_dir = td
    os.environ.setdefault("PEDIGREE_DATA_DIR", td)


def pytest_unconfigure(config):
    global _pedigree_test_data_dir
    td = _pedigree_test_data_dir
    _pedigree_test_data_dir = None
    if td and os.path.exists(td):
        shutil.rmtree(td, ignore_errors=True)


def _atexit_cleanup():
    td = _pedigree_test_data_dir
    if td and os.path.exists(td):
        shutil.rmtree(td, ignore_errors=True)


atexit.register(_atexit_cleanup)
