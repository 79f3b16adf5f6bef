from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import threading

from ..analysis import analyze, coefficient_profile, dog_coefficient
from ..config import load_config
from ..errors import InvalidArgument, ComputationError
from ..pedigree import pedigree_chart
from ..storage import Storage

app = FastAPI(title="pedigree-py")

logging.basicConfig(level=logging.INFO)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

cfg = load_config()

# Created in the startup event (or on first use) so that importing this module
# never touches the data directory.
storage: Optional[Storage] = None
_storage_lock = threading.Lock()


@app.on_event("startup")
def _create_storage_on_startup():
    _store()


def _store() -> Storage:
    global storage
    with _storage_lock:
        if storage is None:
            storage = Storage(cfg.data_dir)
            logging.info("Storage initialized at %s", str(cfg.data_dir))
        return storage


def _generations(value: Optional[int]) -> int:
    return cfg.default_generations if value is None else value


def _run(fn, *args):
    """Call an analysis function and translate engine errors to HTTP errors."""
    try:
        return fn(*args)
    except InvalidArgument as exc:
        raise HTTPException(status_code=400, detail={"field": exc.field, "message": str(exc)})
    except ComputationError:
        # already logged with its traceback by the analyzer
        raise HTTPException(status_code=500, detail="Coefficient calculation failed")


@app.get("/api/dogs/{dog_id}")
def api_dog(dog_id: str):
    st = _store()
    d = st.get_dog(dog_id)
    if d is None:
        raise HTTPException(status_code=404, detail="Dog not found")
    sire = st.get_dog(d.sire_id) if d.sire_id else None
    dam = st.get_dog(d.dam_id) if d.dam_id else None
    return {
        "dog": d.to_dict(),
        "sire": sire.to_dict() if sire else None,
        "dam": dam.to_dict() if dam else None,
        "offspring": [c.to_dict() for c in st.children_of(dog_id)],
    }


@app.get("/api/dogs/{dog_id}/pedigree")
def api_dog_pedigree(dog_id: str, generations: int = 3):
    st = _store()
    if st.get_dog(dog_id) is None:
        raise HTTPException(status_code=404, detail="Dog not found")
    entries = _run(pedigree_chart, st, dog_id, generations)
    return {"dogId": dog_id, "generations": generations, "pedigree": entries}


@app.get("/api/dogs/{dog_id}/inbreeding")
def api_dog_inbreeding(dog_id: str, generations: Optional[int] = None):
    st = _store()
    if st.get_dog(dog_id) is None:
        raise HTTPException(status_code=404, detail="Dog not found")
    g = _generations(generations)
    return {"dogId": dog_id, "generations": g, "coefficient": _run(dog_coefficient, st, dog_id, g)}


def _analysis_response(sire_id: str, dam_id: str, generations: Optional[int]) -> Dict[str, Any]:
    g = _generations(generations)
    result = _run(analyze, _store(), sire_id, dam_id, g, cfg.density_threshold)
    return result.to_dict()


@app.get("/api/linebreeding-analysis")
def api_linebreeding(sire_id: str, dam_id: str, generations: Optional[int] = None):
    return _analysis_response(sire_id, dam_id, generations)


@app.post("/api/linebreeding-analysis")
def api_linebreeding_post(data: Dict[str, Any]):
    # request shape: {sireId, damId, generations?}
    sire_id = data.get("sireId") or data.get("sire_id") or ""
    dam_id = data.get("damId") or data.get("dam_id") or ""
    return _analysis_response(sire_id, dam_id, data.get("generations"))


@app.get("/api/linebreeding-analysis/profile")
def api_linebreeding_profile(sire_id: str, dam_id: str, generations: Optional[int] = None):
    g = _generations(generations)
    rows = _run(coefficient_profile, _store(), sire_id, dam_id, g)
    return {
        "sireId": sire_id,
        "damId": dam_id,
        "profile": [{"generation": gen, "coefficient": f} for gen, f in rows],
    }


@app.get("/linebreeding", response_class=HTMLResponse)
def linebreeding_page(request: Request, sire_id: Optional[str] = None, dam_id: Optional[str] = None, generations: Optional[int] = None):
    g = _generations(generations)
    ctx: Dict[str, Any] = {"request": request, "sire_id": sire_id, "dam_id": dam_id, "generations": g, "result": None, "error": None}
    if sire_id and dam_id:
        try:
            ctx["result"] = _analysis_response(sire_id, dam_id, g)
        except HTTPException as exc:
            ctx["error"] = exc.detail["message"] if isinstance(exc.detail, dict) else exc.detail
    return templates.TemplateResponse(request, "linebreeding.html", ctx)
