import os
import threading

from fastapi import Depends, FastAPI, HTTPException, Path, Query

from .client import SolvedClient
from .errors import ProtocolMismatch, SolvedClientError, Timeout
from .models import SolvedStatus, UnsolvedFields

SOLVED_SERVER = os.environ.get("SOLVED_SERVER", "localhost:6000")
SOLVED_TIMEOUT = float(os.environ["SOLVED_TIMEOUT"]) if os.environ.get("SOLVED_TIMEOUT") else None

app = FastAPI(title="solved server gateway")

# one connection shared by every request; each exchange holds the lock
_lock = threading.Lock()
_client = None


def _http_error(exc: SolvedClientError) -> HTTPException:
    if isinstance(exc, ProtocolMismatch):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, Timeout):
        return HTTPException(status_code=504, detail=str(exc))
    return HTTPException(status_code=503, detail=str(exc))


def get_client() -> SolvedClient:
    global _client
    with _lock:
        if _client is None:
            try:
                _client = SolvedClient(SOLVED_SERVER, timeout=SOLVED_TIMEOUT)
            except SolvedClientError as exc:
                raise _http_error(exc)
        return _client


def _exchange(method, *args):
    with _lock:
        try:
            return method(*args)
        except SolvedClientError as exc:
            raise _http_error(exc)


@app.get("/solved/{file}/{field}", response_model=SolvedStatus)
def get_solved(file: int = Path(..., ge=0), field: int = Path(..., ge=0),
               client: SolvedClient = Depends(get_client)):
    solved = _exchange(client.get, file, field)
    return SolvedStatus(file=file, field=field, solved=solved)


@app.post("/solved/{file}/{field}", response_model=SolvedStatus)
def mark_solved(file: int = Path(..., ge=0), field: int = Path(..., ge=0),
                client: SolvedClient = Depends(get_client)):
    _exchange(client.set, file, field)
    return SolvedStatus(file=file, field=field, solved=True)


@app.get("/unsolved/{file}", response_model=UnsolvedFields)
def get_unsolved(file: int = Path(..., ge=0),
                 first: int = Query(..., ge=0),
                 last: int = Query(..., ge=0),
                 max_fields: int = Query(0, ge=0, alias="max"),
                 client: SolvedClient = Depends(get_client)):
    fields = _exchange(client.getall, file, first, last, max_fields)
    return UnsolvedFields(file=file, first=first, last=last, fields=fields)
