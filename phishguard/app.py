from urllib.parse import unquote
from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import ValidationError
from .config import get_settings
from .errors import ErrorKind, PhishGuardError
from .schemas import AnalyzeRequest, AnalysisResult, ErrorResponse
from .service import SubmissionTracker, Superseded, get_analyzer
from .utils.logging import get_logger

log = get_logger(__name__)

security = HTTPBasic()

settings = get_settings()

app = FastAPI(title="PhishGuard", version=settings.agent_version)

if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

STATUS_BY_KIND = {
    ErrorKind.NETWORK_ERROR: 503,
    ErrorKind.API_ERROR: 502,
    ErrorKind.UNKNOWN: 500,
}

_tracker = None


def get_tracker() -> SubmissionTracker:
    global _tracker
    if _tracker is None:
        _tracker = SubmissionTracker(get_analyzer())
    return _tracker


def require_basic_auth(credentials: HTTPBasicCredentials = Depends(security)) -> str:
    if not (credentials.username == settings.analyzer_user and credentials.password == settings.analyzer_pass):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return credentials.username


@app.exception_handler(PhishGuardError)
async def phishguard_error_handler(request, exc: PhishGuardError):
    return JSONResponse(status_code=STATUS_BY_KIND[exc.kind], content=exc.to_dict())


@app.get("/health")
def health():
    return {"ok": True, "version": settings.agent_version}


async def _run(owner: str, url: str, tracker: SubmissionTracker):
    try:
        return await tracker.submit(owner, url)
    except Superseded:
        return JSONResponse(
            status_code=409,
            content={"error": "SUPERSEDED", "title": "Analysis Cancelled",
                     "message": "A newer analysis request replaced this one."},
        )


ERROR_RESPONSES = {
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@app.post("/analyze", response_model=AnalysisResult, responses=ERROR_RESPONSES)
async def analyze(
    body: AnalyzeRequest,
    owner: str = Depends(require_basic_auth),
    tracker: SubmissionTracker = Depends(get_tracker),
):
    return await _run(owner, body.url, tracker)


@app.get("/analyze", response_model=AnalysisResult, responses=ERROR_RESPONSES)
async def analyze_from_query(
    url: str = Query(...),
    owner: str = Depends(require_basic_auth),
    tracker: SubmissionTracker = Depends(get_tracker),
):
    # prefill entry point: /analyze?url=<encoded url>
    try:
        body = AnalyzeRequest(url=unquote(url))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    return await _run(owner, body.url, tracker)
