"""FastAPI web application for the kaiseki morphological analyzer."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from kaiseki import KaisekiError, __version__

from .state import app_state


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app_state.pool.release_all()


app = FastAPI(
    title="Kaiseki Morphological Analyzer",
    description="Japanese morphological analysis with MeCab",
    version=__version__,
    lifespan=lifespan,
)

# Configure templates
BASE_DIR = Path(__file__).parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def _check_length(text: str):
    if len(text) > app_state.max_text_length:
        return (
            f"テキストが長すぎます（{len(text):,}文字）。"
            f"{app_state.max_text_length:,}文字以内で入力してください。"
        )
    return None


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    """Main page with the analysis form."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"max_text_length": app_state.max_text_length},
    )


@app.post("/api/parse", response_class=HTMLResponse)
def parse_text(request: Request, text: str = Form(...)):
    """Analyze text and return an HTML fragment for htmx."""
    error = _check_length(text)
    if error:
        return templates.TemplateResponse(
            request,
            "partials/error.html",
            {"error": error, "hint": "テキストを分割して、もう一度お試しください。"},
            status_code=400,
        )

    try:
        result = app_state.pool.analyze(text)
    except KaisekiError as e:
        return templates.TemplateResponse(
            request,
            "partials/error.html",
            {
                "error": f"解析に失敗しました：{e}",
                "hint": "テキストを確認して、もう一度お試しください。",
            },
            status_code=500,
        )

    return templates.TemplateResponse(
        request,
        "partials/analysis.html",
        {"text": text, "result_html": result.to_html()},
    )


@app.get("/api/parse")
def parse_json(text: str):
    """Analyze text and return the cloned node chain as JSON."""
    error = _check_length(text)
    if error:
        raise HTTPException(status_code=400, detail=error)

    try:
        result = app_state.pool.analyze(text)
    except KaisekiError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return result.to_dict()


@app.get("/api/version")
def version():
    """Report library and dictionary versions."""
    try:
        analyzer = app_state.pool.get()
        return {
            "kaiseki": __version__,
            "mecab": analyzer.version(),
            "dictionaries": [info.to_dict() for info in analyzer.dictionary_info()],
        }
    except KaisekiError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
