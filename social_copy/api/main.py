"""FastAPI application for the social copy service."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from social_copy.config import settings
from social_copy.errors import ValidationError
from social_copy.pipeline import CopyPipeline
from social_copy.security import safe_log_error

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Social Copy API",
    description="Social media copy generation for news articles with retrieval over past copies",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Global instance; external clients inside are created on first use
pipeline = CopyPipeline()


def get_pipeline() -> CopyPipeline:
    """Dependency returning the process-wide pipeline."""
    return pipeline


class IndexRequest(BaseModel):
    """Request model for indexing a published copy."""
    model_config = ConfigDict(populate_by_name=True)

    noticia: Optional[str] = Field(None, description="News title or text")
    copy_text: Optional[str] = Field(None, alias="copy", description="Published Facebook copy")


class IndexResponse(BaseModel):
    message: str
    id: str


class GenerateRequest(BaseModel):
    """Request model for copy generation."""
    url: Optional[str] = Field(None, description="Article URL")


class FoundCopy(BaseModel):
    id: str
    score: float
    noticia: str
    copy_text: str = Field(serialization_alias="copy")


class GenerateResponse(BaseModel):
    """Generated copy per platform plus the references used."""
    facebook: str
    twitter: str
    wpp: str
    found_copies: List[FoundCopy] = Field(default_factory=list, serialization_alias="foundCopies")


class SimilarRequest(BaseModel):
    texto: Optional[str] = Field(None, description="Text to search for")


class SimilarResponse(BaseModel):
    id: str
    score: float
    metadata: Dict[str, Any]


INDEX_ERROR = "Hubo un error al indexar la noticia."
GENERATE_ERROR = "Hubo un error al generar el copy con RAG."
SIMILAR_ERROR = "Hubo un error al buscar la similitud."
NOT_FOUND_ERROR = "No se encontraron coincidencias similares."


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": ...}."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors, reported like missing fields."""
    logger.warning(f"Invalid request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Cuerpo de la petición inválido."})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Social Copy API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat()
    }


@app.get("/config")
async def get_config(copy_pipeline: CopyPipeline = Depends(get_pipeline)):
    """
    Get current configuration (excluding sensitive data).
    """
    return {
        "embedding_model": settings.embedding_model,
        "generation_model": settings.generation_model,
        "pinecone_index_name": settings.pinecone_index_name,
        "shortener_enabled": bool(settings.bitly_access_token),
        "policy": copy_pipeline.policy.to_dict()
    }


@app.post("/indexar", response_model=IndexResponse)
async def index_copy(
    index_request: IndexRequest,
    copy_pipeline: CopyPipeline = Depends(get_pipeline)
):
    """
    Index a news text together with the copy published for it.

    The stored copies are later retrieved as examples when generating
    new copies.
    """
    try:
        entry_id = await copy_pipeline.index_copy(index_request.noticia, index_request.copy_text)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        safe_log_error(logger, "Error indexing copy", e)
        raise HTTPException(status_code=500, detail=INDEX_ERROR)

    return IndexResponse(message="Noticia indexada exitosamente.", id=entry_id)


async def _generate(generate_request: GenerateRequest, copy_pipeline: CopyPipeline):
    try:
        logger.info(f"Received generate request: url={generate_request.url}")
        result = await copy_pipeline.generate_copies(generate_request.url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        safe_log_error(logger, "Error generating copies", e)
        raise HTTPException(status_code=500, detail=GENERATE_ERROR)

    response = GenerateResponse(
        facebook=result["facebook"],
        twitter=result["twitter"],
        wpp=result["wpp"],
        found_copies=[
            FoundCopy(
                id=found["id"],
                score=found["score"],
                noticia=found["noticia"],
                copy_text=found["copy"]
            )
            for found in result["foundCopies"]
        ]
    )
    return JSONResponse(content=response.model_dump(by_alias=True))


@app.post("/generar_copy_rag")
async def generate_copy_rag(
    generate_request: GenerateRequest,
    copy_pipeline: CopyPipeline = Depends(get_pipeline)
):
    """
    Generate Facebook, Twitter and WhatsApp copies for an article URL.

    1. Scrapes the article title (and description)
    2. Retrieves the most similar indexed copies
    3. Generates the three copies concurrently
    4. Appends the tagged article link to the configured platform
    """
    return await _generate(generate_request, copy_pipeline)


@app.post("/generar_copy")
async def generate_copy(
    generate_request: GenerateRequest,
    copy_pipeline: CopyPipeline = Depends(get_pipeline)
):
    """Alias of /generar_copy_rag."""
    return await _generate(generate_request, copy_pipeline)


@app.post("/generate-copies")
async def generate_copies(
    generate_request: GenerateRequest,
    copy_pipeline: CopyPipeline = Depends(get_pipeline)
):
    """Alias of /generar_copy_rag."""
    return await _generate(generate_request, copy_pipeline)


@app.post("/buscar_similar", response_model=SimilarResponse)
async def find_similar(
    similar_request: SimilarRequest,
    copy_pipeline: CopyPipeline = Depends(get_pipeline)
):
    """
    Return the indexed entry closest to the given text.

    Useful for checking what the retrieval step would pick up.
    """
    try:
        match = await copy_pipeline.find_similar(similar_request.texto)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        safe_log_error(logger, "Error searching similar copy", e)
        raise HTTPException(status_code=500, detail=SIMILAR_ERROR)

    if match is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_ERROR)

    return SimilarResponse(**match.to_dict())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "social_copy.api.main:app",
        host=settings.api_host,
        port=settings.port
    )
