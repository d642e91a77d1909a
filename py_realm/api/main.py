"""FastAPI application exposing the layout engine."""

from typing import Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .. import __version__
from ..config import settings
from ..config.shape_params import ShapeParameters
from ..core.coastal import Coastline, classify
from ..core.labels import LabelDeclutterer
from ..core.layout_analysis import LayoutReport, analyze_layout
from ..core.models import LabelBox, Link, MapLayout, MapOverrides, Node, Point
from ..core.pipeline import MapGenerator
from ..core.validation import GraphValidationError
from ..utils.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

app = FastAPI(
    title="py-realm Layout API",
    description="Procedural borders, roads, terrain and labels for political fantasy maps",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class LayoutRequest(BaseModel):
    """Input graph for a layout run."""

    nodes: List[Node] = Field(..., description="Every location on the map")
    links: List[Link] = Field(default_factory=list, description="Road connections")
    seed: int = Field(0, description="Global seed; increment it for a new variation")
    shape_params: Optional[ShapeParameters] = Field(
        None, description="Visual tuning, defaults to the reference look"
    )
    overrides: Optional[MapOverrides] = Field(None, description="Editor state")


class LabelRequest(BaseModel):
    """Label boxes to declutter."""

    boxes: List[LabelBox]


class LabelResponse(BaseModel):
    """Offsets for labels that had to move."""

    offsets: Dict[str, Point]
    passes: int
    converged: bool
    residual_collisions: int


class ClassifyRequest(BaseModel):
    """Free-text location description."""

    text: str = ""


class ClassifyResponse(BaseModel):
    """Coastal classification result."""

    classification: Coastline


def _run_layout(request: LayoutRequest) -> MapLayout:
    generator = MapGenerator(
        shape_params=request.shape_params,
        width=settings.canvas_width,
        height=settings.canvas_height,
    )
    try:
        return generator.generate(request.nodes, request.links, request.seed, request.overrides)
    except GraphValidationError as e:
        logger.warning("Rejected malformed graph", node_id=e.node_id, error=str(e))
        raise HTTPException(status_code=400, detail=str(e))


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "py-realm Layout API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/layout", response_model=MapLayout)
def generate_layout(request: LayoutRequest):
    """Generate outlines, roads, terrain and label offsets for a graph."""
    logger.info("Layout requested", nodes=len(request.nodes), links=len(request.links), seed=request.seed)
    return _run_layout(request)


@app.post("/layout/report", response_model=LayoutReport)
def layout_report(request: LayoutRequest):
    """Generate a layout and report nesting and overlap problems."""
    layout = _run_layout(request)
    return analyze_layout(layout, request.nodes)


@app.post("/labels/resolve", response_model=LabelResponse)
def resolve_labels(request: LabelRequest):
    """Push overlapping label boxes apart."""
    result = LabelDeclutterer().resolve_layout(request.boxes)
    return LabelResponse(
        offsets=result.offsets,
        passes=result.passes,
        converged=result.converged,
        residual_collisions=result.residual_collisions,
    )


@app.post("/classify", response_model=ClassifyResponse)
def classify_description(request: ClassifyRequest):
    """Classify a location description as coastal or inland."""
    return ClassifyResponse(classification=classify(request.text))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
