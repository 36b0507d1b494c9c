"""taxosim HTTP service."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from taxosim.graph import CSRGraph
from taxosim.hirst_st_onge import find_best_chain
from taxosim.loader import build_graph_from_jsonl
from taxosim.measures import (
    MEASURES,
    MeasureOptions,
    UnknownMeasureError,
    compute_all_measures,
    get_measure,
)
from taxosim.traversal import bfs_shortest_path, find_lcas

logger = logging.getLogger(__name__)

GRAPH: Optional[CSRGraph] = None

# Configuration via environment variables
EDGES_PATH = os.environ.get("TAXOSIM_EDGES_PATH", "data/edges.jsonl")
NODES_PATH = os.environ.get("TAXOSIM_NODES_PATH")
LOAD_PREDICATES = os.environ.get("TAXOSIM_PREDICATES")  # comma-separated
DEFAULT_MAX_DEPTH = os.environ.get("TAXOSIM_MAX_DEPTH")


def load_graph(edges_path: str, nodes_path: Optional[str] = None,
               predicates: Optional[str] = None) -> CSRGraph:
    """
    Load the taxonomy from disk.

    Args:
        edges_path: Path to the edges JSONL file
        nodes_path: Optional path to the nodes JSONL file
        predicates: Optional comma-separated predicate whitelist

    Returns:
        Loaded CSRGraph
    """
    if not os.path.exists(edges_path):
        raise FileNotFoundError(f"Edges file not found: {edges_path}")
    if nodes_path and not os.path.exists(nodes_path):
        raise FileNotFoundError(f"Nodes file not found: {nodes_path}")

    whitelist = None
    if predicates:
        whitelist = [p.strip() for p in predicates.split(",") if p.strip()]

    return build_graph_from_jsonl(edges_path, nodes_path, predicates=whitelist)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle taxonomy loading on startup."""
    global GRAPH
    if GRAPH is None:
        print(f"Loading taxonomy from {EDGES_PATH}...")
        GRAPH = load_graph(EDGES_PATH, NODES_PATH, LOAD_PREDICATES)
    print("Server ready!")
    yield
    GRAPH = None


APP = FastAPI(
    title="taxosim",
    lifespan=lifespan,
)

APP.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class PairRequest(BaseModel):
    """A concept pair plus measure options."""

    concept1: str
    concept2: str
    measure: str = "rada_similarity"
    options: dict = Field(default_factory=dict)


def _require_graph() -> CSRGraph:
    if GRAPH is None:
        raise HTTPException(503, "taxonomy not loaded")
    return GRAPH


def _options(request: PairRequest) -> MeasureOptions:
    options = dict(request.options)
    if DEFAULT_MAX_DEPTH is not None and not (
        "max_depth" in options or "maxDepth" in options
    ):
        options["max_depth"] = DEFAULT_MAX_DEPTH
    try:
        return MeasureOptions.coerce(options)
    except (TypeError, ValueError) as e:
        raise HTTPException(400, f"invalid options: {e}")


@APP.get("/health")
def health():
    """Report the size of the loaded taxonomy."""
    graph = _require_graph()
    return {"status": "ok", "nodes": graph.num_nodes, "edges": graph.num_edges}


@APP.get("/measures")
def list_measures():
    """List registered measure names."""
    return sorted(MEASURES)


@APP.post("/similarity")
def similarity(request: PairRequest):
    """Score a concept pair with one measure."""
    graph = _require_graph()
    try:
        measure = get_measure(request.measure)
    except UnknownMeasureError:
        raise HTTPException(404, f"unknown measure: {request.measure}")
    options = _options(request)

    for concept in (request.concept1, request.concept2):
        if not graph.has_node(concept):
            logger.info("Concept %s not in taxonomy", concept)

    score = measure(graph, request.concept1, request.concept2, options)
    return {
        "measure": request.measure,
        "concept1": request.concept1,
        "concept2": request.concept2,
        "score": score,
    }


@APP.post("/similarity/all")
def similarity_all(request: PairRequest):
    """Score a concept pair with every measure."""
    graph = _require_graph()
    options = _options(request)
    return {
        "concept1": request.concept1,
        "concept2": request.concept2,
        "scores": compute_all_measures(
            graph, request.concept1, request.concept2, options
        ),
    }


@APP.post("/path")
def path(request: PairRequest):
    """Return the shortest path, common ancestors and best chain for a pair.

    ``names`` maps every node in the response that has a ``name`` property
    to that name.
    """
    graph = _require_graph()
    options = _options(request)
    shortest = bfs_shortest_path(
        graph, request.concept1, request.concept2, options.predicates
    )
    lcas = find_lcas(graph, request.concept1, request.concept2, options.predicates)
    chain = find_best_chain(
        graph, request.concept1, request.concept2, options.hirst_st_onge_config()
    )
    return {
        "concept1": request.concept1,
        "concept2": request.concept2,
        "shortest_path": shortest,
        "lcas": lcas,
        "chain": {
            "score": chain.score,
            "path": chain.path,
            "changes": chain.changes,
        },
        "names": graph.node_names(
            [request.concept1, request.concept2]
            + (shortest or [])
            + lcas
            + (chain.path or [])
        ),
    }
