"""
JSON input and output for drawn figures and match results.

Figures list segments by endpoints, arcs by end/mid/end points, and
circles either fully (with center, radius, normal) or by their three guide
points, in which case they are solved on load.
"""

import json
import math
import os

from gesturematch.geometry.curves import circle_from_3_points, primitive_polylines
from gesturematch.models import Arc, Circle, DrawnFigure, Segment
from gesturematch.tracer import get_tracer, trace


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def _entries(data, kind):
    entries = data.get(kind, [])
    if not isinstance(entries, list) or not all(isinstance(item, dict) for item in entries):
        raise ValueError(f"'{kind}' must be a list of objects")
    return entries


def figure_from_dict(data, config=None):
    """
    Build a DrawnFigure from parsed JSON data.

    Raises ValueError for malformed entries and GeometryError subclasses
    for degenerate ones.
    """
    if not isinstance(data, dict):
        raise ValueError("figure must be a JSON object")

    segments = [Segment.model_validate(item) for item in _entries(data, "segments")]
    arcs = [Arc.model_validate(item) for item in _entries(data, "arcs")]

    circles = []
    for item in _entries(data, "circles"):
        if "center" in item:
            circles.append(Circle.model_validate(item))
            continue
        missing = [key for key in ("p1", "p2", "p3") if key not in item]
        if missing:
            raise ValueError(
                f"circle needs a center or guide points p1, p2, p3; missing {', '.join(missing)}"
            )
        circles.append(circle_from_3_points(item["p1"], item["p2"], item["p3"], config=config).circle)

    return DrawnFigure(segments=segments, arcs=arcs, circles=circles)


@trace(label="load_figure")
def load_figure(path, config=None):
    """
    Load a drawn figure from a JSON file.

    Raises FileNotFoundError if path does not exist.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Figure not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    figure = figure_from_dict(data, config=config)
    tracer.event(
        f"Loaded figure: {len(figure.segments)} segments, "
        f"{len(figure.arcs)} arcs, {len(figure.circles)} circles"
    )
    return figure


def _json_number(value):
    """Infinite scores as the strings "inf" / "-inf", which strict JSON allows."""
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def result_to_dict(result, config=None):
    """
    Summarize a MatchResult for JSON output.

    Includes the aligned template primitives and their sampled overlay
    polylines; template metadata is passed through as-is. Infinite scores
    are written as strings.
    """
    template = result.template
    data = {
        "template": template.name if template else None,
        "score": _json_number(result.score),
        "raw_score": _json_number(result.raw_score),
        "rmsd": result.rmsd,
        "accepted": result.accepted,
        "centroid": list(result.centroid) if result.centroid else None,
        "matched_segments": [s.model_dump() for s in result.matched_segments],
        "matched_arcs": [a.model_dump() for a in result.matched_arcs],
        "matched_circles": [c.model_dump() for c in result.matched_circles],
    }
    if template:
        data["metadata"] = {
            "family": template.family.value,
            "min_score": template.min_score,
            "color": template.color,
            "audio_tag": template.audio_tag,
            "description": template.description,
        }
        polylines = primitive_polylines(
            result.matched_segments, result.matched_arcs, result.matched_circles, config=config,
        )
        data["overlay"] = [polyline.tolist() for polyline in polylines]
    return data


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to strict JSON.

    Raises ValueError if the data holds NaN or infinite floats.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump()

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str, allow_nan=False)

    tracer.event(f"Saved JSON: {path}")
