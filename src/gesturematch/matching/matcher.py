"""
Template matching for drawn gestures.

Scores the most recently drawn primitives against every template in the
library and reports the best one, with the template aligned onto the
drawing for feedback.
"""

import math

from gesturematch.config import MatcherConfig
from gesturematch.errors import GeometryError
from gesturematch.matching.alignment import align_template_to_drawn
from gesturematch.matching.rmsd import rmsd
from gesturematch.models import MatchResult
from gesturematch.templates.library import get_template_library
from gesturematch.tracer import get_tracer, trace


def candidate_window(items, count):
    """The last `count` items, in drawing order; empty when count is 0."""
    start = len(items) - count
    return [items[i] for i in range(start, len(items))]


def has_enough_primitives(template, segments, arcs, circles):
    return (
        len(segments) >= template.segment_count
        and len(arcs) >= template.arc_count
        and len(circles) >= template.circle_count
    )


@trace(label="match_against_templates")
def match_against_templates(drawn_segments, drawn_arcs, drawn_circles, config=None, library=None):
    """
    Find the template that best matches the trailing drawn primitives.

    For each template, in library order:
    1. Skip it if fewer primitives of some kind were drawn than it needs
    2. Take the trailing window sized to its counts
    3. Align the template onto the window and compute the RMSD
    4. raw_score = 1 / rmsd, or +inf when rmsd is within
       exact_match_tolerance; score = raw_score - min_score

    The highest score wins; ties keep the earlier template. If no template
    could be attempted the result has template None and score -inf.
    """
    if config is None:
        config = MatcherConfig()
    if library is None:
        library = get_template_library()
    tracer = get_tracer()

    best = MatchResult()
    attempted = 0

    for template in library:
        if not has_enough_primitives(template, drawn_segments, drawn_arcs, drawn_circles):
            continue

        window_segments = candidate_window(drawn_segments, template.segment_count)
        window_arcs = candidate_window(drawn_arcs, template.arc_count)
        window_circles = candidate_window(drawn_circles, template.circle_count)

        try:
            segments, arcs, circles, centroid = align_template_to_drawn(
                window_segments, window_arcs, window_circles, template, config.alignment,
            )
        except GeometryError as e:
            tracer.event(f"Skipped {template.name}: {e}", level="WARN")
            continue

        attempted += 1
        diff = rmsd(window_segments, window_arcs, window_circles, segments, arcs, circles)
        raw_score = math.inf if diff <= config.scoring.exact_match_tolerance else 1.0 / diff
        score = raw_score - template.min_score

        tracer.event(f"Scored {template.name}", level="DEBUG", rmsd=diff, score=score)

        if score > best.score:
            best = MatchResult(
                score=score,
                raw_score=raw_score,
                rmsd=diff,
                template=template,
                centroid=centroid,
                matched_segments=segments,
                matched_arcs=arcs,
                matched_circles=circles,
            )

    if best.template is None:
        tracer.event(f"No template matched ({attempted} attempted)")
    else:
        tracer.event(
            "Best match",
            template=best.template, score=best.score, attempted=attempted,
        )

    return best
