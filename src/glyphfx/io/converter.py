"""Converters between fontTools/ufoLib representations and domain models.

Reading goes through ``PointToSegmentPen`` into ``ContourCollectorPen`` (a
``BasePen``), which turns every drawing command into cubic segments:
quadratic and super-Bezier segments are decomposed by ``BasePen``, lines are
stored as straight cubics.

Writing goes the other way through ``SegmentToPointPen``; straight segments
are emitted as ``lineTo`` so line points stay line points in the GLIF.

Single-point contours (often legacy anchors) have no segments. They are set
aside in ``GlyphMetadata.extras["lone_points"]`` on read and drawn back
unchanged on write.
"""

import logging
from typing import Any

from fontTools.pens.basePen import BasePen
from fontTools.pens.pointPen import PointToSegmentPen, SegmentToPointPen
from fontTools.pens.recordingPen import RecordingPointPen

from glyphfx.domain.contour import Contour, ContourKind, Point, Segment
from glyphfx.domain.glyph import Component, Glyph, GlyphMetadata

logger = logging.getLogger(__name__)

# GLIF glyph attributes carried opaquely in GlyphMetadata.extras
EXTRA_ATTRIBUTES = ("note", "image", "guidelines", "anchors", "lib")

LONE_POINTS = "lone_points"


class GlyphObject:
    """Attribute bag ``ufoLib`` reads glyph data into and writes it from."""

    def __init__(self) -> None:
        self.width: float = 0
        self.height: float = 0
        self.unicodes: list[int] = []


class ContourCollectorPen(BasePen):
    """Segment pen collecting domain contours and component references.

    Example:
        pen = ContourCollectorPen()
        glyph_set.readGlyph(name, GlyphObject(), PointToSegmentPen(pen))
        contours, components = pen.contours, pen.components
    """

    def __init__(self, glyphSet: Any = None) -> None:
        super().__init__(glyphSet)
        self.contours: list[Contour] = []
        self.components: list[Component] = []
        self._segments: list[Segment] = []
        self._start: Point | None = None
        self._last: Point | None = None

    def _moveTo(self, pt: tuple[float, float]) -> None:
        self._segments = []
        self._start = self._last = Point(*pt)

    def _lineTo(self, pt: tuple[float, float]) -> None:
        end = Point(*pt)
        self._segments.append(Segment.line(self._last, end))
        self._last = end

    def _curveToOne(
        self,
        pt1: tuple[float, float],
        pt2: tuple[float, float],
        pt3: tuple[float, float],
    ) -> None:
        end = Point(*pt3)
        self._segments.append(Segment(self._last, Point(*pt1), Point(*pt2), end))
        self._last = end

    def _closePath(self) -> None:
        if self._last is not None and self._last != self._start:
            self._lineTo(self._start.to_tuple())
        self._finish(ContourKind.CLOSED)

    def _endPath(self) -> None:
        self._finish(ContourKind.OPEN)

    def _finish(self, kind: ContourKind) -> None:
        if self._segments:
            self.contours.append(Contour(segments=tuple(self._segments), kind=kind))
        self._segments = []
        self._start = self._last = None

    def addComponent(self, glyphName: str, transformation: Any) -> None:
        self.components.append(Component(glyphName, tuple(transformation)))


def _replay_outlines(recording: RecordingPointPen, point_pen: Any) -> list[dict[str, Any]]:
    """Replay recorded outlines into ``point_pen``, holding back single-point contours.

    Returns:
        The held-back points as ``{"x", "y", "type", "name", "identifier"}`` dicts
    """
    lone_points: list[dict[str, Any]] = []
    path: list[tuple[str, tuple, dict]] = []
    for operator, args, kwargs in recording.value:
        if operator == "beginPath":
            path = [(operator, args, kwargs)]
        elif operator == "addPoint":
            path.append((operator, args, kwargs))
        elif operator == "endPath":
            points = path[1:]
            if len(points) == 1:
                (x, y), segment_type, _, name = points[0][1]
                lone_points.append(
                    {
                        "x": x,
                        "y": y,
                        "type": segment_type,
                        "name": name,
                        "identifier": points[0][2].get("identifier"),
                    }
                )
            else:
                for op, op_args, op_kwargs in path:
                    getattr(point_pen, op)(*op_args, **op_kwargs)
                point_pen.endPath(*args, **kwargs)
            path = []
        else:
            getattr(point_pen, operator)(*args, **kwargs)
    return lone_points


def ufo_glyph_to_domain(name: str, glyph_set: Any) -> Glyph:
    """Read one glyph from a ufoLib ``GlyphSet`` into a domain Glyph.

    Args:
        name: Glyph name
        glyph_set: ``fontTools.ufoLib.glifLib.GlyphSet``

    Returns:
        Domain Glyph model with metadata extras preserved
    """
    glyph_object = GlyphObject()
    recording = RecordingPointPen()
    glyph_set.readGlyph(name, glyph_object, recording)
    pen = ContourCollectorPen()
    lone_points = _replay_outlines(recording, PointToSegmentPen(pen))

    extras = {}
    for attr in EXTRA_ATTRIBUTES:
        value = getattr(glyph_object, attr, None)
        if value:
            extras[attr] = value
    if lone_points:
        logger.debug("Holding %d single-point contours of %s", len(lone_points), name)
        extras[LONE_POINTS] = lone_points

    metadata = GlyphMetadata(
        name=name,
        unicodes=list(glyph_object.unicodes),
        width=glyph_object.width,
        height=glyph_object.height,
        extras=extras,
    )
    return Glyph(metadata=metadata, contours=tuple(pen.contours), components=tuple(pen.components))


def draw_glyph_points(glyph: Glyph, point_pen: Any) -> None:
    """Draw a domain glyph's outlines and components into a point pen."""
    pen = SegmentToPointPen(point_pen)
    for contour in glyph.contours:
        contour.draw(pen)
    for point in glyph.metadata.extras.get(LONE_POINTS, []):
        point_pen.beginPath()
        point_pen.addPoint(
            (point["x"], point["y"]),
            segmentType=point["type"],
            name=point["name"],
            identifier=point["identifier"],
        )
        point_pen.endPath()
    for component in glyph.components:
        point_pen.addComponent(component.base_glyph, component.transformation)


def domain_glyph_to_ufo(glyph: Glyph) -> GlyphObject:
    """Build the ufoLib glyph object for writing ``glyph``."""
    glyph_object = GlyphObject()
    glyph_object.width = glyph.metadata.width
    glyph_object.height = glyph.metadata.height
    glyph_object.unicodes = list(glyph.metadata.unicodes)
    for attr, value in glyph.metadata.extras.items():
        if attr in EXTRA_ATTRIBUTES:
            setattr(glyph_object, attr, value)
    return glyph_object
