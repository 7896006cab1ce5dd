"""Glyph representation and metadata.

This module defines the glyph domain model, which represents a single
glyph in a font source with its outline contours, component references
and metadata.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from glyphfx.domain.contour import Contour


@dataclass
class GlyphMetadata:
    """Metadata about a glyph.

    Attributes:
        name: Glyph name (e.g., "A", "B", "exclam")
        unicodes: Unicode code points (empty for unencoded glyphs)
        width: Horizontal advance width in font units
        height: Vertical advance height in font units
        extras: Opaque glyph data carried through untouched
            (anchors, guidelines, note, lib, image)
    """

    name: str
    unicodes: list[int] = field(default_factory=list)
    width: float = 0
    height: float = 0
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of metadata
        """
        return {
            "name": self.name,
            "unicodes": list(self.unicodes),
            "width": self.width,
            "height": self.height,
            "extras": copy.deepcopy(self.extras),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlyphMetadata":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of metadata

        Returns:
            GlyphMetadata instance
        """
        return cls(
            name=data["name"],
            unicodes=list(data.get("unicodes", [])),
            width=data.get("width", 0),
            height=data.get("height", 0),
            extras=copy.deepcopy(data.get("extras", {})),
        )


@dataclass(frozen=True)
class Component:
    """A reference to another glyph, placed with an affine transformation.

    Attributes:
        base_glyph: Name of the referenced glyph
        transformation: (xx, xy, yx, yy, dx, dy) affine matrix
    """

    base_glyph: str
    transformation: tuple[float, float, float, float, float, float] = (1, 0, 0, 1, 0, 0)

    def to_dict(self) -> dict[str, Any]:
        return {"base": self.base_glyph, "transformation": list(self.transformation)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Component":
        xx, xy, yx, yy, dx, dy = data["transformation"]
        return cls(base_glyph=data["base"], transformation=(xx, xy, yx, yy, dx, dy))


@dataclass
class Glyph:
    """Represents a single glyph with its contours.

    Designed for efficient serialization for parallel processing.

    Attributes:
        metadata: Glyph metadata (name, unicodes, metrics, extras)
        contours: Outline contours in source order
        components: Component references, never touched by effects
    """

    metadata: GlyphMetadata
    contours: tuple[Contour, ...] = ()
    components: tuple[Component, ...] = ()

    def __post_init__(self) -> None:
        self.contours = tuple(self.contours)
        self.components = tuple(self.components)

    @property
    def name(self) -> str:
        """Get glyph name from metadata.

        Returns:
            Glyph name
        """
        return self.metadata.name

    def is_empty(self) -> bool:
        """Check if glyph has no outlines.

        Returns:
            True if glyph has no contours, False otherwise
        """
        return len(self.contours) == 0

    def has_open_contours(self) -> bool:
        """Check if any contour is an open path.

        Returns:
            True if glyph has at least one open contour
        """
        return any(not contour.closed for contour in self.contours)

    def open_contour_indices(self) -> list[int]:
        """Indices of the open contours, in source order."""
        return [i for i, contour in enumerate(self.contours) if not contour.closed]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the glyph
        """
        return {
            "metadata": self.metadata.to_dict(),
            "contours": [c.to_dict() for c in self.contours],
            "components": [c.to_dict() for c in self.components],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Glyph":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a glyph

        Returns:
            Glyph instance
        """
        return cls(
            metadata=GlyphMetadata.from_dict(data["metadata"]),
            contours=tuple(Contour.from_dict(c) for c in data["contours"]),
            components=tuple(Component.from_dict(c) for c in data.get("components", [])),
        )
