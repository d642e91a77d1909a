"""
Settlement label decluttering.

Greedy relaxation: every colliding pair of label boxes is pushed apart along
the line between their centers, pass after pass, until a pass finds no
collision or the pass budget runs out. This is a local heuristic, not an
optimal layout; collisions left after the last pass are accepted.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from .models import LabelBox, Node, Point

logger = structlog.get_logger()


@dataclass
class LabelOptions:
    """Label sizing and relaxation options."""

    step: float = 12.0  # Push per collision per pass
    max_passes: int = 10
    epsilon: float = 0.1  # Offsets smaller than this are not reported
    default_direction: Tuple[float, float] = (1.0, 0.5)  # Push direction for coincident centers

    # Label box geometry, matching how the renderer draws names
    char_width: float = 7.0
    padding: float = 6.0
    box_height: float = 16.0
    name_offset: float = 28.0  # Label center sits this far below the marker


@dataclass
class LabelLayout:
    """Outcome of a relaxation run."""

    offsets: Dict[str, Point] = field(default_factory=dict)
    passes: int = 0
    residual_collisions: int = 0

    @property
    def converged(self) -> bool:
        return self.residual_collisions == 0


@dataclass
class _MovingBox:
    owner_id: str
    x: float
    y: float
    width: float
    height: float
    dx: float = 0.0
    dy: float = 0.0

    @property
    def center(self):
        return self.x + self.width / 2 + self.dx, self.y + self.height / 2 + self.dy


def boxes_overlap(a, b) -> bool:
    """Strict overlap of two offset boxes; touching edges do not collide."""
    return not (
        a.x + a.width + a.dx <= b.x + b.dx
        or b.x + b.width + b.dx <= a.x + a.dx
        or a.y + a.height + a.dy <= b.y + b.dy
        or b.y + b.height + b.dy <= a.y + a.dy
    )


def build_label_boxes(
    settlements: Sequence[Node],
    positions: Optional[Mapping[str, Point]] = None,
    options: Optional[LabelOptions] = None,
) -> List[LabelBox]:
    """
    Label rectangles for settlements, sized from their names.

    Nodes without a name are sized from their id.
    """
    options = options or LabelOptions()
    positions = positions or {}
    boxes = []
    for node in settlements:
        x, y = positions.get(node.id, node.position)
        text = node.name or node.id
        width = len(text) * options.char_width + options.padding * 2
        boxes.append(
            LabelBox(
                owner_id=node.id,
                x=x - width / 2,
                y=y + options.name_offset - options.box_height / 2,
                width=width,
                height=options.box_height,
            )
        )
    return boxes


class LabelDeclutterer:
    """Resolves overlapping label boxes by iterative pairwise pushes."""

    def __init__(self, options: Optional[LabelOptions] = None):
        self.options = options or LabelOptions()

    def resolve(self, boxes: Sequence[LabelBox]) -> Dict[str, Point]:
        """
        Offsets that separate colliding labels.

        Args:
            boxes: Label rectangles; their current ``offset`` is the starting point

        Returns:
            Sparse map of owner id -> offset, only for labels that moved
        """
        return self.resolve_layout(boxes).offsets

    def resolve_layout(self, boxes: Sequence[LabelBox]) -> LabelLayout:
        """Like ``resolve`` but also reports passes used and leftover collisions."""
        opts = self.options
        moving = [
            _MovingBox(b.owner_id, b.x, b.y, b.width, b.height, b.offset[0], b.offset[1])
            for b in boxes
        ]

        passes = 0
        collisions = 0
        while passes < opts.max_passes:
            passes += 1
            collisions = self._relax(moving)
            if collisions == 0:
                break
        else:
            collisions = self._count_collisions(moving)

        if collisions:
            logger.debug(
                "Label collisions left after pass budget",
                collisions=collisions,
                passes=passes,
            )

        offsets = {
            box.owner_id: Point(box.dx, box.dy)
            for box in moving
            if abs(box.dx) > opts.epsilon or abs(box.dy) > opts.epsilon
        }
        return LabelLayout(offsets=offsets, passes=passes, residual_collisions=collisions)

    def _relax(self, moving: List[_MovingBox]) -> int:
        opts = self.options
        collisions = 0
        for i in range(len(moving)):
            a = moving[i]
            for j in range(i + 1, len(moving)):
                b = moving[j]
                if not boxes_overlap(a, b):
                    continue
                collisions += 1

                (ax, ay), (bx, by) = a.center, b.center
                push_x, push_y = ax - bx, ay - by
                if abs(push_x) < 0.1 and abs(push_y) < 0.1:
                    push_x, push_y = opts.default_direction
                length = math.hypot(push_x, push_y)
                step_x = push_x / length * opts.step
                step_y = push_y / length * opts.step

                a.dx += step_x
                a.dy += step_y
                b.dx -= step_x
                b.dy -= step_y
        return collisions

    def _count_collisions(self, moving: List[_MovingBox]) -> int:
        return sum(
            1
            for i in range(len(moving))
            for j in range(i + 1, len(moving))
            if boxes_overlap(moving[i], moving[j])
        )
