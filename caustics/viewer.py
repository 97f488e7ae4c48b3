"""
viewer.py - Interactive caustic viewer

Keeps the receiver-plane depth as the only interactive state and
redraws the projected caustic whenever it changes. Lens vertices and
refracted directions are computed once by the caller and cached here,
since they do not depend on the plane depth.

Default keys:
    w       move the receiver plane away from the lens
    s       move the receiver plane toward the lens
    q       log the current lens-to-wall distance
    Escape  quit (closing the window also quits)

Project: Caustics Visualizer
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pygame

from .surfaces import DISPLAY_DOMAIN, ReceiverPlane, to_display

logger = logging.getLogger(__name__)


WINDOW_TITLE = "Caustics Visualizer"
WINDOW_SIZE = (256, 256)

BACKGROUND_COLOR = (0, 0, 0)
POINT_COLOR = (255, 255, 255)


class Intent(Enum):
    """User requests delivered by the window."""
    INCREASE_DISTANCE = "increase_distance"
    DECREASE_DISTANCE = "decrease_distance"
    REPORT_DISTANCE = "report_distance"
    QUIT = "quit"
    RESIZE = "resize"


KEY_BINDINGS: Dict[int, Intent] = {
    pygame.K_w: Intent.INCREASE_DISTANCE,
    pygame.K_s: Intent.DECREASE_DISTANCE,
    pygame.K_q: Intent.REPORT_DISTANCE,
    pygame.K_ESCAPE: Intent.QUIT,
}


def translate_event(
    event: pygame.event.Event,
    bindings: Dict[int, Intent] = KEY_BINDINGS
) -> Optional[Intent]:
    """Map a pygame event to an Intent, or None if the event is not handled."""
    if event.type == pygame.QUIT:
        return Intent.QUIT
    if event.type == pygame.VIDEORESIZE:
        return Intent.RESIZE
    if event.type == pygame.KEYDOWN:
        return bindings.get(event.key)
    return None


class CausticScene:
    """
    Pipeline state behind the viewer.

    Attributes
    ----------
    vertices : np.ndarray
        Lens vertices, shape (N, 3)
    refracted : np.ndarray
        Refracted directions, shape (N, 3)
    plane : ReceiverPlane
        Current receiver plane
    step : float
        Depth change per increase/decrease request
    domain : float
        Width of the normalized display domain
    points : np.ndarray
        Caustic points for the current plane, shape (N, 2)
    running : bool
        False once a quit request has been applied
    """

    DEPTH_STEP = 0.1

    def __init__(
        self,
        vertices: List[Sequence[float]] | np.ndarray,
        refracted: List[Sequence[float]] | np.ndarray,
        depth: float,
        step: float = DEPTH_STEP,
        domain: float = DISPLAY_DOMAIN
    ):
        self.vertices = np.asarray(vertices, dtype=np.float64)
        self.refracted = np.asarray(refracted, dtype=np.float64)
        self.plane = ReceiverPlane(depth)
        self.step = step
        self.domain = domain
        self.running = True
        self.points = self.recompute()

    @property
    def depth(self) -> float:
        """z-coordinate of the receiver plane."""
        return self.plane.depth

    def recompute(self) -> np.ndarray:
        """Project the cached rays onto the current plane, replacing ``points``."""
        self.points = to_display(
            self.plane.intersect(self.vertices, self.refracted), self.domain
        )
        return self.points

    def apply(self, intent: Intent) -> bool:
        """
        Apply a user request.

        Returns
        -------
        bool
            True if the window should be redrawn
        """
        if intent is Intent.INCREASE_DISTANCE:
            self.plane = self.plane.moved(self.step)
            self.recompute()
            return True
        if intent is Intent.DECREASE_DISTANCE:
            self.plane = self.plane.moved(-self.step)
            self.recompute()
            return True
        if intent is Intent.REPORT_DISTANCE:
            logger.info(f"Current lens-to-wall distance: {self.depth}")
            return False
        if intent is Intent.RESIZE:
            return True
        if intent is Intent.QUIT:
            self.running = False
        return False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"points={len(self.points)}, "
            f"depth={self.depth:.4f}, "
            f"step={self.step})"
        )


def viewport_coordinates(
    points: np.ndarray,
    viewport_size: Tuple[int, int],
    domain: float = DISPLAY_DOMAIN
) -> np.ndarray:
    """
    Scale display-domain points to pixel coordinates of a viewport.

    Parameters
    ----------
    points : np.ndarray
        Points in [0, domain) x [0, domain), shape (N, 2)
    viewport_size : tuple
        (width, height) in pixels
    domain : float, optional
        Width of the display domain (default: 256)

    Returns
    -------
    np.ndarray
        Pixel coordinates, shape (N, 2)
    """
    width, height = viewport_size
    scale = np.array([width / domain, height / domain])
    return np.asarray(points, dtype=np.float64).reshape(-1, 2) * scale


def draw_points(
    surface: pygame.Surface,
    points: np.ndarray,
    domain: float = DISPLAY_DOMAIN,
    viewport_size: Optional[Tuple[int, int]] = None,
    color: Tuple[int, int, int] = POINT_COLOR,
    background: Tuple[int, int, int] = BACKGROUND_COLOR
) -> int:
    """
    Clear the surface and plot each point as a single pixel.

    Points falling outside the viewport are not drawn.

    Returns
    -------
    int
        Number of pixels plotted
    """
    if viewport_size is None:
        viewport_size = surface.get_size()
    width, height = viewport_size

    surface.fill(background)
    pixels = viewport_coordinates(points, viewport_size, domain)
    inside = (
        (pixels[:, 0] >= 0) & (pixels[:, 0] < width)
        & (pixels[:, 1] >= 0) & (pixels[:, 1] < height)
    )

    surface.lock()
    try:
        for x, y in pixels[inside].astype(int):
            surface.set_at((int(x), int(y)), color)
    finally:
        surface.unlock()
    return int(inside.sum())


def _render(screen: pygame.Surface, scene: CausticScene) -> None:
    drawn = draw_points(screen, scene.points, scene.domain)
    pygame.display.flip()
    logger.debug(f"Drew {drawn} of {len(scene.points)} points at z={scene.depth:.4f}")


def run_viewer(
    scene: CausticScene,
    window_size: Tuple[int, int] = WINDOW_SIZE,
    title: str = WINDOW_TITLE,
    bindings: Dict[int, Intent] = KEY_BINDINGS
) -> None:
    """
    Open a resizable window and run the event loop until a quit request.

    Raises
    ------
    pygame.error
        If the display cannot be initialized
    """
    pygame.init()
    try:
        screen = pygame.display.set_mode(window_size, pygame.RESIZABLE)
        pygame.display.set_caption(title)
        _render(screen, scene)

        while scene.running:
            intent = translate_event(pygame.event.wait(), bindings)
            if intent is None:
                continue
            if scene.apply(intent):
                # The display surface is replaced when the window is resized
                screen = pygame.display.get_surface()
                _render(screen, scene)
    finally:
        pygame.quit()
