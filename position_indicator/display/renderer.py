"""
Display renderer for the position indicator.

Composites the two stacked indicator images with their per-tick opacities
onto a canvas and shows it in an OpenCV window.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
import cv2

from position_indicator.config import DisplayConfig, IndicatorConfig
from position_indicator.engine.types import VisualState, RenderSurface, LayerState

logger = logging.getLogger(__name__)


TEXTURE_FILES = {
    VisualState.OUT_OF_RANGE: "out_of_range.png",
    VisualState.IN_RANGE_FRONT: "in_range.png",
    VisualState.IN_RANGE_BEHIND: "in_range_behind.png",
}

# Fallback texture colors (BGR)
TEXTURE_COLORS = {
    VisualState.OUT_OF_RANGE: (0, 0, 220),      # Red
    VisualState.IN_RANGE_FRONT: (0, 200, 255),  # Amber
    VisualState.IN_RANGE_BEHIND: (0, 200, 0),   # Green
}

BASE_TEXTURE_SIZE = 128


def generate_texture(color: Tuple[int, int, int], size: int = BASE_TEXTURE_SIZE) -> np.ndarray:
    """
    Draw a round BGRA indicator texture.

    Args:
        color: Fill color (BGR)
        size: Texture edge length in pixels

    Returns:
        (size, size, 4) uint8 array with transparent corners
    """
    texture = np.zeros((size, size, 4), dtype=np.uint8)
    center = (size // 2, size // 2)
    radius = size // 2 - 2
    cv2.circle(texture, center, radius, (*color, 255), -1, cv2.LINE_AA)
    cv2.circle(texture, center, radius, (255, 255, 255, 255), max(1, size // 32), cv2.LINE_AA)
    return texture


def _to_bgra(image: np.ndarray) -> np.ndarray:
    """Convert a loaded image to BGRA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    return image


def composite_layer(
    canvas: np.ndarray,
    texture: np.ndarray,
    alpha: float,
    center: Tuple[int, int],
) -> np.ndarray:
    """
    Blend a BGRA texture onto a BGR canvas in place.

    The texture's own alpha channel is multiplied by the layer opacity.
    Parts of the texture outside the canvas are clipped.

    Args:
        canvas: (H, W, 3) uint8 canvas, modified in place
        texture: (h, w, 4) uint8 texture
        alpha: Layer opacity in [0, 1]
        center: Texture center in canvas pixels (x, y)

    Returns:
        The canvas
    """
    alpha = float(np.clip(alpha, 0.0, 1.0))
    if alpha <= 0.0:
        return canvas

    canvas_h, canvas_w = canvas.shape[:2]
    tex_h, tex_w = texture.shape[:2]
    x0 = center[0] - tex_w // 2
    y0 = center[1] - tex_h // 2

    cx0, cy0 = max(0, x0), max(0, y0)
    cx1, cy1 = min(canvas_w, x0 + tex_w), min(canvas_h, y0 + tex_h)
    if cx0 >= cx1 or cy0 >= cy1:
        return canvas

    patch = texture[cy0 - y0:cy1 - y0, cx0 - x0:cx1 - x0]
    weight = patch[..., 3:4].astype(np.float32) / 255.0 * alpha
    region = canvas[cy0:cy1, cx0:cx1].astype(np.float32)

    blended = region * (1.0 - weight) + patch[..., :3].astype(np.float32) * weight
    canvas[cy0:cy1, cx0:cx1] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
    return canvas


class IndicatorRenderer:
    """
    Renders the indicator render surface.

    Features:
    - Texture per visible state, loaded from disk or generated
    - Per-layer opacity blending (outgoing layer under incoming layer)
    - Position offset from canvas centre, outline while unlocked
    - Info panel with state and timing

    Usage:
        renderer = IndicatorRenderer(display_config, indicator_config)
        renderer.initialize()

        # In tick loop:
        output = renderer.render(engine.on_tick(delta), info={"fps": 60.0})
        renderer.show(output)
        if renderer.should_quit():
            break

        # On shutdown:
        renderer.cleanup()
    """

    def __init__(
        self,
        config: Optional[DisplayConfig] = None,
        indicator: Optional[IndicatorConfig] = None,
    ):
        """
        Initialize renderer.

        Args:
            config: Display configuration (uses defaults if None)
            indicator: Indicator settings read on every render
        """
        self._config = config or DisplayConfig()
        self._indicator = indicator or IndicatorConfig()
        self._window_created = False
        self._last_key = -1

        self._textures: Dict[VisualState, np.ndarray] = self._load_textures()
        self._scaled: Dict[Tuple[VisualState, int], np.ndarray] = {}

    def _load_textures(self) -> Dict[VisualState, np.ndarray]:
        """Load state textures, generating any that are missing."""
        texture_dir = Path(self._config.texture_dir)
        textures = {}
        for state, filename in TEXTURE_FILES.items():
            path = texture_dir / filename
            image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED) if path.exists() else None
            if image is None:
                textures[state] = generate_texture(TEXTURE_COLORS[state])
            else:
                textures[state] = _to_bgra(image)
                logger.debug(f"Loaded texture {path}")
        return textures

    def texture(self, state: VisualState, size: int) -> np.ndarray:
        """Texture for state, scaled to size x size."""
        key = (state, size)
        if key not in self._scaled:
            self._scaled[key] = cv2.resize(
                self._textures[state], (size, size), interpolation=cv2.INTER_AREA
            )
        return self._scaled[key]

    def initialize(self) -> bool:
        """
        Create the display window.

        Returns:
            True if initialization successful
        """
        try:
            cv2.namedWindow(self._config.window_name, cv2.WINDOW_NORMAL)
            self._window_created = True
            logger.info(f"Display window created: {self._config.window_name}")
            return True
        except cv2.error as e:
            logger.error(f"Display initialization failed: {e}")
            return False

    def indicator_center(self) -> Tuple[int, int]:
        """Indicator centre in canvas pixels (screen y grows downward)."""
        width, height = self._config.canvas_size
        return (
            width // 2 + int(round(self._indicator.pos_x)),
            height // 2 - int(round(self._indicator.pos_y)),
        )

    def render(self, surface: RenderSurface, info: Optional[dict] = None) -> np.ndarray:
        """
        Render one frame.

        Args:
            surface: Layer state from the engine
            info: Info panel data (state, fps, ...)

        Returns:
            BGR canvas
        """
        width, height = self._config.canvas_size
        canvas = np.empty((height, width, 3), dtype=np.uint8)
        canvas[:] = self._config.background_color

        if surface.indicator_visible:
            size = self._indicator.size
            center = self.indicator_center()

            # Outgoing layer first, incoming on top
            self._draw_layer(canvas, surface.fade, size, center)
            self._draw_layer(canvas, surface.main, size, center)

            if not self._indicator.locked:
                half = size // 2
                cv2.rectangle(
                    canvas,
                    (center[0] - half, center[1] - half),
                    (center[0] + half, center[1] + half),
                    (160, 160, 160),
                    1,
                )

        if info:
            canvas = self._draw_info_panel(canvas, info)

        return canvas

    def _draw_layer(
        self,
        canvas: np.ndarray,
        layer: LayerState,
        size: int,
        center: Tuple[int, int],
    ) -> None:
        if layer.rendered_alpha <= 0.0:
            return
        composite_layer(canvas, self.texture(layer.texture, size), layer.alpha, center)

    def _draw_info_panel(self, frame: np.ndarray, info: dict) -> np.ndarray:
        """Draw semi-transparent info panel in the top-left corner."""
        lines = []
        if "state" in info:
            lines.append(f"State: {info['state']}")
        if "tracking" in info:
            lines.append(f"Tracking: {'yes' if info['tracking'] else 'no'}")
        if "poll_interval" in info:
            lines.append(f"Poll: {info['poll_interval'] * 1000:.0f}ms")
        if "distance" in info and info["distance"] is not None:
            lines.append(f"Gap: {info['distance']:.2f}")
        if "fps" in info:
            lines.append(f"FPS: {info['fps']:.1f}")
        if not lines:
            return frame

        padding = 10
        line_height = 20
        panel_width = 190
        panel_height = len(lines) * line_height + padding * 2

        overlay = frame.copy()
        cv2.rectangle(overlay, (5, 5), (5 + panel_width, 5 + panel_height), (0, 0, 0), -1)
        output = cv2.addWeighted(overlay, 0.5, frame, 0.5, 0)

        y = 5 + padding + 12
        for line in lines:
            cv2.putText(
                output,
                line,
                (10, y),
                cv2.FONT_HERSHEY_SIMPLEX,
                self._config.font_scale,
                (255, 255, 255),
                1,
            )
            y += line_height

        return output

    def show(self, frame: np.ndarray) -> None:
        """
        Display frame in window.

        Args:
            frame: Frame to display
        """
        if not self._window_created:
            return

        try:
            cv2.imshow(self._config.window_name, frame)
            self._last_key = cv2.waitKey(1) & 0xFF
        except cv2.error as e:
            logger.error(f"Display error: {e}")

    @property
    def last_key(self) -> int:
        """Key code read by the latest show() call (-1 or 255 when none)."""
        return self._last_key

    def should_quit(self) -> bool:
        """
        Check if quit key was pressed.

        Returns:
            True if 'q' or ESC was pressed
        """
        return self._last_key in (ord('q'), ord('Q'), 27)

    def cleanup(self) -> None:
        """Clean up display resources."""
        if self._window_created:
            try:
                cv2.destroyWindow(self._config.window_name)
            except cv2.error as e:
                logger.debug(f"destroyWindow failed: {e}")
            self._window_created = False

        logger.info("Display renderer cleaned up")

    @property
    def is_active(self) -> bool:
        """Check if display is active."""
        return self._window_created
