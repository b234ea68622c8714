import math
from typing import Callable, Dict, Optional, Sequence

import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap, to_hex, to_rgba
from matplotlib.font_manager import FontProperties
from matplotlib.patches import Circle, PathPatch
from matplotlib.path import Path
from matplotlib.textpath import TextPath
from matplotlib.transforms import Affine2D
from matplotlib.widgets import Button

from treerings.layout import PackedNode, PackedTree, font_size_for_depth
from treerings.transitions import ViewTransform

NodeCallback = Callable[[PackedNode], None]

# paper and ink palette
INK_FRESH = "#1f1a17"
INK_FADED = "#a88f72"
VERMILLION = "#d9462b"
PAPER = "#f6f1e7"

ELLIPSIS = "..."
LABEL_FONT = FontProperties(family="DejaVu Sans Mono", weight="bold")

_INK_CMAP = LinearSegmentedColormap.from_list("ink", [INK_FRESH, "#5b4636", INK_FADED])

DEFAULT_STYLE = {"fill_alpha": 0.15, "stroke_px": 1.5}
HOVER_STYLE = {"fill_alpha": 0.3, "stroke_px": 2.5}


def ink_gradient(depth: int, max_depth: int) -> str:
    """Colour of a ring: fresh ink at the root fading with depth, normalised by the tree depth."""
    t = depth / max_depth if max_depth > 0 else 0.0
    return to_hex(_INK_CMAP(min(max(t, 0.0), 1.0)))


def fit_label(
    text: str, arc_radius: float, font_size: float, char_width_ratio: float = 0.6
) -> str:
    """
    Fit a label on the upper half circle of radius `arc_radius`.

    The character budget is floor(arc_radius * pi / (char_width_ratio * font_size)). Labels
    within budget are returned untouched; longer ones are cut and end with an ellipsis, the
    ellipsis included in the budget. An empty string means nothing legible fits.
    """
    if arc_radius <= 0 or font_size <= 0:
        return ""
    max_chars = int(math.floor(arc_radius * math.pi / (font_size * char_width_ratio)))
    if len(text) <= max_chars:
        return text
    keep = max_chars - len(ELLIPSIS)
    if keep < 1:
        return ""
    return text[:keep] + ELLIPSIS


def arc_text_path(
    text: str,
    cx: float,
    cy: float,
    arc_radius: float,
    font_size: float,
    char_width_ratio: float = 0.6,
    prop: FontProperties = LABEL_FONT,
) -> Optional[Path]:
    """
    Glyph outlines of `text` set along the top half of a circle, centred on its top point.

    Coordinates are y-down like the layout. Each character gets a cell of
    char_width_ratio * font_size along the arc; the baseline lies on the arc and glyphs point
    outwards. Returns None if no character has an outline.
    """
    cell = char_width_ratio * font_size
    start = arc_radius * math.pi / 2 - len(text) * cell / 2
    glyphs = []
    for i, ch in enumerate(text):
        outline = TextPath((0, 0), ch, size=font_size, prop=prop)
        if len(outline.vertices) == 0:
            continue
        # angle pi is the left end of the arc, 3pi/2 the top (y grows downwards)
        phi = math.pi + (start + (i + 0.5) * cell) / arc_radius
        placement = (
            Affine2D()
            .translate(-cell / 2, 0)
            .scale(1, -1)
            .rotate(phi + math.pi / 2)
            .translate(cx + arc_radius * math.cos(phi), cy + arc_radius * math.sin(phi))
        )
        glyphs.append(placement.transform_path(outline))
    if not glyphs:
        return None
    return Path.make_compound_path(*glyphs)


class Renderer:
    """Draws a packed tree with matplotlib and turns pointer input into node events.

    Viewport pixels are the data coordinates of the axes (y pointing down) and every circle and
    label is drawn through one shared `Affine2D`, the view transform. Changing the view is a
    single mutation of that transform.

    Parameters
    ----------
    ax: matplotlib Axes, optional
        Axes to draw on. A figure of the viewport size is created on the first draw otherwise.

    min_label_radius: float (default 30)
        Rings whose on-screen radius is at or below this many pixels get no label.

    label_inset: float (default 5)
        Distance from the circle edge to the label baseline.

    char_width_ratio: float (default 0.6)
        Average character width as a fraction of the font size.

    font_size: callable (default `font_size_for_depth`)
        On-screen label font size (pixels) per depth, whatever the zoom.

    show_tooltips: bool (default True)
        Show the kind label of the hovered ring next to the pointer.

    dpi: int (default 100)
    """

    def __init__(
        self,
        ax=None,
        min_label_radius: float = 30,
        label_inset: float = 5,
        char_width_ratio: float = 0.6,
        font_size: Callable[[int], float] = font_size_for_depth,
        show_tooltips: bool = True,
        dpi: int = 100,
    ):
        self.ax = ax
        self.figure = ax.figure if ax is not None else None
        self.min_label_radius = min_label_radius
        self.label_inset = label_inset
        self.char_width_ratio = char_width_ratio
        self.font_size = font_size
        self.show_tooltips = show_tooltips
        self.dpi = dpi

        self.view_affine = Affine2D()
        self.view_transform = ViewTransform()
        self.tree: Optional[PackedTree] = None
        self.circles: Dict[int, Circle] = {}
        self.labels: Dict[int, Optional[PathPatch]] = {}
        self._label_scales: Dict[int, float] = {}
        self.colors: Dict[int, str] = {}
        self.hovered_id: Optional[int] = None
        self.visible_label_id: Optional[int] = None

        self.on_enter: Optional[NodeCallback] = None
        self.on_leave: Optional[NodeCallback] = None
        self.on_click: Optional[NodeCallback] = None
        self.on_reset: Optional[Callable[[], None]] = None

        self._tooltip = None
        self._breadcrumbs = None
        self._reset_button: Optional[Button] = None
        self._timer = None
        self._connected = False

    # ---------------- drawing ----------------

    def draw(
        self,
        tree: PackedTree,
        view_transform: ViewTransform,
        visible_label_id: Optional[int] = None,
    ):
        """Replace the scene with `tree`. A hovered ring missing from the new tree is left."""
        self._ensure_axes(tree.viewport_width, tree.viewport_height)
        previous_tree = self.tree
        for artist in list(self.circles.values()) + [p for p in self.labels.values() if p]:
            artist.remove()
        self.circles, self.labels, self.colors = {}, {}, {}
        self._label_scales = {}
        self.tree = tree

        if self.hovered_id is not None:
            old = previous_tree.get(self.hovered_id) if previous_tree is not None else None
            new = tree.get(self.hovered_id)
            if new is None or old is None or new.name != old.name:
                self._leave_hovered(old)

        ax = self.ax
        ax.set_xlim(0, tree.viewport_width)
        ax.set_ylim(tree.viewport_height, 0)

        base = self.view_affine + ax.transData
        for node in tree.nodes:
            color = ink_gradient(node.depth, tree.max_depth)
            circle = Circle(
                (node.cx, node.cy),
                node.radius,
                transform=base,
                facecolor=to_rgba(color, DEFAULT_STYLE["fill_alpha"]),
                edgecolor=color,
                zorder=1 + node.depth,
            )
            ax.add_patch(circle)
            self.circles[node.node_id] = circle
            self.colors[node.node_id] = color

        if self.hovered_id is not None:
            self._apply_style(self.hovered_id, hovered=True)
        self.set_view(view_transform, visible_label_id)

    def set_view(self, view_transform: ViewTransform, visible_label_id: Optional[int] = None):
        """Apply a view transform and show at most the label of `visible_label_id`."""
        self.view_transform = view_transform
        self.view_affine.clear().scale(view_transform.scale).translate(
            view_transform.translate_x, view_transform.translate_y
        )
        for node_id in self.circles:
            self._apply_style(node_id, hovered=node_id == self.hovered_id)

        self.visible_label_id = None
        for patch in self.labels.values():
            if patch is not None:
                patch.set_visible(False)
        patch = self._label_patch(visible_label_id)
        if patch is not None:
            patch.set_visible(True)
            self.visible_label_id = visible_label_id
        self._redraw()

    def label_text(self, node_id: Optional[int]) -> Optional[str]:
        """Fitted label of a ring at the current zoom, or None when the ring is too small.

        Radius threshold and character budget are measured on screen, so a ring zoomed onto
        gets the room it is drawn with.
        """
        node = self.tree.get(node_id) if self.tree is not None else None
        if node is None:
            return None
        screen_radius = node.radius * self.view_transform.scale
        if screen_radius <= self.min_label_radius:
            return None
        text = fit_label(
            node.name,
            screen_radius - self.label_inset,
            self.font_size(node.depth),
            self.char_width_ratio,
        )
        return text or None

    def set_breadcrumbs(self, names: Sequence[str]):
        if self._breadcrumbs is not None:
            self._breadcrumbs.set_text(" › ".join(names))
            self._redraw()

    def add_reset_button(self, callback: Callable[[], None]):
        """A "Reset View" button in the top right corner, hidden until `set_reset_visible`."""
        self.on_reset = callback
        if self.figure is None or self._reset_button is not None:
            return
        button_ax = self.figure.add_axes([0.80, 0.93, 0.18, 0.05])
        self._reset_button = Button(button_ax, "← Reset View", color=PAPER, hovercolor="#ece3d2")
        self._reset_button.label.set_color(INK_FRESH)
        self._reset_button.on_clicked(lambda event: self.on_reset() if self.on_reset else None)
        self.set_reset_visible(False)

    def set_reset_visible(self, visible: bool):
        if self._reset_button is None:
            return
        self._reset_button.ax.set_visible(visible)
        self._reset_button.set_active(visible)
        self._redraw()

    def save(self, path, **kwargs):
        self.figure.savefig(path, dpi=self.dpi, **kwargs)

    # ---------------- pointer input ----------------

    def node_at(self, px: float, py: float) -> Optional[PackedNode]:
        """Ring under the viewport pixel (px, py). Labels never take part."""
        if self.tree is None or self.view_transform.scale == 0:
            return None
        x, y = self.view_transform.invert(px, py)
        return self.tree.hit_test(x, y)

    def pointer_move(self, px: float, py: float):
        node = self.node_at(px, py)
        node_id = node.node_id if node is not None else None
        if node_id == self.hovered_id:
            self._move_tooltip(px, py)
            return
        if self.hovered_id is not None:
            self._leave_hovered(self.tree.get(self.hovered_id))
        if node is not None:
            self.hovered_id = node_id
            self._apply_style(node_id, hovered=True)
            self._show_tooltip(node, px, py)
            if self.on_enter is not None:
                self.on_enter(node)
        self._redraw()

    def pointer_leave(self):
        if self.hovered_id is not None:
            self._leave_hovered(self.tree.get(self.hovered_id))
            self._redraw()

    def pointer_click(self, px: float, py: float) -> Optional[PackedNode]:
        node = self.node_at(px, py)
        if node is not None and self.on_click is not None:
            self.on_click(node)
        return node

    # ---------------- animation timer ----------------

    def start_timer(self, callback: Callable[[], None], interval_ms: int = 16):
        if self.figure is None:
            return
        if self._timer is None:
            self._timer = self.figure.canvas.new_timer(interval=interval_ms)
            self._timer.add_callback(callback)
        self._timer.start()

    def stop_timer(self):
        if self._timer is not None:
            self._timer.stop()

    # ---------------- internals ----------------

    def _ensure_axes(self, width: float, height: float):
        if self.ax is None:
            self.figure, self.ax = plt.subplots(
                figsize=(max(width, 1) / self.dpi, max(height, 1) / self.dpi), dpi=self.dpi
            )
            self.figure.subplots_adjust(left=0, right=1, bottom=0, top=1)
            self.figure.patch.set_facecolor(PAPER)
        ax = self.ax
        ax.set_aspect("equal", adjustable="box")
        ax.set_axis_off()
        ax.set_facecolor(PAPER)
        if self._tooltip is None:
            self._tooltip = ax.text(
                0, 0, "", fontsize=9, color=INK_FRESH, zorder=10_000, visible=False,
                bbox={"boxstyle": "round,pad=0.3", "facecolor": PAPER, "edgecolor": INK_FADED},
            )
            self._breadcrumbs = self.figure.text(
                0.01, 0.99, "", va="top", ha="left", fontsize=9, color=INK_FRESH
            )
        if not self._connected:
            canvas = self.figure.canvas
            canvas.mpl_connect("motion_notify_event", self._on_motion)
            canvas.mpl_connect("button_press_event", self._on_press)
            canvas.mpl_connect("axes_leave_event", lambda event: self.pointer_leave())
            canvas.mpl_connect("figure_leave_event", lambda event: self.pointer_leave())
            canvas.mpl_connect("key_press_event", self._on_key)
            self._connected = True

    def _px_to_points(self, px: float) -> float:
        dpi = self.figure.dpi if self.figure is not None else self.dpi
        return px * 72.0 / dpi

    def _apply_style(self, node_id: int, hovered: bool):
        circle = self.circles.get(node_id)
        if circle is None:
            return
        style = HOVER_STYLE if hovered else DEFAULT_STYLE
        color = VERMILLION if hovered else self.colors[node_id]
        circle.set_facecolor(to_rgba(color, style["fill_alpha"]))
        circle.set_edgecolor(color)
        circle.set_linewidth(self._px_to_points(style["stroke_px"] * self.view_transform.scale))

    def _label_patch(self, node_id: Optional[int]) -> Optional[PathPatch]:
        if node_id is None or self.tree is None:
            return None
        scale = self.view_transform.scale
        if node_id in self.labels and self._label_scales.get(node_id) != scale:
            # glyphs are sized for the zoom they were built at
            stale = self.labels.pop(node_id)
            if stale is not None:
                stale.remove()
        if node_id not in self.labels:
            text = self.label_text(node_id)
            patch = None
            if text is not None:
                node = self.tree.get(node_id)
                # layout units, the view transform scales them back to pixels
                path = arc_text_path(
                    text,
                    node.cx,
                    node.cy,
                    node.radius - self.label_inset / scale,
                    self.font_size(node.depth) / scale,
                    self.char_width_ratio,
                )
                if path is not None:
                    patch = PathPatch(
                        path,
                        transform=self.view_affine + self.ax.transData,
                        facecolor=INK_FRESH,
                        edgecolor="none",
                        zorder=self.tree.max_depth + 10,
                        visible=False,
                    )
                    self.ax.add_patch(patch)
            self.labels[node_id] = patch
            self._label_scales[node_id] = scale
        return self.labels[node_id]

    def _leave_hovered(self, node: Optional[PackedNode]):
        node_id = self.hovered_id
        self.hovered_id = None
        self._apply_style(node_id, hovered=False)
        if self._tooltip is not None:
            self._tooltip.set_visible(False)
        if self.on_leave is not None:
            self.on_leave(node)

    def _show_tooltip(self, node: PackedNode, px: float, py: float):
        if not self.show_tooltips or self._tooltip is None:
            return
        self._tooltip.set_text(node.name)
        self._tooltip.set_visible(True)
        self._move_tooltip(px, py)

    def _move_tooltip(self, px: float, py: float):
        if self._tooltip is not None and self._tooltip.get_visible():
            self._tooltip.set_position((px + 12, py + 16))

    def _redraw(self):
        if self.figure is not None:
            self.figure.canvas.draw_idle()

    def _on_motion(self, event):
        if event.inaxes is not self.ax or event.xdata is None:
            self.pointer_leave()
            return
        self.pointer_move(event.xdata, event.ydata)

    def _on_press(self, event):
        if event.inaxes is self.ax and event.xdata is not None and event.button == 1:
            self.pointer_click(event.xdata, event.ydata)

    def _on_key(self, event):
        if event.key == "escape" and self.on_reset is not None:
            self.on_reset()
