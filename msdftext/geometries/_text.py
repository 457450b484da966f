"""
This module implements text geometry: turning the positioned glyphs of a
layout into flat arrays that a renderer can upload as vertex and index
buffers.

Each visible glyph becomes one quad of 4 vertices, in the order
bottom-left, top-left, top-right, bottom-right (as seen in the layout's
y-down convention). This order is the same for all per-vertex arrays, so
that the index buffer only depends on the number of quads.
"""

import numpy as np
import pylinalg as la

from ..utils import logger, normals_from_vertices
from ..text import layout as layout_text, LayoutOptions


# Per-vertex info channels, each one float per vertex
INFO_CHANNELS = (
    "line_index",
    "line_letter_total",
    "line_letter_index",
    "line_word_total",
    "line_word_index",
    "global_word_index",
    "global_letter_index",
)

# Names of the vertex attributes as the MSDF shaders know them, and the
# corresponding key in the attribute/info dicts.
VERTEX_ATTRIBUTE_NAMES = {
    "position": ("positions", 3),
    "uv": ("uvs", 2),
    "layoutUv": ("layout_uvs", 2),
    "center": ("centers", 2),
    "lineIndex": ("line_index", 1),
    "lineLettersTotal": ("line_letter_total", 1),
    "lineLetterIndex": ("line_letter_index", 1),
    "lineWordsTotal": ("line_word_total", 1),
    "lineWordIndex": ("line_word_index", 1),
    "wordIndex": ("global_word_index", 1),
    "letterIndex": ("global_letter_index", 1),
}

CLOCKWISE_QUAD = (0, 1, 2, 0, 2, 3)
COUNTER_CLOCKWISE_QUAD = (0, 1, 2, 2, 1, 3)


def _get_extent(layout):
    if layout is None:
        return 0.0, 0.0
    elif isinstance(layout, dict):
        return float(layout["width"]), float(layout["height"])
    else:
        return float(layout.width), float(layout.height)


def build_attributes(glyphs, atlas_width, atlas_height, flip_v=True, layout=None):
    """Create the per-vertex attributes for the given glyphs.

    Parameters:
        glyphs (list): the (visible) PositionedGlyph objects.
        atlas_width (float): the width of the atlas texture.
        atlas_height (float): the height of the atlas texture.
        flip_v (bool): whether to invert the v coordinate of the atlas uvs. Default True.
        layout (LayoutResult | dict): the layout the glyphs belong to; its
            width and height are used for the layout uvs. If None, the
            layout uvs are zero.

    Returns a dict with flat float32 arrays: "positions" (3 per vertex),
    "uvs", "layout_uvs" and "centers" (2 per vertex).
    """
    if not (atlas_width > 0 and atlas_height > 0):
        raise ValueError("The atlas width and height must be positive.")

    n = len(glyphs)
    data = np.array(
        [
            (
                g.position[0],
                g.position[1],
                g.glyph.x,
                g.glyph.y,
                g.glyph.width,
                g.glyph.height,
                g.glyph.xoffset,
                g.glyph.yoffset,
            )
            for g in glyphs
        ],
        np.float64,
    ).reshape(n, 8)
    px, py, bx, by, bw, bh, ox, oy = data.T

    # Atlas uvs
    u0 = bx / atlas_width
    u1 = (bx + bw) / atlas_width
    if flip_v:
        v1 = (atlas_height - by) / atlas_height
        v0 = (atlas_height - (by + bh)) / atlas_height
    else:
        v1 = by / atlas_height
        v0 = (by + bh) / atlas_height

    uvs = np.zeros((n, 4, 2), np.float32)
    uvs[:, 0] = np.column_stack([u0, v1])
    uvs[:, 1] = np.column_stack([u0, v0])
    uvs[:, 2] = np.column_stack([u1, v0])
    uvs[:, 3] = np.column_stack([u1, v1])

    # Layout uvs: the glyph's place in the whole text block
    layout_width, layout_height = _get_extent(layout)
    sx = 1.0 / layout_width if layout_width else 0.0
    sy = 1.0 / layout_height if layout_height else 0.0
    lx0 = px * sx
    lx1 = (px + bw) * sx
    ly0 = (py + layout_height) * sy
    ly1 = (py + layout_height + bh) * sy

    layout_uvs = np.zeros((n, 4, 2), np.float32)
    layout_uvs[:, 0] = np.column_stack([lx0, ly0])
    layout_uvs[:, 1] = np.column_stack([lx0, ly1])
    layout_uvs[:, 2] = np.column_stack([lx1, ly1])
    layout_uvs[:, 3] = np.column_stack([lx1, ly0])

    # Positions, with y negated and z zero
    x = px + ox
    y = py + oy
    positions = np.zeros((n, 4, 3), np.float32)
    positions[:, 0, :2] = np.column_stack([x, -y])
    positions[:, 1, :2] = np.column_stack([x, -(y + bh)])
    positions[:, 2, :2] = np.column_stack([x + bw, -(y + bh)])
    positions[:, 3, :2] = np.column_stack([x + bw, -y])

    # The center of the quad, the same for all 4 vertices
    centers = np.zeros((n, 4, 2), np.float32)
    centers[:] = np.column_stack([x + 0.5 * bw, y + 0.5 * bh])[:, None, :]

    return {
        "positions": positions.reshape(-1),
        "uvs": uvs.reshape(-1),
        "layout_uvs": layout_uvs.reshape(-1),
        "centers": centers.reshape(-1),
    }


def build_infos(glyphs):
    """Create the per-vertex info channels for the given glyphs.

    Returns a dict with a flat float32 array (one value per vertex) for
    each name in ``INFO_CHANNELS``, plus the scalars "lines_total",
    "words_total" and "letters_total".
    """
    n = len(glyphs)
    values = np.array(
        [[getattr(g, name) for name in INFO_CHANNELS] for g in glyphs], np.float32
    ).reshape(n, len(INFO_CHANNELS))

    infos = {}
    for i, name in enumerate(INFO_CHANNELS):
        infos[name] = np.repeat(values[:, i], 4)

    # Totals are the same for all glyphs, so take them from the last
    last = glyphs[-1] if n else None
    infos["lines_total"] = last.line_total if last else 0
    infos["words_total"] = last.global_word_total if last else 0
    infos["letters_total"] = last.global_letter_total if last else 0
    return infos


def create_indices(count, *, clockwise=True, dtype="uint16"):
    """Create the triangle indices for ``count`` quads (6 indices per quad)."""
    dtype = np.dtype(dtype)
    count = int(count)
    if count < 0:
        raise ValueError("The quad count must not be negative.")
    if count * 4 > np.iinfo(dtype).max + 1:
        raise ValueError(f"Cannot index {count} quads with {dtype.name} indices.")
    quad = np.array(CLOCKWISE_QUAD if clockwise else COUNTER_CLOCKWISE_QUAD, np.int64)
    offsets = np.arange(count, dtype=np.int64) * 4
    return (offsets[:, None] + quad[None, :]).reshape(-1).astype(dtype)


class TextGeometry:
    """Geometry for rendering text with a (multi-channel) signed distance field atlas.

    The TextGeometry lays out the text and holds the resulting arrays. Each
    visible glyph becomes a quad. Setting any of the properties performs a
    complete new layout.

    Parameters
    ----------
    text : str
        The text to render.
    font : Font | dict
        The font, or a decoded BMFont descriptor (e.g. loaded from JSON).
    width : float | None
        The width to wrap at, and the minimum width of the text block. None
        or 0 means no wrapping.
    align : str | TextAlign
        The alignment of the lines: "left", "center" or "right". Default "left".
    letter_spacing : float
        Extra space between glyphs, in font units. Default 0.
    tab_size : float
        The advance of a tab character, in font units. Default 4.
    line_height : float
        The line height as a factor of the font's line height. Default 1.
    mode : str | WrapMode
        The wrap mode: "greedy" (default), "pre" or "nowrap".
    flip_v : bool
        Whether to flip the v coordinate of the atlas uvs. Default True.
    """

    def __init__(
        self,
        text=None,
        *,
        font,
        width=None,
        align="left",
        letter_spacing=0,
        tab_size=4,
        line_height=1,
        mode=None,
        flip_v=True,
    ):
        self._flip_v = bool(flip_v)
        self._options = LayoutOptions(
            text,
            font,
            width=width,
            align=align,
            letter_spacing=letter_spacing,
            tab_size=tab_size,
            line_height=line_height,
            mode=mode,
        )
        self._update()

    def __repr__(self):
        n = len(self._layout.visible_glyphs)
        return f"<TextGeometry with {n} quads at {hex(id(self))}>"

    # --- layout properties

    @property
    def text(self):
        """The text to render."""
        return self._options.text

    @text.setter
    def text(self, text):
        self._set_options(text=text)

    @property
    def font(self):
        """The Font object."""
        return self._options.font

    @font.setter
    def font(self, font):
        self._set_options(font=font)

    @property
    def width(self):
        """The width to wrap at (None for no wrapping)."""
        return self._options.width

    @width.setter
    def width(self, width):
        self._set_options(width=width)

    @property
    def align(self):
        """The horizontal alignment of the lines.

        See :obj:`msdftext.utils.enums.TextAlign`.
        """
        return self._options.align

    @align.setter
    def align(self, align):
        self._set_options(align=align)

    @property
    def letter_spacing(self):
        return self._options.letter_spacing

    @letter_spacing.setter
    def letter_spacing(self, letter_spacing):
        self._set_options(letter_spacing=letter_spacing)

    @property
    def tab_size(self):
        return self._options.tab_size

    @tab_size.setter
    def tab_size(self, tab_size):
        self._set_options(tab_size=tab_size)

    @property
    def line_height(self):
        """The relative height of a line of text. Default 1."""
        return self._options.line_height

    @line_height.setter
    def line_height(self, line_height):
        self._set_options(line_height=line_height)

    @property
    def mode(self):
        """The wrap mode. See :obj:`msdftext.utils.enums.WrapMode`."""
        return self._options.mode

    @mode.setter
    def mode(self, mode):
        self._set_options(mode=mode)

    @property
    def flip_v(self):
        """Whether the v coordinate of the atlas uvs is flipped."""
        return self._flip_v

    @flip_v.setter
    def flip_v(self, flip_v):
        self._flip_v = bool(flip_v)
        self._update()

    # --- results

    @property
    def layout(self):
        """The LayoutResult of the current text."""
        return self._layout

    @property
    def positions(self):
        """The vertex positions, as an Nx3 float32 array."""
        return self._attributes["positions"].reshape(-1, 3)

    @property
    def texcoords(self):
        """The atlas uvs, as an Nx2 float32 array."""
        return self._attributes["uvs"].reshape(-1, 2)

    @property
    def layout_texcoords(self):
        """The uvs relative to the text block, as an Nx2 float32 array."""
        return self._attributes["layout_uvs"].reshape(-1, 2)

    @property
    def centers(self):
        """The center of each vertex' quad, as an Nx2 float32 array."""
        return self._attributes["centers"].reshape(-1, 2)

    @property
    def indices(self):
        """The triangle indices, as an Mx3 array."""
        return self._indices.reshape(-1, 3)

    @property
    def infos(self):
        """A dict with the per-vertex info channels and the totals of the visible glyphs."""
        return self._infos

    @property
    def lines_total(self):
        return self._layout.lines_total

    @property
    def words_total(self):
        return self._layout.words_total

    @property
    def letters_total(self):
        return self._layout.letters_total

    def get_vertex_attributes(self):
        """Get a dict that maps shader attribute names to (flat_array, stride) tuples."""
        arrays = {**self._attributes, **self._infos}
        return {
            name: (arrays[key], stride)
            for name, (key, stride) in VERTEX_ATTRIBUTE_NAMES.items()
        }

    def compute_normals(self):
        """Compute the vertex normals (an Nx3 array). For text these all point along z."""
        return normals_from_vertices(self.positions, self._indices)

    def get_bounding_box(self):
        """Axis-aligned bounding box of the quads, as a (2, 3) array, or None if there are no quads."""
        if self._aabb is None:
            positions = self.positions
            if not len(positions):
                return None
            self._aabb = np.array(
                [positions.min(axis=0), positions.max(axis=0)], np.float32
            )
        return self._aabb

    def get_bounding_sphere(self):
        """Bounding sphere (x, y, z, radius) of the quads, or None if there are no quads."""
        aabb = self.get_bounding_box()
        return None if aabb is None else la.aabb_to_sphere(aabb)

    # --- private methods

    def _set_options(self, **kwargs):
        self._options = self._options.copy(**kwargs)
        self._update()

    def _update(self):
        self._layout = layout_text(self._options)
        glyphs = self._layout.visible_glyphs
        common = self._options.font.common

        self._attributes = build_attributes(
            glyphs, common.scale_w, common.scale_h, self._flip_v, self._layout
        )
        self._infos = build_infos(glyphs)

        if len(glyphs) * 4 > 65536:
            logger.info(f"Text with {len(glyphs)} quads needs uint32 indices.")
            self._indices = create_indices(len(glyphs), dtype="uint32")
        else:
            self._indices = create_indices(len(glyphs), dtype="uint16")

        self._aabb = None
