"""
The font description consumed by the layout. This is the decoded form of a
bitmap-font atlas descriptor (the BMFont convention, as produced by e.g.
msdf-bmfont): per-glyph atlas entries, kerning pairs and common metrics.
Decoding the font file itself happens elsewhere; here we only take the
decoded structure (usually a dict loaded from JSON) and make it fast to query.
"""

from ..utils import logger, ConfigurationError


# Candidate characters to derive the x-height and cap-height from, in order of preference.
X_HEIGHTS = "xeaonsrcumvwz"
CAP_HEIGHTS = "HINEFKLTUVWXYZ"
M_WIDTHS = "mw"


class FontChar:
    """One glyph's entry in the atlas.

    Parameters:
        id (int): the character code (Unicode code point).
        x, y, width, height (float): the rectangle of the glyph in the atlas, in pixels.
        xoffset, yoffset (float): the offset to apply when placing the glyph.
        xadvance (float): how far the pen moves after this glyph.
        page (int): the atlas page. Default 0.
    """

    __slots__ = [
        "_height",
        "_id",
        "_page",
        "_width",
        "_x",
        "_xadvance",
        "_xoffset",
        "_y",
        "_yoffset",
    ]

    def __init__(
        self,
        id,
        x=0,
        y=0,
        width=0,
        height=0,
        xoffset=0,
        yoffset=0,
        xadvance=0,
        page=0,
    ):
        self._id = int(id)
        self._x = float(x)
        self._y = float(y)
        self._width = float(width)
        self._height = float(height)
        self._xoffset = float(xoffset)
        self._yoffset = float(yoffset)
        self._xadvance = float(xadvance)
        self._page = int(page or 0)

    @classmethod
    def from_dict(cls, d):
        """Create a FontChar from a BMFont char entry. Unknown keys are ignored."""
        try:
            id = d["id"]
        except KeyError:
            raise ConfigurationError("Font char entry has no 'id'.") from None
        return cls(
            id,
            x=d.get("x", 0),
            y=d.get("y", 0),
            width=d.get("width", 0),
            height=d.get("height", 0),
            xoffset=d.get("xoffset", 0),
            yoffset=d.get("yoffset", 0),
            xadvance=d.get("xadvance", 0),
            page=d.get("page", 0),
        )

    def __repr__(self):
        return f"<FontChar {self._id} at {hex(id(self))}>"

    def __eq__(self, other):
        if not isinstance(other, FontChar):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def _key(self):
        return (
            self._id,
            self._x,
            self._y,
            self._width,
            self._height,
            self._xoffset,
            self._yoffset,
            self._xadvance,
            self._page,
        )

    def copy(self, **kwargs):
        """Make a copy of this char, with given kwargs replaced."""
        d = {
            "id": self._id,
            "x": self._x,
            "y": self._y,
            "width": self._width,
            "height": self._height,
            "xoffset": self._xoffset,
            "yoffset": self._yoffset,
            "xadvance": self._xadvance,
            "page": self._page,
        }
        d.update(kwargs)
        return self.__class__(**d)

    @property
    def id(self):
        """The character code."""
        return self._id

    @property
    def x(self):
        return self._x

    @property
    def y(self):
        return self._y

    @property
    def width(self):
        """The width of the glyph's bitmap in the atlas."""
        return self._width

    @property
    def height(self):
        """The height of the glyph's bitmap in the atlas."""
        return self._height

    @property
    def xoffset(self):
        return self._xoffset

    @property
    def yoffset(self):
        return self._yoffset

    @property
    def xadvance(self):
        """The horizontal pen movement attributed to this glyph."""
        return self._xadvance

    @property
    def page(self):
        return self._page

    @property
    def area(self):
        """The area of the bitmap. Glyphs with zero area produce no geometry."""
        return self._width * self._height


class FontKerning:
    """An adjustment of the pen position when ``second`` directly follows ``first``."""

    __slots__ = ["_amount", "_first", "_second"]

    def __init__(self, first, second, amount):
        self._first = int(first)
        self._second = int(second)
        self._amount = float(amount)

    def __repr__(self):
        return f"<FontKerning {self._first} {self._second} {self._amount:g}>"

    @property
    def first(self):
        return self._first

    @property
    def second(self):
        return self._second

    @property
    def amount(self):
        return self._amount


class FontCommon:
    """The font-wide metrics, in atlas pixel units."""

    __slots__ = ["_base", "_line_height", "_scale_h", "_scale_w"]

    def __init__(self, line_height, base, scale_w, scale_h):
        self._line_height = float(line_height)
        self._base = float(base)
        self._scale_w = float(scale_w)
        self._scale_h = float(scale_h)

    @classmethod
    def from_dict(cls, d):
        keys = "lineHeight", "base", "scaleW", "scaleH"
        missing = [key for key in keys if key not in d]
        if missing:
            raise ConfigurationError(
                f"Font common block is missing {', '.join(missing)}."
            )
        return cls(d["lineHeight"], d["base"], d["scaleW"], d["scaleH"])

    def __repr__(self):
        return (
            f"<FontCommon line_height={self._line_height:g} base={self._base:g} "
            f"scale={self._scale_w:g}x{self._scale_h:g}>"
        )

    @property
    def line_height(self):
        """The distance between two lines."""
        return self._line_height

    @property
    def base(self):
        """The distance from the top of a line to the baseline."""
        return self._base

    @property
    def scale_w(self):
        """The width of the atlas texture."""
        return self._scale_w

    @property
    def scale_h(self):
        """The height of the atlas texture."""
        return self._scale_h


class Font:
    """A decoded bitmap/MSDF font description.

    The font is read-only input for the layout; it is never mutated.

    Parameters:
        chars (list): the ``FontChar`` objects. Must not be empty.
        kernings (list): the ``FontKerning`` objects (optional).
        common (FontCommon): the font-wide metrics.
    """

    def __init__(self, chars, kernings=None, common=None):
        if not chars:
            raise ConfigurationError("Must provide a valid bitmap font (no chars).")
        if not isinstance(common, FontCommon):
            raise ConfigurationError(
                "Must provide a valid bitmap font (no common metrics)."
            )

        # Chars are unique by id. Keep the declaration order for the fallback to the first char.
        self._chars = []
        self._char_map = {}
        for char in chars:
            if not isinstance(char, FontChar):
                cls = type(char).__name__
                raise ConfigurationError(f"Font chars must be FontChar, not '{cls}'.")
            if char.id in self._char_map:
                logger.warning(f"Font has duplicate char {char.id}, using the first.")
                continue
            self._char_map[char.id] = char
            self._chars.append(char)
        self._chars = tuple(self._chars)

        # At most one amount per ordered pair
        self._kerning_map = {}
        for kerning in kernings or ():
            key = kerning.first, kerning.second
            if key in self._kerning_map:
                logger.warning(
                    f"Font has duplicate kerning pair {key}, using the first."
                )
                continue
            self._kerning_map[key] = kerning.amount

        self._common = common
        self._x_height = self._first_height(X_HEIGHTS)
        self._cap_height = self._first_height(CAP_HEIGHTS)

    @classmethod
    def from_dict(cls, data):
        """Create a Font from a decoded BMFont descriptor (e.g. loaded from JSON).

        The dict must have "chars" and "common", and may have "kernings".
        Other entries (like "info", "pages" and "distanceField") are ignored.
        """
        if not isinstance(data, dict):
            cls_name = type(data).__name__
            raise ConfigurationError(f"Font data must be a dict, not '{cls_name}'.")
        if not data.get("chars"):
            raise ConfigurationError("Must provide a valid bitmap font (no chars).")
        if not isinstance(data.get("common"), dict):
            raise ConfigurationError(
                "Must provide a valid bitmap font (no common metrics)."
            )
        chars = [FontChar.from_dict(d) for d in data["chars"]]
        kernings = [
            FontKerning(d["first"], d["second"], d["amount"])
            for d in data.get("kernings") or ()
        ]
        common = FontCommon.from_dict(data["common"])
        return cls(chars, kernings, common)

    def __repr__(self):
        return f"<Font with {len(self._chars)} chars at {hex(id(self))}>"

    def _first_height(self, candidates):
        for c in candidates:
            char = self._char_map.get(ord(c))
            if char is not None:
                return char.height
        return 0.0

    @property
    def chars(self):
        """A tuple of all FontChar objects, in declaration order."""
        return self._chars

    @property
    def kernings(self):
        """A tuple of all FontKerning objects."""
        return tuple(
            FontKerning(first, second, amount)
            for (first, second), amount in self._kerning_map.items()
        )

    @property
    def common(self):
        """The FontCommon metrics."""
        return self._common

    @property
    def x_height(self):
        """The height of the first of the x-height candidates ('x', 'e', 'a', ...) present."""
        return self._x_height

    @property
    def cap_height(self):
        """The height of the first of the cap-height candidates ('H', 'I', 'N', ...) present."""
        return self._cap_height

    def get_char(self, id):
        """Get the FontChar for the given character code, or None."""
        return self._char_map.get(id)

    def get_kerning(self, first, second):
        """Get the kerning amount for the given pair of character codes (zero if absent)."""
        return self._kerning_map.get((first, second), 0.0)

    def get_m_glyph(self):
        """Get the glyph for 'm' or 'w', or None."""
        for c in M_WIDTHS:
            char = self._char_map.get(ord(c))
            if char is not None:
                return char
        return None
