"""Global configuration for pytest"""

import numpy as np
import pytest


@pytest.fixture(autouse=True, scope="session")
def numerical_exceptions():
    """
    Make numerical errors (e.g. a division by zero when computing uvs) raise
    in the test suite, so that such cases must be handled in the code.
    """
    np.seterr(all="raise")


def _char(id, x, y, width, height, xoffset, yoffset, xadvance):
    return {
        "id": id,
        "x": x,
        "y": y,
        "width": width,
        "height": height,
        "xoffset": xoffset,
        "yoffset": yoffset,
        "xadvance": xadvance,
    }


def _make_font_data():
    # A small font with easy numbers. Lowercase letters are all 10 wide
    # (bitmap and advance), so a word of n letters measures 10 * n.
    chars = [
        _char(32, 0, 0, 0, 0, 0, 0, 10),
        _char(65, 0, 0, 18, 20, 1, 10, 20),
        _char(66, 20, 0, 16, 20, 2, 10, 18),
        _char(72, 40, 0, 18, 22, 1, 8, 20),
    ]
    for i, c in enumerate("abcdefghijklmnopqrstuvwxyz"):
        height = 14 if c == "x" else 16
        chars.append(
            {
                "id": ord(c),
                "char": c,
                "x": 10 * i,
                "y": 32,
                "width": 10,
                "height": height,
                "xoffset": 0,
                "yoffset": 30 - height,
                "xadvance": 10,
                "page": 0,
            }
        )
    return {
        "pages": ["atlas.png"],
        "chars": chars,
        "info": {"face": "Test", "size": 32},
        "common": {
            "lineHeight": 40,
            "base": 30,
            "scaleW": 256,
            "scaleH": 128,
            "pages": 1,
        },
        "distanceField": {"fieldType": "msdf", "distanceRange": 4},
        "kernings": [{"first": 65, "second": 66, "amount": -5}],
    }


@pytest.fixture
def font_data():
    """A decoded BMFont descriptor (a fresh dict for each test)."""
    return _make_font_data()


@pytest.fixture
def font(font_data):
    """The Font object for ``font_data``."""
    from msdftext import Font

    return Font.from_dict(font_data)
