"""
Utility functions for msdftext.

.. currentmodule:: msdftext.utils

.. autosummary::
    :toctree: utils/
    :template: ../_templates/custom_layout.rst

    ConfigurationError
    ReadOnlyDict
    assert_type
    normals_from_vertices
    enums

"""

import os
import types
import logging
import inspect

import numpy as np

from . import enums  # noqa: F401


logger = logging.getLogger("msdftext")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("MSDFTEXT_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except Exception:
            logger.warning(f"Invalid msdftext log level: {level}")


_set_log_level()


class ConfigurationError(ValueError):
    """Raised when the layout cannot be configured, e.g. a missing or invalid font.

    No partial layout is ever produced when this is raised.
    """


def normals_from_vertices(rr, tris):
    """Compute vertex normals for a triangulated surface.

    Each vertex gets the normalized sum of the (area-weighted) normals of the
    triangles it is part of. Returns an Nx3 float32 array.
    """
    rr = np.asarray(rr)[:, :3].astype(np.float64)
    tris = np.asarray(tris).reshape(-1, 3).astype(np.intp)

    r1, r2, r3 = rr[tris[:, 0]], rr[tris[:, 1]], rr[tris[:, 2]]
    tri_nn = np.cross(r2 - r1, r3 - r1)

    nn = np.zeros((len(rr), 3), np.float64)
    for i in range(3):
        np.add.at(nn, tris[:, i], tri_nn)

    size = np.linalg.norm(nn, axis=1)
    size[size == 0] = 1.0  # unused vertices keep a zero normal
    return (nn / size[:, None]).astype(np.float32)


def assert_type(name, value, *classes):
    """Raise a TypeError if value is not an instance of one of the given classes.

    If the first class is None, the value may also be None. The traceback of
    the error points at the code that passed the value in.
    """
    allow_none = classes[0] is None
    if allow_none:
        classes = classes[1:]
        if value is None:
            return
    if isinstance(value, classes):
        return

    # Skip this frame and that of the function doing the check
    f = inspect.currentframe().f_back
    if f.f_back is not None:
        f = f.f_back
    tb = types.TracebackType(None, f, f.f_lasti, f.f_lineno)

    class_names = " | ".join(cls.__name__ for cls in classes)
    msg = f"Expected '{name}' to be an instance of {class_names}"
    if allow_none:
        msg += " or None"
    msg += f", but got {value.__class__.__name__} object."
    raise TypeError(msg).with_traceback(tb) from None


class ReadOnlyDict(dict):
    """A dict that cannot be modified, and that can be hashed.

    All values must be hashable.
    """

    __slots__ = ["_hash"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._hash = hash(tuple(sorted((k, hash(v)) for k, v in self.items())))

    def _readonly(self, *args, **kwargs):
        raise TypeError("Cannot modify ReadOnlyDict")

    __setitem__ = __delitem__ = __ior__ = _readonly
    clear = pop = popitem = setdefault = update = _readonly

    def __hash__(self):
        return self._hash
