"""
Versioning for msdftext. We use a hard-coded version number, because it's
simple and always works. The setup.py reads it from this file.
"""

# This is the reference version number, to be bumped before each release.
__version__ = "0.2.0"


def _version_to_tuple(version):
    parts = []
    for part in version.split("+")[0].split("."):
        if not part.isnumeric():
            break
        parts.append(int(part))
    return tuple(parts)


version_info = _version_to_tuple(__version__)
