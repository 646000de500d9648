"""Turn image files into the data URIs the provider accepts."""

from __future__ import annotations

import base64
import mimetypes
from pathlib import Path

SUPPORTED_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")

# Not in the stdlib table before Python 3.11.
mimetypes.add_type("image/webp", ".webp")


def supported_formats() -> str:
    """Human-readable list of accepted formats, e.g. ``JPEG, PNG, WEBP ou GIF``."""
    names = [t.split("/", 1)[1].upper() for t in SUPPORTED_TYPES]
    return f"{', '.join(names[:-1])} ou {names[-1]}"


def to_data_uri(data: bytes, mime_type: str = "image/jpeg") -> str:
    encoded = base64.standard_b64encode(data).decode()
    return f"data:{mime_type};base64,{encoded}"


def load_image(path: str | Path) -> str:
    """Read an image file and return it as a ``data:`` URI.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is empty or not a supported image type.
    """
    p = Path(path).expanduser()
    data = p.read_bytes()
    if not data:
        raise ValueError(f"Arquivo de imagem vazio: {p}")

    mime_type = mimetypes.guess_type(p.name)[0] or "image/jpeg"
    if mime_type not in SUPPORTED_TYPES:
        raise ValueError(
            f"Formato não suportado: {mime_type} ({p.name}). "
            f"Use {supported_formats()}."
        )
    return to_data_uri(data, mime_type)
