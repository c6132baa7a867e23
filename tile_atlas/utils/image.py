import numpy as np
import numpy.typing as npt
from pathlib import Path
from PIL import Image, UnidentifiedImageError
from typing import Tuple, Union

from tile_atlas.errors import AtlasIOError
from tile_atlas.types import Atlas

# Type aliases for clarity
Int64Array = npt.NDArray[np.int64]

PathLike = Union[str, Path]


def blank_atlas(width: int, height: int) -> Atlas:
    """Fully transparent RGBA buffer of the given pixel size."""
    return np.zeros((height, width, 4), dtype=np.uint8)


def atlas_size(atlas: Atlas) -> Tuple[int, int]:
    """Return ``(width, height)`` in pixels."""
    height, width = atlas.shape[:2]
    return width, height


def _round_div(num: Int64Array, den: Int64Array) -> Int64Array:
    # Round half up; den > 0 wherever the result is used.
    safe: Int64Array = np.where(den == 0, 1, den)
    return (2 * num + safe) // (2 * safe)


def source_over(src: Atlas, dst: Atlas) -> Atlas:
    """
    Composite straight-alpha ``src`` over ``dst`` (same shape) in integer math.

    With ``sa``/``da`` the source/destination alpha in 0..255::

        a_num = sa*255 + da*(255 - sa)
        alpha = round(a_num / 255)
        color = round((sc*sa*255 + dc*da*(255 - sa)) / a_num)

    Pixels where both alphas are 0 come out as (0, 0, 0, 0). The result is
    exact for an opaque source and for any source over a transparent
    destination, and identical on every platform.
    """
    if src.shape != dst.shape:
        raise ValueError(f"Shape mismatch: {src.shape} vs {dst.shape}")

    s: Int64Array = src.astype(np.int64)
    d: Int64Array = dst.astype(np.int64)
    sa: Int64Array = s[..., 3:4]
    da: Int64Array = d[..., 3:4]

    src_weight: Int64Array = sa * 255
    dst_weight: Int64Array = da * (255 - sa)
    a_num: Int64Array = src_weight + dst_weight

    color: Int64Array = _round_div(
        s[..., :3] * src_weight + d[..., :3] * dst_weight, a_num
    )
    alpha: Int64Array = _round_div(a_num, np.full_like(a_num, 255))

    out: Int64Array = np.concatenate([color, alpha], axis=-1)
    out[(a_num == 0)[..., 0]] = 0
    return out.astype(np.uint8)


def atlas_from_image(image: Image.Image) -> Atlas:
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return np.array(image, dtype=np.uint8)


def atlas_to_image(atlas: Atlas) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(atlas, dtype=np.uint8))


def load_atlas(path: PathLike) -> Atlas:
    """
    Read an image file into an RGBA buffer.

    Raises:
        AtlasIOError: The file is missing, unreadable or not an image.
    """
    try:
        with Image.open(path) as image:
            return atlas_from_image(image)
    except (OSError, UnidentifiedImageError) as exc:
        raise AtlasIOError(f'Failed to load base image "{path}": {exc}') from exc


def save_atlas(atlas: Atlas, path: PathLike) -> None:
    """
    Encode ``atlas`` as PNG at ``path``.

    Raises:
        AtlasIOError: The file could not be written.
    """
    try:
        atlas_to_image(atlas).save(path, format="PNG")
    except OSError as exc:
        raise AtlasIOError(f'Could not save output image "{path}": {exc}') from exc
