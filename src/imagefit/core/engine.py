"""Pillow-backed image engine configured at startup."""

import io
from typing import Any, Callable, Dict, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError
from PIL.ExifTags import TAGS

from .constants import DEFAULT_FORMAT, DEFAULT_QUALITY
from .exceptions import ImageProcessingError, with_error_handling

_FORMAT_ALIASES = {"JPG": "JPEG", "TIF": "TIFF"}
_LOSSY_FORMATS = {"JPEG", "WEBP"}


def _pillow_format(fmt: str) -> str:
    upper = fmt.upper()
    return _FORMAT_ALIASES.get(upper, upper)


def _dimension(params: Dict[str, Any], key: str) -> int:
    try:
        value = int(params.get(key, 0) or 0)
    except (TypeError, ValueError):
        raise ImageProcessingError(f"'{key}' must be an integer") from None
    if value < 0:
        raise ImageProcessingError(f"'{key}' must be >= 0")
    return value


def _resize(image: "Image.Image", params: Dict[str, Any]) -> "Image.Image":
    width = _dimension(params, "width")
    height = _dimension(params, "height")
    if not width and not height:
        raise ImageProcessingError("resize needs a width or a height")
    if not width:
        width = max(1, round(image.width * height / image.height))
    if not height:
        height = max(1, round(image.height * width / image.width))
    return image.resize((width, height))


def _thumbnail(image: "Image.Image", params: Dict[str, Any]) -> "Image.Image":
    width = _dimension(params, "width") or image.width
    height = _dimension(params, "height") or image.height
    thumb = image.copy()
    thumb.thumbnail((width, height))
    return thumb


def _flip(image: "Image.Image", params: Dict[str, Any]) -> "Image.Image":
    direction = str(params.get("direction", "h")).lower()
    if direction == "h":
        return ImageOps.mirror(image)
    if direction == "v":
        return ImageOps.flip(image)
    raise ImageProcessingError(f"Unknown flip direction: {direction}")


def _rotate(image: "Image.Image", params: Dict[str, Any]) -> "Image.Image":
    try:
        degrees = float(params.get("degrees", 0))
    except (TypeError, ValueError):
        raise ImageProcessingError("'degrees' must be a number") from None
    return image.rotate(degrees, expand=True)


def _grayscale(image: "Image.Image", params: Dict[str, Any]) -> "Image.Image":
    return image.convert("L").convert("RGB")


OPERATIONS: Dict[str, Callable[["Image.Image", Dict[str, Any]], "Image.Image"]] = {
    "resize": _resize,
    "thumbnail": _thumbnail,
    "flip": _flip,
    "rotate": _rotate,
    "grayscale": _grayscale,
}


class ImageEngine:
    """Decodes, transforms and re-encodes images with fixed output settings."""

    def __init__(
        self,
        format: str = "",
        default_format: str = DEFAULT_FORMAT,
        quality: int = DEFAULT_QUALITY,
    ):
        self.format = format
        self.default_format = default_format
        self.quality = quality

    @property
    def effective_format(self) -> str:
        return self.format or self.default_format

    def decode(self, image_bytes: bytes) -> "Image.Image":
        """Load image bytes into a Pillow image."""
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
            raise ImageProcessingError(f"Cannot decode image: {exc}") from exc
        return image

    def encode(
        self,
        image: "Image.Image",
        fmt: Optional[str] = None,
        quality: Optional[int] = None,
    ) -> bytes:
        """Serialize ``image`` using ``fmt`` or the engine's format."""
        pillow_format = _pillow_format(fmt or self.effective_format)
        if pillow_format == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        save_kwargs: Dict[str, Any] = {}
        if pillow_format in _LOSSY_FORMATS:
            save_kwargs["quality"] = quality or self.quality

        output = io.BytesIO()
        try:
            image.save(output, format=pillow_format, **save_kwargs)
        except (KeyError, ValueError, OSError) as exc:
            raise ImageProcessingError(f"Cannot encode image as {pillow_format}: {exc}") from exc
        return output.getvalue()

    @with_error_handling()
    def transform(
        self,
        image_bytes: bytes,
        operation: str,
        fmt: Optional[str] = None,
        **params: Any,
    ) -> bytes:
        """
        Apply ``operation`` to encoded image bytes.

        The output format is ``fmt``, else the engine format, else the
        source image's format, else the default format.
        """
        if operation not in OPERATIONS:
            raise ImageProcessingError(f"Unknown operation: {operation}")

        image = self.decode(image_bytes)
        target = fmt or self.format or (image.format or "").lower() or self.default_format
        transformed = OPERATIONS[operation](image, params)
        return self.encode(transformed, target)

    def extract_metadata(self, image_bytes: bytes) -> Dict[str, Union[str, int, float]]:
        """Basic image info plus EXIF tags, skipping GPS data."""
        image = self.decode(image_bytes)
        metadata: Dict[str, Union[str, int, float]] = {
            "width": image.width,
            "height": image.height,
            "format": image.format or "unknown",
            "mode": image.mode,
        }

        for tag_id, value in image.getexif().items():
            tag = str(TAGS.get(tag_id, tag_id))
            if "gps" in tag.lower():
                continue
            if isinstance(value, bytes):
                try:
                    value = value.decode("utf-8")
                except UnicodeDecodeError:
                    value = str(value)
            elif not isinstance(value, (str, int, float)):
                value = str(value)
            metadata[tag] = value

        return metadata

    def __repr__(self) -> str:
        return (
            f"ImageEngine(format={self.format!r}, "
            f"default_format={self.default_format!r}, quality={self.quality})"
        )
