"""Cover image re-encoding."""

from io import BytesIO

from PIL import Image

DEFAULT_MAX_SIZE = 800
DEFAULT_JPEG_QUALITY = 90


def resize_to_jpeg(
    image_data: bytes,
    max_size: int = DEFAULT_MAX_SIZE,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> bytes:
    """Re-encode an image as JPEG fitting into a ``max_size`` square.

    Aspect ratio is preserved and smaller images are not upscaled.

    Args:
        image_data: Encoded image in any format Pillow can read
        max_size: Maximum length of the longer side in pixels
        quality: JPEG quality (1-95)

    Returns:
        JPEG-encoded bytes

    Raises:
        PIL.UnidentifiedImageError: If the data is not a readable image
    """
    with Image.open(BytesIO(image_data)) as image:
        image.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

        # JPEG has no alpha channel or palette
        if image.mode != "RGB":
            image = image.convert("RGB")

        output = BytesIO()
        image.save(output, format="JPEG", quality=quality)
        return output.getvalue()
