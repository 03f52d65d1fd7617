"""
PillowImageCodec - decode, resize and encode images with Pillow.
"""

import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError
from .image_utils import derive_height


class PillowImageCodec:
    """
    Image codec backed by Pillow.

    Decodes once per item, resizes by width with a derived height, and encodes
    to a single fixed output format.
    """

    EXTENSIONS = {
        'WEBP': 'webp',
        'JPEG': 'jpg',
        'PNG': 'png',
    }

    def __init__(
        self,
        output_format: str = 'WEBP',
        quality: int = 80,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the codec.

        Args:
            output_format: Pillow format name for encoded variants (default: WEBP)
            quality: Lossy quality for output (default: 80)
            logger: Optional logger instance
        """
        output_format = output_format.upper()
        if output_format not in self.EXTENSIONS:
            raise ValueError(f"Unsupported output format: {output_format}")
        self.output_format = output_format
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    @property
    def extension(self) -> str:
        """File extension for encoded variants."""
        return self.EXTENSIONS[self.output_format]

    def decode(self, data: bytes) -> Image.Image:
        """Decode raw bytes, applying EXIF orientation."""
        if not data:
            raise DecodeError("Empty image data")
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
            return ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError,
                Image.DecompressionBombError) as e:
            raise DecodeError(f"Failed to decode image: {e}") from e

    def resize(self, image: Image.Image, width: int) -> Image.Image:
        """Resize to ``width`` keeping the aspect ratio."""
        try:
            height = derive_height(image.width, image.height, width)
            return image.resize((width, height), Image.Resampling.LANCZOS)
        except (OSError, ValueError) as e:
            raise EncodeError(f"Failed to resize image to width {width}: {e}") from e

    def encode(self, image: Image.Image) -> bytes:
        """Encode to the configured output format."""
        try:
            img = self._convert_color_mode(image)
            output = io.BytesIO()
            if self.output_format == 'PNG':
                img.save(output, format='PNG', optimize=True)
            else:
                img.save(output, format=self.output_format, quality=self.quality)
            return output.getvalue()
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Failed to encode to {self.output_format}: {e}") from e

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert image to a color mode the output format can store."""
        has_alpha = img.mode in ('RGBA', 'LA', 'PA') or (
            img.mode == 'P' and 'transparency' in img.info
        )
        if self.output_format == 'JPEG':
            if has_alpha:
                rgba = img.convert('RGBA')
                background = Image.new('RGB', img.size, (255, 255, 255))
                background.paste(rgba, mask=rgba.split()[-1])
                return background
            return img if img.mode == 'RGB' else img.convert('RGB')
        if has_alpha:
            return img if img.mode == 'RGBA' else img.convert('RGBA')
        return img if img.mode == 'RGB' else img.convert('RGB')
