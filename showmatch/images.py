"""Image file discovery and optimization for catalog artwork."""

from pathlib import Path
from typing import List, Set, Tuple

from PIL import Image, ImageOps

from .normalize import strip_extension

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}

# Portrait card size used by the catalog pages
CARD_SIZE = (400, 600)
JPEG_QUALITY = 85


class ImageProcessingError(ValueError):
    """Raised when a source image cannot be read, resized or written."""


def list_image_files(directory: Path) -> List[str]:
    """Sorted image filenames (not paths) directly inside ``directory``."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        p.name
        for p in directory.iterdir()
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    )


def used_image_names(directory: Path) -> Set[str]:
    directory = Path(directory)
    if not directory.is_dir():
        return set()
    return {strip_extension(p.name) for p in directory.iterdir() if p.is_file()}


def optimize_image(
    src: Path,
    dest: Path,
    size: Tuple[int, int] = CARD_SIZE,
    quality: int = JPEG_QUALITY,
) -> Path:
    """Cover-fit ``src`` to ``size`` (centered crop) and save a progressive JPEG."""
    src, dest = Path(src), Path(dest)
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        with Image.open(src) as img:
            fitted = ImageOps.fit(img.convert("RGB"), size, method=Image.LANCZOS, centering=(0.5, 0.5))
            fitted.save(dest, "JPEG", quality=quality, progressive=True, optimize=True)
    except (OSError, ValueError) as e:
        raise ImageProcessingError(f"Could not optimize {src.name}: {e}") from e
    return dest
