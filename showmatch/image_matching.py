"""
Pair catalog shows with source image files and publish the winners.

For every show whose image has not been optimized yet, the best fuzzy
match among the source images is found. High-confidence matches are
resized into the output directory and written back to the catalog.
Low-confidence matches are only reported for manual review.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from .images import ImageProcessingError, list_image_files, optimize_image, used_image_names
from .logger import get_logger
from .matcher import (
    DEFAULT_CONFIG,
    HIGH_CONFIDENCE,
    LOW_CONFIDENCE,
    MatchConfig,
    MatchResult,
    classify_match,
    find_best_match,
)
from .normalize import slugify_show_name
from .retry import RetryError
from .storage import count_optimized, list_unmatched_shows, set_image_url


@dataclass
class ShowMatch:
    show_id: int
    show_name: str
    image_file: str
    result: MatchResult


@dataclass
class ImageMatchReport:
    shows_considered: int = 0
    images_available: int = 0
    images_already_used: int = 0
    processed: List[ShowMatch] = field(default_factory=list)
    high: List[ShowMatch] = field(default_factory=list)
    low: List[ShowMatch] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)
    failed: List[ShowMatch] = field(default_factory=list)
    total_optimized: int = 0


def publish_image(session, match: ShowMatch, source_dir: Path, output_dir: Path, prefix: str) -> str:
    """Optimize the matched image and point the show's image_url at it."""
    filename = f"{slugify_show_name(match.show_name)}.jpg"
    optimize_image(Path(source_dir) / match.image_file, Path(output_dir) / filename)
    image_url = f"{prefix}{filename}"
    set_image_url(session, match.show_id, image_url)
    return image_url


def run_image_matching(
    session,
    source_dir: Path,
    output_dir: Path,
    prefix: str = "/images/tv-shows/",
    high: float = HIGH_CONFIDENCE,
    low: float = LOW_CONFIDENCE,
    dry_run: bool = False,
    config: MatchConfig = DEFAULT_CONFIG,
) -> ImageMatchReport:
    logger = get_logger()
    shows = list_unmatched_shows(session, prefix)
    image_files = list_image_files(source_dir)

    report = ImageMatchReport(
        shows_considered=len(shows),
        images_available=len(image_files),
        images_already_used=len(used_image_names(output_dir)),
    )
    logger.info(
        "Starting image matching",
        shows=report.shows_considered,
        images=report.images_available,
        already_used=report.images_already_used,
        dry_run=dry_run,
    )

    for show in shows:
        logger.record_attempt("images")
        result = find_best_match(show.name, image_files, config)
        confidence = classify_match(result, high=high, low=low)
        logger.record_match("images", confidence)

        if confidence == "none":
            report.unmatched.append(show.name)
            logger.debug("No image match", show=show.name)
            continue

        match = ShowMatch(show.id, show.name, result.candidate, result)
        if confidence == "low":
            report.low.append(match)
            logger.debug("Low confidence image match", show=show.name, image=match.image_file, score=result.score)
            continue

        report.high.append(match)
        if dry_run:
            continue
        try:
            image_url = publish_image(session, match, source_dir, output_dir, prefix)
        except (ImageProcessingError, RetryError, SQLAlchemyError) as e:
            logger.record_error(type(e).__name__)
            logger.error(f"Error processing {show.name}", image=match.image_file, error=str(e))
            report.failed.append(match)
            continue
        logger.record_update()
        logger.info("Image published", show=show.name, image=match.image_file, image_url=image_url, score=result.score)
        report.processed.append(match)

    report.total_optimized = count_optimized(session, prefix)
    return report
