from typing import Any, Dict, List

from sqlalchemy import func, or_
from sqlalchemy.exc import OperationalError

from .database import UPDATABLE_FIELDS, CatalogShow
from .retry import exponential_backoff


def list_all_shows(session) -> List[CatalogShow]:
    return session.query(CatalogShow).order_by(CatalogShow.name).all()


def list_unmatched_shows(session, prefix: str) -> List[CatalogShow]:
    """Shows whose image has not been optimized into ``prefix`` yet."""
    return (
        session.query(CatalogShow)
        .filter(
            or_(
                CatalogShow.image_url.is_(None),
                ~CatalogShow.image_url.startswith(prefix, autoescape=True),
            )
        )
        .order_by(CatalogShow.name)
        .all()
    )


def count_optimized(session, prefix: str) -> int:
    return (
        session.query(func.count(CatalogShow.id))
        .filter(CatalogShow.image_url.startswith(prefix, autoescape=True))
        .scalar()
    )


@exponential_backoff(max_retries=3, base_delay=0.5, exceptions=(OperationalError,))
def _write(session, show: CatalogShow, values: Dict[str, Any]) -> None:
    """Assign and commit in one unit so a retry replays the whole write."""
    for k, v in values.items():
        setattr(show, k, v)
    try:
        session.commit()
    except OperationalError:
        session.rollback()
        raise


def set_image_url(session, show_id: int, image_url: str) -> bool:
    show = session.get(CatalogShow, show_id)
    if show is None:
        return False
    _write(session, show, {"image_url": image_url})
    return True


def diff_fields(old: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    changed = {}
    for k in new:
        ov = old.get(k)
        nv = new[k]
        if ov != nv:
            changed[k] = {"old": ov, "new": nv}
    return changed


def pending_changes(show: CatalogShow, fields: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Diff of the updatable, non-empty ``fields`` against ``show``."""
    incoming = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
    return diff_fields({k: getattr(show, k) for k in incoming}, incoming)


def apply_show_updates(session, show: CatalogShow, fields: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Write pending changes from ``fields`` onto ``show``. Returns the diff."""
    changes = pending_changes(show, fields)
    if changes:
        _write(session, show, {k: c["new"] for k, c in changes.items()})
    return changes
