"""
Entry points used by the dashboard.

generate() returns as soon as the record has been claimed; the pipeline keeps
running on a background thread and callers poll get_overview() for the result.
"""

import logging
import threading
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from exceptions import MissingWebsiteError, TargetNotFoundError
from generator import BrandOverviewGenerator
from models import OverviewStatus, Target

logger = logging.getLogger(__name__)

_generator = None
_generator_lock = threading.Lock()


def get_generator() -> BrandOverviewGenerator:
    global _generator
    with _generator_lock:
        if _generator is None:
            _generator = BrandOverviewGenerator()
        return _generator


def get_overview(target_id, generator: Optional[BrandOverviewGenerator] = None) -> Optional[Dict[str, Any]]:
    """The current record as a dict, or None if generation was never requested."""
    overview = (generator or get_generator()).get_overview(target_id)
    return overview.to_dict() if overview else None


def _load_target(generator, target_id) -> Target:
    with generator.Session() as session:
        target = session.get(Target, target_id)
    if target is None:
        raise TargetNotFoundError(target_id)
    if not target.website_url:
        raise MissingWebsiteError(target_id)
    return target


def generate(target_id, force=False, background=True,
             generator: Optional[BrandOverviewGenerator] = None) -> Dict[str, Any]:
    """Trigger generation for a target and report the resulting status."""
    generator = generator or get_generator()
    target = _load_target(generator, target_id)

    try:
        claim = generator.claim(target_id, target.website_url, force=force)
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize brand overview for {target_id}: {e}")
        return {
            'status': OverviewStatus.FAILED.value,
            'message': 'Failed to initialize brand overview generation',
            'data': None,
        }

    if not claim.started:
        status = claim.overview.status
        if status == OverviewStatus.RUNNING:
            message = 'Generation already in progress'
        else:
            message = 'Brand overview already exists. Use force=True to regenerate.'
        return {'status': status.value, 'message': message, 'data': claim.overview.to_dict()}

    if not background:
        result = generator.run(claim, target.tracked_brand)
        return {
            'status': result.status.value,
            'message': result.error or 'Brand overview generated.',
            'data': result.overview.to_dict() if result.overview else None,
        }

    worker = threading.Thread(
        target=generator.run,
        args=(claim, target.tracked_brand),
        name=f"brand-overview-{target_id}",
        daemon=True,
    )
    worker.start()
    logger.info(f"Started brand overview generation for {target_id} on {worker.name}")
    return {
        'status': OverviewStatus.RUNNING.value,
        'message': 'Brand overview generation started. Poll get_overview for status.',
        'data': claim.overview.to_dict(),
    }
