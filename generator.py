"""
Brand overview generation with per-target status tracking.

One BrandOverview row per target moves through RUNNING -> COMPLETE | FAILED.
A run is started only by a successful claim: the row is inserted (guarded by
the unique target_id) or flipped to RUNNING by a conditional UPDATE, so two
near-simultaneous requests cannot both start a run. The loser gets the
current record back.

    no record          -> RUNNING (run)
    RUNNING            -> unchanged
    COMPLETE, force    -> RUNNING (run)
    COMPLETE, no force -> unchanged
    FAILED / PENDING   -> RUNNING (run)
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from crawler import SiteCrawler
from database import Session
from models import BrandOverview, OverviewStatus, Target
from schema import CrawlResult, empty_crawl_result
from summarizer import AnthropicSummarizer

logger = logging.getLogger(__name__)


@dataclass
class Claim:
    started: bool
    overview: BrandOverview


@dataclass
class GenerationResult:
    success: bool
    status: OverviewStatus
    overview: Optional[BrandOverview] = None
    error: Optional[str] = None


def normalize_site_url(website_url) -> str:
    url = website_url.strip()
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url
    return url


class BrandOverviewGenerator:
    def __init__(self, session_factory=None, summarizer=None, crawler=None):
        self.Session = session_factory or Session
        self.summarizer = summarizer or AnthropicSummarizer()
        self.crawler = crawler or SiteCrawler()

    def get_overview(self, target_id) -> Optional[BrandOverview]:
        with self.Session() as session:
            return session.query(BrandOverview).filter_by(target_id=target_id).first()

    def claim(self, target_id, website_url, force=False) -> Claim:
        """Atomically move the target's record to RUNNING, or report why not."""
        with self.Session() as session:
            existing = session.query(BrandOverview).filter_by(target_id=target_id).first()

            if existing is None:
                overview = BrandOverview(target_id=target_id, source_url=website_url, status=OverviewStatus.RUNNING)
                session.add(overview)
                try:
                    session.commit()
                except IntegrityError:
                    # Another request inserted first
                    session.rollback()
                    current = session.query(BrandOverview).filter_by(target_id=target_id).one()
                    return Claim(started=False, overview=current)
                return Claim(started=True, overview=overview)

            if existing.status == OverviewStatus.RUNNING:
                return Claim(started=False, overview=existing)
            if existing.status == OverviewStatus.COMPLETE and not force:
                return Claim(started=False, overview=existing)

            claimable = [OverviewStatus.FAILED, OverviewStatus.PENDING]
            if force:
                claimable.append(OverviewStatus.COMPLETE)
            updated = (
                session.query(BrandOverview)
                .filter(BrandOverview.id == existing.id, BrandOverview.status.in_(claimable))
                .update(
                    {
                        BrandOverview.status: OverviewStatus.RUNNING,
                        BrandOverview.source_url: website_url,
                        BrandOverview.error: None,
                        BrandOverview.warnings: None,
                    },
                    synchronize_session=False,
                )
            )
            session.commit()
            current = session.get(BrandOverview, existing.id, populate_existing=True)
            return Claim(started=updated == 1, overview=current)

    def resolve_brand_name(self, session, target_id, brand_name, crawl_result: CrawlResult, website_url) -> str:
        if brand_name:
            return brand_name
        target = session.get(Target, target_id)
        if target is not None and (target.tracked_brand or target.name):
            return target.tracked_brand or target.name
        if crawl_result.brand_info.recommended_name:
            return crawl_result.brand_info.recommended_name
        return (urlparse(website_url).hostname or website_url).replace('www.', '', 1)

    def crawl(self, website_url, warnings) -> CrawlResult:
        try:
            crawl_result = self.crawler.crawl(website_url)
        except Exception as e:
            logger.error(f"Crawl of {website_url} failed: {e}")
            warnings.append(f"Crawl failed: {e}")
            return empty_crawl_result(website_url)
        logger.info(f"Crawled {crawl_result.pages_crawled} pages in {crawl_result.crawl_duration_ms}ms")
        return crawl_result

    def _mark_failed(self, overview_id, error, warnings):
        try:
            with self.Session() as session:
                session.query(BrandOverview).filter(BrandOverview.id == overview_id).update(
                    {
                        BrandOverview.status: OverviewStatus.FAILED,
                        BrandOverview.error: error,
                        BrandOverview.warnings: '\n'.join(warnings) if warnings else None,
                    },
                    synchronize_session=False,
                )
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Could not mark brand overview {overview_id} as failed: {e}")

    def _update_target_profile(self, session, target_id, profile):
        """Copy the finished profile onto the target. Failure here does not fail the run."""
        try:
            target = session.get(Target, target_id)
            if target is not None:
                target.brand_profile = profile
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to update target {target_id} with brand profile: {e}")

    def run(self, claim: Claim, brand_name=None) -> GenerationResult:
        """Execute the pipeline for a claimed record."""
        overview = claim.overview
        target_id = overview.target_id
        warnings = []
        try:
            website_url = normalize_site_url(overview.source_url)
            logger.info(f"Starting brand overview generation for {target_id} ({website_url})")
            crawl_result = self.crawl(website_url, warnings)

            with self.Session() as session:
                name = self.resolve_brand_name(session, target_id, brand_name, crawl_result, website_url)
            logger.info(f"Generating brand profile for {name!r}")
            profile = self.summarizer.structure_profile(name, website_url, crawl_result)
            summary = self.summarizer.render_markdown(profile)

            with self.Session() as session:
                record = session.get(BrandOverview, overview.id)
                if record is None:
                    raise RuntimeError(f"Brand overview {overview.id} disappeared during generation")
                record.status = OverviewStatus.COMPLETE
                record.summary = summary
                record.structured_profile = profile
                record.warnings = '\n'.join(warnings) if warnings else None
                record.error = None
                session.commit()
                self._update_target_profile(session, target_id, profile)

            logger.info(f"Brand overview complete for {target_id}")
            return GenerationResult(success=True, status=OverviewStatus.COMPLETE, overview=record)
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.exception(f"Brand overview generation failed for {target_id}: {error}")
            self._mark_failed(overview.id, error, warnings)
            return GenerationResult(
                success=False,
                status=OverviewStatus.FAILED,
                overview=self.get_overview_safely(target_id),
                error=error,
            )

    def get_overview_safely(self, target_id) -> Optional[BrandOverview]:
        try:
            return self.get_overview(target_id)
        except SQLAlchemyError:
            return None

    def generate(self, target_id, website_url, brand_name=None, force=False) -> GenerationResult:
        """Claim then run synchronously. Never raises for pipeline or database errors."""
        try:
            claim = self.claim(target_id, website_url, force)
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize brand overview for {target_id}: {e}")
            return GenerationResult(
                success=False,
                status=OverviewStatus.FAILED,
                error='Failed to initialize brand overview generation',
            )

        if not claim.started:
            logger.info(f"Brand overview for {target_id} is {claim.overview.status.value}; not starting a run")
            return GenerationResult(success=True, status=claim.overview.status, overview=claim.overview)
        return self.run(claim, brand_name)
