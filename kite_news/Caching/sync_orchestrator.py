"""
Sync Orchestrator Module

Orchestrates a complete synchronization run by coordinating the API client,
the day-rollover invalidation, the followed categories filter and the cache.

A run is strictly sequential. Before every category fetch and every image
download the orchestrator hands a progress report to the caller's callback;
returning False from the callback cancels the run at that point. Work that
finished before the cancellation is kept.
"""

import time
import logging
from datetime import tzinfo
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from kite_news.Caching.news_cache import NewsCache
from kite_news.Caching.followed_filter import resolve_followed
from kite_news.Caching.settings_store import SettingsStore
from kite_news.database.kite_client import KiteClient
from kite_news.exceptions import KiteApiError, CacheIOError
from kite_news.models.news_models import Category, CategoryIndex, CategoryArticles
from kite_news.models.sync_models import SyncState, SyncOutcome, SyncProgress, SyncReport

# Configure logging
logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SyncProgress], Optional[bool]]
ConfirmCallback = Callable[[], bool]


def _display_name(index: CategoryIndex, category_file: str) -> str:
    category = index.get_category(category_file) or Category(file=category_file)
    return category.display_name


class SyncOrchestrator:
    """Runs the index refresh, invalidation check and per-category sync loop."""

    def __init__(self,
                 cache: NewsCache,
                 client: KiteClient,
                 settings: Optional[SettingsStore] = None,
                 tz: Optional[tzinfo] = None):
        """
        Args:
            cache: Local news cache to populate
            client: API client used for every remote request
            settings: Settings store holding the followed categories
                      (defaults to the cache's own store)
            tz: Timezone for the day-rollover check (defaults to local time)
        """
        self.cache = cache
        self.client = client
        self.settings = settings or cache.settings
        self.tz = tz
        self.state = SyncState.IDLE

    def _set_state(self, state: SyncState) -> None:
        logger.debug(f"Sync state: {self.state.value} -> {state.value}")
        self.state = state

    @staticmethod
    def _proceed(progress_callback: Optional[ProgressCallback], progress: SyncProgress) -> bool:
        logger.debug(progress.message)
        if progress_callback is None:
            return True
        return progress_callback(progress) is not False

    def _finish(self, report: SyncReport, start_time: float) -> SyncReport:
        report.elapsed_seconds = round(time.time() - start_time, 2)
        terminal = {
            SyncOutcome.COMPLETED: SyncState.COMPLETED,
            SyncOutcome.CANCELLED: SyncState.CANCELLED,
            SyncOutcome.DECLINED: SyncState.CANCELLED,
            SyncOutcome.FIRST_RUN: SyncState.FIRST_RUN_EXIT,
            SyncOutcome.FAILED: SyncState.FAILED,
        }
        self._set_state(terminal[report.outcome])
        return report

    def _fetch_index(self) -> Dict[str, Any]:
        """Fetch and validate the category index; errors are fatal to the run."""
        raw_index = self.client.fetch_categories()
        try:
            CategoryIndex.model_validate(raw_index)
        except ValidationError as e:
            raise KiteApiError(f"Malformed category index: {e.error_count()} validation error(s)") from e
        return raw_index

    def run_sync(self,
                 progress_callback: Optional[ProgressCallback] = None,
                 confirm_callback: Optional[ConfirmCallback] = None) -> SyncReport:
        """
        Run a full synchronization.

        On the very first run (no cached index) only the index is downloaded.
        Otherwise the index is refreshed, the cache is wiped on a day change,
        and every followed category is fetched together with its images.

        Args:
            progress_callback: Receives a SyncProgress before each category and
                               each image download; return False to cancel
            confirm_callback: Asked before the refresh when an index is cached;
                              return False to abort without any request

        Returns:
            SyncReport describing the run
        """
        start_time = time.time()
        self._set_state(SyncState.IDLE)

        # Step 1: First run only downloads the category list
        if not self.cache.has_index():
            return self._first_run(start_time)

        # Step 2: Confirm the full sync
        self._set_state(SyncState.CONFIRM_PROMPT)
        if confirm_callback is not None and not confirm_callback():
            logger.info("Sync declined")
            return self._finish(SyncReport(outcome=SyncOutcome.DECLINED), start_time)

        # Step 3: Refresh the index unconditionally
        self._set_state(SyncState.REFRESHING_INDEX)
        logger.info("Refreshing categories index")
        try:
            raw_index = self._fetch_index()
        except KiteApiError as e:
            logger.error(f"Could not fetch categories: {e}")
            return self._finish(SyncReport(outcome=SyncOutcome.FAILED, error=str(e)), start_time)
        index = CategoryIndex.model_validate(raw_index)
        report = SyncReport(outcome=SyncOutcome.COMPLETED, index_timestamp=index.timestamp)

        # Step 4: Wipe the cache on a day change, then store the new index
        self._set_state(SyncState.INVALIDATION_CHECK)
        report.cache_invalidated = self.cache.check_and_clear_if_new_day(index.timestamp, tz=self.tz)
        try:
            self.cache.save_index(raw_index)
        except CacheIOError as e:
            logger.warning(f"Could not save categories index: {e}")

        # Step 5: Sync every followed category
        working_set = resolve_followed(self.settings.get_followed_categories(), index.category_files())
        report.total = len(working_set)
        if not working_set:
            logger.info("No categories selected, nothing to sync")
            return self._finish(report, start_time)

        for position, category_file in enumerate(working_set, start=1):
            self._set_state(SyncState.FETCHING_ARTICLES)
            progress = SyncProgress(
                state=SyncState.FETCHING_ARTICLES,
                category_file=category_file,
                category_name=_display_name(index, category_file),
                position=position,
                total=report.total,
                succeeded=report.succeeded,
                images_downloaded=report.images_downloaded,
            )
            if not self._proceed(progress_callback, progress):
                report.outcome = SyncOutcome.CANCELLED
                break

            report.attempted += 1
            if not self._sync_category(progress, report, progress_callback):
                report.outcome = SyncOutcome.CANCELLED
                break

        if report.cancelled:
            logger.info(f"Sync cancelled after {report.succeeded}/{report.total} categories")
        else:
            logger.info(f"Sync complete: {report.succeeded}/{report.total} downloaded, "
                        f"{report.images_downloaded} images")
        return self._finish(report, start_time)

    def _first_run(self, start_time: float) -> SyncReport:
        self._set_state(SyncState.FETCHING_INDEX)
        logger.info("No cached index, downloading category list")
        try:
            raw_index = self._fetch_index()
            self.cache.save_index(raw_index)
        except (KiteApiError, CacheIOError) as e:
            logger.error(f"Could not fetch categories: {e}")
            return self._finish(SyncReport(outcome=SyncOutcome.FAILED, error=str(e)), start_time)

        report = SyncReport(outcome=SyncOutcome.FIRST_RUN,
                            index_timestamp=CategoryIndex.model_validate(raw_index).timestamp)
        logger.info("Category list updated")
        return self._finish(report, start_time)

    def _sync_category(self, progress: SyncProgress, report: SyncReport,
                       progress_callback: Optional[ProgressCallback]) -> bool:
        """
        Fetch and store one category, then download its missing images.

        Returns:
            False if the run was cancelled during the image downloads
        """
        category_file = progress.category_file
        try:
            raw_articles = self.client.fetch_articles(category_file)
            articles = CategoryArticles.model_validate(raw_articles)
            self.cache.save_articles(category_file, raw_articles)
        except (KiteApiError, CacheIOError) as e:
            logger.warning(f"Sync failed for {category_file}: {e}")
            report.failed_categories.append(category_file)
            return True
        except ValidationError as e:
            logger.warning(f"Sync failed for {category_file}: malformed response ({e.error_count()} errors)")
            report.failed_categories.append(category_file)
            return True

        report.succeeded += 1

        self._set_state(SyncState.DOWNLOADING_IMAGES)
        for cluster_position, cluster in enumerate(articles.clusters, start=1):
            for label, image in cluster.image_refs():
                if self.cache.has_image(image.url):
                    logger.debug(f"Using cached image {image.url}")
                    report.images_reused += 1
                    continue

                image_progress = SyncProgress(
                    state=SyncState.DOWNLOADING_IMAGES,
                    category_file=category_file,
                    category_name=progress.category_name,
                    position=progress.position,
                    total=progress.total,
                    succeeded=report.succeeded,
                    images_downloaded=report.images_downloaded,
                    cluster_position=cluster_position,
                    image_label=label,
                )
                if not self._proceed(progress_callback, image_progress):
                    return False

                try:
                    content = self.client.fetch_image(image.url)
                    self.cache.save_image(image.url, content)
                except (KiteApiError, CacheIOError) as e:
                    logger.warning(f"Image download failed for {image.url}: {e}")
                    report.images_failed += 1
                    continue
                report.images_downloaded += 1
        return True
