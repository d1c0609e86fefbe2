"""
Data models for the news cache.
"""

from kite_news.models.news_models import (
    Category,
    CategoryIndex,
    ImageRef,
    SourceRef,
    Perspective,
    TimelineEvent,
    DomainRef,
    ArticleCluster,
    CategoryArticles,
)
from kite_news.models.sync_models import SyncState, SyncOutcome, SyncProgress, SyncReport
