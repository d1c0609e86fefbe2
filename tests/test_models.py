"""
Tests for the news wire models and sync run models.
"""

import unittest

import pytest
from pydantic import ValidationError

from kite_news.models.news_models import ArticleCluster, Category, CategoryArticles, CategoryIndex
from kite_news.models.sync_models import SyncOutcome, SyncProgress, SyncReport, SyncState


class TestNewsModels(unittest.TestCase):

    def test_category_index_keeps_order_and_extras(self):
        index = CategoryIndex.model_validate({
            "timestamp": 1741600800,
            "categories": [{"file": "world.json", "name": "World"}, {"file": "tech.json", "name": "Tech"}],
            "supported_languages": ["en"],
            "unexpected": 1,
        })
        self.assertEqual(index.category_files(), ["world.json", "tech.json"])
        self.assertEqual(index.get_category("tech.json").name, "Tech")
        self.assertIsNone(index.get_category("missing.json"))
        self.assertEqual(index.to_dict()["unexpected"], 1)

    def test_category_index_requires_timestamp(self):
        with self.assertRaises(ValidationError):
            CategoryIndex.model_validate({"categories": []})

    def test_fractional_timestamps_are_truncated(self):
        index = CategoryIndex.model_validate({"timestamp": 1741615200.5, "categories": None})
        self.assertEqual(index.timestamp, 1741615200)
        self.assertEqual(index.categories, [])
        self.assertEqual(CategoryIndex.model_validate({"timestamp": "1741615200.9"}).timestamp, 1741615200)
        self.assertEqual(CategoryArticles.model_validate({"timestamp": 1741615200.5}).timestamp, 1741615200)

    def test_null_strings_become_empty(self):
        cluster = ArticleCluster.model_validate({
            "title": None,
            "short_summary": None,
            "perspectives": [{"sources": [{"name": None}], "text": None}],
            "timeline": [{"date": None, "content": None}],
            "domains": [{"name": None}],
            "primary_image": {"url": None},
        })
        self.assertEqual(cluster.title, "")
        self.assertEqual(cluster.perspectives[0].sources[0].name, "")
        self.assertEqual(cluster.timeline[0].content, "")
        self.assertEqual(cluster.image_refs(), [])
        self.assertEqual(Category(file="usa.json", name=None).display_name, "usa")

    def test_display_name_falls_back_to_identifier(self):
        self.assertEqual(Category(file="usa.json", name="USA").display_name, "USA")
        self.assertEqual(Category(file="usa.json").display_name, "usa")

    def test_cluster_with_nulls(self):
        cluster = ArticleCluster.model_validate({
            "title": "Story",
            "talking_points": None,
            "perspectives": [{"sources": None, "text": "View"}],
            "timeline": None,
            "domains": None,
            "primary_image": None,
        })
        self.assertEqual(cluster.talking_points, [])
        self.assertEqual(cluster.perspectives[0].sources, [])
        self.assertEqual(cluster.image_refs(), [])

    def test_image_refs_skip_empty_urls(self):
        cluster = ArticleCluster.model_validate({
            "primary_image": {"url": "", "caption": "no url"},
            "secondary_image": {"url": "https://img/2.jpg", "caption": "second"},
        })
        refs = cluster.image_refs()
        self.assertEqual([label for label, _ in refs], ["secondary"])
        self.assertEqual(refs[0][1].url, "https://img/2.jpg")

    def test_category_articles(self):
        articles = CategoryArticles.model_validate({
            "category": "Tech",
            "timestamp": 1741600800,
            "clusters": [{"title": "A"}, {"title": "B"}],
        })
        self.assertEqual([c.title for c in articles.clusters], ["A", "B"])
        self.assertEqual(CategoryArticles.model_validate({"clusters": None}).clusters, [])


@pytest.mark.parametrize("outcome,cancelled", [
    (SyncOutcome.COMPLETED, False),
    (SyncOutcome.CANCELLED, True),
    (SyncOutcome.DECLINED, True),
    (SyncOutcome.FIRST_RUN, False),
    (SyncOutcome.FAILED, False),
])
def test_report_cancelled_flag(outcome, cancelled):
    assert SyncReport(outcome=outcome).cancelled is cancelled


def test_progress_messages():
    category = SyncProgress(state=SyncState.FETCHING_ARTICLES, category_file="tech.json",
                            category_name="Tech", position=2, total=5)
    image = SyncProgress(state=SyncState.DOWNLOADING_IMAGES, category_file="tech.json",
                         category_name="Tech", position=2, total=5,
                         cluster_position=3, image_label="secondary")
    assert category.message == "Downloading category: Tech (2/5)..."
    assert image.message == "Downloading Tech - Article 3 secondary image..."
