"""
End-to-end check against a real Weaviate instance and embedding model.

Run with RUN_INTEGRATION=1 and WEAVIATE_URL pointing at a live server.
"""

import os
import uuid

import pytest

from core.config import BrainConfig
from core.pipeline_factory import PipelineFactory
from sample_data.sample_documents import SAMPLE_SPACE_AND_COOKING, SAMPLE_TAGS


pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(os.getenv("RUN_INTEGRATION") != "1", reason="set RUN_INTEGRATION=1 to run"),
]


@pytest.fixture(scope="module")
def live_brain():
    config = BrainConfig.from_env()
    config.collection_name = f"IntegrationTags{uuid.uuid4().hex[:8]}"
    factory = PipelineFactory(config)
    vector_index = factory.create_vector_index()
    brain = factory.create_brain(vector_index=vector_index, initialize=True)
    for tag_id, alias, synonyms in SAMPLE_TAGS:
        brain.learn(tag_id, alias, synonyms)
    yield brain
    vector_index.client.collections.delete(config.collection_name)
    vector_index.close()


def test_both_topics_detected_overall(live_brain):
    tags = {t.name for t in live_brain.get_combined_tags(SAMPLE_SPACE_AND_COOKING, threshold=0.4)}
    assert "Space" in tags or "Mars" in tags
    assert "Cooking" in tags or "Pasta" in tags
    assert "Java" not in tags


def test_regions_anchor_into_source(live_brain):
    for region in live_brain.get_region_tags(SAMPLE_SPACE_AND_COOKING, threshold=0.4):
        assert SAMPLE_SPACE_AND_COOKING[region.start_index:region.end_index] == region.content


def test_relearn_is_idempotent(live_brain):
    before = live_brain.list_tags(limit=100)["tags"]
    tag_id, alias, synonyms = SAMPLE_TAGS[0]
    live_brain.learn(tag_id, alias, synonyms)
    after = live_brain.list_tags(limit=100)["tags"]
    assert sorted(t["id"] for t in before) == sorted(t["id"] for t in after)
