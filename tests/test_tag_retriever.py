"""
Tests for raw, region and consensus tag retrieval.
"""

from unittest.mock import Mock

import pytest

from core.validation_and_errors import ValidationException
from core.service_interfaces import SearchHit
from semantic_tagging.ranking import consensus_decay
from semantic_tagging.tag_brain import TagBrain
from semantic_tagging.tag_retriever import TagRetriever, best_score_per_tag
from sample_data.sample_documents import SAMPLE_SPACE_AND_COOKING, SAMPLE_TAGS


REPEATED_TOPIC_TEXT = "Space is big.\nPasta is tasty.\nSpace is big."


@pytest.fixture
def retriever(brain):
    return brain.retriever


def names(tags):
    return [t.name for t in tags]


class TestBestScorePerTag:

    def test_groups_by_alias_and_keeps_max(self):
        hits = [
            SearchHit("1", 0.6, {"alias": "Space", "original_name": "space"}),
            SearchHit("2", 0.9, {"alias": "Space", "original_name": "cosmos"}),
            SearchHit("3", 0.7, {"alias": "Mars", "original_name": "mars"}),
        ]
        tags = best_score_per_tag(hits)
        assert [(t.name, t.score) for t in tags] == [("Space", 0.9), ("Mars", 0.7)]

    def test_falls_back_to_original_name(self):
        tags = best_score_per_tag([SearchHit("1", 0.5, {"original_name": "cosmos"})])
        assert names(tags) == ["cosmos"]

    def test_skips_unnamed_hits(self):
        assert best_score_per_tag([SearchHit("1", 0.5, {})]) == []


class TestRawTags:

    def test_whole_document(self, retriever, two_topic_text):
        tags = retriever.get_raw_tags(two_topic_text, threshold=0.3)
        assert set(names(tags)) == {"Space", "Cooking"}
        assert all(t.score >= 0.3 for t in tags)

    def test_one_entry_per_alias(self, retriever):
        tags = retriever.get_raw_tags("The cosmos and space beyond", threshold=0.3)
        assert names(tags) == ["Space"]

    def test_sorted_best_first(self, retriever):
        tags = retriever.get_raw_tags("Space, space, cosmos and some pasta.", threshold=0.0)
        scores = [t.score for t in tags]
        assert scores == sorted(scores, reverse=True)
        assert tags[0].name == "Space"

    def test_higher_threshold_returns_subset(self, retriever, two_topic_text):
        low = retriever.get_raw_tags(two_topic_text, threshold=0.0)
        high = retriever.get_raw_tags(two_topic_text, threshold=0.6)
        assert set(names(high)) <= set(names(low))
        assert len(low) == 3

    def test_top_k(self, retriever, two_topic_text):
        assert len(retriever.get_raw_tags(two_topic_text, threshold=0.0, top_k=1)) == 1

    def test_search_is_overfetched_and_filtered(self, retriever, index, two_topic_text):
        retriever.get_raw_tags(two_topic_text, threshold=0.3, top_k=4)
        call = index.search_calls[-1]
        assert call["limit"] == 12
        assert call["filters"] == {"type": "TAG"}

    def test_long_content_uses_leading_summary(self, embedding, index):
        retriever = TagRetriever(embedding, index, summary_chars=10)
        retriever.get_raw_tags("Java is fun and the rest is ignored")
        assert embedding.text_calls == ["Java is fu"]

    @pytest.mark.parametrize("content, threshold, top_k", [
        ("", 0.3, 5),
        ("text", 1.5, 5),
        ("text", 0.3, 0),
        ("text", 0.3, True),
    ])
    def test_invalid_input(self, retriever, content, threshold, top_k):
        with pytest.raises(ValidationException):
            retriever.get_raw_tags(content, threshold, top_k)


class TestRegionTags:

    def test_regions_per_topic(self, retriever, two_topic_text):
        regions = retriever.get_region_tags(two_topic_text, threshold=0.3)
        assert [names(r.tag_scores) for r in regions] == [["Space"], ["Cooking"]]

    def test_region_indices_point_into_source(self, retriever, two_topic_text):
        for region in retriever.get_region_tags(two_topic_text, threshold=0.3):
            assert two_topic_text[region.start_index:region.end_index] == region.content

    def test_cursor_advances_past_repeated_text(self, retriever):
        regions = retriever.get_region_tags(REPEATED_TOPIC_TEXT, threshold=0.3)
        assert [(r.start_index, r.end_index) for r in regions] == [(0, 13), (14, 29), (30, 43)]

    def test_regions_without_tags_are_dropped(self, retriever):
        regions = retriever.get_region_tags("Space is big.\nThe weather is mild.", threshold=0.3)
        assert [r.content for r in regions] == ["Space is big."]

    def test_unanchored_chunk_is_dropped(self, embedding, index, brain):
        segmenter = Mock()
        segmenter.split.return_value = ["Space is big.", "Cosmos never mentioned here"]
        retriever = TagRetriever(embedding, index, segmenter=segmenter)

        regions = retriever.get_region_tags("Space is big. Pasta is tasty.", threshold=0.3)
        assert [r.content for r in regions] == ["Space is big."]

    def test_to_dict_shape(self, retriever, two_topic_text):
        region = retriever.get_region_tags(two_topic_text, threshold=0.3)[0].to_dict()
        assert set(region) == {"regionContent", "regionStartIndex", "regionEndIndex", "tagScores"}
        assert region["tagScores"][0]["name"] == "Space"


class TestCombinedTags:

    def test_single_region_tags_are_not_decayed(self, retriever, two_topic_text):
        regions = retriever.get_region_tags(two_topic_text, threshold=0.3)
        combined = {t.name: t.score for t in retriever.get_combined_tags(two_topic_text, threshold=0.3)}
        assert combined["Space"] == pytest.approx(regions[0].tag_scores[0].score)
        assert combined["Cooking"] == pytest.approx(regions[1].tag_scores[0].score)

    def test_tags_in_several_regions_are_summed_and_decayed(self, retriever):
        regions = retriever.get_region_tags(REPEATED_TOPIC_TEXT, threshold=0.3)
        space_total = sum(t.score for r in regions for t in r.tag_scores if t.name == "Space")

        combined = retriever.get_combined_tags(REPEATED_TOPIC_TEXT, threshold=0.3)
        assert combined[0].name == "Space"
        assert combined[0].score == pytest.approx(space_total * consensus_decay(2))

    def test_top_k(self, retriever, two_topic_text):
        assert len(retriever.get_combined_tags(two_topic_text, threshold=0.3, top_k=1)) == 1

    def test_no_regions(self, retriever):
        assert retriever.get_combined_tags("Nothing relevant here.", threshold=0.3) == []


def test_sample_document_scenario(embedding, index):
    brain = TagBrain(embedding, index)
    for tag_id, alias, synonyms in SAMPLE_TAGS:
        brain.learn(tag_id, alias, synonyms)

    regions = brain.get_region_tags(SAMPLE_SPACE_AND_COOKING, threshold=0.4)

    assert len(regions) >= 2
    tops = [r.tag_scores[0].name for r in regions]
    assert any(name in ("Space", "Mars") for name in tops)
    assert any(name in ("Cooking", "Pasta") for name in tops)
    assert all(t.name != "Java" for r in regions for t in r.tag_scores)
