"""
Tests for adjacent-sentence semantic segmentation.
"""

from core.text_processor import TextProcessor
from semantic_tagging.text_segmenter import TextSegmenter


DRIFT_TEXT = "Alpha one. Beta two. Gamma three."
DRIFT_VECTORS = {
    "Alpha one.": [1.0, 0.0, 0.0],
    "Beta two.": [0.8, 0.6, 0.0],
    "Gamma three.": [0.28, 0.96, 0.0],
}


def test_splits_on_topic_change(embedding, two_topic_text):
    chunks = TextSegmenter(embedding).split(two_topic_text)
    assert chunks == [
        "Space exploration is vast. Rockets fly to the cosmos.",
        "Cooking pasta needs salt. Italian cuisine is culinary art.",
    ]


def test_sentences_embedded_in_one_batch(embedding, two_topic_text):
    TextSegmenter(embedding).split(two_topic_text)
    assert len(embedding.batch_calls) == 1
    assert len(embedding.batch_calls[0]) == 4


def test_chunks_cover_every_sentence_in_order(embedding, two_topic_text):
    chunks = TextSegmenter(embedding).split(two_topic_text)
    sentences = TextProcessor.split_sentences(two_topic_text)
    assert " ".join(chunks) == " ".join(sentences)


def test_compares_with_previous_sentence_not_chunk_start(static_embedding):
    # First and last sentence are far apart, each neighbour pair is close
    segmenter = TextSegmenter(static_embedding(DRIFT_VECTORS), similarity_threshold=0.5)
    assert segmenter.split(DRIFT_TEXT) == [DRIFT_TEXT]


def test_threshold_override(static_embedding):
    segmenter = TextSegmenter(static_embedding(DRIFT_VECTORS), similarity_threshold=0.5)
    assert segmenter.split(DRIFT_TEXT, similarity_threshold=0.9) == [
        "Alpha one.", "Beta two.", "Gamma three.",
    ]


def test_single_sentence(static_embedding):
    segmenter = TextSegmenter(static_embedding(DRIFT_VECTORS))
    assert segmenter.split("Alpha one.") == ["Alpha one."]


def test_empty_content_makes_no_embedding_call(embedding):
    segmenter = TextSegmenter(embedding)
    assert segmenter.split("") == []
    assert segmenter.split("  \n\n ") == []
    assert embedding.batch_calls == []
