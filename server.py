"""
Web server for the tagging engine
Exposes learning, tag retrieval, scoring and keyword discovery over REST
Supports React frontend via CORS
"""

from flask import Flask, request, jsonify, g
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from pydantic import BaseModel, Field, AliasChoices, ValidationError
from typing import List, Optional
import time
import uuid

from core.config import BrainConfig, SecretsMask
from core.logging_config import Logger
from core.pipeline_factory import PipelineFactory
from core.validation_and_errors import (
    ValidationException,
    BackendUnavailableException,
)
from semantic_tagging.tag_brain import TagBrain, DEFAULT_LIST_LIMIT


logger = Logger(__name__)

MAX_CONTENT_LENGTH = 2 * 1024 * 1024  # 2MB request bodies


class LearnRequest(BaseModel):
    tag_id: str = Field(validation_alias=AliasChoices("tagId", "id"))
    alias: str
    synonyms: List[str]


class ContentRequest(BaseModel):
    content: str
    threshold: Optional[float] = None
    top_k: Optional[int] = Field(default=None, validation_alias=AliasChoices("topK", "top_k"))


class ScoreTagsRequest(BaseModel):
    tags: List[str]
    content: str


class KeywordsRequest(BaseModel):
    content: str
    top_k: Optional[int] = Field(default=None, validation_alias=AliasChoices("topK", "top_k"))
    diversity: Optional[float] = None


def _parse(model: type, payload) -> BaseModel:
    if payload is None:
        raise ValidationException("Request body must be JSON")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationException(details) from e


def create_app(brain: TagBrain) -> Flask:
    """Build the Flask app around an already constructed TagBrain"""
    app = Flask(__name__)
    CORS(app, resources={r"/*": {"origins": "*"}})
    app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH

    @app.before_request
    def _before():
        g.req_start = time.perf_counter()
        g.correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        logger.info(f">> {request.method} {request.path}", correlation_id=g.correlation_id)

    @app.after_request
    def _after(response):
        dur = (time.perf_counter() - g.get('req_start', time.perf_counter())) * 1000
        response.headers["X-Correlation-ID"] = g.get("correlation_id", "")
        logger.performance(
            dur,
            f"{request.method} {request.path} -> {response.status_code}",
            correlation_id=g.get("correlation_id"),
        )
        return response

    @app.errorhandler(ValidationException)
    def _validation_error(e):
        return jsonify({'success': False, 'error': str(e)}), 400

    @app.errorhandler(BackendUnavailableException)
    def _backend_error(e):
        logger.error(f"Backend unavailable: {e}", correlation_id=g.get("correlation_id"))
        return jsonify({'success': False, 'error': 'Backend unavailable'}), 503

    @app.errorhandler(Exception)
    def _unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.error(
            f"Unhandled error: {SecretsMask.mask_string(str(e))}",
            exc_info=True,
            correlation_id=g.get("correlation_id"),
        )
        return jsonify({'success': False, 'error': 'Internal error'}), 500

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'}), 200

    @app.route('/learn', methods=['POST'])
    def learn():
        body = _parse(LearnRequest, request.get_json(silent=True))
        brain.learn(body.tag_id, body.alias, body.synonyms)
        return jsonify({'success': True}), 200

    @app.route('/raw-tags', methods=['POST'])
    def raw_tags():
        body = _parse(ContentRequest, request.get_json(silent=True))
        tags = brain.get_raw_tags(body.content, body.threshold, body.top_k)
        return jsonify({'tags': [t.to_dict() for t in tags]}), 200

    @app.route('/region-tags', methods=['POST'])
    def region_tags():
        body = _parse(ContentRequest, request.get_json(silent=True))
        regions = brain.get_region_tags(body.content, body.threshold, body.top_k)
        return jsonify({'regions': [r.to_dict() for r in regions]}), 200

    @app.route('/combined-tags', methods=['POST'])
    def combined_tags():
        body = _parse(ContentRequest, request.get_json(silent=True))
        tags = brain.get_combined_tags(body.content, body.threshold, body.top_k)
        return jsonify({'tags': [t.to_dict() for t in tags]}), 200

    @app.route('/score-tags', methods=['POST'])
    def score_tags():
        body = _parse(ScoreTagsRequest, request.get_json(silent=True))
        scores = brain.score_tags(body.tags, body.content)
        return jsonify({'scores': [s.to_dict() for s in scores]}), 200

    @app.route('/keywords', methods=['POST'])
    def keywords():
        body = _parse(KeywordsRequest, request.get_json(silent=True))
        found = brain.extract_keywords(body.content, body.top_k, body.diversity)
        return jsonify({'keywords': [k.to_dict() for k in found]}), 200

    @app.route('/tags', methods=['GET'])
    def list_tags():
        limit = request.args.get('limit', default=DEFAULT_LIST_LIMIT, type=int)
        cursor = request.args.get('cursor') or request.args.get('offset')
        return jsonify(brain.list_tags(limit, cursor)), 200

    @app.route('/tags/<tag_id>', methods=['DELETE'])
    def delete_tag(tag_id):
        brain.delete_tag(tag_id)
        return jsonify({'success': True}), 200

    return app


def main():
    config = BrainConfig.from_env()
    brain = PipelineFactory(config).create_brain(initialize=True)
    app = create_app(brain)
    logger.info(f"Tagging service (REST) running on port {config.port}")
    app.run(host="0.0.0.0", port=config.port)


if __name__ == '__main__':
    main()
