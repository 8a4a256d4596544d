"""Output sink — writes a collection and optionally publishes it."""

import logging
from dataclasses import dataclass
from pathlib import Path

from payload_collection.errors import PublishFailure
from payload_collection.generator.publisher import PostmanPublisher, PublishConfig
from payload_collection.postman import Collection, to_json

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path("build") / "postman_collection.json"


@dataclass
class EmitResult:
    path: Path
    uid: str | None = None
    skipped: bool = False  # no API key configured
    error: str | None = None  # publish failure; the file is still written


def write_collection(collection: Collection, path: Path = DEFAULT_OUTPUT) -> Path:
    """Write the pretty-printed collection to `path`, replacing any previous file."""
    text = to_json(collection)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Postman collection written to %s", path)
    return path


def emit(
    collection: Collection,
    method: str,
    output: Path = DEFAULT_OUTPUT,
    config: PublishConfig | None = None,
) -> EmitResult:
    """Write the collection, then publish it if an API key is configured.

    Publishing is best effort: a failure is logged and recorded on the
    result, and the written file stays in place.
    """
    result = EmitResult(path=write_collection(collection, output))

    if config is None or not config.api_key:
        logger.info("No Postman API key configured, skipping publish")
        result.skipped = True
        return result

    try:
        result.uid = PostmanPublisher(config).publish(collection)
    except PublishFailure as e:
        logger.warning("Publishing %s collection failed: %s", method, e)
        result.error = str(e)
    else:
        logger.info("Published %s collection, uid=%s", method, result.uid)
    return result
