"""Publishes collections to the Postman API."""

import requests
from pydantic import BaseModel, ValidationError

from payload_collection.errors import PublishFailure
from payload_collection.postman import Collection, to_json

DEFAULT_API_HOST = "https://api.getpostman.com"


class PublishConfig(BaseModel):
    """Publish settings, passed in explicitly by the caller."""

    api_key: str | None = None
    host: str = DEFAULT_API_HOST
    timeout: float = 30.0


class _CollectionRef(BaseModel):
    uid: str


class PublishAck(BaseModel):
    collection: _CollectionRef


class PostmanPublisher:
    """Creates collections through `POST {host}/collections`."""

    def __init__(self, config: PublishConfig):
        if not config.api_key:
            raise PublishFailure("no Postman API key configured")
        self.config = config

    def publish(self, collection: Collection) -> str:
        """Upload a collection and return the uid Postman assigned to it."""
        body = '{"collection":' + to_json(collection, pretty=False) + "}"
        url = f"{self.config.host.rstrip('/')}/collections"

        try:
            resp = requests.post(
                url,
                data=body.encode("utf-8"),
                headers={
                    "X-Api-Key": self.config.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.config.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise PublishFailure(f"POST {url} failed: {e}") from e

        try:
            return PublishAck.model_validate_json(resp.text).collection.uid
        except ValidationError as e:
            raise PublishFailure(f"unexpected response from {url}: {resp.text[:200]}") from e
