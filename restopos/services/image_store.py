"""Client for the external image store holding rendered bills (Cloudinary REST API)."""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests

from restopos.core.config import settings

logger = logging.getLogger(__name__)


class ImageStoreError(Exception):
    """Raised when an upload cannot be completed."""


@dataclass(frozen=True)
class StoredImage:
    url: str
    public_id: str


class CloudinaryImageStore:
    """Signed upload and delete calls against one Cloudinary cloud.

    A signature is the SHA-1 hex digest of the request parameters sorted by
    name, joined as ``k=v`` pairs with ``&``, followed by the API secret.
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        base_url: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 10.0,
        http: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        self.clock = clock

    def _endpoint(self, action: str) -> str:
        return f"{self.base_url}/{self.cloud_name}/image/{action}"

    def sign(self, params: dict[str, Any]) -> str:
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def _signed_form(self, params: dict[str, Any]) -> dict[str, str]:
        signed = {key: str(value) for key, value in params.items()}
        signed["timestamp"] = str(int(self.clock()))
        signed["signature"] = self.sign(signed)
        signed["api_key"] = self.api_key
        return signed

    def upload(self, content: bytes, filename: str, folder: str | None = None) -> StoredImage:
        """Upload a file and return its durable URL and public id."""
        params: dict[str, Any] = {}
        if folder:
            params["folder"] = folder
        form = self._signed_form(params)
        try:
            response = self.http.post(
                self._endpoint("upload"),
                data=form,
                files={"file": (filename, content)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise ImageStoreError(f"Upload of {filename} failed") from exc

        url = body.get("secure_url") or body.get("url")
        public_id = body.get("public_id")
        if not url or not public_id:
            raise ImageStoreError(f"Upload of {filename} returned no location")
        logger.info("[IMAGE_STORE] Uploaded %s as %s", filename, public_id)
        return StoredImage(url=url, public_id=public_id)

    def delete(self, public_id: str) -> bool:
        """Delete an image by public id. Failures are logged and reported as ``False``."""
        form = self._signed_form({"public_id": public_id})
        try:
            response = self.http.post(self._endpoint("destroy"), data=form, timeout=self.timeout)
            response.raise_for_status()
            result = response.json().get("result")
        except (requests.RequestException, ValueError):
            logger.warning("[IMAGE_STORE] Failed to delete image %s", public_id, exc_info=True)
            return False

        if result != "ok":
            logger.warning("[IMAGE_STORE] Delete of %s answered %r", public_id, result)
            return False
        logger.info("[IMAGE_STORE] Deleted image %s", public_id)
        return True


def get_image_store() -> CloudinaryImageStore:
    """Build the configured image store client."""
    return CloudinaryImageStore(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        base_url=settings.image_store_base_url,
        timeout=settings.image_store_timeout_seconds,
    )
