# FILE: image_broker/services/blob_mirror.py
"""
Optional mirroring of generated images to a blob host

Mirroring is best-effort: any failure keeps the original URL.
"""
import asyncio
import base64
import logging
import uuid
from typing import Any, List, Optional, Tuple
from urllib.parse import unquote_to_bytes

import httpx

logger = logging.getLogger(__name__)


class BlobMirrorError(RuntimeError):
    """Upload or source download failed"""


def decode_data_uri(uri: str) -> Tuple[bytes, str]:
    """data:[<type>][;base64],<data> -> (bytes, content type)"""
    header, sep, data = uri.partition(",")
    if not uri.startswith("data:") or not sep:
        raise BlobMirrorError("Malformed data URI")

    params = header[len("data:"):].split(";")
    content_type = params[0] or "text/plain"
    if "base64" in params[1:]:
        try:
            return base64.b64decode(data, validate=False), content_type
        except ValueError as e:
            raise BlobMirrorError(f"Bad base64 payload: {e}") from e
    return unquote_to_bytes(data), content_type


def _hosted_url(data: Any) -> Optional[str]:
    """Hosted URL from {url}, {ufsUrl}, [{...}] or {data: [...] | {...}}"""
    if isinstance(data, dict) and "data" in data:
        data = data["data"]
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None
    url = data.get("url") or data.get("ufsUrl")
    return url if isinstance(url, str) and url else None


class BlobMirror:
    """Uploads image bytes to a configured endpoint and returns the hosted URL"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        upload_url: str,
        token: Optional[str] = None,
        hosted_marker: str = "utfs.io"
    ):
        self.client = client
        self.upload_url = upload_url
        self.token = token
        self.hosted_marker = hosted_marker

    def is_hosted(self, url: str) -> bool:
        return bool(self.hosted_marker) and self.hosted_marker in url

    async def _load_source(self, url: str) -> Tuple[bytes, str]:
        if url.startswith("data:"):
            return decode_data_uri(url)
        response = await self.client.get(url)
        if not response.is_success:
            raise BlobMirrorError(f"Source fetch failed with status {response.status_code}")
        content_type = response.headers.get("content-type", "image/png").split(";")[0]
        return response.content, content_type

    async def mirror(self, url: str) -> str:
        """Upload the image at `url`; raises BlobMirrorError or httpx.HTTPError"""
        content, content_type = await self._load_source(url)
        ext = content_type.split("/")[1] if "/" in content_type else "png"
        ext = ext.split("+")[0] or "png"
        name = f"gen-{uuid.uuid4()}.{ext}"

        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = await self.client.post(
            self.upload_url,
            files={"file": (name, content, content_type)},
            headers=headers
        )
        if not response.is_success:
            raise BlobMirrorError(f"Upload failed with status {response.status_code}: {response.text}")

        hosted = _hosted_url(response.json())
        if not hosted:
            raise BlobMirrorError("Upload response carried no URL")
        return hosted

    async def mirror_or_keep(self, url: str) -> str:
        """Mirrored URL, or the original one when mirroring is skipped or fails"""
        if not url or self.is_hosted(url):
            return url
        try:
            return await self.mirror(url)
        except Exception as e:
            # best-effort: a bad URL or host must never abort the history write
            logger.error(f"Blob mirror failed, keeping original URL: {e!r}")
            return url

    async def mirror_all(self, urls: List[str]) -> List[str]:
        return list(await asyncio.gather(*(self.mirror_or_keep(u) for u in urls)))
