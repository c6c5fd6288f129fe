"""Avatar ingestion: fetch, normalize and store avatar frames."""

import asyncio
import logging
import shutil
from collections.abc import Sequence
from io import BytesIO
from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

import httpx
from PIL import Image, ImageOps

from messageboard.config import Settings
from messageboard.services.errors import IngestionError, ValidationError

logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "PNG"
CANONICAL_EXTENSION = ".png"


class FrameTooLargeError(Exception):
    """Frame exceeded the configured byte or pixel ceiling."""


class AvatarIngestor:
    """Turns a list of remote image URLs into locally hosted square frames.

    Frames are written to ``<asset_dir>/<user id>/<index>.png`` and exposed as
    ``<base_url>/<user id>/<index>.png``. The caller owns the user directory:
    it creates it with :meth:`create_user_dir` and removes it with
    :meth:`remove_user_dir` if the submission does not go through.
    """

    def __init__(
        self,
        asset_dir: str | Path,
        base_url: str,
        size: int = 128,
        max_frames: int = 16,
        max_bytes: int = 5 * 1024 * 1024,
        max_pixels: int = 4096 * 4096,
        fetch_timeout: float = 10.0,
        max_redirects: int = 3,
        allowed_schemes: Sequence[str] = ("http", "https"),
        allowed_extensions: Sequence[str] = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"),
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.asset_dir = Path(asset_dir)
        self.base_url = base_url.rstrip("/")
        self.size = size
        self.max_frames = max_frames
        self.max_bytes = max_bytes
        self.max_pixels = max_pixels
        self.fetch_timeout = fetch_timeout
        self.max_redirects = max_redirects
        self.allowed_schemes = {scheme.lower() for scheme in allowed_schemes}
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self.transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "AvatarIngestor":
        return cls(
            asset_dir=settings.asset_dir,
            base_url=settings.asset_base_url,
            size=settings.avatar_size,
            max_frames=settings.avatar_max_frames,
            max_bytes=settings.avatar_max_bytes,
            max_pixels=settings.avatar_max_pixels,
            fetch_timeout=settings.avatar_fetch_timeout,
            max_redirects=settings.avatar_max_redirects,
            allowed_schemes=settings.avatar_allowed_schemes,
            allowed_extensions=settings.avatar_allowed_extensions,
            transport=transport,
        )

    def user_dir(self, user_id: int) -> Path:
        return self.asset_dir / str(user_id)

    def public_url(self, user_id: int, index: int) -> str:
        return f"{self.base_url}/{user_id}/{index}{CANONICAL_EXTENSION}"

    def validate_urls(self, urls: Sequence[str]) -> None:
        """Reject structurally invalid frame lists before any network activity."""
        if not urls:
            raise ValidationError("Invalid avatar: at least one frame is required")
        if len(urls) > self.max_frames:
            raise ValidationError(f"Invalid avatar: at most {self.max_frames} frames are allowed")

        invalid = [url for url in urls if not self._is_acceptable_url(url)]
        if invalid:
            raise ValidationError(f"Invalid avatar URL(s): {', '.join(invalid)}")

    def _is_acceptable_url(self, url: str) -> bool:
        try:
            parts = urlsplit(url)
        except ValueError:
            return False
        if parts.scheme.lower() not in self.allowed_schemes or not parts.netloc:
            return False
        return PurePosixPath(parts.path).suffix.lower() in self.allowed_extensions

    def create_user_dir(self, user_id: int) -> Path:
        path = self.user_dir(user_id)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def remove_user_dir(self, user_id: int) -> None:
        """Recursively remove a user's asset directory. Missing is fine."""
        path = self.user_dir(user_id)
        if path.exists():
            shutil.rmtree(path)
            logger.info(f"Removed asset directory {path}")

    async def ingest(self, user_id: int, urls: Sequence[str]) -> list[str]:
        """Fetch and store every frame concurrently; all must succeed.

        Each frame is attempted independently and a failing frame never cancels
        its siblings. Once all have settled, any failed frame raises
        :class:`IngestionError` naming the original URLs that failed. Unexpected
        errors (for example a disk write failing) are re-raised after the other
        frames have settled.
        """
        destination = self.user_dir(user_id)
        async with httpx.AsyncClient(
            timeout=self.fetch_timeout,
            follow_redirects=True,
            max_redirects=self.max_redirects,
            transport=self.transport,
        ) as client:
            results = await asyncio.gather(
                *(
                    self._ingest_frame(client, user_id, index, url, destination)
                    for index, url in enumerate(urls)
                ),
                return_exceptions=True,
            )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        failed = [url for url, result in zip(urls, results, strict=True) if result is None]
        if failed:
            raise IngestionError(failed)

        logger.info(f"Stored {len(results)} avatar frame(s) for user {user_id}")
        return list(results)

    async def _ingest_frame(
        self,
        client: httpx.AsyncClient,
        user_id: int,
        index: int,
        url: str,
        destination: Path,
    ) -> str | None:
        try:
            raw = await asyncio.wait_for(self._fetch(client, url), timeout=self.fetch_timeout)
        except (httpx.HTTPError, FrameTooLargeError, TimeoutError) as e:
            logger.warning(f"Failed to fetch avatar frame {index} from {url}: {e!r}")
            return None

        try:
            encoded = await asyncio.to_thread(self._normalize, raw)
        except (OSError, ValueError, Image.DecompressionBombError, FrameTooLargeError) as e:
            logger.warning(f"Failed to decode avatar frame {index} from {url}: {e!r}")
            return None

        path = destination / f"{index}{CANONICAL_EXTENSION}"
        await asyncio.to_thread(path.write_bytes, encoded)
        return self.public_url(user_id, index)

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> bytes:
        async with client.stream("GET", url) as response:
            response.raise_for_status()

            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                raise FrameTooLargeError(f"{declared} bytes declared")

            body = bytearray()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) > self.max_bytes:
                    raise FrameTooLargeError(f"more than {self.max_bytes} bytes")
        return bytes(body)

    def _normalize(self, raw: bytes) -> bytes:
        """Decode, center-crop to the canonical square and re-encode as PNG."""
        with Image.open(BytesIO(raw)) as image:
            width, height = image.size
            if width * height > self.max_pixels:
                raise FrameTooLargeError(f"{width}x{height} pixels")
            image.load()
            frame = ImageOps.fit(
                image.convert("RGBA"),
                (self.size, self.size),
                method=Image.Resampling.LANCZOS,
                centering=(0.5, 0.5),
            )
        output = BytesIO()
        frame.save(output, format=CANONICAL_FORMAT)
        return output.getvalue()
