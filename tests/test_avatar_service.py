"""Tests for avatar ingestion."""

import asyncio
from io import BytesIO

import httpx
import pytest
from PIL import Image

from messageboard.services.avatar_service import AvatarIngestor
from messageboard.services.errors import IngestionError, ValidationError


class TestValidateUrls:
    """Structural checks that run before any fetch."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://x/a.png",
            "http://x/a.JPG",
            "https://x/frames/b.gif?v=2",
            "https://x/c.webp",
        ],
    )
    def test_accepts_supported_urls(self, ingestor, url):
        ingestor.validate_urls([url])

    @pytest.mark.parametrize(
        "url",
        [
            "ftp://x/a.gif",
            "file:///etc/a.png",
            "https:///a.png",
            "https://x/a.svg",
            "https://x/a",
            "not a url",
        ],
    )
    def test_rejects_unsupported_urls(self, ingestor, url):
        with pytest.raises(ValidationError) as exc_info:
            ingestor.validate_urls(["https://x/ok.png", url])

        assert url in exc_info.value.message
        assert "ok.png" not in exc_info.value.message

    def test_rejects_empty_list(self, ingestor):
        with pytest.raises(ValidationError):
            ingestor.validate_urls([])

    def test_rejects_too_many_frames(self, ingestor):
        with pytest.raises(ValidationError):
            ingestor.validate_urls([f"https://x/{i}.png" for i in range(ingestor.max_frames + 1)])


class TestIngest:
    """Fetching and normalizing frames."""

    @pytest.mark.asyncio
    async def test_frames_are_square_pngs_in_order(
        self, ingestor, avatar_host, asset_dir, make_image
    ):
        wide = avatar_host.add("/wide.png", make_image((300, 100), "blue"))
        tall = avatar_host.add("/tall.jpg", make_image((50, 120), "green", "JPEG"))
        ingestor.create_user_dir(7)

        frames = await ingestor.ingest(7, [wide, tall])

        assert frames == [
            "http://testserver/assets/7/0.png",
            "http://testserver/assets/7/1.png",
        ]
        for index in (0, 1):
            with Image.open(asset_dir / "7" / f"{index}.png") as image:
                assert image.format == "PNG"
                assert image.size == (64, 64)

    @pytest.mark.asyncio
    async def test_crop_is_centered(self, ingestor, avatar_host, asset_dir):
        # red | blue | red stripes; the centered square is all blue
        source = Image.new("RGB", (300, 100), "red")
        source.paste(Image.new("RGB", (100, 100), "blue"), (100, 0))
        output = BytesIO()
        source.save(output, format="PNG")
        url = avatar_host.add("/striped.png", output.getvalue())
        ingestor.create_user_dir(1)

        await ingestor.ingest(1, [url])

        with Image.open(asset_dir / "1" / "0.png") as image:
            assert image.convert("RGB").getpixel((32, 32)) == (0, 0, 255)

    @pytest.mark.asyncio
    async def test_failure_names_only_failing_urls(self, ingestor, avatar_host):
        good = avatar_host.add("/good.png")
        missing = "https://img.example.com/missing.png"
        server_error = avatar_host.add("/error.png", status_code=500)
        ingestor.create_user_dir(2)

        with pytest.raises(IngestionError) as exc_info:
            await ingestor.ingest(2, [good, missing, server_error])

        assert exc_info.value.urls == [missing, server_error]
        # Siblings of a failing frame are still fetched
        assert good in avatar_host.requested

    @pytest.mark.asyncio
    async def test_oversized_frame_fails(self, ingestor, avatar_host):
        big = avatar_host.add("/big.png", b"\0" * (ingestor.max_bytes + 1))
        ingestor.create_user_dir(3)

        with pytest.raises(IngestionError) as exc_info:
            await ingestor.ingest(3, [big])

        assert exc_info.value.urls == [big]

    @pytest.mark.asyncio
    async def test_frame_over_pixel_ceiling_fails(
        self, asset_dir, avatar_host, make_image
    ):
        """A small file that decodes to too many pixels is refused before decoding."""
        ingestor = AvatarIngestor(
            asset_dir=asset_dir,
            base_url="http://testserver/assets",
            max_pixels=50 * 50,
            transport=httpx.MockTransport(avatar_host.handler),
        )
        small = avatar_host.add("/small.png", make_image((40, 40)))
        huge = avatar_host.add("/huge.png", make_image((100, 100)))
        ingestor.create_user_dir(6)

        with pytest.raises(IngestionError) as exc_info:
            await ingestor.ingest(6, [small, huge])

        assert exc_info.value.urls == [huge]

    @pytest.mark.asyncio
    async def test_redirects_are_followed_up_to_limit(self, ingestor, avatar_host):
        target = avatar_host.add("/real.png")
        one_hop = avatar_host.redirect("/hop.png", target)
        loop = avatar_host.redirect("/loop.png", "https://img.example.com/loop.png")
        ingestor.create_user_dir(4)

        assert len(await ingestor.ingest(4, [one_hop])) == 1
        with pytest.raises(IngestionError) as exc_info:
            await ingestor.ingest(4, [loop])
        assert exc_info.value.urls == [loop]

    @pytest.mark.asyncio
    async def test_slow_frame_times_out_without_blocking_siblings(self, asset_dir, make_image):
        png = make_image()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/slow.png":
                await asyncio.sleep(5)
            return httpx.Response(200, content=png)

        ingestor = AvatarIngestor(
            asset_dir=asset_dir,
            base_url="http://testserver/assets",
            fetch_timeout=0.2,
            transport=httpx.MockTransport(handler),
        )
        ingestor.create_user_dir(5)

        with pytest.raises(IngestionError) as exc_info:
            await ingestor.ingest(5, ["https://h/fast.png", "https://h/slow.png"])

        assert exc_info.value.urls == ["https://h/slow.png"]
        assert (asset_dir / "5" / "0.png").exists()


class TestUserDirectory:
    """Creating and removing per-user asset directories."""

    def test_remove_user_dir(self, ingestor, asset_dir):
        path = ingestor.create_user_dir(9)
        (path / "0.png").write_bytes(b"x")

        ingestor.remove_user_dir(9)

        assert not path.exists()

    def test_remove_missing_dir_is_noop(self, ingestor):
        ingestor.remove_user_dir(12345)
