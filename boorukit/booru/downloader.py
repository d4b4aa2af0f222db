"""Download post images to disk."""

import asyncio
import contextlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union
from urllib.parse import urlparse
import logging

import httpx
from tqdm import tqdm

from ..errors import BooruError, BooruIOError, InvalidUrl, RequestError
from ..utils.http_client import create_http_client
from .models import BasePost

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DEFAULT_CONCURRENCY = 4


@dataclass
class DownloadOptions:
    """How downloaded files are named and placed.

    ``filename_template`` accepts ``{id}``, ``{md5}`` and ``{ext}``.
    """

    overwrite: bool = False
    filename_template: str = '{id}.{ext}'
    organize_by_rating: bool = False


@dataclass
class DownloadResult:
    path: Path
    size: int
    skipped: bool = False


@dataclass
class DownloadProgress:
    """Byte counts reported while a download is in flight."""

    downloaded: int
    total: Optional[int] = None
    post_id: Optional[int] = None

    @property
    def fraction(self) -> Optional[float]:
        if not self.total:
            return None
        return self.downloaded / self.total


ProgressCallback = Callable[[DownloadProgress], None]


def _discard(tmp_path: Path) -> None:
    with contextlib.suppress(OSError):
        tmp_path.unlink(missing_ok=True)


def _extension(url: str) -> str:
    suffix = Path(urlparse(url).path).suffix
    return suffix.lstrip('.').lower() or 'bin'


class Downloader:
    """Streams post files to disk over an (optionally shared) httpx client."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None,
                 options: Optional[DownloadOptions] = None):
        self.http_client = http_client
        self.options = options or DownloadOptions()

    def generate_filename(self, post: BasePost) -> str:
        """Render the filename template for a post.

        Raises:
            InvalidUrl: If the post has no file URL
        """
        file_url = getattr(post, 'file_url', None)
        if not file_url:
            raise InvalidUrl(f"post {post.id} has no file_url")
        return self.options.filename_template.format(
            id=post.id,
            md5=getattr(post, 'checksum', None) or post.id,
            ext=_extension(file_url),
        )

    def _target_path(self, post: BasePost, dest_dir: Union[str, Path]) -> Path:
        directory = Path(dest_dir)
        rating = getattr(post, 'rating', None)
        if self.options.organize_by_rating and rating is not None:
            directory = directory / str(rating)
        return directory / self.generate_filename(post)

    async def _stream_to_file(self, client: httpx.AsyncClient, url: str, path: Path,
                              on_progress: Optional[ProgressCallback],
                              post_id: Optional[int]) -> int:
        try:
            async with client.stream('GET', url) as response:
                if response.status_code >= 400:
                    raise RequestError(f"HTTP {response.status_code} for {url}",
                                       status_code=response.status_code)
                total = response.headers.get('Content-Length')
                total = int(total) if total and total.isdigit() else None

                downloaded = 0
                tmp_path = path.with_name(path.name + '.part')
                try:
                    with open(tmp_path, 'wb') as f:
                        async for chunk in response.aiter_bytes(CHUNK_SIZE):
                            f.write(chunk)
                            downloaded += len(chunk)
                            if on_progress is not None:
                                on_progress(DownloadProgress(downloaded, total, post_id))
                    os.replace(tmp_path, path)
                except OSError as e:
                    _discard(tmp_path)
                    raise BooruIOError(f"could not write {path}: {e}", path=str(path)) from e
                except BaseException:
                    _discard(tmp_path)
                    raise
                return downloaded
        except httpx.TimeoutException as e:
            raise RequestError(f"timed out downloading {url}: {e}", is_timeout=True) from e
        except httpx.ConnectError as e:
            raise RequestError(f"could not connect to {url}: {e}", is_connect=True) from e
        except httpx.HTTPError as e:
            raise RequestError(f"{type(e).__name__} downloading {url}: {e}") from e

    async def download_url_with_progress(self, url: str, path: Union[str, Path],
                                         on_progress: Optional[ProgressCallback] = None,
                                         post_id: Optional[int] = None) -> DownloadResult:
        """Download ``url`` to ``path``, reporting progress per chunk.

        Existing files are left alone unless ``overwrite`` is set.

        Raises:
            InvalidUrl: If ``url`` is not an http(s) URL
            RequestError: On transport failures and HTTP error statuses
            BooruIOError: If the file cannot be written
        """
        if urlparse(url).scheme not in ('http', 'https'):
            raise InvalidUrl(url)

        path = Path(path)
        if path.exists() and not self.options.overwrite:
            logger.debug(f"Skipping existing file: {path}")
            return DownloadResult(path=path, size=path.stat().st_size, skipped=True)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BooruIOError(f"could not create {path.parent}: {e}", path=str(path.parent)) from e

        if self.http_client is not None:
            size = await self._stream_to_file(self.http_client, url, path, on_progress, post_id)
        else:
            async with create_http_client() as client:
                size = await self._stream_to_file(client, url, path, on_progress, post_id)

        logger.info(f"Downloaded {url} -> {path} ({size} bytes)")
        return DownloadResult(path=path, size=size)

    async def download_url(self, url: str, path: Union[str, Path]) -> DownloadResult:
        """Download ``url`` to ``path``."""
        return await self.download_url_with_progress(url, path)

    async def download_post(self, post: BasePost, dest_dir: Union[str, Path],
                            on_progress: Optional[ProgressCallback] = None) -> DownloadResult:
        """Download a post's file into ``dest_dir`` using the filename template."""
        path = self._target_path(post, dest_dir)
        return await self.download_url_with_progress(post.file_url, path,
                                                     on_progress=on_progress, post_id=post.id)

    async def download_posts(self, posts: Sequence[BasePost], dest_dir: Union[str, Path],
                             concurrency: int = DEFAULT_CONCURRENCY,
                             show_progress: bool = False) -> List[Union[DownloadResult, BooruError]]:
        """Download many posts with at most ``concurrency`` transfers in flight.

        One failed download does not stop the others.

        Returns:
            One entry per post, in input order: a DownloadResult, or the
            BooruError that download raised
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        semaphore = asyncio.Semaphore(concurrency)
        bar = tqdm(total=len(posts), desc="Downloading", unit="post", disable=not show_progress)

        async def run(post: BasePost) -> Union[DownloadResult, BooruError]:
            async with semaphore:
                try:
                    return await self.download_post(post, dest_dir)
                except BooruError as e:
                    logger.error(f"Download failed for post {post.id}: {e}")
                    return e
                finally:
                    bar.update(1)

        try:
            results = await asyncio.gather(*(run(post) for post in posts))
        finally:
            bar.close()

        failed = sum(1 for r in results if isinstance(r, BooruError))
        logger.info(f"Downloaded {len(posts) - failed}/{len(posts)} posts to {dest_dir}")
        return list(results)
