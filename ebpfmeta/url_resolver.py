"""Find the JSON package of an eBPF program from a file path or an HTTP URL."""

from __future__ import annotations

import http.client
import logging
import subprocess
import urllib.error
import urllib.request
from pathlib import Path

from .config import TrackerConfig

logger = logging.getLogger(__name__)

DOWNLOAD_DIR = Path("/tmp/ebpm")
HTTP_TIMEOUT = 10.0


def download_with_wget(url: str, config: TrackerConfig) -> str:
    """Fetch ``url`` with wget into the download directory and store it in ``config``.

    Returns the downloaded text. Raises OSError if nothing was downloaded.
    """
    resource_name = url.rsplit("/", 1)[-1]
    download_dir = DOWNLOAD_DIR
    download_dir.mkdir(parents=True, exist_ok=True)
    path = download_dir / resource_name
    cmd = ["wget", "--no-verbose", f"--output-document={path}", url]
    logger.info("%s", " ".join(cmd))
    try:
        subprocess.run(cmd, check=False)
    except OSError as exc:
        logger.error("cannot run wget: %s", exc)
    if resource_name and path.is_file():
        config.json_data = path.read_text(encoding="utf-8", errors="replace")
        return config.json_data
    logger.error("failed to wget %s", url)
    raise OSError(f"failed to wget {url}")


def resolve_json_data(config: TrackerConfig) -> str:
    """Fill ``config.json_data`` from ``config.url`` and return it.

    An empty URL keeps the JSON data already held. A path to a regular file is
    read; an ``http`` URL is fetched, falling back to wget when the server
    cannot be reached or answers 404. Raises FileNotFoundError when the URL is
    neither, and OSError when a download fails.
    """
    url = config.url
    if not url:
        logger.debug("url is empty, use json_data directly")
        return config.json_data
    path = Path(url)
    if path.is_file():
        logger.debug("json data path is a file: %s", url)
        config.json_data = path.read_text(encoding="utf-8", errors="replace")
        return config.json_data
    if len(url) > 4 and url.startswith("http"):
        try:
            with urllib.request.urlopen(url, timeout=HTTP_TIMEOUT) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as err:
            if err.code == 404:
                logger.debug("Not found.")
                return download_with_wget(url, config)
            status = err.code
            body = err.read()
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError):
            logger.debug("Connection failed.")
            return download_with_wget(url, config)
        logger.info("Get json data complete: %s", status)
        config.json_data = body.decode("utf-8", errors="replace")
        return config.json_data
    logger.error("json data path not exits: %s", url)
    raise FileNotFoundError(f"json data path not exits: {url}")