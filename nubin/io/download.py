# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""HTTP download of single files (used to fetch nuget.exe).

Key Features:

- **Retries with backoff** on transient status codes (429, 5xx)
- **Atomic writes** - downloads to <name>.part, then renames on success
- **Stream hashing** - SHA-256 computed while the body streams to disk
- **Redirects** followed; the final URL names the file unless
  Content-Disposition provides a name

Example:
    ```python
    from pathlib import Path
    from nubin.io import download_file

    path, sha256 = download_file(
        "https://dist.nuget.org/win-x86-commandline/latest/nuget.exe",
        Path("cache/tools"),
    )
    ```
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from nubin.logging import get_global_logger

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024


def _filename_from_cd(content_disposition: str) -> str | None:
    """
    Extract a filename from a Content-Disposition header if present.

    Example header:
      'attachment; filename="nuget.exe"'
    """
    if not content_disposition:
        return None
    for part in (s.strip() for s in content_disposition.split(";")):
        if part.lower().startswith("filename="):
            value = part.split("=", 1)[1].strip().strip('"')
            return value or None
    return None


def _filename_from_url(url: str) -> str:
    name = Path(urlparse(url).path).name
    return name or "download.bin"


def make_session() -> requests.Session:
    """
    Create a requests.Session with retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a User-Agent identifying the tool.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": "nubin/0.1"})
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def download_file(
    url: str,
    destination_folder: Path,
    *,
    filename: str | None = None,
    timeout: int = 60,
) -> tuple[Path, str]:
    """Download a URL into destination_folder.

    Args:
        url: Source URL.
        destination_folder: Folder to save into (created if missing).
        filename: Name to save as. Default: Content-Disposition, then the
            final URL path.
        timeout: Per-request timeout (seconds).

    Returns:
        A tuple (file_path, sha256_hex).

    Raises:
        requests.HTTPError: For non-2xx responses (after retries).
        requests.RequestException: For connection failures.
    """
    logger = get_global_logger()
    destination_folder = Path(destination_folder)
    destination_folder.mkdir(parents=True, exist_ok=True)

    logger.verbose("HTTP", f"GET {url}")

    with make_session() as session:
        resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)

        for hist in resp.history:
            logger.debug(
                "HTTP",
                f"Redirect {hist.status_code} -> {hist.headers.get('Location', 'unknown')}",
            )

        try:
            resp.raise_for_status()
        except requests.HTTPError as err:
            resp.close()
            raise requests.HTTPError(f"download failed for {url}: {err}") from err

        logger.verbose("HTTP", f"Response: {resp.status_code} {resp.reason}")

        if filename is None:
            cd_name = _filename_from_cd(resp.headers.get("Content-Disposition", ""))
            filename = cd_name or _filename_from_url(resp.url)
        target = destination_folder / filename
        tmp = target.with_suffix(target.suffix + ".part")

        sha = hashlib.sha256()
        with tmp.open("wb") as f:
            for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                if not chunk:
                    continue
                f.write(chunk)
                sha.update(chunk)
        resp.close()

    digest = sha.hexdigest()
    tmp.replace(target)
    logger.verbose("HTTP", f"Saved {target} (SHA-256 {digest})")
    return target, digest
