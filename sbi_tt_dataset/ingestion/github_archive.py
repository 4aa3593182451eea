"""List and download historical SBI TT rate PDFs from a GitHub archive."""

from __future__ import annotations

import re
from collections import defaultdict
from datetime import date
from pathlib import Path
from urllib.parse import quote

import requests
from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from sbi_tt_dataset.errors import DiscoveryError, FetchError
from sbi_tt_dataset.utils.dates import date_from_path
from sbi_tt_dataset.utils.logger import get_logger

LOGGER = get_logger(__name__)

DEFAULT_UPSTREAM_REPO = "skbly7/sbi-tt-rates-historical"
DEFAULT_UPSTREAM_REF = "master"
GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def group_by_date(paths: list[str]) -> dict[date, list[str]]:
    """Group document paths by the publication date encoded in their name."""

    grouped: dict[date, list[str]] = defaultdict(list)
    for path in paths:
        rate_date = date_from_path(path)
        if rate_date is None:
            LOGGER.debug("Ignoring %s; no date in file name", path)
            continue
        grouped[rate_date].append(path)
    return dict(grouped)


class GitHubArchiveClient:
    """Discover and fetch PDFs committed to a GitHub repository."""

    def __init__(
        self,
        repo: str = DEFAULT_UPSTREAM_REPO,
        ref: str = DEFAULT_UPSTREAM_REF,
        *,
        session: requests.Session | None = None,
        timeout: int = 30,
        max_attempts: int = 3,
    ) -> None:
        self.repo = repo.strip()
        self.ref = ref.strip()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", "sbi-tt-dataset/1.0")

    @property
    def tree_url(self) -> str:
        ref = quote(self.ref, safe="")
        return f"{GITHUB_API_URL}/repos/{self.repo}/git/trees/{ref}?recursive=1"

    def raw_url(self, path: str) -> str:
        return f"{GITHUB_RAW_URL}/{self.repo}/{self.ref}/{path}"

    def list_documents(self) -> list[str]:
        """Return every PDF path in the upstream tree, sorted."""

        try:
            response = self.session.get(self.tree_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise DiscoveryError(f"Unable to list documents in {self.repo}@{self.ref}") from exc
        nodes = payload.get("tree") if isinstance(payload, dict) else None
        if not isinstance(nodes, list):
            raise DiscoveryError(f"Unexpected tree payload for {self.repo}@{self.ref}")
        if payload.get("truncated"):
            LOGGER.warning("GitHub truncated the tree listing for %s@%s", self.repo, self.ref)
        paths = [
            node["path"]
            for node in nodes
            if isinstance(node, dict)
            and isinstance(node.get("path"), str)
            and _PDF_SUFFIX.search(node["path"])
        ]
        LOGGER.info("Discovered %s PDFs in %s@%s", len(paths), self.repo, self.ref)
        return sorted(paths)

    def discover(self) -> dict[date, list[str]]:
        """Return ``{publication date: [candidate paths]}`` for the upstream tree."""

        return group_by_date(self.list_documents())

    def fetch(self, path: str, destination: Path) -> Path:
        """Download ``path`` to ``destination``, retrying transient failures."""

        destination.parent.mkdir(parents=True, exist_ok=True)
        url = self.raw_url(path)

        @retry(
            retry=retry_if_exception_type(requests.RequestException),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=False,
        )
        def _download() -> bytes:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.content

        try:
            content = _download()
        except RetryError as exc:
            raise FetchError(f"Unable to download {url}") from exc.last_attempt.exception()
        destination.write_bytes(content)
        LOGGER.info("Downloaded %s to %s", path, destination)
        return destination

    def __enter__(self) -> "GitHubArchiveClient":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover - trivial
        self.session.close()


__all__ = [
    "DEFAULT_UPSTREAM_REF",
    "DEFAULT_UPSTREAM_REPO",
    "GitHubArchiveClient",
    "group_by_date",
]
