"""Release lookup client for the GitHub releases API."""

from __future__ import annotations

import logging
import os
import urllib.parse
from datetime import datetime
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

import requests
from pydantic import BaseModel, Field, ValidationError

from hotsuploader.updates.errors import (
    NetworkError,
    ParseError,
    UpdateConfigurationError,
    UpdateError,
)
from hotsuploader.utils.file import ensure_directory_exists
from hotsuploader.version import AppVersion

logger: Final = logging.getLogger(__name__)

API_ROOT: Final = "https://api.github.com"
USER_AGENT: Final = "Hotsapi.Uploader"

# Human-readable explanations for common HTTP errors
HTTP_ERROR_MAP: Final = {
    403: "Access denied or API rate limit exceeded",
    404: "Repository has no published release",
    429: "Rate limit exceeded",
    500: "Release host internal error",
    502: "Bad gateway at release host",
    503: "Release host unavailable",
}


class ReleaseAsset(BaseModel):
    """Downloadable file attached to a release."""

    name: str
    browser_download_url: str
    size: int = 0


class ReleaseInfo(BaseModel):
    """A published application release."""

    tag_name: str
    name: str | None = None
    html_url: str | None = None
    published_at: datetime | None = None
    assets: list[ReleaseAsset] = Field(default_factory=list)
    staged_files: list[Path] = Field(default_factory=list)

    @property
    def version(self) -> AppVersion:
        return AppVersion.parse(self.tag_name)


@runtime_checkable
class UpdateClient(Protocol):
    """Protocol for update-transport clients."""

    def check_and_apply_update(self) -> ReleaseInfo | None:
        """Look for a newer release and stage it for installation.

        Returns:
            The staged release, or None when already up to date
        """
        ...

    def close(self) -> None:
        """Release network resources."""
        ...


def parse_repository(repository_url: str) -> tuple[str, str]:
    """Split a ``https://github.com/<owner>/<repo>`` locator.

    Raises:
        UpdateConfigurationError: If the locator is not a GitHub repository URL
    """
    parsed = urllib.parse.urlparse(repository_url)
    if parsed.scheme not in ("http", "https") or parsed.netloc.lower() not in (
        "github.com",
        "www.github.com",
    ):
        raise UpdateConfigurationError(f"Not a GitHub repository URL: {repository_url}")

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        raise UpdateConfigurationError(f"Repository URL lacks owner/name: {repository_url}")

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return owner, repo


class GitHubUpdateClient:
    """Update-transport client backed by GitHub releases.

    Finds the latest published release of the configured repository and,
    when it is newer than the running version, downloads its assets into
    the staging directory where the installer picks them up on next launch.
    """

    def __init__(
        self,
        repository_url: str,
        current_version: AppVersion,
        staging_dir: Path,
        timeout: int = 10,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the release client.

        Args:
            repository_url: Repository that publishes releases
            current_version: Version of the running application
            staging_dir: Directory downloaded packages are written to
            timeout: Timeout for HTTP requests in seconds
            session: Optional pre-configured HTTP session

        Raises:
            UpdateConfigurationError: If the repository URL is unusable
        """
        self.owner, self.repo = parse_repository(repository_url)
        self.current_version = current_version
        self.staging_dir = staging_dir
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self.session.headers.setdefault("Accept", "application/vnd.github+json")

    @property
    def latest_release_url(self) -> str:
        return f"{API_ROOT}/repos/{self.owner}/{self.repo}/releases/latest"

    def fetch_latest_release(self) -> ReleaseInfo:
        """Retrieve the latest published release.

        Raises:
            NetworkError: When the release host cannot be reached
            ReleaseNotFoundError: When nothing has been published
            RateLimitError: When the API refuses further requests
            ParseError: When the response is not a release document
            UpdateError: For other API-related errors
        """
        try:
            resp = self.session.get(self.latest_release_url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"Network error: {exc}", exc) from exc

        if resp.status_code != 200:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            body.setdefault("message", HTTP_ERROR_MAP.get(resp.status_code, resp.text))
            logger.debug("Release API error: %s - %s", resp.status_code, body["message"])
            raise UpdateError.from_response(body, resp.status_code)

        try:
            release = ReleaseInfo.model_validate(resp.json())
            AppVersion.parse(release.tag_name)
        except (ValueError, ValidationError) as exc:
            raise ParseError(f"Unexpected release document: {exc}", exc) from exc
        return release

    def staged_files(self, release: ReleaseInfo) -> list[Path] | None:
        """Files of a release already fully staged, or None if any is missing."""
        target_dir = self.staging_dir / release.tag_name
        if not target_dir.is_dir():
            return None
        files = [target_dir / Path(asset.name).name for asset in release.assets]
        for asset, path in zip(release.assets, files):
            if not path.is_file():
                return None
            if asset.size and path.stat().st_size != asset.size:
                return None
        return files

    def download_assets(self, release: ReleaseInfo) -> list[Path]:
        """Download every asset of a release into the staging directory.

        Each file is written under a ``.part`` name and moved into place once
        complete, so an interrupted download never leaves a truncated package.

        Returns:
            Paths of the staged files
        """
        target_dir = self.staging_dir / release.tag_name
        ensure_directory_exists(target_dir)

        staged: list[Path] = []
        for asset in release.assets:
            target = target_dir / Path(asset.name).name
            partial = target.with_name(target.name + ".part")
            try:
                self._download(asset, partial)
            except BaseException:
                partial.unlink(missing_ok=True)
                raise
            os.replace(partial, target)
            staged.append(target)
            logger.debug("Staged %s", target)
        return staged

    def _download(self, asset: ReleaseAsset, destination: Path) -> None:
        try:
            with self.session.get(
                asset.browser_download_url, timeout=self.timeout, stream=True
            ) as resp:
                if resp.status_code != 200:
                    raise UpdateError(resp.status_code, f"Download of {asset.name} failed")
                with destination.open("wb") as fh:
                    for chunk in resp.iter_content(chunk_size=65536):
                        fh.write(chunk)
        except requests.RequestException as exc:
            raise NetworkError(f"Download of {asset.name} failed: {exc}", exc) from exc

    def check_and_apply_update(self) -> ReleaseInfo | None:
        """Stage the latest release if it is newer than the running version.

        Returns None when already up to date or when the release was staged
        by an earlier check.
        """
        release = self.fetch_latest_release()
        if release.version <= self.current_version:
            logger.debug(
                "Latest release %s is not newer than %s",
                release.version.display,
                self.current_version.display,
            )
            return None

        if self.staged_files(release) is not None:
            logger.debug("Release %s already staged", release.version.display)
            return None

        release.staged_files = self.download_assets(release)
        logger.info("Update %s downloaded", release.version.display)
        return release

    def close(self) -> None:
        self.session.close()


def create_update_client(
    repository_url: str, current_version: AppVersion, staging_dir: Path
) -> UpdateClient:
    """Create the update-transport client for a repository locator.

    Raises:
        UpdateConfigurationError: If the locator is unusable
    """
    return GitHubUpdateClient(repository_url, current_version, staging_dir)
