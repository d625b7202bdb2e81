"""
Fetches the SoundCloud web app and extracts the public client_id that api-v2
requires on every request.
"""

import asyncio
import logging
import re
from typing import Optional

import aiohttp
from bs4 import BeautifulSoup

from soundcloud_cli.exceptions import ClientIdError

from .client import USER_AGENT

log = logging.getLogger(__name__)

WEB_BASE_URL = "https://soundcloud.com"
_CLIENT_ID_REGEX = re.compile(r',client_id:"(?P<client_id>[\w-]+)"')


def find_last_script_url(page_html: str) -> Optional[str]:
    """Returns the ``src`` of the last <script> tag on the page, if any."""
    soup = BeautifulSoup(page_html, "html.parser")
    scripts = [tag["src"] for tag in soup.find_all("script") if tag.get("src")]
    return scripts[-1] if scripts else None


def extract_client_id(script_text: str) -> str:
    """Extracts the client_id literal from the web app's JavaScript bundle."""
    match = _CLIENT_ID_REGEX.search(script_text)
    if not match:
        raise ClientIdError("Could not find client_id in the SoundCloud app script.")
    return match.group("client_id")


class ClientIdFetcher:
    """Downloads the SoundCloud landing page and its app script to recover a client_id."""

    def __init__(self, base_url: str = WEB_BASE_URL, max_retries: int = 3):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries

    async def fetch(self) -> str:
        """
        Fetches a fresh client_id with retry logic.

        Raises:
            ClientIdError: If the page layout changed or every attempt failed.
        """
        timeout = aiohttp.ClientTimeout(total=45, connect=15)
        async with aiohttp.ClientSession(
            timeout=timeout, headers={"User-Agent": USER_AGENT}
        ) as session:
            for attempt in range(1, self.max_retries + 1):
                try:
                    log.debug(
                        f"Attempt {attempt}/{self.max_retries} to fetch a client_id..."
                    )
                    async with session.get(self.base_url) as response:
                        response.raise_for_status()
                        page_html = await response.text()

                    script_url = find_last_script_url(page_html)
                    if not script_url:
                        raise ClientIdError(
                            "Could not find any app script on the SoundCloud page."
                        )
                    if script_url.startswith("/"):
                        script_url = self.base_url + script_url
                    log.debug(f"Found app script URL: {script_url}")

                    async with session.get(script_url) as response:
                        response.raise_for_status()
                        script_text = await response.text()

                    client_id = extract_client_id(script_text)
                    log.debug(f"Extracted client_id: {client_id[:8]}...")
                    return client_id

                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    log.warning(f"client_id fetch attempt {attempt} failed: {e}")
                    if attempt == self.max_retries:
                        raise ClientIdError(
                            f"Failed to fetch a client_id after {self.max_retries} attempts."
                        ) from e
                    await asyncio.sleep(2**attempt)

        raise ClientIdError("client_id fetching failed unexpectedly.")
