"""
Tests for bootstrapping a client_id from the SoundCloud web app.
"""

import asyncio

import pytest
from aiohttp import web

from soundcloud_cli.api.client_id import (
    ClientIdFetcher,
    extract_client_id,
    find_last_script_url,
)
from soundcloud_cli.client import SoundCloudClient
from soundcloud_cli.exceptions import ClientIdError

LANDING_PAGE = """
<html>
  <head><title>SoundCloud</title></head>
  <body>
    <script>window.__sc_hydration = [];</script>
    <script crossorigin src="/assets/vendor-1a2b.js"></script>
    <script crossorigin src="/assets/app-3c4d.js"></script>
  </body>
</html>
"""

APP_SCRIPT = 'n.init({env:"production",client_id:"aBcD1234eFgH5678",api:"v2"})'


class TestParsing:
    def test_find_last_script_url(self):
        assert find_last_script_url(LANDING_PAGE) == "/assets/app-3c4d.js"
        assert find_last_script_url("<html></html>") is None

    def test_extract_client_id(self):
        assert extract_client_id(APP_SCRIPT) == "aBcD1234eFgH5678"

    def test_extract_client_id_missing(self):
        with pytest.raises(ClientIdError):
            extract_client_id("console.log('no id here')")


def _routes():
    async def landing(request: web.Request) -> web.Response:
        return web.Response(text=LANDING_PAGE, content_type="text/html")

    async def app_script(request: web.Request) -> web.Response:
        return web.Response(text=APP_SCRIPT, content_type="application/javascript")

    async def vendor_script(request: web.Request) -> web.Response:
        return web.Response(text="var x = 1;", content_type="application/javascript")

    return [
        web.get("/", landing),
        web.get("/assets/app-3c4d.js", app_script),
        web.get("/assets/vendor-1a2b.js", vendor_script),
    ]


class TestClientIdFetcher:
    def test_fetch(self, serve):
        async def run():
            async with serve(_routes()) as server:
                fetcher = ClientIdFetcher(base_url=str(server.make_url("/")))
                return await fetcher.fetch()

        assert asyncio.run(run()) == "aBcD1234eFgH5678"

    def test_client_installs_fetched_id(self, serve):
        async def run():
            async with serve(_routes()) as server:
                fetcher = ClientIdFetcher(base_url=str(server.make_url("/")))
                async with SoundCloudClient() as client:
                    before = client.api.config
                    await client.set_client_id(fetcher)
                    return before, client.api.config

        before, after = asyncio.run(run())

        assert before.client_id == ""
        assert after.client_id == "aBcD1234eFgH5678"
        assert after is not before

    def test_page_without_scripts(self, serve):
        async def empty(request: web.Request) -> web.Response:
            return web.Response(text="<html></html>", content_type="text/html")

        async def run():
            async with serve([web.get("/", empty)]) as server:
                await ClientIdFetcher(base_url=str(server.make_url("/"))).fetch()

        with pytest.raises(ClientIdError):
            asyncio.run(run())
