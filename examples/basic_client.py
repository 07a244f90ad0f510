"""
Example demonstrating typed_http with request logging.

This example shows how to:
- Read client settings from the environment (or a .env file)
- Route request logs through Rich
- Decode JSON responses into dataclasses
- Probe an endpoint with check()

Set TYPED_HTTP_BASE_URL to point at another httpbin-compatible server.
"""

import asyncio
import os
from dataclasses import dataclass
from logging import basicConfig
from logging import getLogger

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from typed_http import ClientSettings
from typed_http import HTTPClient
from typed_http import HTTPClientError

load_dotenv()

logger = getLogger(__name__)
console = Console()


@dataclass
class SlideshowInfo:
    title: str
    author: str


@dataclass
class Slideshow:
    slideshow: SlideshowInfo


async def main() -> None:
    """Fetch a document, post a form and check reachability."""
    console.print(Panel.fit("[bold blue]typed_http Example[/bold blue]"))

    base_url = os.getenv("TYPED_HTTP_BASE_URL", "https://httpbin.org")
    settings = ClientSettings.from_env()
    logger.info(f"Using base URL {base_url}")

    async with HTTPClient.from_settings(settings) as client:
        reachable = await client.check(f"{base_url}/status/200")
        console.print(f"[dim]Reachable:[/dim] {reachable}")

        try:
            doc = await client.get(f"{base_url}/json", Slideshow)
            console.print(f"[green]Slideshow:[/green] {doc.slideshow.title} by {doc.slideshow.author}")

            echoed = await client.post(f"{base_url}/post", {"name": "typed_http", "debug": True})
            console.print(f"[green]Form echoed:[/green] {echoed['form']}")
        except HTTPClientError as e:
            console.print(f"[red]Request failed:[/red] {e}")


if __name__ == "__main__":
    basicConfig(
        level="DEBUG",
        format="[%(name)s] %(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    asyncio.run(main())
