import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Sequence

PROGRESS_EVERY = 50


async def find_matches(
    target_digest: str,
    tags: Sequence[str],
    fetch_digest: Callable[[str], Awaitable[str | None]],
    delay: float = 0.5,
) -> AsyncIterator[str]:
    """Yield every tag in `tags` whose digest equals `target_digest`.

    Tags are checked one at a time, in order, with `delay` seconds
    between requests. The scan never stops early since several tags
    can share a digest.
    """
    for counter, tag in enumerate(tags):
        if counter:
            if counter % PROGRESS_EVERY == 0:
                logging.info(f"Still working, currently on tag number: {counter}")
            await asyncio.sleep(delay)

        if not (digest := await fetch_digest(tag)):
            logging.debug(f"{tag}: No digest available.")
            continue

        if digest == target_digest:
            logging.info(f"Found match. tag: {tag}")
            logging.info(f"Image ID Target: {digest}")
            logging.info(f"Image ID Source: {target_digest}")
            yield tag
