"""Moderation word list retrieval from Azure Blob Storage.

The list is a single UTF-8 text blob with one pattern per line. It is fetched
whole on every call; edits to the blob take effect on the next mention.
"""

import logging

from azure.core.exceptions import AzureError
from azure.storage.blob.aio import BlobServiceClient

logger = logging.getLogger(__name__)

BLOB_TIMEOUT_SECONDS = 10


class WordListUnavailableError(RuntimeError):
    """Raised when the moderation word list cannot be fetched."""


def parse_word_list(document: str) -> list[str]:
    """Split a word list document into trimmed, non-blank lines."""
    return [line.strip() for line in document.splitlines() if line.strip()]


async def fetch_word_list(
    connection_string: str, container: str, blob_name: str
) -> list[str]:
    """Download and parse the moderation word list.

    Raises:
        WordListUnavailableError: If no connection string is configured or the
            blob cannot be downloaded.
    """
    if not connection_string:
        raise WordListUnavailableError("Azure Storage connection string not configured")

    try:
        service = BlobServiceClient.from_connection_string(
            connection_string,
            connection_timeout=BLOB_TIMEOUT_SECONDS,
            read_timeout=BLOB_TIMEOUT_SECONDS,
        )
        async with service:
            blob = service.get_blob_client(container=container, blob=blob_name)
            downloader = await blob.download_blob(encoding="UTF-8")
            document = await downloader.readall()
    except (AzureError, ValueError) as exc:
        raise WordListUnavailableError(
            f"Failed to download {container}/{blob_name}: {exc}"
        ) from exc

    words = parse_word_list(document)
    logger.info(
        "Moderation word list loaded",
        extra={"container": container, "blob": blob_name, "patterns": len(words)},
    )
    return words
