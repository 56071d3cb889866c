from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

import msgspec
import requests
from loguru import logger

from baromods.models.metadata.metadata_structure import (
    PublishedFileDetailsEnvelope,
    WorkshopItem,
)
from baromods.utils.constants import (
    STEAM_GET_PUBLISHED_FILE_DETAILS_URL,
    STEAM_REQUEST_TIMEOUT,
    STEAM_RESULT_OK,
)
from baromods.utils.exception import ApiError, NetworkError
from baromods.utils.generic import chunks
from baromods.utils.steam.webapi.retry import RetryConfig, webapi_post_with_retry


def published_file_details_form(publishedfileids: list[int]) -> dict[str, str]:
    """Build the form body of an ISteamRemoteStorage/GetPublishedFileDetails call."""
    data = {"itemcount": str(len(publishedfileids))}
    for count, publishedfileid in enumerate(publishedfileids):
        data[f"publishedfileids[{count}]"] = str(publishedfileid)
    return data


class WorkshopClient:
    """
    Client of the Steam Workshop metadata endpoint.

    https://steamapi.xpaw.me/#ISteamRemoteStorage/GetPublishedFileDetails
    """

    def __init__(
        self,
        endpoint: str = STEAM_GET_PUBLISHED_FILE_DETAILS_URL,
        retry_config: RetryConfig | None = None,
        timeout: float = STEAM_REQUEST_TIMEOUT,
        max_workers: int | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self.max_workers = max_workers

    def get_items(self, publishedfileids: list[int]) -> list[WorkshopItem]:
        """
        Query the details of the given items in one request.

        Items Steam could not resolve (private, deleted, ...) are left out.

        :param publishedfileids: PublishedFileIds to look up
        :return: the resolved items
        :raises NetworkError: if the request cannot be completed
        :raises ApiError: if Steam reports a failure, answers with a body that is not
            a details response, or with a different number of results than requested
        """
        if not publishedfileids:
            return []

        logger.debug(
            f"Querying details for {len(publishedfileids)} mod(s) via Steam WebAPI"
        )
        try:
            response = webapi_post_with_retry(
                self.endpoint,
                published_file_details_form(publishedfileids),
                config=self.retry_config,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(
                f"Unable to complete request! Are you connected to the internet? Received exception: {e.__class__.__name__}"
            )
            raise NetworkError(f"Steam WebAPI request failed: {e}") from e

        logger.debug(f"Received WebAPI response {response.status_code} from query")

        try:
            envelope = msgspec.json.decode(
                response.content, type=PublishedFileDetailsEnvelope, strict=False
            )
        except msgspec.DecodeError as e:
            logger.error(f"Invalid JSON response: {e}")
            raise ApiError(0, f"Invalid Steam WebAPI response: {e}") from e

        body = envelope.response
        if body.result != STEAM_RESULT_OK:
            raise ApiError(body.result)
        if body.resultcount != len(publishedfileids):
            raise ApiError(
                body.result,
                f"Steam WebAPI returned {body.resultcount} results for {len(publishedfileids)} requested items",
            )

        items = []
        for item in body.publishedfiledetails:
            if item.ok:
                items.append(item)
            else:
                logger.debug(
                    f"Workshop item {item.publishedfileid} unavailable, result code {item.result}"
                )
        return items

    def get_item(self, publishedfileid: int) -> WorkshopItem:
        """
        Query the details of a single item.

        :raises ApiError: if the item cannot be resolved
        """
        items = self.get_items([publishedfileid])
        if not items:
            raise ApiError(
                STEAM_RESULT_OK,
                f"Workshop item {publishedfileid} is not available",
            )
        return items[0]

    def get_items_batched(
        self, publishedfileids: list[int], batch_size: int
    ) -> list[WorkshopItem]:
        """
        Query item details in chunks of at most batch_size ids, concurrently.

        The call succeeds only when every chunk succeeds. The first failing
        chunk fails the whole call right away: chunks not started yet are
        cancelled and chunks in flight are not waited for.

        :param publishedfileids: PublishedFileIds to look up
        :param batch_size: chunk size, 0 sends everything in a single request
        :return: the resolved items, in chunk order
        """
        if batch_size < 0:
            raise ValueError(f"batch_size must not be negative, got {batch_size}")
        if not publishedfileids:
            return []
        if batch_size == 0:
            return self.get_items(publishedfileids)

        chunk_list = list(chunks(_list=publishedfileids, limit=batch_size))
        logger.info(
            f"Querying {len(publishedfileids)} mod(s) in {len(chunk_list)} chunk(s) of up to {batch_size}"
        )

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures: list[Future[list[WorkshopItem]]] = [
                executor.submit(self.get_items, chunk) for chunk in chunk_list
            ]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        finally:
            # Chunks still in flight after a failure finish in the background
            executor.shutdown(wait=False, cancel_futures=True)

        for future in futures:
            if future in done and future.exception() is not None:
                raise future.exception()  # type: ignore[misc]

        items: list[WorkshopItem] = []
        for future in futures:
            items.extend(future.result())
        return items
