"""
Google Images internal-JSON reader.

The image grid HTML does not carry image sources. They sit in an inline
script as ``var x={"...": [...], ...};`` where each record is an array of
arrays addressed by position. All offsets are below; when Google reshuffles
them this is the only module to touch.
"""

from __future__ import annotations

import json
import re
from typing import Any

from serpkit.search.extraction import parse_document
from serpkit.search.models import EngineImageResult, EngineImagesResponse
from serpkit.utils.logging import get_logger

logger = get_logger(__name__)

INTERNAL_JSON_PATTERN = re.compile(r'var \w+=(\{".+?\});')

# record = value[RECORD_INDEX]
RECORD_INDEX = 1
# record[IMAGE_INDEX] = [image_url, width, height]
IMAGE_INDEX = 3
# record[PAGE_INDEX][PAGE_KEY] = [_, _, page_url, title, ...]
PAGE_INDEX = 9
PAGE_KEY = "2003"
PAGE_URL_INDEX = 2
PAGE_TITLE_INDEX = 3


def find_internal_json(body: str | bytes) -> str | None:
    """Return the first inline script payload that looks like the image data."""
    soup = parse_document(body)
    scripts = soup.find_all("script")
    logger.debug("Scanning scripts for image data", script_count=len(scripts))

    for i, script in enumerate(scripts):
        match = INTERNAL_JSON_PATTERN.search(script.string or "")
        if match:
            logger.debug("Found image data", script_index=i)
            return match.group(1)

    return None


def _get(container: Any, index: int) -> Any:
    if isinstance(container, list) and len(container) > index:
        return container[index]
    return None


def _is_dimension(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def parse_image_record(value: Any) -> EngineImageResult | None:
    """
    Read one entry of the internal JSON object.

    Returns:
        The image result, or None when any offset misses.
    """
    record = _get(value, RECORD_INDEX)
    if not isinstance(record, list):
        return None

    image = _get(record, IMAGE_INDEX)
    if not (
        isinstance(image, list)
        and len(image) == 3
        and isinstance(image[0], str)
        and _is_dimension(image[1])
        and _is_dimension(image[2])
    ):
        logger.warning("Missing image data in Google images record")
        return None
    image_url, width, height = image

    page_data = _get(record, PAGE_INDEX)
    page = page_data.get(PAGE_KEY) if isinstance(page_data, dict) else None
    if not isinstance(page, list):
        logger.warning("Missing page data in Google images record")
        return None

    page_url = _get(page, PAGE_URL_INDEX)
    if not isinstance(page_url, str):
        logger.warning("Missing page URL in Google images record")
        return None

    title = _get(page, PAGE_TITLE_INDEX)
    if not isinstance(title, str):
        logger.warning("Missing page title in Google images record")
        return None

    return EngineImageResult(
        page_url=page_url,
        image_url=image_url,
        title=title,
        width=width,
        height=height,
    )


def parse_images_body(body: str | bytes) -> EngineImagesResponse:
    """
    Extract image results from a Google Images page.

    Missing or undecodable data yields an empty response, never an error.
    """
    raw = find_internal_json(body)
    if raw is None:
        logger.warning("No internal JSON found for Google images")
        return EngineImagesResponse()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse Google images JSON", error=str(e))
        return EngineImagesResponse()

    if not isinstance(data, dict):
        logger.warning("Google images JSON is not an object", json_type=type(data).__name__)
        return EngineImagesResponse()

    image_results = []
    for value in data.values():
        result = parse_image_record(value)
        if result is not None:
            image_results.append(result)

    return EngineImagesResponse(image_results=tuple(image_results))
