"""
Granicus Parsers - METRO's publisher RSS feed and AgendaViewer pages

1. ViewPublisherRSS.php - one <item> per published agenda (parse_publisher_rss)
2. AgendaViewer.php - table-based agenda, one item per row (parse_agendaviewer_items)
"""

import re
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from config import get_logger
from exceptions import VendorParsingError

logger = get_logger(__name__).bind(component="vendor")

CLIP_ID_PATTERN = re.compile(r"clip_id=(\d+)")


def _child_text(element: ET.Element, tag: str) -> str:
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def parse_publisher_rss(xml_text: str) -> List[Dict[str, str]]:
    """Parse the publisher RSS feed into title/link/pub_date/description dicts.

    Raises VendorParsingError when the feed isn't well-formed XML.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise VendorParsingError(
            f"Granicus RSS feed is not valid XML: {e}",
            vendor="granicus",
            original_error=e
        ) from e

    # Feeds come as <rss><channel>..., occasionally as a bare <channel>
    channel = root if root.tag == "channel" else root.find("channel")
    if channel is None:
        logger.warning("rss feed has no channel", vendor="granicus", root_tag=root.tag)
        return []

    items = []
    for item in channel.findall("item"):
        items.append({
            "title": _child_text(item, "title"),
            "link": _child_text(item, "link"),
            "pub_date": _child_text(item, "pubDate"),
            "description": _child_text(item, "description"),
        })

    logger.debug("parsed publisher rss", vendor="granicus", item_count=len(items))
    return items


def extract_clip_id(link: str) -> Optional[str]:
    """Pull clip_id out of an AgendaViewer/MediaPlayer link"""
    match = CLIP_ID_PATTERN.search(link or "")
    return match.group(1) if match else None


def parse_agendaviewer_items(html: str) -> List[str]:
    """Extract agenda item text from an AgendaViewer page.

    Takes the first cell of every table row, drops short fragments (section
    letters, page furniture) and bare item numbers.
    """
    soup = BeautifulSoup(html, 'html.parser')
    items = []

    for row in soup.find_all('tr'):
        cell = row.find('td')
        if cell is None:
            continue
        text = " ".join(cell.get_text(" ", strip=True).split())
        if len(text) > 10 and not text.isdigit():
            items.append(text)

    return items
