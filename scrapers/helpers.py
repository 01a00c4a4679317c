"""Text and query helpers shared by provider adapters."""

from __future__ import annotations

import html as html_lib
import re
import xml.etree.ElementTree as ET
from typing import List, Optional
from urllib.parse import urlparse

from core import TargetProfile


def is_relevant(text: str, name: str) -> bool:
    """
    Loose name match used to drop obvious false positives.

    With two or more name parts every part longer than two characters must
    appear in the text; a single-token name must appear as a substring.
    """
    lowered = str(text or "").lower()
    parts = [part for part in str(name or "").lower().split() if part]
    if not parts:
        return False
    if len(parts) >= 2:
        return all(len(part) > 2 and part in lowered for part in parts)
    return parts[0] in lowered


def build_search_query(profile: TargetProfile, suffix: str = "") -> str:
    parts = [f'"{profile.name}"']
    if profile.company:
        parts.append(f'"{profile.company}"')
    if suffix:
        parts.append(suffix)
    return " ".join(parts)


def strip_html(value: str) -> str:
    text = str(value or "")
    text = re.sub(r"<script[^>]*>.*?</script>", " ", text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<style[^>]*>.*?</style>", " ", text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<[^>]+>", " ", text)
    text = html_lib.unescape(text)
    return re.sub(r"\s+", " ", text).strip()


def truncate(text: str, max_len: int = 300) -> str:
    value = re.sub(r"\s+", " ", str(text or "")).strip()
    if len(value) <= max_len:
        return value
    return value[:max_len]


def domain_of(url: str) -> str:
    host = str(urlparse(str(url or "")).netloc or "").lower()
    return host[4:] if host.startswith("www.") else host


def rss_text(node: ET.Element, tag: str) -> str:
    child = node.find(tag)
    return str((child.text if child is not None else "") or "").strip()


def parse_rss_items(xml_text: str) -> List[ET.Element]:
    """Return <item> (RSS) or <entry> (Atom) nodes; raises ValueError on malformed XML."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ValueError(f"malformed feed: {exc}") from exc
    items = root.findall(".//item")
    if items:
        return items
    return [node for node in root.iter() if str(node.tag).endswith("entry")]


def first_text(*values: Optional[str]) -> str:
    for value in values:
        text = str(value or "").strip()
        if text:
            return text
    return ""
