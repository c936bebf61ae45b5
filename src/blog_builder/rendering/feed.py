"""Serialização do feed RSS 2.0."""

from datetime import datetime, timezone
from xml.etree.ElementTree import Element, SubElement, tostring

from ..models import DocumentSummary
from ..utils import format_rfc822


def render_rss(
    title: str,
    base_url: str,
    description: str,
    entries: list[DocumentSummary],
    language: str = "en",
    feed_path: str = "index.xml",
) -> str:
    """
    Gera o XML do feed RSS 2.0 para as entradas publicadas.

    Args:
        title: Título do site
        base_url: URL absoluta do site
        description: Descrição do canal
        entries: Resumos já ordenados (mais recentes primeiro)
        language: Código de idioma do canal
        feed_path: Caminho do feed relativo à raiz do site

    Returns:
        Documento XML como string
    """
    site_url = base_url.rstrip("/")

    rss = Element("rss", attrib={"version": "2.0", "xmlns:atom": "http://www.w3.org/2005/Atom"})
    channel = SubElement(rss, "channel")
    SubElement(channel, "title").text = title
    SubElement(channel, "link").text = f"{site_url}/"
    SubElement(channel, "description").text = description
    SubElement(channel, "language").text = language
    SubElement(
        channel,
        "atom:link",
        attrib={
            "href": f"{site_url}/{feed_path}",
            "rel": "self",
            "type": "application/rss+xml",
        },
    )

    dated = [entry.date for entry in entries if entry.date]
    last_build = max(dated) if dated else datetime.now(timezone.utc)
    SubElement(channel, "lastBuildDate").text = format_rfc822(last_build)

    for entry in entries:
        link = f"{site_url}{entry.url}"
        item = SubElement(channel, "item")
        SubElement(item, "title").text = entry.title
        SubElement(item, "link").text = link
        SubElement(item, "guid").text = link
        if entry.date:
            SubElement(item, "pubDate").text = format_rfc822(entry.date)
        for tag in entry.tags:
            SubElement(item, "category").text = tag
        SubElement(item, "description").text = entry.excerpt

    body = tostring(rss, encoding="unicode")
    return f'<?xml version="1.0" encoding="utf-8" standalone="yes"?>\n{body}\n'
