"""
Replace external ``<img>`` elements in note markup with ``<en-media>``.

Pure transform apart from the image fetches: parse the body, fetch each
``img`` in document order, splice in an ``en-media`` element pointing at the
new resource by hash, and serialize. Full ENML documents (with an XML
declaration or DOCTYPE) are parsed as XML; bare markup fragments such as
``<p><img src="..."></p>`` are parsed leniently as HTML and written back as
XML fragments.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from lxml import etree

from .exceptions import MissingImageSourceError
from .fetcher import ImageFetcher
from .hashing import content_digest
from .models import Note, Resource

LOGGER = logging.getLogger(__name__)

EVERNOTE_DTD_BASE = "http://xml.evernote.com/pub/"
ENML_DTD = EVERNOTE_DTD_BASE + "enml2.dtd"
ENML_LEGACY_DTD = EVERNOTE_DTD_BASE + "enml.dtd"
XML_NS = "http://www.w3.org/XML/1998/namespace"

# en-media accepts these img/XHTML attributes, see the ENML reference.
CARRIED_ATTRIBUTES: Tuple[str, ...] = (
    "align",
    "alt",
    "longdesc",
    "height",
    "width",
    "border",
    "hspace",
    "vspace",
    "usemap",
    "style",
    "title",
    "lang",
    "xml:lang",
    "dir",
)

_PROLOG_RE = re.compile(r"^\s*<(\?xml|!doctype)", re.IGNORECASE)


@dataclass(frozen=True)
class ParseOptions:
    # External DTDs resolved to an empty document instead of being loaded.
    ignorable_dtds: Tuple[str, ...] = (ENML_DTD, ENML_LEGACY_DTD)
    # Any ".dtd" under these locations is ignored as well.
    ignorable_dtd_bases: Tuple[str, ...] = (EVERNOTE_DTD_BASE,)
    # System identifier written into the DOCTYPE of rewritten documents.
    doctype_system: str = ENML_DTD


class _IgnorableDtdResolver(etree.Resolver):
    def __init__(self, system_ids: Tuple[str, ...], bases: Tuple[str, ...] = ()):
        super().__init__()
        self._system_ids = frozenset(system_ids)
        self._bases = tuple(bases)

    def _ignorable(self, system_url) -> bool:
        if not system_url:
            return False
        if system_url in self._system_ids:
            return True
        return system_url.endswith(".dtd") and system_url.startswith(self._bases)

    def resolve(self, system_url, public_id, context):
        if self._ignorable(system_url):
            return self.resolve_string("", context)
        return None


@dataclass
class RewriteResult:
    content: str
    resources: List[Resource] = field(default_factory=list)

    @property
    def size_estimate(self) -> int:
        """
        Approximate upload cost of the rewritten note.

        Character count of the markup, not its encoded byte length, plus the
        raw size of each new resource.
        """
        return len(self.content) + sum(r.size for r in self.resources)

    def apply_to(self, note: Note) -> None:
        for resource in self.resources:
            note.add_resource(resource)
        note.replace_content(self.content)


class NoteRewriter:
    def __init__(
        self, fetcher: ImageFetcher, options: Optional[ParseOptions] = None
    ):
        self._fetcher = fetcher
        self._options = options or ParseOptions()

        self._xml_parser = etree.XMLParser(
            load_dtd=True,
            resolve_entities=False,
            no_network=True,
            remove_comments=False,
            remove_blank_text=False,
            strip_cdata=False,
            huge_tree=True,
        )
        self._xml_parser.resolvers.add(
            _IgnorableDtdResolver(
                self._options.ignorable_dtds, self._options.ignorable_dtd_bases
            )
        )
        self._html_parser = etree.HTMLParser(
            remove_comments=False, remove_blank_text=False, no_network=True
        )

    def rewrite(self, content: str) -> Optional[RewriteResult]:
        """Return the rewritten markup and new resources, or ``None`` if unchanged."""
        if "<img" not in content.lower():
            LOGGER.debug("found 0 img(s)")
            return None

        is_document = bool(_PROLOG_RE.match(content))
        if is_document:
            root = etree.fromstring(content.encode("utf-8"), self._xml_parser)
            container = root
        else:
            root = etree.fromstring(content, self._html_parser)
            body = root.find("body") if root is not None else None
            container = body if body is not None else root
            if container is None:
                return None

        imgs = list(container.iter("img"))
        LOGGER.debug("found %d img(s)", len(imgs))

        resources: List[Resource] = []
        for img in imgs:
            resource = self._replace(img)
            if resource is not None:
                resources.append(resource)

        if not resources:
            return None

        if is_document:
            markup = self._serialize_document(root)
        else:
            markup = self._serialize_fragment(root, container)
        return RewriteResult(content=markup, resources=resources)

    def _replace(self, img) -> Optional[Resource]:
        url = img.get("src")
        if url is None:
            raise MissingImageSourceError(
                f"img on line {img.sourceline} has no src attribute"
            )

        parent = img.getparent()
        if parent is None:
            LOGGER.warning("img at document root can't be replaced: %s", url)
            return None

        fetched = self._fetcher.fetch(url)
        if fetched is None:
            return None

        resource = Resource(
            data=fetched.data,
            body_hash=content_digest(fetched.data),
            mime=fetched.mime_type,
            source_url=url,
        )

        media = img.makeelement("en-media", {})
        media.set("hash", resource.hex_hash)
        media.set("type", resource.mime)
        for name in CARRIED_ATTRIBUTES:
            value = _get_attribute(img, name)
            if value is not None:
                media.set(_qualified(name), value)
        media.tail = img.tail

        parent.replace(img, media)
        LOGGER.debug("replaced %s with en-media %s", url, resource.hex_hash)
        return resource

    def _serialize_document(self, root) -> str:
        head = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<!DOCTYPE {root.tag} SYSTEM "{self._options.doctype_system}">\n'
        )
        return head + etree.tostring(root, encoding="unicode", with_tail=False)

    @staticmethod
    def _serialize_fragment(root, container) -> str:
        # comments before or after the markup end up as siblings of <html>
        leading = reversed(list(root.itersiblings(preceding=True)))
        trailing = root.itersiblings()

        parts = [_tostring(node) for node in leading]
        if container.text:
            parts.append(escape(container.text))
        for child in container:
            parts.append(etree.tostring(child, encoding="unicode", method="xml"))
        parts.extend(_tostring(node) for node in trailing)
        return "".join(parts)


def _tostring(node) -> str:
    return etree.tostring(node, encoding="unicode", method="xml", with_tail=False)


def _qualified(name: str) -> str:
    if name.startswith("xml:"):
        return f"{{{XML_NS}}}{name[4:]}"
    return name


def _get_attribute(element, name: str) -> Optional[str]:
    value = element.get(_qualified(name))
    if value is None and name.startswith("xml:"):
        # the HTML parser keeps prefixed names verbatim
        value = element.get(name)
    return value
