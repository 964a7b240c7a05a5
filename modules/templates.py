"""
Declarative XML skeletons for the bootstrap files of an EPUB container.

A template is a tree of Node objects. Slot objects mark the places that are
filled in at render time. Values are consumed positionally, in document order
(a node's attributes before its children), so the order documented on each
template is part of its contract:

    CONTAINER_TEMPLATE  (manifest path)
    PACKAGE_TEMPLATE    (format version, unique identifier, generator signature)
    NCX_TEMPLATE        (unique identifier)
"""

from dataclasses import dataclass

from bs4 import BeautifulSoup, Doctype

from modules.errors import TemplateArityError


@dataclass(frozen=True)
class Slot:
    name: str


@dataclass(frozen=True)
class Node:
    name: str
    attrs: tuple = ()
    children: tuple = ()

    def slots(self):
        for _, value in self.attrs:
            if isinstance(value, Slot):
                yield value
        for child in self.children:
            if isinstance(child, Slot):
                yield child
            elif isinstance(child, Node):
                yield from child.slots()


def el(name, attrs=None, *children):
    """Shorthand for building a Node; attrs keep their declaration order."""
    return Node(name, tuple((attrs or {}).items()), tuple(children))


@dataclass(frozen=True)
class Template:
    name: str
    root: Node
    doctype: tuple = None  # (name, public id, system id)

    @property
    def slot_names(self):
        return [slot.name for slot in self.root.slots()]

    @property
    def arity(self):
        return len(self.slot_names)


def render(template, values):
    """
    Serializes a template to an XML document string.
    Raises TemplateArityError unless exactly one value per slot is given.
    """
    values = list(values)
    if len(values) != template.arity:
        raise TemplateArityError(template.name, template.arity, len(values))

    soup = BeautifulSoup("", "xml")
    if template.doctype:
        soup.append(Doctype.for_name_and_ids(*template.doctype))

    fill = iter(values)
    soup.append(_build(soup, template.root, fill))
    return str(soup)


def _build(soup, node, fill):
    attrs = {}
    for key, value in node.attrs:
        attrs[key] = str(next(fill)) if isinstance(value, Slot) else value

    tag = soup.new_tag(node.name, attrs=attrs)
    for child in node.children:
        if isinstance(child, Node):
            tag.append(_build(soup, child, fill))
        elif isinstance(child, Slot):
            tag.append(str(next(fill)))
        else:
            tag.append(child)
    return tag


CONTAINER_TEMPLATE = Template(
    "container.xml",
    el("container", {"version": "1.0", "xmlns": "urn:oasis:names:tc:opendocument:xmlns:container"},
        el("rootfiles", None,
            el("rootfile", {
                "full-path": Slot("manifest_path"),
                "media-type": "application/oebps-package+xml",
            }),
        ),
    ),
)

PACKAGE_TEMPLATE = Template(
    "content.opf",
    el("package", {
        "xmlns": "http://www.idpf.org/2007/opf",
        "version": Slot("format_version"),
        "unique-identifier": "bookid",
    },
        el("metadata", {
            "xmlns:dc": "http://purl.org/dc/elements/1.1/",
            "xmlns:opf": "http://www.idpf.org/2007/opf",
        },
            el("dc:identifier", {"id": "bookid"}, Slot("identifier")),
            el("dc:title", None, "Untitled"),
            el("dc:language", None, "en"),
            el("meta", {"name": "generator", "content": Slot("generator")}),
        ),
        # Filled in by whoever adds content
        el("manifest"),
        el("spine"),
    ),
)

NCX_TEMPLATE = Template(
    "toc.ncx",
    el("ncx", {"xmlns": "http://www.daisy.org/z3986/2005/ncx/", "version": "2005-1"},
        el("head", None,
            el("meta", {"name": "dtb:uid", "content": Slot("identifier")}),
            el("meta", {"name": "dtb:depth", "content": "0"}),
            el("meta", {"name": "dtb:totalPageCount", "content": "0"}),
            el("meta", {"name": "dtb:maxPageNumber", "content": "0"}),
        ),
        el("docTitle", None, el("text", None, "Untitled")),
        el("navMap"),
    ),
    doctype=(
        "ncx",
        "-//NISO//DTD ncx 2005-1//EN",
        "http://www.daisy.org/z3986/2005/ncx-2005-1.dtd",
    ),
)
