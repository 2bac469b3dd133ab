"""METS 讀寫。

讀取時把 fileSec、兩個 structMap 與 structLink 轉成 ``StructuralDocument``；
寫出時依模型重建這四個區塊，其餘區塊（metsHdr、dmdSec、amdSec…）原封不動。
div 以外的子元素（mptr、fptr 等）與未知屬性會被保留下來，寫出時原樣放回。
"""

from __future__ import annotations

import copy
from pathlib import Path, PurePosixPath
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

from lxml import etree

from ..models import ContentFile, LogicalNode, PhysicalNode, StructuralDocument
from ..models.error_record import ExportError
from ..utils.logger import get_logger

METS_NS = "http://www.loc.gov/METS/"
XLINK_NS = "http://www.w3.org/1999/xlink"
NS = {"mets": METS_NS, "xlink": XLINK_NS}
XLINK_HREF = f"{{{XLINK_NS}}}href"
XLINK_FROM = f"{{{XLINK_NS}}}from"
XLINK_TO = f"{{{XLINK_NS}}}to"

LOGICAL_PAGE_NUMBER = "logicalPageNumber"
PREFERRED_FILE_USE = "LOCAL"
_REBUILT_SECTIONS = ("fileSec", "structMap", "structLink")


class MetsError(ExportError):
    """A METS file could not be read or written."""


def _mets(tag: str) -> str:
    return f"{{{METS_NS}}}{tag}"


def _localname(element) -> Optional[str]:
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def _image_name(location: str) -> str:
    return PurePosixPath(unquote(urlparse(location).path or location)).name


def _extra_attributes(element, skip: tuple[str, ...]) -> Dict[str, str]:
    return {key: value for key, value in element.attrib.items() if key not in skip}


def read_mets(path: Path, page_number_type: str = "physPageNumber", logger=None) -> StructuralDocument:
    logger = logger or get_logger("Mets")
    parser = etree.XMLParser(remove_blank_text=True)
    try:
        tree = etree.parse(str(path), parser)
    except (OSError, etree.XMLSyntaxError) as exc:
        raise MetsError(f"Cannot read metadata file {path}: {exc}") from exc
    root = tree.getroot()

    files_by_id: Dict[str, ContentFile] = {}
    files: list[ContentFile] = []
    file_groups: Dict[str, Dict[str, str]] = {}
    for group in root.iterfind("mets:fileSec/mets:fileGrp", NS):
        use = group.get("USE", PREFERRED_FILE_USE)
        file_groups.setdefault(use, _extra_attributes(group, ("USE",)))
        for file_element in group.iterfind("mets:file", NS):
            content_file = _read_file(file_element, use)
            files.append(content_file)
            files_by_id[content_file.id] = content_file

    physical_map = root.find("mets:structMap[@TYPE='PHYSICAL']/mets:div", NS)
    if physical_map is None:
        physical_root = PhysicalNode(id="PHYS_0000", type="physSequence")
    else:
        physical_root = PhysicalNode(
            id=physical_map.get("ID", ""),
            type=physical_map.get("TYPE", "physSequence"),
            attributes=_extra_attributes(physical_map, ("ID", "TYPE")),
            extras=[child for child in physical_map if _localname(child) != "div"],
        )
        for div in physical_map.iterfind("mets:div", NS):
            page = PhysicalNode(
                id=div.get("ID", ""),
                type=div.get("TYPE", "page"),
                attributes=_extra_attributes(div, ("ID", "TYPE", "ORDER", "ORDERLABEL")),
                extras=[child for child in div if _localname(child) != "fptr"],
            )
            if div.get("ORDER") is not None:
                page.metadata[page_number_type] = [div.get("ORDER")]
            if div.get("ORDERLABEL") is not None:
                page.metadata[LOGICAL_PAGE_NUMBER] = [div.get("ORDERLABEL")]

            page_files = []
            for fptr in div.iterfind("mets:fptr", NS):
                content_file = files_by_id.get(fptr.get("FILEID", ""))
                if content_file is None:
                    logger.warning(f"找不到 fptr 指向的檔案: {fptr.get('FILEID')}")
                    continue
                content_file.referenced.append(page)
                page_files.append(content_file)
            preferred = next((item for item in page_files if item.use == PREFERRED_FILE_USE), None)
            preferred = preferred or (page_files[0] if page_files else None)
            if preferred is not None:
                page.image_name = _image_name(preferred.location)
            physical_root.add_child(page)

    logical_map = root.find("mets:structMap[@TYPE='LOGICAL']/mets:div", NS)
    logical_root = _read_logical(logical_map) if logical_map is not None else None

    document = StructuralDocument(
        physical_root=physical_root,
        logical_root=logical_root,
        files=files,
        file_groups=file_groups,
        source_tree=tree,
    )

    logical_by_id = {node.id: node for node in logical_root.iter_nodes()} if logical_root else {}
    physical_by_id = {node.id: node for node in document.physical_nodes()}
    for link in root.iterfind("mets:structLink/mets:smLink", NS):
        source = logical_by_id.get(link.get(XLINK_FROM, ""))
        target = physical_by_id.get(link.get(XLINK_TO, ""))
        if source is None or target is None:
            logger.warning(f"略過無效的 smLink: {link.get(XLINK_FROM)} -> {link.get(XLINK_TO)}")
            continue
        document.link(source, target)

    return document


def _read_file(element, use: str) -> ContentFile:
    flocat = element.find("mets:FLocat", NS)
    return ContentFile(
        id=element.get("ID", ""),
        location=flocat.get(XLINK_HREF, "") if flocat is not None else "",
        mimetype=element.get("MIMETYPE"),
        use=use,
        attributes=_extra_attributes(element, ("ID", "MIMETYPE")),
        location_attributes=_extra_attributes(flocat, (XLINK_HREF,)) if flocat is not None else {},
        extras=[child for child in element if child is not flocat],
    )


def _read_logical(element) -> LogicalNode:
    node = LogicalNode(
        id=element.get("ID", ""),
        type=element.get("TYPE", ""),
        label=element.get("LABEL"),
        attributes=_extra_attributes(element, ("ID", "TYPE", "LABEL")),
        extras=[child for child in element if _localname(child) != "div"],
    )
    for child in element.iterfind("mets:div", NS):
        node.add_child(_read_logical(child))
    return node


def write_mets(document: StructuralDocument, path: Path, page_number_type: str = "physPageNumber") -> Path:
    root = _base_root(document)
    section_attributes: Dict[str, Dict[str, str]] = {}
    insert_at: Optional[int] = None
    for child in list(root):
        name = _localname(child)
        if name in _REBUILT_SECTIONS:
            key = f"structMap:{child.get('TYPE')}" if name == "structMap" else name
            section_attributes.setdefault(key, dict(child.attrib))
            if insert_at is None:
                insert_at = root.index(child)
            root.remove(child)
    if insert_at is None:
        insert_at = len(root)

    def section(tag: str, key: str, **defaults: str):
        element = etree.Element(_mets(tag), section_attributes.get(key, {}))
        for attribute, value in defaults.items():
            element.set(attribute, value)
        return element

    kept_file_ids = {content_file.id for content_file in document.files}
    sections = [_build_file_sec(document, section("fileSec", "fileSec"))]
    if document.logical_root is not None:
        logical_map = section("structMap", "structMap:LOGICAL", TYPE="LOGICAL")
        logical_map.append(_build_logical(document.logical_root, kept_file_ids))
        sections.append(logical_map)
    physical_map = section("structMap", "structMap:PHYSICAL", TYPE="PHYSICAL")
    sections.append(_build_physical_map(document, physical_map, page_number_type))
    references = list(document.iter_references())
    if references:
        struct_link = section("structLink", "structLink")
        for reference in references:
            link = etree.SubElement(struct_link, _mets("smLink"))
            link.set(XLINK_FROM, reference.source.id)
            link.set(XLINK_TO, reference.target.id)
        sections.append(struct_link)

    for offset, element in enumerate(sections):
        root.insert(insert_at + offset, element)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        etree.ElementTree(root).write(str(path), xml_declaration=True, encoding="UTF-8", pretty_print=True)
    except OSError as exc:
        raise MetsError(f"Failed to write METS file {path}: {exc}") from exc
    return path


def _base_root(document: StructuralDocument):
    if document.source_tree is not None:
        return copy.deepcopy(document.source_tree.getroot())
    return etree.Element(_mets("mets"), nsmap={"mets": METS_NS, "xlink": XLINK_NS})


def _append_extras(element, extras, kept_file_ids: Optional[set] = None) -> None:
    for extra in extras:
        if (
            kept_file_ids is not None
            and _localname(extra) == "fptr"
            and extra.get("FILEID") is not None
            and extra.get("FILEID") not in kept_file_ids
        ):
            continue
        element.append(copy.deepcopy(extra))


def _build_file_sec(document: StructuralDocument, file_sec):
    groups: Dict[str, etree._Element] = {}
    for content_file in document.files:
        group = groups.get(content_file.use)
        if group is None:
            group = etree.SubElement(file_sec, _mets("fileGrp"), USE=content_file.use)
            for key, value in document.file_groups.get(content_file.use, {}).items():
                group.set(key, value)
            groups[content_file.use] = group
        file_element = etree.SubElement(group, _mets("file"), ID=content_file.id)
        if content_file.mimetype:
            file_element.set("MIMETYPE", content_file.mimetype)
        for key, value in content_file.attributes.items():
            file_element.set(key, value)
        flocat = etree.SubElement(file_element, _mets("FLocat"), content_file.location_attributes or {"LOCTYPE": "URL"})
        flocat.set(XLINK_HREF, content_file.location)
        _append_extras(file_element, content_file.extras)
    return file_sec


def _build_logical(node: LogicalNode, kept_file_ids: set):
    element = etree.Element(_mets("div"), ID=node.id, TYPE=node.type)
    if node.label is not None:
        element.set("LABEL", node.label)
    for key, value in node.attributes.items():
        element.set(key, value)
    _append_extras(element, node.extras, kept_file_ids)
    for child in node.children:
        element.append(_build_logical(child, kept_file_ids))
    return element


def _build_physical_map(document: StructuralDocument, physical_map, page_number_type: str):
    root_div = etree.SubElement(
        physical_map, _mets("div"), ID=document.physical_root.id, TYPE=document.physical_root.type
    )
    for key, value in document.physical_root.attributes.items():
        root_div.set(key, value)
    kept_file_ids = {content_file.id for content_file in document.files}
    _append_extras(root_div, document.physical_root.extras, kept_file_ids)

    files_by_page: Dict[int, list[ContentFile]] = {}
    for content_file in document.files:
        for node in content_file.referenced:
            files_by_page.setdefault(id(node), []).append(content_file)

    for page in document.pages:
        div = etree.SubElement(root_div, _mets("div"), ID=page.id)
        orders = page.get_metadata(page_number_type)
        if orders:
            div.set("ORDER", orders[0])
        labels = page.get_metadata(LOGICAL_PAGE_NUMBER)
        if labels:
            div.set("ORDERLABEL", labels[0])
        div.set("TYPE", page.type)
        for key, value in page.attributes.items():
            div.set(key, value)
        # METS content model: mptr, then fptr, then nested div
        _append_extras(div, [extra for extra in page.extras if _localname(extra) == "mptr"])
        for content_file in files_by_page.get(id(page), []):
            etree.SubElement(div, _mets("fptr"), FILEID=content_file.id)
        _append_extras(div, [extra for extra in page.extras if _localname(extra) != "mptr"])
    return physical_map
