"""Read ordering and values back out of exported report XML.

Used to check that an export can be re-imported with the same group, member, field and
column order. The DOCTYPE is never fetched."""

from __future__ import annotations

from typing import Dict, List, Union

from lxml import etree


class XMLReader:
    """Query helpers over one exported document."""

    def __init__(self, xml_text: Union[str, bytes]):
        parser = etree.XMLParser(load_dtd=False, no_network=True, resolve_entities=False)
        data = xml_text.encode("utf-8") if isinstance(xml_text, str) else xml_text
        self.root = etree.fromstring(data, parser)

    @property
    def title(self) -> str:
        meta = self.root.find("head/meta[@name='title']")
        return meta.get("value", "") if meta is not None else ""

    def has_slot(self, name: str) -> bool:
        return self.root.find(name) is not None

    def group_order(self) -> List[str]:
        return [el.get("data-group") for el in self.root.findall("body/div[@data-group]")]

    def member_order(self, group_id: str) -> List[str]:
        group = self._one("//div[@data-group=$scope_id]", group_id)
        members = []
        for child in group:
            member_id = child.get("data-section") or child.get("data-table")
            if member_id:
                members.append(member_id)
        return members

    def field_order(self, section_id: str) -> List[str]:
        section = self._one("//table[@data-section=$scope_id]", section_id)
        return [row.get("data-field") for row in section.findall("tr[@data-field]")]

    def field_values(self, section_id: str) -> Dict[str, str]:
        section = self._one("//table[@data-section=$scope_id]", section_id)
        values = {}
        for row in section.findall("tr[@data-field]"):
            cells = row.findall("td")
            values[row.get("data-field")] = (cells[-1].text or "") if cells else ""
        return values

    def field_labels(self, section_id: str) -> Dict[str, str]:
        section = self._one("//table[@data-section=$scope_id]", section_id)
        labels = {}
        for row in section.findall("tr[@data-field]"):
            label_cell = row.find("td[@class='field-label']")
            labels[row.get("data-field")] = (label_cell.text or "") if label_cell is not None else ""
        return labels

    def column_order(self, table_id: str) -> List[str]:
        table = self._one("//table[@data-table=$scope_id]", table_id)
        return [th.get("data-column") for th in table.findall("thead/tr/th[@data-column]")]

    def column_labels(self, table_id: str) -> List[str]:
        table = self._one("//table[@data-table=$scope_id]", table_id)
        return [th.text or "" for th in table.findall("thead/tr/th[@data-column]")]

    def row_values(self, table_id: str) -> List[Dict[str, str]]:
        table = self._one("//table[@data-table=$scope_id]", table_id)
        rows = []
        for tr in table.findall("tbody/tr[@data-row-index]"):
            rows.append({td.get("data-column"): td.text or "" for td in tr.findall("td[@data-column]")})
        return rows

    def placeholder_slots(self) -> List[str]:
        return [el.get("data-slot") for el in self.root.xpath("//*[@data-slot]")]

    def _one(self, path: str, scope_id: str):
        # Ids are bound as XPath variables so quotes in an id need no escaping
        found = self.root.xpath(path, scope_id=scope_id)
        if not found:
            raise KeyError(f"No element matches {path} for {scope_id!r}")
        return found[0]


__all__ = ["XMLReader"]
