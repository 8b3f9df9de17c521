"""Report model: entries, data collections, sections and the collector."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Any, Optional, Union

from cube_reporter.errors import ReportError
from cube_reporter.io_utils import write_json_atomic, write_text_atomic
from cube_reporter.units import format_bytes

logger = logging.getLogger(__name__)

REPORT_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class Label:
    """Data label; the parent chain groups related series in tables."""

    name: str
    parent: Optional["Label"] = None

    def with_parent(self, parent: Optional["Label"]) -> "Label":
        if parent is None:
            return self
        if self.parent is None:
            return Label(self.name, parent)
        return Label(self.name, self.parent.with_parent(parent))

    def path(self) -> list[str]:
        names: list[str] = []
        current: Optional[Label] = self
        while current is not None:
            names.append(current.name)
            current = current.parent
        names.reverse()
        return names

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "path": self.path()}


@dataclass(frozen=True)
class FileEntry:
    """Path of a generated file, relative to the report root directory."""

    path: Optional[str]

    @classmethod
    def empty(cls) -> "FileEntry":
        return cls(None)

    @classmethod
    def relative_to(cls, root: Union[str, Path], target: Union[str, Path]) -> "FileEntry":
        root_path = Path(root).resolve()
        target_path = Path(target).resolve()
        try:
            relative = target_path.relative_to(root_path)
        except ValueError:
            relative = target_path
        return cls(relative.as_posix())

    @property
    def is_empty(self) -> bool:
        return not self.path

    def to_dict(self) -> dict[str, Any]:
        return {"type": "file", "path": self.path}


@dataclass(frozen=True)
class KeyValueEntry:
    key: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        value = self.value
        if isinstance(value, FileEntry):
            value = value.to_dict()
        return {"type": "key_value", "key": self.key, "value": value}


@dataclass(frozen=True)
class DataItem:
    label: Label
    value: Any
    display: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label.to_dict(),
            "value": self.value,
            "display": self.display,
        }


@dataclass(frozen=True)
class DataCollection:
    title: str
    label: Optional[Label] = None
    items: tuple[DataItem, ...] = ()
    collections: tuple["DataCollection", ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "data_collection",
            "title": self.title,
            "label": None if self.label is None else self.label.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "collections": [child.to_dict() for child in self.collections],
        }


Entry = Union[KeyValueEntry, DataCollection]


class DataCollectionBuilder:
    def __init__(self, title: str = "") -> None:
        self._title = title
        self._label: Optional[Label] = None
        self._items: list[DataItem] = []
        self._collections: list[DataCollection] = []

    def add_data_item(self, value: Any, label: Label, display: Optional[str] = None) -> "DataCollectionBuilder":
        shown = str(value) if display is None else display
        self._items.append(DataItem(label=label, value=value, display=shown))
        return self

    def add_byte_data_item(
        self,
        value: Optional[int],
        decimal: bool,
        label: Label,
    ) -> "DataCollectionBuilder":
        return self.add_data_item(value, label, format_bytes(value, decimal=decimal))

    def add_data_collection(
        self,
        *builders: "DataCollectionBuilder",
        label: Optional[Label] = None,
    ) -> "DataCollectionBuilder":
        for builder in builders:
            if label is not None:
                builder.assign_parent_label(label)
            self._collections.append(builder.build())
        return self

    def assign_parent_label(self, label: Label) -> "DataCollectionBuilder":
        if self._label is None:
            self._label = label
        else:
            self._label = self._label.with_parent(label)
        return self

    def build(self) -> DataCollection:
        return DataCollection(
            title=self._title,
            label=self._label,
            items=tuple(self._items),
            collections=tuple(self._collections),
        )


@dataclass
class Report:
    name: Optional[str]
    entries: list[Entry] = field(default_factory=list)
    sub_reports: list["Report"] = field(default_factory=list)

    def merge(self, other: "Report") -> None:
        self.entries.extend(other.entries)
        for sub in other.sub_reports:
            existing = _find_report(self.sub_reports, sub.name)
            if existing is None:
                self.sub_reports.append(sub)
            else:
                existing.merge(sub)

    def find_entry(self, key: str) -> Optional[Entry]:
        for entry in self.entries:
            if isinstance(entry, KeyValueEntry) and entry.key == key:
                return entry
            if isinstance(entry, DataCollection) and entry.title == key:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "entries": [entry.to_dict() for entry in self.entries],
            "sub_reports": [sub.to_dict() for sub in self.sub_reports],
        }


def _find_report(reports: Iterable[Report], name: Optional[str]) -> Optional[Report]:
    for report in reports:
        if report.name == name:
            return report
    return None


@dataclass(frozen=True)
class Section:
    kind: str
    section_id: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.kind, self.section_id)


STANDALONE_SECTION_ID = "docker-environment"


class DockerContainerSection(Section):
    def __init__(self, container_id: str) -> None:
        super().__init__("container", container_id)

    @classmethod
    def standalone(cls) -> "DockerContainerSection":
        return cls(STANDALONE_SECTION_ID)


class TestMethodSection(Section):
    # Keeps pytest from collecting this class.
    __test__ = False

    def __init__(self, test_id: str) -> None:
        super().__init__("test", test_id)


@dataclass(frozen=True)
class SectionReport:
    section: Section
    report: Report

    def fire(self, collector: "ReportCollector") -> None:
        collector.fire(self)


class ReportBuilder:
    def __init__(self, name: Optional[str] = None) -> None:
        self._report = Report(name=name)

    def add_key_value_entry(self, key: str, value: Any) -> "ReportBuilder":
        self._report.entries.append(KeyValueEntry(key=key, value=value))
        return self

    def add_entries(self, *entries: Entry) -> "ReportBuilder":
        self._report.entries.extend(entries)
        return self

    def add_report(self, report: Union["ReportBuilder", Report]) -> "ReportBuilder":
        if isinstance(report, ReportBuilder):
            report = report.build()
        self._report.sub_reports.append(report)
        return self

    def build(self) -> Report:
        return self._report

    def in_section(self, section: Section) -> SectionReport:
        return SectionReport(section=section, report=self._report)


def create_report(name: Optional[str] = None) -> ReportBuilder:
    return ReportBuilder(name)


def create_data_collection(title: str = "") -> DataCollectionBuilder:
    return DataCollectionBuilder(title)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


class ReportCollector:
    """Receives fired section reports and assembles the report tree."""

    def __init__(self, title: str = "Docker Report") -> None:
        self.title = title
        self.created_at = utc_now_iso()
        self._sections: dict[tuple[str, str], list[Report]] = {}

    def fire(self, section_report: SectionReport) -> None:
        reports = self._sections.setdefault(section_report.section.key, [])
        incoming = section_report.report
        existing = _find_report(reports, incoming.name)
        if existing is None:
            reports.append(incoming)
        else:
            existing.merge(incoming)
        logger.debug(
            "Report %r fired into %s section %r.",
            incoming.name,
            section_report.section.kind,
            section_report.section.section_id,
        )

    def sections(self, kind: Optional[str] = None) -> list[tuple[Section, list[Report]]]:
        result: list[tuple[Section, list[Report]]] = []
        for (section_kind, section_id), reports in self._sections.items():
            if kind is not None and section_kind != kind:
                continue
            result.append((Section(section_kind, section_id), reports))
        return result

    def reports(self, section: Section) -> list[Report]:
        return list(self._sections.get(section.key, []))

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": REPORT_SCHEMA_VERSION,
            "title": self.title,
            "created_at": self.created_at,
            "sections": [
                {
                    "kind": section.kind,
                    "id": section.section_id,
                    "reports": [report.to_dict() for report in reports],
                }
                for section, reports in self.sections()
            ],
        }

    def write_json(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        try:
            write_json_atomic(path, self.to_dict())
        except OSError as exc:
            raise ReportError(f"Failed to write report JSON to {path}: {exc}") from exc
        return path

    def write_html(self, path: Union[str, Path]) -> Path:
        from cube_reporter.reporting import render_report_html

        path = Path(path)
        html_text = render_report_html(
            title=self.title,
            created_at=self.created_at,
            payload=self.to_dict(),
        )
        try:
            write_text_atomic(path, html_text)
        except OSError as exc:
            raise ReportError(f"Failed to write report HTML to {path}: {exc}") from exc
        return path


def validate_report_payload(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ReportError("Report payload must be a mapping.")
    sections = payload.get("sections")
    if not isinstance(sections, Sequence) or isinstance(sections, (str, bytes)):
        raise ReportError("Report payload must contain a 'sections' list.")
    return payload


__all__ = [
    "REPORT_SCHEMA_VERSION",
    "STANDALONE_SECTION_ID",
    "DataCollection",
    "DataCollectionBuilder",
    "DataItem",
    "DockerContainerSection",
    "Entry",
    "FileEntry",
    "KeyValueEntry",
    "Label",
    "Report",
    "ReportBuilder",
    "ReportCollector",
    "Section",
    "SectionReport",
    "TestMethodSection",
    "create_data_collection",
    "create_report",
    "utc_now_iso",
    "validate_report_payload",
]
