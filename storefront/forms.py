"""Controllers for the category and subcategory admin forms.

A controller holds the form state (scalar fields, one image input and any
number of repeatable row groups), validates it and submits it to the backend
as multipart form data. Markup lives in the admin blueprint templates.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from storefront.api_client import ApiClient, FetchFailure, FilePart
from storefront.config import ALLOWED_IMAGE_EXTENSIONS, ALLOWED_IMAGE_TYPES, MAX_IMAGE_FILES
from storefront.logging_config import get_logger, log_page_event

__all__ = [
    "FileValidationError",
    "UploadedFile",
    "ImageFileInput",
    "RepeatableRowGroup",
    "FormMessage",
    "AdminFormController",
    "CategoryFormController",
    "SubcategoryFormController",
]

logger = get_logger("forms")

TOO_MANY_FILES_MESSAGE = "Maximum {max_files} file allowed"
BAD_FORMAT_MESSAGE = "Only AVIF and WebP image formats are allowed. Please choose valid files."


class FileValidationError(Exception):
    """Raised when a file selection breaks the count or format rules."""


@dataclass
class UploadedFile:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return self.filename.rsplit(".", 1)[-1].lower() if "." in self.filename else ""

    @property
    def size_label(self) -> str:
        return f"{self.filename} ({len(self.content) / 1024:.2f} KB)"


class ImageFileInput:
    """Single image upload restricted to AVIF/WebP.

    A rejected selection clears the input entirely; nothing is half-accepted.
    """

    def __init__(self, name: str = "images", max_files: int = MAX_IMAGE_FILES):
        self.name = name
        self.max_files = max_files
        self.files: List[UploadedFile] = []

    def select(self, files: Sequence[UploadedFile]) -> None:
        if len(files) > self.max_files:
            self.clear()
            raise FileValidationError(TOO_MANY_FILES_MESSAGE.format(max_files=self.max_files))
        for f in files:
            if f.content_type not in ALLOWED_IMAGE_TYPES and f.extension not in ALLOWED_IMAGE_EXTENSIONS:
                self.clear()
                raise FileValidationError(BAD_FORMAT_MESSAGE)
        self.files = list(files)

    def remove(self, index: int) -> None:
        if 0 <= index < len(self.files):
            del self.files[index]

    def clear(self) -> None:
        self.files = []

    def describe(self) -> List[str]:
        return [f.size_label for f in self.files]

    def parts(self) -> List[FilePart]:
        return [(self.name, (f.filename, f.content, f.content_type)) for f in self.files]


class RepeatableRowGroup:
    """A list of rows that all share one field schema.

    Single-field groups (features, colors, materials) serialize to a list of
    strings; multi-field groups to a list of objects. Only rows with at least
    one non-blank field are kept.
    """

    def __init__(self, name: str, fields: Sequence[str], label: Optional[str] = None):
        if not fields:
            raise ValueError("A row group needs at least one field")
        self.name = name
        self.fields = tuple(fields)
        self.label = label or name
        self.rows: List[Dict[str, str]] = []
        self.reset()

    @property
    def single_value(self) -> bool:
        return len(self.fields) == 1

    def empty_row(self) -> Dict[str, str]:
        return {f: "" for f in self.fields}

    def add_row(self, **values: str) -> Dict[str, str]:
        row = self.empty_row()
        for key, value in values.items():
            if key not in row:
                raise KeyError(f"{self.name} has no field {key!r}")
            row[key] = value
        self.rows.append(row)
        return row

    def remove_row(self, index: int) -> None:
        if 0 <= index < len(self.rows):
            del self.rows[index]

    def reset(self) -> None:
        self.rows = [self.empty_row()]

    def load_columns(self, columns: Mapping[str, Sequence[str]]) -> None:
        """Rebuild rows from per-field value lists (as posted by the form)."""
        length = max((len(columns.get(f, ())) for f in self.fields), default=0)
        self.rows = []
        for i in range(length):
            values = {}
            for f in self.fields:
                column = columns.get(f, ())
                values[f] = column[i] if i < len(column) else ""
            self.rows.append(values)
        if not self.rows:
            self.reset()

    def collect(self) -> List[Union[str, Dict[str, str]]]:
        collected: List[Union[str, Dict[str, str]]] = []
        for row in self.rows:
            values = {f: (row.get(f) or "").strip() for f in self.fields}
            if not any(values.values()):
                continue
            collected.append(values[self.fields[0]] if self.single_value else values)
        return collected

    def serialize(self) -> Optional[str]:
        """JSON array of the non-empty rows, or None when there are none."""
        collected = self.collect()
        return json.dumps(collected, ensure_ascii=False) if collected else None


@dataclass
class FormMessage:
    kind: str  # "success" or "error"
    text: str

    @property
    def ok(self) -> bool:
        return self.kind == "success"


@dataclass
class AdminFormController(ABC):
    """Shared state and submit flow for the admin creation forms."""

    client: ApiClient
    scalar_fields: Tuple[str, ...] = ()
    groups: Dict[str, RepeatableRowGroup] = field(default_factory=dict)
    image_input: ImageFileInput = field(default_factory=ImageFileInput)
    values: Dict[str, str] = field(default_factory=dict)
    message: Optional[FormMessage] = None

    def __post_init__(self) -> None:
        self.values = {name: self.values.get(name, "") for name in self.scalar_fields}

    @abstractmethod
    def _post(self, data: Sequence[Tuple[str, str]], files: Sequence[FilePart]) -> Dict[str, Any]:
        """Send the form to the endpoint for this entity."""

    def set_values(self, values: Mapping[str, str]) -> None:
        for name in self.scalar_fields:
            if name in values:
                self.values[name] = values[name] or ""

    def select_images(self, files: Sequence[UploadedFile]) -> Optional[FormMessage]:
        """Apply a file selection; returns a blocking error message if rejected."""
        try:
            self.image_input.select(files)
        except FileValidationError as e:
            logger.warning(f"Rejected image selection: {e}")
            return FormMessage("error", str(e))
        return None

    def side_lists(self) -> List[Tuple[str, str]]:
        """JSON-encoded row groups sent next to the scalar fields."""
        fields = []
        for name, group in self.groups.items():
            serialized = group.serialize()
            if serialized is not None:
                fields.append((name, serialized))
        return fields

    def build_payload(self) -> Tuple[List[Tuple[str, str]], List[FilePart]]:
        data = [(name, self.values.get(name, "")) for name in self.scalar_fields]
        data.extend(self.side_lists())
        return data, self.image_input.parts()

    def reset(self) -> None:
        self.values = {name: "" for name in self.scalar_fields}
        self.image_input.clear()
        for group in self.groups.values():
            group.reset()

    def submit(self) -> FormMessage:
        """POST the form. Resets on success; keeps state on failure."""
        data, files = self.build_payload()
        try:
            body = self._post(data, files)
        except FetchFailure as e:
            if e.status is not None:
                text = f"✗ {e.server_message or 'Error'}"
            else:
                text = f"✗ {e}"
            logger.error(f"{type(self).__name__} submission failed: {e}")
            log_page_event("form_failed", {
                "form": type(self).__name__,
                "status": e.status,
                "server_message": e.server_message,
            }, logger_name="forms")
            self.message = FormMessage("error", text)
            return self.message

        log_page_event("form_submitted", {
            "form": type(self).__name__,
            "slug": self.values.get("slug"),
            "files": len(files),
        }, logger_name="forms")
        self.message = FormMessage("success", f"✓ {body.get('message', '')}")
        self.reset()
        return self.message


class CategoryFormController(AdminFormController):
    """Create-category form: FAQ and buying-guidance (specification/detail) rows."""

    SCALAR_FIELDS = ("name", "slug", "h1Tag", "metaTitle", "metaDescription", "description")

    def __init__(self, client: ApiClient):
        super().__init__(
            client=client,
            scalar_fields=self.SCALAR_FIELDS,
            groups={
                "faqs": RepeatableRowGroup("faqs", ("question", "answer"), label="FAQ"),
                "buyingGuidance": RepeatableRowGroup(
                    "buyingGuidance", ("specification", "detail"), label="Buying guidance"
                ),
            },
        )

    def _post(self, data: Sequence[Tuple[str, str]], files: Sequence[FilePart]) -> Dict[str, Any]:
        return self.client.create_category(data, files)


class SubcategoryFormController(AdminFormController):
    """Create-subcategory form.

    Besides FAQ and the single-value feature/color/material lists, the
    question/answer guidance rows travel inside ``descriptionStructured``
    rather than as a top-level list.
    """

    SCALAR_FIELDS = ("name", "category", "slug", "h1Tag", "metaTitle", "metaDescription", "description")

    def __init__(self, client: ApiClient):
        super().__init__(
            client=client,
            scalar_fields=self.SCALAR_FIELDS,
            groups={
                "features": RepeatableRowGroup("features", ("value",), label="Features"),
                "colors": RepeatableRowGroup("colors", ("value",), label="Colors"),
                "materials": RepeatableRowGroup("materials", ("value",), label="Materials"),
                "faqs": RepeatableRowGroup("faqs", ("question", "answer"), label="FAQ"),
                "guidance": RepeatableRowGroup("guidance", ("question", "answer"), label="Buying guidance"),
            },
        )

    def side_lists(self) -> List[Tuple[str, str]]:
        fields = []
        for name, group in self.groups.items():
            if name == "guidance":
                continue
            serialized = group.serialize()
            if serialized is not None:
                fields.append((name, serialized))

        guidance = self.groups["guidance"].collect()
        if guidance:
            fields.insert(0, ("descriptionStructured", json.dumps({"buyingGuidance": guidance}, ensure_ascii=False)))
        return fields

    def _post(self, data: Sequence[Tuple[str, str]], files: Sequence[FilePart]) -> Dict[str, Any]:
        return self.client.create_subcategory(data, files)
