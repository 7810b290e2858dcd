"""
Wire schemas for provide/vod aggregator responses
Numeric fields arrive as JSON numbers or numeric strings; both are accepted
"""
import math
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ApiProtocolError


def _coerce_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"number out of range: {value}")
        return int(value)
    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(float(text))
    except OverflowError as e:
        raise ValueError(f"number out of range: {text}") from e


class RemoteCategory(BaseModel):
    """One entry of the `class` array returned by `ac=list`"""
    model_config = ConfigDict(extra="ignore")

    type_id: str
    type_name: str = ""
    type_pid: str = "0"

    @field_validator("type_id", "type_pid", mode="before")
    @classmethod
    def stringify_ids(cls, v):
        return "" if v is None else str(v)


class VodEntry(BaseModel):
    """A single remote video record"""
    model_config = ConfigDict(extra="allow")

    vod_name: str
    type_id: str
    type_name: Optional[str] = None
    vod_status: int = 1
    vod_class: Optional[str] = None
    vod_pic: Optional[str] = None
    vod_actor: Optional[str] = None
    vod_director: Optional[str] = None
    vod_remarks: str = ""
    vod_area: Optional[str] = None
    vod_lang: Optional[str] = None
    vod_year: Optional[str] = None
    vod_content: Optional[str] = None
    vod_play_from: str = ""
    vod_play_url: Optional[str] = None

    @field_validator("type_id", mode="before")
    @classmethod
    def stringify_type_id(cls, v):
        return "" if v is None else str(v)

    @field_validator("vod_status", mode="before")
    @classmethod
    def coerce_status(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return 1
        return _coerce_int(v)

    @field_validator("vod_year", mode="before")
    @classmethod
    def normalize_year(cls, v):
        if v is None:
            return None
        text = str(v).strip()
        # "0" is how many aggregators say "unknown"
        return text if text and text != "0" else None

    @field_validator("vod_remarks", "vod_play_from", mode="before")
    @classmethod
    def default_text(cls, v):
        return "" if v is None else str(v)


class VodListResponse(BaseModel):
    """The `{code, msg, page, pagecount, limit, total, list}` envelope"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    code: int
    msg: str = ""
    page: int = 0
    pagecount: int = 0
    limit: int = 0
    total: int = 0
    # Entries stay raw here; each is validated on its own with parse_entry
    items: List[Any] = Field(default_factory=list, alias="list")
    categories: List[RemoteCategory] = Field(default_factory=list, alias="class")

    @field_validator("code", "page", "pagecount", "limit", "total", mode="before")
    @classmethod
    def number_or_string(cls, v):
        return _coerce_int(v)

    @field_validator("items", "categories", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v

    @field_validator("msg", mode="before")
    @classmethod
    def stringify_msg(cls, v):
        return "" if v is None else str(v)

    def total_pages(self) -> int:
        """Pages needed for `total` rows at `limit` per page"""
        if self.limit > 0:
            return math.ceil(self.total / self.limit)
        return self.pagecount


def parse_list_response(body: str) -> VodListResponse:
    """
    Decode and validate an aggregator response body

    Raises:
        ApiProtocolError: on malformed JSON, an unexpected shape, or code != 1
    """
    try:
        response = VodListResponse.model_validate_json(body)
    except ValidationError as e:
        raise ApiProtocolError(f"Invalid aggregator response: {e.error_count()} error(s), first: {e.errors()[0]['msg']}") from e

    if response.code != 1:
        raise ApiProtocolError(f"Aggregator returned code={response.code}: {response.msg}")
    return response


def parse_entry(raw: Any) -> VodEntry:
    """
    Validate one raw `list` entry

    Raises:
        ApiProtocolError: when the entry is not a usable video record
    """
    try:
        return VodEntry.model_validate(raw)
    except ValidationError as e:
        raise ApiProtocolError(f"Invalid video entry: {e.errors()[0]['msg']}") from e


class SourceConfig(BaseModel):
    """Immutable snapshot of a collection source taken when a run starts"""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    api_url: str
    sync_pictures: bool = False
    convert_webp: bool = False
    download_retry: int = 3
    play_from_filter: str = ""

    @classmethod
    def from_model(cls, source) -> "SourceConfig":
        return cls(
            id=source.id,
            name=source.name,
            api_url=source.api_url,
            sync_pictures=bool(source.sync_pictures),
            convert_webp=bool(source.convert_webp),
            download_retry=source.download_retry or 0,
            play_from_filter=source.play_from_filter or "",
        )

    def allowed_play_sources(self) -> List[str]:
        """Play source names to ingest; empty means all"""
        return [name.strip() for name in self.play_from_filter.split(",") if name.strip()]
