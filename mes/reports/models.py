"""
Report Models

Pydantic models for report API responses. Field names follow the JSON
contract consumed by the admin UI (camelCase envelope keys, snake_case row
columns).
"""

from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field


class ReportPage(BaseModel):
    """One page of a report"""
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(..., alias="pageSize")
    total_count: int = Field(..., alias="totalCount")
    total_pages: int = Field(..., alias="totalPages")
    rows: List[Dict[str, Any]]
    totals: Dict[str, Any]


class SearchSectionResult(BaseModel):
    """Matches from one module in the global search"""
    key: str
    title: str
    count: int
    rows: List[Dict[str, Any]]


class GlobalSearchResponse(BaseModel):
    """Global search across every production module"""
    q: str
    start: Optional[str] = None
    end: Optional[str] = None
    all: bool = False
    limit: int
    sections: List[SearchSectionResult]


class DashboardMetrics(BaseModel):
    """Per-day totals across modules"""
    model_config = ConfigDict(populate_by_name=True)

    date: str
    total_stitches: Union[int, float] = Field(0, alias="totalStitches")
    total_pieces: Union[int, float] = Field(0, alias="totalPieces")
    qc_flat_inspected: Union[int, float] = Field(0, alias="qcFlatInspected")
    qc_3d_inspected: Union[int, float] = Field(0, alias="qc3DInspected")
    qc_total_inspected: Union[int, float] = Field(0, alias="qcTotalInspected")
    emblem_sew_pieces: Union[int, float] = Field(0, alias="emblemSewPieces")
    emblem_sticker_pieces: Union[int, float] = Field(0, alias="emblemStickerPieces")
    emblem_heat_seal_pieces: Union[int, float] = Field(0, alias="emblemHeatSealPieces")
    emblem_total_pieces: Union[int, float] = Field(0, alias="emblemTotalPieces")
    laser_total_pieces: Union[int, float] = Field(0, alias="laserTotalPieces")


class EntryDetail(BaseModel):
    """A single production entry, with lines for emblem submissions"""
    module: str
    entry: Dict[str, Any]
    lines: Optional[List[Dict[str, Any]]] = None


class EntryList(BaseModel):
    """One day of entries for a module, newest first"""
    entries: List[Dict[str, Any]]


class UserInfo(BaseModel):
    """Identity of the session cookie holder"""
    model_config = ConfigDict(populate_by_name=True)

    username: str
    display_name: str = Field(..., alias="displayName")
    employee_number: Optional[int] = Field(None, alias="employeeNumber")
    role: str


class HealthStatus(BaseModel):
    """Liveness and database reachability"""
    status: str
    database: str
    timestamp: str
