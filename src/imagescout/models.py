from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

BINARIES_ANALYZE_TYPE = "binaries"


class DetectedBinary(BaseModel):
    name: str
    version: str

    model_config = ConfigDict(frozen=True)


class InstalledPackage(BaseModel):
    name: str = Field(alias="Name")
    version: str = Field(alias="Version")
    source: Optional[str] = Field(default=None, alias="Source")
    provides: List[str] = Field(default_factory=list, alias="Provides")
    deps: List[str] = Field(default_factory=list, alias="Deps")
    auto_installed: Optional[bool] = Field(default=None, alias="AutoInstalled")

    model_config = ConfigDict(populate_by_name=True)


class PackageAnalysis(BaseModel):
    image: str = Field(alias="Image")
    analyze_type: Literal["Apk", "Apt", "Rpm"] = Field(alias="AnalyzeType")
    analysis: List[InstalledPackage] = Field(default_factory=list, alias="Analysis")

    model_config = ConfigDict(populate_by_name=True)

    def package_names(self) -> set[str]:
        return {pkg.name for pkg in self.analysis}


class BinariesAnalysis(BaseModel):
    image: str = Field(alias="Image")
    analyze_type: Literal["binaries"] = Field(
        default=BINARIES_ANALYZE_TYPE, alias="AnalyzeType"
    )
    analysis: List[DetectedBinary] = Field(default_factory=list, alias="Analysis")

    model_config = ConfigDict(populate_by_name=True)


AnalysisResult = Union[PackageAnalysis, BinariesAnalysis]


class OsRelease(BaseModel):
    name: str
    version: str


class ScanResult(BaseModel):
    image_id: str = Field(alias="imageId")
    os_release: OsRelease = Field(alias="osRelease")
    results: List[AnalysisResult] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")
