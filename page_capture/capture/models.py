"""
Data containers shared by the capture components.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from bs4 import Tag


class TagKind(Enum):
    """Kinds of elements whose references are localized."""

    IMAGE = "image"
    SCRIPT = "script"
    STYLESHEET = "stylesheet"
    ICON = "icon"
    MEDIA = "media"

    @property
    def default_extension(self) -> str:
        """Extension appended to local paths that have none."""
        return DEFAULT_EXTENSIONS.get(self, "")


# Media sources are left without a forced extension
DEFAULT_EXTENSIONS = {
    TagKind.IMAGE: ".png",
    TagKind.SCRIPT: ".js",
    TagKind.STYLESHEET: ".css",
    TagKind.ICON: ".css",
}


class SkipReason(Enum):
    """Why a reference was left untouched."""

    NOT_FETCHABLE = "not_fetchable"
    UNPARSEABLE = "unparseable"
    OUT_OF_SCOPE = "out_of_scope"


@dataclass(frozen=True, eq=False)
class AssetReference:
    """
    A reference found in the document.

    Identity is the element and attribute, not the URL: two elements
    pointing at the same URL are two references.
    """

    kind: TagKind
    element: Tag = field(repr=False)
    attribute: str
    raw: str

    def __eq__(self, other) -> bool:
        if not isinstance(other, AssetReference):
            return NotImplemented
        return self.element is other.element and self.attribute == other.attribute

    def __hash__(self) -> int:
        return hash((id(self.element), self.attribute))


@dataclass(frozen=True)
class ResolvedAsset:
    """Decision taken for one reference."""

    reference: AssetReference
    absolute_url: Optional[str] = None
    in_scope: bool = False
    local_path: Optional[str] = None
    skip_reason: Optional[SkipReason] = None

    @property
    def skipped(self) -> bool:
        return self.local_path is None


@dataclass(frozen=True)
class DownloadJob:
    """One fetch-and-persist unit of work."""

    url: str
    local_path: str
    target_path: str


@dataclass
class DownloadOutcome:
    """Result of one download job."""

    url: str
    local_path: str
    target_path: str
    success: bool
    error: Optional[str] = None


@dataclass
class CaptureResult:
    """Results of the capture operation."""

    html: str
    assets: Tuple[ResolvedAsset, ...] = ()
    outcomes: List[DownloadOutcome] = field(default_factory=list)
    output_dir: Optional[str] = None
    index_path: Optional[str] = None

    @property
    def queued(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def skipped(self) -> int:
        return sum(1 for asset in self.assets if asset.skipped)
