"""Pydantic models for Snyk REST API payloads.

Each page returned by the REST API is a JSON:API style envelope:

    {"data": [...], "links": {"next": "/rest/orgs?starting_after=..."}}

Models are immutable snapshots of remote state. Missing scalar fields decode
to their zero value; a field of the wrong JSON type fails validation.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "Issue",
    "IssueAttributes",
    "IssueCoordinates",
    "Links",
    "Organization",
    "OrganizationAttributes",
    "Page",
    "Project",
    "ProjectAttributes",
]


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


# =============================================================================
# Organizations
# =============================================================================


class OrganizationAttributes(_Snapshot):
    group_id: str = ""
    name: str = ""


class Organization(_Snapshot):
    """A Snyk organization.

    Attributes:
        id: Organization ID (UUID)
        type: Resource type, always "org" on the wire
        attributes: Group membership and display name
    """

    id: str = ""
    type: str = ""
    attributes: OrganizationAttributes = Field(default_factory=OrganizationAttributes)

    @property
    def name(self) -> str:
        return self.attributes.name

    @property
    def group_id(self) -> str:
        return self.attributes.group_id


# =============================================================================
# Projects
# =============================================================================


class ProjectAttributes(_Snapshot):
    name: str = ""


class Project(_Snapshot):
    """A Snyk project.

    The owning organization is not part of the payload; it is whichever
    organization ID the caller used to list the project.
    """

    id: str = ""
    type: str = ""
    attributes: ProjectAttributes = Field(default_factory=ProjectAttributes)

    @property
    def name(self) -> str:
        return self.attributes.name


# =============================================================================
# Issues
# =============================================================================


class IssueAttributes(_Snapshot):
    id: str = ""
    type: str = ""
    title: str = ""
    # Server-defined level (low, medium, high, critical, ...)
    severity: str = Field(default="", alias="effective_severity_level")
    ignored: bool = False


class IssueCoordinates(_Snapshot):
    upgradeable: bool = Field(default=False, alias="is_upgradable")
    patchable: bool = Field(default=False, alias="is_patchable")
    type: str = ""


class Issue(_Snapshot):
    """A security issue linked to a project through the scan_item filter."""

    attributes: IssueAttributes = Field(default_factory=IssueAttributes)
    coordinates: IssueCoordinates = Field(default_factory=IssueCoordinates)

    @property
    def id(self) -> str:
        return self.attributes.id

    @property
    def title(self) -> str:
        return self.attributes.title

    @property
    def severity(self) -> str:
        return self.attributes.severity

    @property
    def ignored(self) -> bool:
        return self.attributes.ignored


# =============================================================================
# Page envelope
# =============================================================================


T = TypeVar("T", bound=BaseModel)


class Links(_Snapshot):
    next: str | None = None


class Page(_Snapshot, Generic[T]):
    """One decoded page: items plus the cursor link to the following page.

    An absent, null or empty ``links.next`` means the sequence is exhausted.
    A present link is a path resolved against the API base URL.
    """

    data: list[T] = Field(default_factory=list)
    links: Links = Field(default_factory=Links)

    @field_validator("data", mode="before")
    @classmethod
    def null_data_as_empty(cls, v):
        return [] if v is None else v

    @field_validator("links", mode="before")
    @classmethod
    def null_links_as_empty(cls, v):
        return {} if v is None else v

    @property
    def next_link(self) -> str:
        return self.links.next or ""
