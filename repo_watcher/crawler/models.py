"""Shared data models for the repository refresh."""

from dataclasses import dataclass, field


@dataclass
class SecurityAlertSummary:
    """Open security findings, one count per scanning feature.

    ``None`` means the feature could not be queried for the repository.
    """
    advisories: int
    dependabot: int | None = None
    code_scanning: int | None = None
    secret_scanning: int | None = None

    def to_dict(self) -> dict:
        data = {"advisories": self.advisories}
        if self.dependabot is not None:
            data["dependabot"] = self.dependabot
        if self.code_scanning is not None:
            data["codeScanning"] = self.code_scanning
        if self.secret_scanning is not None:
            data["secretScanning"] = self.secret_scanning
        return data


@dataclass
class RepositoryRecord:
    """Repository metadata snapshot."""
    name: str
    description: str
    topics: list[str]
    languages: list[str]
    stars: int
    forks: int
    open_issues: int
    open_pull_requests: int
    security_alerts: SecurityAlertSummary
    last_commit_date: str | None
    package_versions: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert the record to the snapshot's JSON shape."""
        return {
            "name": self.name,
            "description": self.description,
            "topics": self.topics,
            "languages": self.languages,
            "stars": self.stars,
            "forks": self.forks,
            "openIssues": self.open_issues,
            "openPullRequests": self.open_pull_requests,
            "securityAlerts": self.security_alerts.to_dict(),
            "lastCommitDate": self.last_commit_date,
            "packageVersions": self.package_versions,
        }
