from __future__ import annotations

from dataclasses import dataclass, field

INCONSISTENT_STATS_MESSAGE = "Results saved but stats may be inconsistent."


class StatsError(Exception):
    """Base class for reconciliation failures tied to a single record."""


class ReferenceNotFound(StatsError):
    def __init__(self, kind: str, name: str, scope: str | None = None) -> None:
        self.kind = kind
        self.name = name
        self.scope = scope
        where = f" in {scope}" if scope else ""
        super().__init__(f"{kind} not found{where}: {name!r}")


class MalformedNumeric(StatsError):
    def __init__(self, field_name: str, raw: object, owner: str = "") -> None:
        self.field_name = field_name
        self.raw = raw
        self.owner = owner
        who = f" for {owner}" if owner else ""
        super().__init__(f"Malformed {field_name}{who}: {raw!r}")


@dataclass(slots=True)
class StatsIssue:
    kind: str
    entity: str
    name: str
    detail: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "entity": self.entity, "name": self.name, "detail": self.detail}


@dataclass(slots=True)
class ReconcileReport:
    """Outcome of one or more reconcilers; each entity succeeds or fails on its own."""

    updated: list[str] = field(default_factory=list)
    issues: list[StatsIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def record_update(self, entity: str, name: str) -> None:
        self.updated.append(f"{entity}:{name}")

    def record_error(self, entity: str, error: Exception) -> None:
        name = getattr(error, "name", "") or getattr(error, "owner", "")
        issue = StatsIssue(kind=type(error).__name__, entity=entity, name=str(name), detail=str(error))
        # One save can look up the same record from several reconcilers.
        if issue not in self.issues:
            self.issues.append(issue)

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "ok": self.ok,
            "updated": list(self.updated),
            "issues": [issue.to_dict() for issue in self.issues],
        }
        if not self.ok:
            out["warning"] = INCONSISTENT_STATS_MESSAGE
        return out
