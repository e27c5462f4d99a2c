#!/usr/bin/env python3
"""
Metadata records produced by the git extractor.

Every field carries an explicit default ("" or "Unknown") so consumers only
ever compare against sentinel values, never check for missing attributes.
The to_dict() methods produce the camelCase JSON shape read by the
dashboard front end.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterator, List, TypeVar

UNKNOWN: str = "Unknown"
DEFAULT_BUILD_NUMBER: str = "1"

TAG_ANNOTATED: str = "annotated"
TAG_LIGHTWEIGHT: str = "lightweight"


@dataclass(frozen=True)
class CommitInfo:
    """
    Latest commit summary of a branch.

    Attributes:
        hash (str): Abbreviated commit hash.
        timestamp (str): Committer date (`git log --format=%ci`).
        message (str): Subject line.
    """

    hash: str = UNKNOWN
    timestamp: str = UNKNOWN
    message: str = UNKNOWN

    def __iter__(self) -> Iterator[str]:
        # Allows `h, ts, msg = get_commit_info(...)`
        return iter((self.hash, self.timestamp, self.message))

    @property
    def is_known(self) -> bool:
        return UNKNOWN not in (self.hash, self.timestamp, self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "timestamp": self.timestamp,
            "message": self.message,
        }


@dataclass(frozen=True)
class CommitRecord:
    """One commit from `git log`."""

    hash: str = ""
    author: str = ""
    date: str = ""
    title: str = ""
    body: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "author": self.author,
            "date": self.date,
            "title": self.title,
            "body": self.body,
        }


@dataclass(frozen=True)
class TagRecord:
    """
    One tag and the commit it points to.

    For lightweight tags `tagger` and `date` come from the commit.
    """

    name: str = ""
    date: str = ""
    hash: str = ""
    message: str = ""
    commit_author: str = ""
    tagger: str = ""
    type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "date": self.date,
            "hash": self.hash,
            "message": self.message,
            "commitAuthor": self.commit_author,
            "tagger": self.tagger,
            "type": self.type,
        }


@dataclass(frozen=True)
class ReleaseRecord:
    """A release tag; the tagger is exposed as `releaser`."""

    name: str = ""
    date: str = ""
    hash: str = ""
    message: str = ""
    commit_author: str = ""
    releaser: str = ""
    type: str = ""

    @classmethod
    def from_tag(cls, tag: TagRecord) -> "ReleaseRecord":
        return cls(
            name=tag.name,
            date=tag.date,
            hash=tag.hash,
            message=tag.message,
            commit_author=tag.commit_author,
            releaser=tag.tagger,
            type=tag.type,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "date": self.date,
            "hash": self.hash,
            "message": self.message,
            "commitAuthor": self.commit_author,
            "releaser": self.releaser,
            "type": self.type,
        }


T = TypeVar("T", CommitRecord, TagRecord, ReleaseRecord)


@dataclass
class ResultSet(Generic[T]):
    """
    Requested limit plus the records found, newest first.

    `limit` echoes the request (0 means unbounded), not len(items).
    """

    limit: int = 0
    items: List[T] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {"limit": self.limit, "items": [item.to_dict() for item in self.items]}


def to_jsonable(value: Any) -> Any:
    """
    Convert records, result sets and plain containers into JSON-ready data.
    """
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def dumps(value: Any, indent: int = 2) -> str:
    """
    Serialize an extractor result to the JSON payload consumed by the UI.
    """
    return json.dumps(to_jsonable(value), indent=indent, ensure_ascii=False)


__all__ = [
    "UNKNOWN",
    "DEFAULT_BUILD_NUMBER",
    "TAG_ANNOTATED",
    "TAG_LIGHTWEIGHT",
    "CommitInfo",
    "CommitRecord",
    "TagRecord",
    "ReleaseRecord",
    "ResultSet",
    "to_jsonable",
    "dumps",
]
