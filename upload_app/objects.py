from dataclasses import dataclass, field
from typing import List, Optional

BLOB_MODE = "100644"


@dataclass
class FileUpload:
    path: str
    content: bytes


@dataclass
class TreeEntry:
    sha: str
    path: str
    mode: str = BLOB_MODE
    type: str = "blob"

    def as_dict(self):
        return {"sha": self.sha, "path": self.path, "mode": self.mode, "type": self.type}


@dataclass
class BranchRef:
    """Branch pointer: name plus the commit it pointed at when last read."""
    name: str
    commit_sha: Optional[str] = None
    tree_sha: Optional[str] = None


@dataclass
class NewCommit:
    message: str
    parent_sha: Optional[str] = None
    tree_sha: Optional[str] = None
    sha: Optional[str] = None


@dataclass
class PushContext:
    """State of one upload, passed through each pipeline step."""
    owner: str
    repo: str
    branch: Optional[BranchRef] = None
    entries: List[TreeEntry] = field(default_factory=list)
    commit: Optional[NewCommit] = None

    @property
    def full_name(self):
        return f"{self.owner}/{self.repo}"
