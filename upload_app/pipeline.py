"""Push files to a GitHub branch as a single commit.

The Git Data API builds a commit bottom-up, so every push follows the same
order: read the branch ref, read its commit to get the tree, upload one blob
per file, create a tree on top of the old one, create a commit whose parent
is the old head, then move the ref.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from .errors import BranchNotSet, EmptyUpload, RepositoryNotInitialized
from .github import GitHubClient
from .objects import BranchRef, FileUpload, NewCommit, PushContext, TreeEntry

logger = logging.getLogger(__name__)

DEFAULT_BASE_BRANCH = "master"
MAX_BLOB_WORKERS = 4


class GitHubPusher:
    def __init__(self, token, api_url=None, timeout=30, client_factory=GitHubClient):
        self._token = token
        self._api_url = api_url
        self._timeout = timeout
        self._client_factory = client_factory
        self.client = None
        self.context = None

    def set_repo(self, owner, repo):
        kwargs = {"timeout": self._timeout}
        if self._api_url:
            kwargs["api_url"] = self._api_url
        self.client = self._client_factory(self._token, owner, repo, **kwargs)
        self.context = PushContext(owner=owner, repo=repo)

    def close(self):
        if self.client is not None:
            self.client.close()

    def _require_repo(self):
        if self.client is None or self.context is None:
            raise RepositoryNotInitialized()

    def set_branch(self, name, base=DEFAULT_BASE_BRANCH):
        """Select the branch to push to, creating it from `base` if missing.

        Returns True when the branch had to be created.
        """
        self._require_repo()
        names = {b["name"] for b in self.client.list_branches()}
        created = False
        if name not in names:
            logger.info("Branch %s missing in %s, creating it from %s",
                        name, self.context.full_name, base)
            self.client.create_branch(base, name)
            created = True
        self.context.branch = BranchRef(name=name)
        return created

    def push_files(self, message, files):
        """Commit `files` (FileUpload or (path, content) pairs) and return the new commit sha."""
        self._require_repo()
        if self.context.branch is None:
            raise BranchNotSet()

        uploads = [f if isinstance(f, FileUpload) else FileUpload(*f) for f in files]
        if not uploads:
            raise EmptyUpload("Nothing to push")

        ctx = self.context
        ctx.entries = []
        ctx.commit = NewCommit(message=message)

        self._read_head(ctx)
        self._create_blobs(ctx, uploads)
        self._create_tree(ctx)
        self._create_commit(ctx)
        self._update_head(ctx)

        logger.info("Pushed %d file(s) to %s@%s as %s",
                    len(uploads), ctx.full_name, ctx.branch.name, ctx.commit.sha)
        return ctx.commit.sha

    def _read_head(self, ctx):
        ref = self.client.get_ref(f"heads/{ctx.branch.name}")
        ctx.branch.commit_sha = ref["object"]["sha"]
        commit = self.client.get_commit(ctx.branch.commit_sha)
        ctx.branch.tree_sha = commit["tree"]["sha"]
        logger.debug("%s is at %s (tree %s)",
                     ctx.branch.name, ctx.branch.commit_sha, ctx.branch.tree_sha)

    def _create_blob(self, upload):
        blob = self.client.create_blob(upload.content)
        logger.debug("Blob %s for %s", blob["sha"], upload.path)
        return TreeEntry(sha=blob["sha"], path=upload.path)

    def _create_blobs(self, ctx, uploads):
        workers = min(MAX_BLOB_WORKERS, len(uploads))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            ctx.entries = list(pool.map(self._create_blob, uploads))

    def _create_tree(self, ctx):
        tree = self.client.create_tree([e.as_dict() for e in ctx.entries], ctx.branch.tree_sha)
        ctx.commit.tree_sha = tree["sha"]

    def _create_commit(self, ctx):
        ctx.commit.parent_sha = ctx.branch.commit_sha
        commit = self.client.create_commit(ctx.commit.parent_sha, ctx.commit.tree_sha, ctx.commit.message)
        ctx.commit.sha = commit["sha"]

    def _update_head(self, ctx):
        self.client.update_ref(f"heads/{ctx.branch.name}", ctx.commit.sha)
        ctx.branch.commit_sha = ctx.commit.sha
        ctx.branch.tree_sha = ctx.commit.tree_sha
