import base64
import hashlib
import threading
from dataclasses import replace

import pytest

from upload_app.conf import UploadConfig
from upload_app.crypto import encrypt_token
from upload_app.errors import GitHubApiError
from upload_app.github import blob_body

PASSPHRASE = "correct horse"
TOKEN = "ghp_testtoken1234567890"


def _sha(*parts):
    return hashlib.sha1(repr(parts).encode()).hexdigest()


class FakeRemote:
    """In-memory stand-in for one repository behind the Git Data API."""

    def __init__(self):
        self.blobs = {}
        self.trees = {}
        self.commits = {}
        self.refs = {}
        self.calls = []
        self.fail_on = set()
        self.tokens = []
        self.closed = 0
        self._lock = threading.Lock()

        tree = self.put_tree({"index.html": self.put_blob(b"<html></html>"),
                              "exp4/index.html": self.put_blob(b"<img src=upload.jpg>")})
        root = self.put_commit(tree, [], "initial")
        self.refs["heads/master"] = root
        self.refs["heads/gh-pages"] = root

    def put_blob(self, data):
        sha = _sha("blob", data)
        self.blobs[sha] = data
        return sha

    def put_tree(self, entries):
        sha = _sha("tree", sorted(entries.items()))
        self.trees[sha] = dict(entries)
        return sha

    def put_commit(self, tree, parents, message):
        sha = _sha("commit", tree, tuple(parents), message, len(self.commits))
        self.commits[sha] = {"tree": tree, "parents": list(parents), "message": message}
        return sha

    def head(self, branch):
        return self.refs[f"heads/{branch}"]

    def files(self, branch):
        tree = self.commits[self.head(branch)]["tree"]
        return {path: self.blobs[sha] for path, sha in self.trees[tree].items()}

    def history(self, branch):
        sha = self.head(branch)
        out = []
        while sha:
            out.append(sha)
            parents = self.commits[sha]["parents"]
            sha = parents[0] if parents else None
        return out

    def is_ancestor(self, old, new):
        stack = [new]
        while stack:
            sha = stack.pop()
            if sha == old:
                return True
            stack.extend(self.commits[sha]["parents"])
        return False

    def record(self, name):
        with self._lock:
            self.calls.append(name)
        if name in self.fail_on:
            raise GitHubApiError(f"{name} returned 422: Validation Failed", status_code=422)

    def call_names(self):
        return list(self.calls)


class FakeGitHubClient:
    def __init__(self, remote, token, owner, repo, **kwargs):
        self.remote = remote
        self.owner = owner
        self.repo = repo
        remote.tokens.append(token)

    def close(self):
        self.remote.closed += 1

    def list_branches(self):
        self.remote.record("list_branches")
        return [{"name": ref[len("heads/"):], "commit": {"sha": sha}}
                for ref, sha in self.remote.refs.items()]

    def get_ref(self, ref):
        self.remote.record("get_ref")
        if ref not in self.remote.refs:
            raise GitHubApiError("GET ref returned 404: Not Found", status_code=404)
        return {"ref": f"refs/{ref}", "object": {"sha": self.remote.refs[ref], "type": "commit"}}

    def create_ref(self, ref, sha):
        self.remote.record("create_ref")
        self.remote.refs[ref] = sha
        return {"ref": f"refs/{ref}", "object": {"sha": sha}}

    def create_branch(self, base, name):
        self.remote.record("create_branch")
        base_ref = self.get_ref(f"heads/{base}")
        return self.create_ref(f"heads/{name}", base_ref["object"]["sha"])

    def get_commit(self, sha):
        self.remote.record("get_commit")
        commit = self.remote.commits[sha]
        return {"sha": sha, "tree": {"sha": commit["tree"]}, "message": commit["message"]}

    def create_blob(self, content):
        self.remote.record("create_blob")
        body = blob_body(content)
        if body["encoding"] == "base64":
            data = base64.b64decode(body["content"])
        else:
            data = body["content"].encode("utf-8")
        with self.remote._lock:
            sha = self.remote.put_blob(data)
        return {"sha": sha}

    def create_tree(self, entries, base_tree=None):
        self.remote.record("create_tree")
        tree = dict(self.remote.trees[base_tree]) if base_tree else {}
        for entry in entries:
            assert entry["mode"] == "100644" and entry["type"] == "blob"
            assert entry["sha"] in self.remote.blobs
            tree[entry["path"]] = entry["sha"]
        return {"sha": self.remote.put_tree(tree)}

    def create_commit(self, parent, tree, message):
        self.remote.record("create_commit")
        return {"sha": self.remote.put_commit(tree, [parent], message)}

    def update_ref(self, ref, sha, force=False):
        self.remote.record("update_ref")
        if not force and not self.remote.is_ancestor(self.remote.refs[ref], sha):
            raise GitHubApiError("PATCH ref returned 422: Update is not a fast forward", status_code=422)
        self.remote.refs[ref] = sha
        return {"ref": f"refs/{ref}", "object": {"sha": sha}}


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def client_factory(remote):
    def factory(token, owner, repo, **kwargs):
        return FakeGitHubClient(remote, token, owner, repo, **kwargs)
    return factory


@pytest.fixture(scope="session")
def descriptor():
    return encrypt_token(PASSPHRASE, TOKEN, iterations=1000)


@pytest.fixture
def config(descriptor):
    return replace(UploadConfig(), encrypted_token=descriptor)
