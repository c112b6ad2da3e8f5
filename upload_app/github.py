import base64
import logging
from dataclasses import dataclass

import requests

from .errors import GitHubApiError

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"


@dataclass
class Base64Content:
    """Content that is already base64 encoded, e.g. the payload of a data URL."""
    data: str


def blob_body(content):
    """Build the JSON body for POST /git/blobs.

    Raw bytes are base64 encoded, text goes up as utf-8, and Base64Content is
    passed through unchanged so an encoded image is not encoded twice.
    """
    if isinstance(content, Base64Content):
        return {"content": content.data, "encoding": "base64"}
    if isinstance(content, (bytes, bytearray)):
        return {"content": base64.b64encode(bytes(content)).decode("ascii"), "encoding": "base64"}
    if isinstance(content, str):
        return {"content": content, "encoding": "utf-8"}
    raise TypeError(f"Cannot build a blob from {type(content).__name__}")


class GitHubClient:
    def __init__(self, token, owner, repo, api_url=API_URL, timeout=30, session=None):
        self.owner = owner
        self.repo = repo
        self.timeout = timeout
        self.base_url = f"{api_url.rstrip('/')}/repos/{owner}/{repo}"
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}/{path}"
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GitHubApiError(f"{method} {path} failed: {e}", url=url) from e

        if resp.status_code >= 400:
            try:
                message = resp.json().get("message", resp.text)
            except ValueError:
                message = resp.text
            raise GitHubApiError(
                f"{method} {path} returned {resp.status_code}: {message[:200]}",
                status_code=resp.status_code,
                url=url,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise GitHubApiError(
                f"{method} {path} returned {resp.status_code} without JSON: {resp.text[:200]}",
                status_code=resp.status_code,
                url=url,
            ) from e

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def list_branches(self):
        branches = []
        page = 1
        while True:
            batch = self._request("GET", "branches", params={"per_page": 100, "page": page})
            branches.extend(batch)
            if len(batch) < 100:
                return branches
            page += 1

    def get_ref(self, ref):
        return self._request("GET", f"git/refs/{ref}")

    def create_ref(self, ref, sha):
        return self._request("POST", "git/refs", json={"ref": f"refs/{ref}", "sha": sha})

    def create_branch(self, base, name):
        base_ref = self.get_ref(f"heads/{base}")
        return self.create_ref(f"heads/{name}", base_ref["object"]["sha"])

    def get_commit(self, sha):
        return self._request("GET", f"git/commits/{sha}")

    def create_blob(self, content):
        return self._request("POST", "git/blobs", json=blob_body(content))

    def create_tree(self, entries, base_tree=None):
        body = {"tree": entries}
        if base_tree:
            body["base_tree"] = base_tree
        return self._request("POST", "git/trees", json=body)

    def create_commit(self, parent, tree, message):
        return self._request("POST", "git/commits", json={
            "message": message,
            "tree": tree,
            "parents": [parent] if parent else [],
        })

    def update_ref(self, ref, sha, force=False):
        return self._request("PATCH", f"git/refs/{ref}", json={"sha": sha, "force": force})
