import base64
import logging

from .crypto import decrypt_token
from .errors import EmptyUpload, FileTooLarge
from .github import Base64Content
from .objects import FileUpload
from .pipeline import GitHubPusher

logger = logging.getLogger(__name__)


def check_size(size, limit):
    if not size:
        raise EmptyUpload("No image selected")
    if limit and size > limit:
        raise FileTooLarge(size, limit)


def split_data_url(data_url):
    """Return the base64 payload of a `data:<mime>;base64,<payload>` URL."""
    if not isinstance(data_url, str):
        raise ValueError("Image must be a data URL string")
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    try:
        base64.b64decode(payload, validate=True)
    except ValueError as e:
        raise ValueError(f"Image payload is not valid base64: {e}") from e
    return Base64Content(payload)


def base64_size(data):
    data = data.strip()
    return len(data) * 3 // 4 - data[-2:].count("=")


def commit_message(filename, path):
    return f"uploaded {filename} to {path}"


def push_image(config, passphrase, filename, content, path=None, message=None, pusher_factory=GitHubPusher):
    """Unlock the token and push one image. Returns (commit_sha, path).

    `content` is raw bytes or Base64Content. The size check runs before the
    passphrase is even tried, so an oversized file never reaches GitHub.
    """
    size = base64_size(content.data) if isinstance(content, Base64Content) else len(content)
    check_size(size, config.max_bytes)

    token = decrypt_token(passphrase, config.encrypted_token)
    path = path or config.target_path
    message = message or commit_message(filename, path)

    pusher = pusher_factory(token, api_url=config.api_url, timeout=config.timeout)
    try:
        pusher.set_repo(config.owner, config.repo)
        pusher.set_branch(config.branch, base=config.base_branch)
        logger.info("Uploading %s (%d bytes) to %s:%s", filename, size, config.full_name, path)
        sha = pusher.push_files(message, [FileUpload(path, content)])
    finally:
        pusher.close()
    return sha, path
