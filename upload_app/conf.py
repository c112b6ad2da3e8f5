import os
from dataclasses import dataclass

GITHUB_API_URL = "https://api.github.com"
GITHUB_TIMEOUT = 30
REPO_OWNER = "joxon"
REPO_NAME = "multimedia-web-design"
BRANCH = "gh-pages"
BASE_BRANCH = "master"
TARGET_PATH = "exp4/upload.jpg"
MAX_BYTES = 1048576  # 1 MiB

# Must stay a string: it is parsed as an SJCL descriptor.
ENCRYPTED_TOKEN = (
    '{"iv":"wwZja1kyc6vnKMP+sXaRdg==","v":1,"iter":10000,"ks":128,"ts":64,'
    '"mode":"ccm","adata":"","cipher":"aes","salt":"MfCsdtUbCOQ=",'
    '"ct":"ZMgE9geLS8jfirkqE4pK6R1K6slvcLwC2Vo2zYeKGW0Yq9sOY6ez5Utnte9MDQSl"}'
)


@dataclass
class UploadConfig:
    api_url: str = GITHUB_API_URL
    timeout: float = GITHUB_TIMEOUT
    owner: str = REPO_OWNER
    repo: str = REPO_NAME
    branch: str = BRANCH
    base_branch: str = BASE_BRANCH
    target_path: str = TARGET_PATH
    max_bytes: int = MAX_BYTES
    encrypted_token: str = ENCRYPTED_TOKEN

    @property
    def full_name(self):
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        return cls(
            api_url=env.get("GITHUB_API_URL", GITHUB_API_URL),
            timeout=float(env.get("GITHUB_TIMEOUT", GITHUB_TIMEOUT)),
            owner=env.get("UPLOAD_REPO_OWNER", REPO_OWNER),
            repo=env.get("UPLOAD_REPO_NAME", REPO_NAME),
            branch=env.get("UPLOAD_BRANCH", BRANCH),
            base_branch=env.get("UPLOAD_BASE_BRANCH", BASE_BRANCH),
            target_path=env.get("UPLOAD_TARGET_PATH", TARGET_PATH),
            max_bytes=int(env.get("UPLOAD_MAX_BYTES", MAX_BYTES)),
            encrypted_token=env.get("UPLOAD_ENCRYPTED_TOKEN", ENCRYPTED_TOKEN),
        )

    @classmethod
    def from_settings(cls):
        from django.conf import settings

        return cls(
            api_url=getattr(settings, "GITHUB_API_URL", GITHUB_API_URL),
            timeout=getattr(settings, "GITHUB_TIMEOUT", GITHUB_TIMEOUT),
            owner=getattr(settings, "UPLOAD_REPO_OWNER", REPO_OWNER),
            repo=getattr(settings, "UPLOAD_REPO_NAME", REPO_NAME),
            branch=getattr(settings, "UPLOAD_BRANCH", BRANCH),
            base_branch=getattr(settings, "UPLOAD_BASE_BRANCH", BASE_BRANCH),
            target_path=getattr(settings, "UPLOAD_TARGET_PATH", TARGET_PATH),
            max_bytes=getattr(settings, "UPLOAD_MAX_BYTES", MAX_BYTES),
            encrypted_token=getattr(settings, "UPLOAD_ENCRYPTED_TOKEN", ENCRYPTED_TOKEN),
        )
