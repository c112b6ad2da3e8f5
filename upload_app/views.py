import json
import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET

from .conf import UploadConfig
from .errors import DecryptionError, EmptyUpload, FileTooLarge, GitHubApiError, UploadError
from .helpers import push_image, split_data_url

logger = logging.getLogger(__name__)


@require_GET
def upload_page(request: HttpRequest) -> HttpResponse:
    config = UploadConfig.from_settings()
    context = {
        "config": config,
        "max_mb": config.max_bytes / 1048576,
        "history_url": f"https://github.com/{config.full_name}/commits/{config.branch}",
    }
    return render(request, "upload_app/upload.html", context)


@require_GET
def upload_status(request: HttpRequest) -> JsonResponse:
    config = UploadConfig.from_settings()
    return JsonResponse({
        "repo": config.full_name,
        "branch": config.branch,
        "path": config.target_path,
        "max_bytes": config.max_bytes,
    })


def _read_upload(request):
    """Return (filename, content, passphrase) from a multipart or JSON body."""
    if request.content_type == "application/json":
        data = json.loads(request.body or b"{}")
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object")
        image = data.get("image")
        if not image:
            raise EmptyUpload("No image selected")
        passphrase = data.get("passphrase")
        if passphrase is not None and not isinstance(passphrase, str):
            raise ValueError("Passphrase must be a string")
        filename = data.get("filename")
        if not isinstance(filename, str) or not filename:
            filename = "image.jpg"
        return filename, split_data_url(image), passphrase

    image = request.FILES.get("image")
    if image is None:
        raise EmptyUpload("No image selected")
    passphrase = request.POST.get("passphrase")
    config = UploadConfig.from_settings()
    # Reject before reading the whole file into memory.
    if config.max_bytes and image.size > config.max_bytes:
        raise FileTooLarge(image.size, config.max_bytes)
    return image.name, image.read(), passphrase


@csrf_exempt
def push_upload(request: HttpRequest) -> JsonResponse:
    if request.method != 'POST':
        return JsonResponse({"status": "error", "error": "POST an image"}, status=405)

    config = UploadConfig.from_settings()
    try:
        filename, content, passphrase = _read_upload(request)
    except (EmptyUpload, ValueError) as e:
        return JsonResponse({"status": "error", "error": str(e)}, status=400)
    except FileTooLarge as e:
        logger.info("Rejected upload: %s", e)
        return JsonResponse({"status": "error", "error": str(e), "max_bytes": e.limit}, status=413)

    try:
        sha, path = push_image(config, passphrase, filename, content)
    except EmptyUpload as e:
        return JsonResponse({"status": "error", "error": str(e)}, status=400)
    except FileTooLarge as e:
        logger.info("Rejected upload: %s", e)
        return JsonResponse({"status": "error", "error": str(e), "max_bytes": e.limit}, status=413)
    except DecryptionError as e:
        logger.warning("Token unlock failed: %s", e)
        return JsonResponse({"status": "error", "error": "Incorrect passphrase"}, status=403)
    except GitHubApiError as e:
        logger.error("Push to %s failed: %s", config.full_name, e)
        return JsonResponse({"status": "error", "error": "Upload failed, please try again"}, status=502)
    except UploadError as e:
        logger.error("Upload failed: %s", e)
        return JsonResponse({"status": "error", "error": str(e)}, status=500)

    return JsonResponse({
        "status": "pushed",
        "commit": sha,
        "repo": config.full_name,
        "branch": config.branch,
        "path": path,
    })
